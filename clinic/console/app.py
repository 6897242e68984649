import argparse
import sys
from pathlib import Path

from loguru import logger

from clinic.config import ClinicConfig
from clinic.console.admin import AdminMenu
from clinic.console.doctor import DoctorMenu
from clinic.console.io import Console
from clinic.console.patient import PatientMenu
from clinic.records.factory import ClinicServices, build_clinic_services


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Clinic appointment manager")
    parser.add_argument("--data-dir", type=Path, help="Directory holding the CSV files")
    parser.add_argument("--log-level", help="Log level for the console sink, e.g. INFO")
    return parser.parse_args(argv)


def configure_logging(config: ClinicConfig) -> None:
    logger.remove()
    logger.add(sys.stderr, level=config.log_level.upper())
    if config.log_file:
        logger.add(
            config.data_dir / config.log_file,
            level="DEBUG",
            rotation="1 MB",
            retention=3,
            encoding="utf-8",
        )


def run(services: ClinicServices, console: Console, config: ClinicConfig) -> None:
    """Top-level role selection loop."""
    for warning in services.warnings:
        console.say(f"Warning: {warning}")

    menus = {
        1: AdminMenu(services, console, config),
        2: PatientMenu(services, console, config),
        3: DoctorMenu(services, console, config),
    }
    console.say("Welcome to the clinic management system!")
    while True:
        console.say("\nWhich panel would you like to open?")
        console.say("1 - Administrator")
        console.say("2 - I am a patient")
        console.say("3 - I am a doctor")
        console.say("0 - Exit")
        choice = console.ask_int("Choose an option: ")
        if choice is None:
            continue
        if choice == 0:
            console.say("Shutting down...")
            return
        menu = menus.get(choice)
        if menu is None:
            console.say("Invalid option!")
            continue
        menu.run_action(menu.start, "main menu")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    overrides = {
        key: value
        for key, value in (("data_dir", args.data_dir), ("log_level", args.log_level))
        if value is not None
    }

    try:
        config = ClinicConfig(**overrides)
        config.data_dir.mkdir(parents=True, exist_ok=True)
        configure_logging(config)
        services = build_clinic_services(config)
    except Exception as exc:
        logger.exception("Startup failed")
        print(f"Fatal error while starting the application: {exc}", file=sys.stderr)
        return 1

    try:
        run(services, Console(), config)
    except (EOFError, KeyboardInterrupt):
        logger.info("Session ended by the user")

    print("\nSee you next time!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
