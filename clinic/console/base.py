from collections.abc import Callable

from loguru import logger

from clinic.config import ClinicConfig
from clinic.console.io import Console
from clinic.domain.exceptions import ClinicError
from clinic.domain.models import Appointment, Doctor, Patient
from clinic.records.directory import DoctorDirectory, PatientDirectory
from clinic.records.factory import ClinicServices
from clinic.records.service import SchedulingService

MenuOption = tuple[str, Callable[[], None]]


class MenuView:
    """Shared plumbing for the role menus: option loops, error reporting, booking flows."""

    def __init__(self, services: ClinicServices, console: Console, config: ClinicConfig) -> None:
        self._services = services
        self._console = console
        self._config = config

    @property
    def scheduling(self) -> SchedulingService:
        return self._services.scheduling

    @property
    def doctors(self) -> DoctorDirectory:
        return self._services.doctors

    @property
    def patients(self) -> PatientDirectory:
        return self._services.patients

    def run_menu(self, title: str, options: dict[int, MenuOption], exit_label: str) -> None:
        """Show ``options`` until the user picks 0."""
        while True:
            self._console.say(f"\n{title}")
            for number, (label, _) in options.items():
                self._console.say(f"{number} - {label}")
            self._console.say(f"0 - {exit_label}")

            choice = self._console.ask_int("Choose an option: ")
            if choice is None:
                continue
            if choice == 0:
                return
            option = options.get(choice)
            if option is None:
                self._console.say("Invalid option!")
                continue
            self.run_action(option[1], option[0])

    def run_action(self, action: Callable[[], None], description: str) -> None:
        try:
            action()
        except ClinicError as exc:
            self._console.say(str(exc))
        except EOFError:
            raise
        except Exception:
            logger.exception("Unexpected error in '{}'", description)
            self._console.say(f"An unexpected error occurred in '{description}'.")

    def describe(self, appointment: Appointment) -> str:
        doctor = self.doctors.name_for(appointment.doctor_code)
        return f"{appointment.formatted_date_time()} (Doctor: {doctor})"

    def pick_doctor(self, doctors: list[Doctor] | None = None) -> Doctor | None:
        candidates = self.doctors.active() if doctors is None else doctors
        if not candidates:
            self._console.say("There are no doctors registered.")
            return None
        self._console.say("\nSelect the doctor:")
        return self._console.choose(candidates, str)

    def schedule_flow(self, patient: Patient) -> None:
        doctor = self.pick_doctor()
        if doctor is None:
            return
        date = self._console.ask_date("Appointment date (YYYY-MM-DD): ")
        if date is None:
            return
        time = self._console.ask_time("Appointment time (HH:MM): ")
        if time is None:
            return

        appointment = self.scheduling.schedule(patient.cpf, doctor.code, date, time)
        self._console.say("\nAppointment scheduled successfully!")
        self._console.say(f"Patient: {patient.name}")
        self._console.say(f"Doctor: {doctor.name}")
        self._console.say(f"Date and time: {appointment.formatted_date_time()}")

    def reschedule_flow(self, appointment: Appointment) -> None:
        date = self._console.ask_date("New appointment date (YYYY-MM-DD): ")
        if date is None:
            return
        time = self._console.ask_time("New appointment time (HH:MM): ")
        if time is None:
            return

        replacement = self.scheduling.reschedule(appointment, date, time)
        self._console.say("Appointment rescheduled successfully!")
        self._console.say(f"New date and time: {replacement.formatted_date_time()}")

    def cancel_flow(self, appointment: Appointment, *, ask_confirmation: bool = True) -> None:
        if ask_confirmation and not self._console.confirm(
            f"Cancel the appointment on {appointment.formatted_date_time()}?"
        ):
            return
        self.scheduling.cancel(appointment)
        self._console.say("Appointment cancelled successfully!")
