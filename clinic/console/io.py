import datetime as dt
import math
from collections.abc import Callable, Sequence
from typing import TypeVar

from clinic.domain.identifiers import is_valid_cpf
from clinic.records.adapters.datetime_helpers import parse_date, parse_time

ItemT = TypeVar("ItemT")


class Console:
    """Line-oriented terminal I/O used by every menu.

    ``input_fn`` and ``output_fn`` default to the builtins; tests pass a
    scripted reader and a list-appending writer.
    """

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self._input = input_fn
        self._output = output_fn

    def say(self, text: str = "") -> None:
        self._output(text)

    def ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def ask_int(self, prompt: str) -> int | None:
        raw = self.ask(prompt)
        try:
            return int(raw)
        except ValueError:
            self.say("Invalid input. Please type a number.")
            return None

    def confirm(self, prompt: str) -> bool:
        return self.ask(f"{prompt} (y/n): ").lower() in ("y", "yes")

    def ask_date(self, prompt: str = "Date (YYYY-MM-DD): ") -> dt.date | None:
        raw = self.ask(prompt)
        try:
            return parse_date(raw)
        except ValueError:
            self.say(f"Invalid date '{raw}'. Expected YYYY-MM-DD.")
            return None

    def ask_time(self, prompt: str = "Time (HH:MM): ") -> dt.time | None:
        raw = self.ask(prompt)
        try:
            return parse_time(raw)
        except ValueError:
            self.say(f"Invalid time '{raw}'. Expected HH:MM.")
            return None

    def ask_cpf(self, prompt: str = "CPF (digits only): ") -> str | None:
        cpf = self.ask(prompt)
        if not is_valid_cpf(cpf):
            self.say("Invalid CPF. It must contain exactly 11 digits.")
            return None
        return cpf

    def choose(
        self,
        items: Sequence[ItemT],
        render: Callable[[ItemT], str],
        prompt: str = "Select a number (0 to go back): ",
    ) -> ItemT | None:
        """Print a numbered list and return the picked item, or ``None``."""
        for number, item in enumerate(items, start=1):
            self.say(f"{number} - {render(item)}")
        selection = self.ask_int(prompt)
        if selection is None or selection == 0:
            return None
        if not 1 <= selection <= len(items):
            self.say("Invalid selection.")
            return None
        return items[selection - 1]

    def paginate(self, lines: Sequence[str], page_size: int) -> None:
        if not lines:
            self.say("Nothing to show.")
            return

        pages = math.ceil(len(lines) / page_size)
        for page in range(pages):
            self.say(f"\nPage {page + 1}/{pages}")
            for line in lines[page * page_size : (page + 1) * page_size]:
                self.say(line)
            if page < pages - 1 and not self.confirm("Show next page?"):
                break
