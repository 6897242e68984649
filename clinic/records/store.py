from collections.abc import Callable, Iterator

from loguru import logger

from clinic.domain.exceptions import ClinicError, StorageError
from clinic.domain.models import Appointment, AppointmentStatus
from clinic.records.ports import AppointmentRepositoryProtocol


class AppointmentStore:
    """Owns the in-memory appointment collection and commits it to a repository.

    Callers read through :meth:`snapshot` or iteration; every change goes
    through :meth:`add`, :meth:`replace` or :meth:`set_status`. Memory is
    updated first and is the truth if the write that follows fails.

    After a failed load the file is left as it is: full rewrites are refused
    until a later load succeeds.
    """

    def __init__(self, repository: AppointmentRepositoryProtocol) -> None:
        self._repository = repository
        self._appointments: list[Appointment] = []
        self.warnings: list[str] = []
        self._load_failed = False

    def load(self) -> list[str]:
        """Replace memory with what storage holds. Returns the load warnings."""
        try:
            report = self._repository.load()
        except StorageError as exc:
            logger.warning("Appointment load failed, starting empty: {}", exc.reason)
            self._appointments = []
            self._load_failed = True
            self.warnings = [str(exc)]
            return self.warnings
        except Exception as exc:
            logger.warning("Appointment load failed, starting empty: {}", exc)
            self._appointments = []
            self._load_failed = True
            self.warnings = [f"Storage failure: {exc}"]
            return self.warnings

        self._load_failed = False
        self._appointments = list(report.records)
        self.warnings = list(report.warnings)
        logger.info(
            "Loaded {} appointment(s), {} line(s) skipped",
            len(self._appointments),
            len(self.warnings),
        )
        return self.warnings

    def __iter__(self) -> Iterator[Appointment]:
        return iter(tuple(self._appointments))

    def __len__(self) -> int:
        return len(self._appointments)

    def snapshot(self) -> tuple[Appointment, ...]:
        return tuple(self._appointments)

    def get(self, appointment_id: str) -> Appointment | None:
        index = self._index_by_id(appointment_id)
        return self._appointments[index] if index is not None else None

    def locate(self, appointment: Appointment) -> int | None:
        """Position of ``appointment``: by id first, then by its value key."""
        index = self._index_by_id(appointment.appointment_id)
        if index is not None:
            return index
        for position, stored in enumerate(self._appointments):
            if stored.key == appointment.key:
                return position
        return None

    def add(self, appointment: Appointment) -> None:
        self._appointments.append(appointment)
        self._commit(lambda: self._repository.append(appointment), "append")

    def replace(self, index: int, appointment: Appointment) -> Appointment:
        self._ensure_writable()
        previous = self._appointments[index]
        self._appointments[index] = appointment
        self.rewrite()
        return previous

    def set_status(self, index: int, status: AppointmentStatus) -> Appointment:
        self._ensure_writable()
        appointment = self._appointments[index]
        appointment.status = status
        self.rewrite()
        return appointment

    def rewrite(self) -> None:
        self._ensure_writable()
        appointments = tuple(self._appointments)
        self._commit(lambda: self._repository.rewrite(appointments), "rewrite")

    def _ensure_writable(self) -> None:
        if self._load_failed:
            raise StorageError("the appointment file could not be read; refusing to overwrite it")

    def _commit(self, write: Callable[[], None], action: str) -> None:
        try:
            write()
        except StorageError as exc:
            logger.error("Appointment {} failed; memory kept as truth: {}", action, exc.reason)
            raise
        except ClinicError:
            raise
        except Exception as exc:
            logger.error("Appointment {} failed; memory kept as truth: {}", action, exc)
            raise StorageError(f"appointment {action} failed: {exc}") from exc

    def _index_by_id(self, appointment_id: str) -> int | None:
        for position, stored in enumerate(self._appointments):
            if stored.appointment_id == appointment_id:
                return position
        return None
