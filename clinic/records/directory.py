from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Generic, TypeVar

from loguru import logger

from clinic.domain.exceptions import (
    ClinicError,
    DuplicateRecordError,
    InvalidIdentifierError,
    StorageError,
    UnknownRecordError,
)
from clinic.domain.identifiers import require_cpf, require_crm
from clinic.domain.models import REMOVED_MARKER, Doctor, Patient
from clinic.records.ports import DoctorRepositoryProtocol, PatientRepositoryProtocol

RecordT = TypeVar("RecordT", Doctor, Patient)


class IdentityDirectory(ABC, Generic[RecordT]):
    """Name lookup table keyed by a natural code, backed by a repository."""

    kind = "record"

    def __init__(self, repository: DoctorRepositoryProtocol | PatientRepositoryProtocol) -> None:
        self._repository = repository
        self._records: list[RecordT] = []
        self.warnings: list[str] = []
        self._load_failed = False

    @abstractmethod
    def key_of(self, record: RecordT) -> str:
        """The natural key of ``record`` (CRM or CPF)."""

    def load(self) -> list[str]:
        """Replace memory with storage contents. Returns the load warnings."""
        try:
            report = self._repository.load()
        except ClinicError as exc:
            logger.warning("{} table load failed, starting empty: {}", self.kind, exc)
            self._records = []
            self._load_failed = True
            self.warnings = [str(exc)]
            return self.warnings

        self._load_failed = False
        self._records = list(report.records)
        self.warnings = list(report.warnings)
        logger.info("Loaded {} {}(s)", len(self._records), self.kind)
        return self.warnings

    reload = load

    def resync(self) -> int:
        """Pick up rows added to storage since the last load. Returns how many."""
        try:
            report = self._repository.load()
        except ClinicError as exc:
            logger.warning("{} table resync failed: {}", self.kind, exc)
            return 0

        known = {self.key_of(record) for record in self._records}
        added = 0
        for record in report.records:
            if self.key_of(record) not in known:
                self._records.append(record)
                known.add(self.key_of(record))
                added += 1
        if added:
            logger.info("Resync added {} {}(s)", added, self.kind)
        return added

    def all(self) -> tuple[RecordT, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, key: str) -> RecordT | None:
        return next((r for r in self._records if self.key_of(r) == key), None)

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def require(self, key: str) -> RecordT:
        record = self.get(key)
        if record is None:
            raise UnknownRecordError(self.kind, key)
        return record

    def name_for(self, key: str) -> str:
        record = self.get(key)
        return record.name if record is not None else f"{key} ({self.kind} not found)"

    def _add(self, record: RecordT) -> RecordT:
        key = self.key_of(record)
        if self.exists(key):
            raise DuplicateRecordError(self.kind, key)
        self._records.append(record)
        self._commit(lambda: self._repository.append(record), "append")  # type: ignore[arg-type]
        logger.info("Registered {} {}", self.kind, key)
        return record

    def _update(self, key: str, change: Callable[[RecordT], RecordT]) -> RecordT:
        self._ensure_writable()
        for position, record in enumerate(self._records):
            if self.key_of(record) == key:
                updated = change(record)
                self._records[position] = updated
                self._rewrite()
                return updated
        raise UnknownRecordError(self.kind, key)

    def _ensure_writable(self) -> None:
        """A table that failed to load is never rewritten over its file."""
        if self._load_failed:
            raise StorageError(
                f"the {self.kind} file could not be read; refusing to overwrite it"
            )

    def _rewrite(self) -> None:
        self._ensure_writable()
        records = tuple(self._records)
        self._commit(lambda: self._repository.rewrite(records), "rewrite")  # type: ignore[arg-type]

    def _commit(self, write: Callable[[], None], action: str) -> None:
        try:
            write()
        except ClinicError as exc:
            logger.error("{} table {} failed: {}", self.kind, action, exc)
            raise
        except Exception as exc:
            logger.error("{} table {} failed: {}", self.kind, action, exc)
            raise StorageError(f"{self.kind} {action} failed: {exc}") from exc


def _require_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidIdentifierError("name", name)
    return cleaned


class DoctorDirectory(IdentityDirectory[Doctor]):
    """Doctors keyed by CRM. Removal only tags the name so history keeps resolving."""

    kind = "doctor"

    def __init__(
        self, repository: DoctorRepositoryProtocol, removed_marker: str = REMOVED_MARKER
    ) -> None:
        super().__init__(repository)
        self._marker = removed_marker

    def key_of(self, record: Doctor) -> str:
        return record.code

    def register(self, name: str, code: str) -> Doctor:
        return self._add(Doctor(code=require_crm(code), name=_require_name(name)))

    def rename(self, code: str, new_name: str) -> Doctor:
        name = _require_name(new_name)
        return self._update(code, lambda d: d.model_copy(update={"name": name}))

    def mark_removed(self, code: str) -> Doctor:
        return self._update(code, lambda d: d.marked_removed(self._marker))

    def reintegrate(self, code: str) -> Doctor:
        doctor = self.get(code)
        if doctor is None or not doctor.is_removed(self._marker):
            raise UnknownRecordError("removed doctor", code)
        return self._update(code, lambda d: d.reintegrated(self._marker))

    def is_removed(self, code: str) -> bool:
        doctor = self.get(code)
        return doctor is not None and doctor.is_removed(self._marker)

    def active(self) -> list[Doctor]:
        return [d for d in self.sorted_by_name() if not d.is_removed(self._marker)]

    def sorted_by_name(self) -> list[Doctor]:
        return sorted(self._records, key=lambda d: d.name)


class PatientDirectory(IdentityDirectory[Patient]):
    """Patients keyed by CPF."""

    kind = "patient"

    def key_of(self, record: Patient) -> str:
        return record.cpf

    def register(self, name: str, cpf: str) -> Patient:
        return self._add(Patient(cpf=require_cpf(cpf), name=_require_name(name)))

    def rename(self, cpf: str, new_name: str) -> Patient:
        name = _require_name(new_name)
        return self._update(cpf, lambda p: p.model_copy(update={"name": name}))

    def remove(self, cpf: str) -> Patient:
        """Drop the patient row; their appointments stay in the appointment store."""
        self._ensure_writable()
        patient = self.require(cpf)
        self._records = [p for p in self._records if p.cpf != cpf]
        self._rewrite()
        logger.info("Removed patient {}", cpf)
        return patient
