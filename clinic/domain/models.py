import datetime as dt
import uuid
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from clinic.records.adapters.datetime_helpers import format_date_time

REMOVED_MARKER = "(Removed)"


class AppointmentStatus(str, Enum):
    """Lifecycle states of an appointment; values are the tokens stored on disk."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]


_STATUS_DESCRIPTIONS: dict[AppointmentStatus, str] = {
    AppointmentStatus.PENDING: "Scheduled",
    AppointmentStatus.COMPLETED: "Completed",
    AppointmentStatus.CANCELLED: "Cancelled",
}


class Doctor(BaseModel):
    """A doctor row from the identity table, keyed by CRM."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str

    def is_removed(self, marker: str = REMOVED_MARKER) -> bool:
        return marker in self.name

    def marked_removed(self, marker: str = REMOVED_MARKER) -> "Doctor":
        if self.is_removed(marker):
            return self
        return self.model_copy(update={"name": f"{self.name} {marker}"})

    def reintegrated(self, marker: str = REMOVED_MARKER) -> "Doctor":
        return self.model_copy(update={"name": self.name.replace(marker, "").strip()})

    def __str__(self) -> str:
        return f"{self.name} (CRM: {self.code})"


class Patient(BaseModel):
    """A patient row from the identity table, keyed by CPF."""

    model_config = ConfigDict(frozen=True)

    cpf: str
    name: str


def _coerce(value: Any, kind: type) -> Any:
    if isinstance(value, str):
        try:
            return kind.fromisoformat(value)
        except ValueError:
            return None
    return value if isinstance(value, kind) else None


class Appointment(BaseModel):
    """A booked visit between a patient and a doctor.

    ``appointment_id`` is generated per instance and lives only for the
    session; the persisted identity of an appointment is :attr:`key`.

    When ``status`` is omitted it is classified once, at construction:
    PENDING for a future slot, COMPLETED for one already in the past.
    """

    model_config = ConfigDict(validate_assignment=True)

    appointment_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    date: dt.date
    time: dt.time
    patient_cpf: str
    doctor_code: str
    status: AppointmentStatus = AppointmentStatus.PENDING

    @model_validator(mode="before")
    @classmethod
    def _classify_status(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("status") is not None:
            return data
        date = _coerce(data.get("date"), dt.date)
        time = _coerce(data.get("time"), dt.time)
        if isinstance(date, dt.date) and isinstance(time, dt.time):
            past = dt.datetime.combine(date, time) < dt.datetime.now()
            data = {
                **data,
                "status": AppointmentStatus.COMPLETED if past else AppointmentStatus.PENDING,
            }
        return data

    @property
    def scheduled_at(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.time)

    @property
    def key(self) -> tuple[dt.date, dt.time, str, str]:
        return (self.date, self.time, self.patient_cpf, self.doctor_code)

    @property
    def slot(self) -> tuple[str, dt.date, dt.time]:
        return (self.doctor_code, self.date, self.time)

    @property
    def persisted_fields(self) -> tuple[dt.date, dt.time, str, str, AppointmentStatus]:
        """Everything that is written to disk, in column order."""
        return (*self.key, self.status)

    def belongs_to_doctor(self, doctor_code: str) -> bool:
        return self.doctor_code == doctor_code

    def belongs_to_patient(self, patient_cpf: str) -> bool:
        return self.patient_cpf == patient_cpf

    def is_pending(self) -> bool:
        return self.status is AppointmentStatus.PENDING

    def is_cancelled(self) -> bool:
        return self.status is AppointmentStatus.CANCELLED

    def has_occurred(self, now: dt.datetime | None = None) -> bool:
        """Time-based: true once the slot is behind ``now``, whatever the status."""
        return self.scheduled_at < (now or dt.datetime.now())

    def is_in_period(self, start: dt.date, end: dt.date) -> bool:
        return start <= self.date <= end

    def formatted_date_time(self) -> str:
        return format_date_time(self.date, self.time)

    def __str__(self) -> str:
        return (
            f"Appointment on {self.formatted_date_time()}, patient: {self.patient_cpf}, "
            f"doctor: {self.doctor_code} [{self.status.description}]"
        )


RecordT = TypeVar("RecordT")


class LoadReport(BaseModel, Generic[RecordT]):
    """Records parsed from storage plus one message per line that was dropped."""

    records: list[RecordT] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
