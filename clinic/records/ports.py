import datetime as dt
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Protocol

from clinic.domain.models import Appointment, Doctor, LoadReport, Patient


class AbstractSchedulingService(ABC):
    """Abstract base class for the appointment lifecycle operations."""

    @abstractmethod
    def schedule(
        self, patient_cpf: str, doctor_code: str, date: dt.date, time: dt.time
    ) -> Appointment:
        """Book a new appointment.

        Args:
            patient_cpf: The patient's CPF.
            doctor_code: The doctor's CRM.
            date: Appointment date; today or later.
            time: Appointment wall-clock time.

        Returns:
            The new PENDING appointment.

        Raises:
            PastDateError: If ``date`` is before today.
            SlotConflictError: If the doctor already has a pending appointment
                at that date and time.
            UnknownRecordError: If the patient or doctor is not registered.
            StorageError: If the appointment was kept in memory but could not be
                written to disk.
        """

    @abstractmethod
    def reschedule(
        self, appointment: Appointment, new_date: dt.date, new_time: dt.time
    ) -> Appointment:
        """Move an appointment to a new date and time.

        Args:
            appointment: The appointment to move.
            new_date: Target date; today or later.
            new_time: Target time.

        Returns:
            The replacement appointment, PENDING, same patient and doctor.

        Raises:
            PastDateError: If ``new_date`` is before today.
            SlotConflictError: If the target slot is taken by another pending
                appointment.
            StaleAppointmentError: If ``appointment`` is no longer stored.
            StorageError: If the rewrite failed; memory already holds the change.
        """

    @abstractmethod
    def cancel(self, appointment: Appointment) -> Appointment:
        """Mark an appointment as CANCELLED, keeping it for history.

        Raises:
            StaleAppointmentError: If ``appointment`` is no longer stored.
            StorageError: If the rewrite failed; memory already holds the change.
        """

    @abstractmethod
    def confirm_presence(self, appointment: Appointment) -> str:
        """Acknowledge attendance. Nothing is persisted.

        Returns:
            A message for the caller to display.
        """

    @abstractmethod
    def appointments_for(self, patient_cpf: str) -> list[Appointment]:
        """All appointments of a patient, in store order."""


class AppointmentRepositoryProtocol(Protocol):
    """Low-level interface for appointment persistence."""

    def load(self) -> LoadReport[Appointment]:
        """Read every stored appointment, reporting dropped lines."""
        ...

    def rewrite(self, appointments: Sequence[Appointment]) -> None:
        """Replace the stored collection with ``appointments``."""
        ...

    def append(self, appointment: Appointment) -> None:
        """Add a single appointment to the end of storage."""
        ...


class DoctorRepositoryProtocol(Protocol):
    """Low-level interface for the doctor identity table."""

    def load(self) -> LoadReport[Doctor]:
        ...

    def rewrite(self, doctors: Sequence[Doctor]) -> None:
        ...

    def append(self, doctor: Doctor) -> None:
        ...


class PatientRepositoryProtocol(Protocol):
    """Low-level interface for the patient identity table."""

    def load(self) -> LoadReport[Patient]:
        ...

    def rewrite(self, patients: Sequence[Patient]) -> None:
        ...

    def append(self, patient: Patient) -> None:
        ...
