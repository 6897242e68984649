import datetime as dt
from collections.abc import Callable

from loguru import logger

from clinic.domain.exceptions import (
    PastDateError,
    SlotConflictError,
    StaleAppointmentError,
)
from clinic.domain.models import Appointment, AppointmentStatus
from clinic.records import queries
from clinic.records.conflicts import has_conflict, is_future_date
from clinic.records.directory import DoctorDirectory, PatientDirectory
from clinic.records.ports import AbstractSchedulingService
from clinic.records.store import AppointmentStore


class SchedulingService(AbstractSchedulingService):
    """Appointment lifecycle over an :class:`AppointmentStore`, enforcing booking rules.

    Every mutation is gated by the conflict and date checks before anything
    changes. The identity tables are optional; when given, schedule also
    rejects unknown patients and doctors.
    """

    def __init__(
        self,
        store: AppointmentStore,
        *,
        doctors: DoctorDirectory | None = None,
        patients: PatientDirectory | None = None,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
    ) -> None:
        self._store = store
        self._doctors = doctors
        self._patients = patients
        self._clock = clock

    @property
    def store(self) -> AppointmentStore:
        return self._store

    def now(self) -> dt.datetime:
        return self._clock()

    def today(self) -> dt.date:
        return self._clock().date()

    def has_conflict(
        self,
        doctor_code: str,
        date: dt.date,
        time: dt.time,
        excluding: Appointment | None = None,
    ) -> bool:
        return has_conflict(self._store.snapshot(), doctor_code, date, time, excluding)

    def is_future_date(self, date: dt.date) -> bool:
        return is_future_date(date, self.today())

    def schedule(
        self, patient_cpf: str, doctor_code: str, date: dt.date, time: dt.time
    ) -> Appointment:
        logger.info(
            "Scheduling appointment: doctor={}, date={}, time={}", doctor_code, date, time
        )

        if not self.is_future_date(date):
            raise PastDateError(date, patient_cpf=patient_cpf)
        if self.has_conflict(doctor_code, date, time):
            raise SlotConflictError(doctor_code, date, time, patient_cpf=patient_cpf)
        if self._patients is not None:
            self._patients.require(patient_cpf)
        if self._doctors is not None:
            self._doctors.require(doctor_code)

        appointment = Appointment(
            date=date,
            time=time,
            patient_cpf=patient_cpf,
            doctor_code=doctor_code,
            status=AppointmentStatus.PENDING,
        )
        self._store.add(appointment)

        logger.info("Appointment scheduled: id={}", appointment.appointment_id)
        return appointment

    def reschedule(
        self, appointment: Appointment, new_date: dt.date, new_time: dt.time
    ) -> Appointment:
        logger.info(
            "Rescheduling appointment id={} to date={}, time={}",
            appointment.appointment_id,
            new_date,
            new_time,
        )

        index = self._store.locate(appointment)
        current = self._store.snapshot()[index] if index is not None else appointment

        if not self.is_future_date(new_date):
            raise PastDateError(new_date, patient_cpf=appointment.patient_cpf)
        if self.has_conflict(appointment.doctor_code, new_date, new_time, excluding=current):
            raise SlotConflictError(
                appointment.doctor_code, new_date, new_time, patient_cpf=appointment.patient_cpf
            )
        if index is None:
            raise StaleAppointmentError(appointment.appointment_id)

        replacement = Appointment(
            date=new_date,
            time=new_time,
            patient_cpf=appointment.patient_cpf,
            doctor_code=appointment.doctor_code,
            status=AppointmentStatus.PENDING,
        )
        self._store.replace(index, replacement)

        logger.info(
            "Appointment rescheduled: id={} replaced by id={}",
            appointment.appointment_id,
            replacement.appointment_id,
        )
        return replacement

    def cancel(self, appointment: Appointment) -> Appointment:
        logger.info("Cancelling appointment id={}", appointment.appointment_id)

        index = self._store.locate(appointment)
        if index is None:
            raise StaleAppointmentError(appointment.appointment_id)

        stored = self._store.snapshot()[index]
        if stored is not appointment:
            appointment.status = AppointmentStatus.CANCELLED
        cancelled = self._store.set_status(index, AppointmentStatus.CANCELLED)

        logger.info("Appointment cancelled: id={}", cancelled.appointment_id)
        return cancelled

    def confirm_presence(self, appointment: Appointment) -> str:
        logger.info("Presence confirmed for appointment id={}", appointment.appointment_id)
        return f"Presence confirmed for the appointment on {appointment.formatted_date_time()}"

    def appointments_for(self, patient_cpf: str) -> list[Appointment]:
        return queries.filter_by_patient(self._store.snapshot(), patient_cpf)

    def upcoming_for(self, patient_cpf: str) -> list[Appointment]:
        """The patient's PENDING appointments, soonest first."""
        return queries.sort_upcoming(queries.filter_pending(self.appointments_for(patient_cpf)))

    def history_for(self, patient_cpf: str) -> list[Appointment]:
        """Visits that took place, most recent first."""
        return queries.sort_history(
            queries.filter_history(self.appointments_for(patient_cpf), self.now())
        )

    def doctor_agenda(
        self, doctor_code: str, start: dt.date, end: dt.date
    ) -> list[Appointment]:
        """The doctor's appointments in ``[start, end]``, ascending by date and time."""
        in_period = queries.filter_by_period(self._store.snapshot(), start, end)
        return queries.sort_upcoming(queries.filter_by_doctor(in_period, doctor_code))

    def patients_seen_by(self, doctor_code: str) -> list[str]:
        return queries.patients_seen_by(self._store.snapshot(), doctor_code)

    def inactive_patients(self, doctor_code: str, months: int) -> list[str]:
        return queries.inactive_patients(
            self._store.snapshot(), doctor_code, months, self.today()
        )
