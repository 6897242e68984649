"""Read-only traversals over appointments.

Every function takes any iterable of appointments (usually a store snapshot)
and returns a new list; input order is preserved unless the function sorts.
"""

import datetime as dt
from collections.abc import Iterable

from clinic.domain.models import Appointment, AppointmentStatus
from clinic.records.adapters.datetime_helpers import subtract_months


def filter_by_patient(appointments: Iterable[Appointment], patient_cpf: str) -> list[Appointment]:
    return [a for a in appointments if a.belongs_to_patient(patient_cpf)]


def filter_by_doctor(appointments: Iterable[Appointment], doctor_code: str) -> list[Appointment]:
    return [a for a in appointments if a.belongs_to_doctor(doctor_code)]


def filter_by_period(
    appointments: Iterable[Appointment], start: dt.date, end: dt.date
) -> list[Appointment]:
    """Both ends inclusive."""
    return [a for a in appointments if a.is_in_period(start, end)]


def filter_pending(appointments: Iterable[Appointment]) -> list[Appointment]:
    """Status-based: PENDING regardless of whether the slot has passed."""
    return [a for a in appointments if a.is_pending()]


def filter_occurred(
    appointments: Iterable[Appointment], now: dt.datetime | None = None
) -> list[Appointment]:
    """Time-based: slots strictly before ``now`` regardless of status."""
    now = now or dt.datetime.now()
    return [a for a in appointments if a.has_occurred(now)]


def filter_history(
    appointments: Iterable[Appointment], now: dt.datetime | None = None
) -> list[Appointment]:
    """Visits that took place: COMPLETED, or past and not cancelled."""
    now = now or dt.datetime.now()
    return [
        a
        for a in appointments
        if a.status is AppointmentStatus.COMPLETED or (a.has_occurred(now) and not a.is_cancelled())
    ]


def sort_upcoming(appointments: Iterable[Appointment]) -> list[Appointment]:
    return sorted(appointments, key=lambda a: (a.date, a.time))


def sort_history(appointments: Iterable[Appointment]) -> list[Appointment]:
    return sorted(appointments, key=lambda a: (a.date, a.time), reverse=True)


def patients_seen_by(appointments: Iterable[Appointment], doctor_code: str) -> list[str]:
    """Distinct patient CPFs with any appointment for the doctor, first-seen order."""
    return list(dict.fromkeys(a.patient_cpf for a in filter_by_doctor(appointments, doctor_code)))


def doctors_for_patient(appointments: Iterable[Appointment], patient_cpf: str) -> list[str]:
    return list(dict.fromkeys(a.doctor_code for a in filter_by_patient(appointments, patient_cpf)))


def last_visit_dates(
    appointments: Iterable[Appointment], doctor_code: str
) -> dict[str, dt.date | None]:
    """Latest non-cancelled date per patient of the doctor; ``None`` if all were cancelled."""
    latest: dict[str, dt.date | None] = {}
    for appointment in filter_by_doctor(appointments, doctor_code):
        current = latest.setdefault(appointment.patient_cpf, None)
        if appointment.is_cancelled():
            continue
        if current is None or appointment.date > current:
            latest[appointment.patient_cpf] = appointment.date
    return latest


def inactive_patients(
    appointments: Iterable[Appointment],
    doctor_code: str,
    months: int,
    today: dt.date | None = None,
) -> list[str]:
    """CPFs of the doctor's patients with no qualifying visit since ``today - months``.

    A patient whose only appointments with the doctor were cancelled counts as
    inactive.
    """
    if months < 0:
        raise ValueError("months must be zero or positive")
    cutoff = subtract_months(today or dt.date.today(), months)
    return [
        cpf
        for cpf, last in last_visit_dates(appointments, doctor_code).items()
        if last is None or last < cutoff
    ]
