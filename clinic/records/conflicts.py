import datetime as dt
from collections.abc import Iterable

from clinic.domain.models import Appointment


def has_conflict(
    appointments: Iterable[Appointment],
    doctor_code: str,
    date: dt.date,
    time: dt.time,
    excluding: Appointment | None = None,
) -> bool:
    """True if another PENDING appointment already holds the doctor's slot.

    ``excluding`` is skipped by id, so a reschedule does not collide with the
    appointment being moved. Completed and cancelled appointments never block.
    """
    excluded_id = excluding.appointment_id if excluding is not None else None
    return any(
        appointment.appointment_id != excluded_id
        and appointment.is_pending()
        and appointment.slot == (doctor_code, date, time)
        for appointment in appointments
    )


def is_future_date(date: dt.date, today: dt.date | None = None) -> bool:
    """Today counts as valid; only strictly earlier dates are rejected."""
    return date >= (today or dt.date.today())
