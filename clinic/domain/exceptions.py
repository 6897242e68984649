import datetime as dt


class ClinicError(Exception):
    """Base exception for all clinic record errors."""


class StorageError(ClinicError):
    """Raised when a backing file cannot be read or written."""

    def __init__(self, reason: str, path: str | None = None) -> None:
        self.reason = reason
        self.path = path
        super().__init__(f"Storage failure: {reason}")


class RecordParseError(ClinicError):
    """Raised when a stored line cannot be turned into a record."""

    def __init__(self, reason: str, line_number: int | None = None) -> None:
        self.reason = reason
        self.line_number = line_number
        where = f"line {line_number}: " if line_number is not None else ""
        super().__init__(f"{where}{reason}")


class InvalidIdentifierError(ClinicError):
    """Raised when a CPF or CRM does not have the expected shape."""

    def __init__(self, kind: str, value: str) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"Invalid {kind}: '{value}'")


class UnknownRecordError(ClinicError):
    """Raised when a doctor or patient key is not in the identity tables."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind.capitalize()} '{key}' not found")


class DuplicateRecordError(ClinicError):
    """Raised when registering a key that already exists."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind.capitalize()} '{key}' is already registered")


class AppointmentRejectedError(ClinicError):
    """Raised when a schedule or reschedule request breaks a booking rule."""

    def __init__(self, reason: str, patient_cpf: str | None = None) -> None:
        self.reason = reason
        self.patient_cpf = patient_cpf
        super().__init__(f"Appointment rejected: {reason}")


class PastDateError(AppointmentRejectedError):
    """Raised when the requested date is before today."""

    def __init__(self, date: dt.date, patient_cpf: str | None = None) -> None:
        self.date = date
        super().__init__(
            f"{date.isoformat()} is in the past; choose today or a later date",
            patient_cpf=patient_cpf,
        )


class SlotConflictError(AppointmentRejectedError):
    """Raised when the doctor already has a pending appointment in that slot."""

    def __init__(
        self,
        doctor_code: str,
        date: dt.date,
        time: dt.time,
        patient_cpf: str | None = None,
    ) -> None:
        self.doctor_code = doctor_code
        self.date = date
        self.time = time
        super().__init__(
            f"doctor {doctor_code} already has an appointment on "
            f"{date.isoformat()} at {time.strftime('%H:%M')}",
            patient_cpf=patient_cpf,
        )


class StaleAppointmentError(ClinicError):
    """Raised when the appointment handed in is no longer in the store."""

    def __init__(self, appointment_id: str) -> None:
        self.appointment_id = appointment_id
        super().__init__(f"Appointment '{appointment_id}' was not found; reload and try again")
