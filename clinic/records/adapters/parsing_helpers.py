from clinic.domain.exceptions import RecordParseError
from clinic.domain.identifiers import is_valid_cpf, is_valid_crm
from clinic.domain.models import Appointment, AppointmentStatus, Doctor, Patient
from clinic.records.adapters.datetime_helpers import (
    format_date,
    format_time,
    parse_date,
    parse_time,
)

APPOINTMENT_HEADER = ["Date", "Time", "PatientCPF", "DoctorCode", "Status"]
DOCTOR_HEADER = ["Name", "CRM"]
PATIENT_HEADER = ["Name", "CPF"]


def parse_appointment_row(row: list[str], line_number: int | None = None) -> Appointment:
    """Build an appointment from ``Date,Time,PatientCPF,DoctorCode,Status``."""
    if len(row) != len(APPOINTMENT_HEADER):
        raise RecordParseError(
            f"expected {len(APPOINTMENT_HEADER)} columns, got {len(row)}", line_number
        )

    date_str, time_str, cpf, crm, status_str = (cell.strip() for cell in row)

    if not is_valid_cpf(cpf):
        raise RecordParseError(f"invalid CPF '{cpf}'", line_number)
    if not is_valid_crm(crm):
        raise RecordParseError(f"invalid CRM '{crm}'", line_number)

    try:
        date = parse_date(date_str)
        time = parse_time(time_str)
    except ValueError as exc:
        raise RecordParseError(
            f"unparsable date/time '{date_str} {time_str}'", line_number
        ) from exc

    try:
        status = AppointmentStatus(status_str)
    except ValueError as exc:
        raise RecordParseError(f"unknown status '{status_str}'", line_number) from exc

    return Appointment(
        date=date,
        time=time,
        patient_cpf=cpf,
        doctor_code=crm,
        status=status,
    )


def appointment_to_row(appointment: Appointment) -> list[str]:
    return [
        format_date(appointment.date),
        format_time(appointment.time),
        appointment.patient_cpf,
        appointment.doctor_code,
        appointment.status.value,
    ]


def parse_doctor_row(row: list[str], line_number: int | None = None) -> Doctor:
    """Build a doctor from ``Name,CRM``. Names are not validated."""
    if len(row) != len(DOCTOR_HEADER):
        raise RecordParseError(f"expected 2 columns, got {len(row)}", line_number)
    name, code = row[0].strip(), row[1].strip()
    if not name or not code:
        raise RecordParseError("empty name or CRM", line_number)
    return Doctor(code=code, name=name)


def doctor_to_row(doctor: Doctor) -> list[str]:
    return [doctor.name, doctor.code]


def parse_patient_row(row: list[str], line_number: int | None = None) -> Patient:
    """Build a patient from ``Name,CPF``; the CPF shape is checked at entry, not here."""
    if len(row) != len(PATIENT_HEADER):
        raise RecordParseError(f"expected 2 columns, got {len(row)}", line_number)
    name, cpf = row[0].strip(), row[1].strip()
    if not name or not cpf:
        raise RecordParseError("empty name or CPF", line_number)
    return Patient(cpf=cpf, name=name)


def patient_to_row(patient: Patient) -> list[str]:
    return [patient.name, patient.cpf]
