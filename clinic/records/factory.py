from collections.abc import Callable
from typing import NamedTuple

from loguru import logger

from clinic.config import ClinicConfig, StorageBackend
from clinic.records.adapters.csv_files import (
    CsvAppointmentRepository,
    CsvDoctorRepository,
    CsvPatientRepository,
)
from clinic.records.adapters.memory import InMemoryRepository
from clinic.records.directory import DoctorDirectory, PatientDirectory
from clinic.records.ports import (
    AppointmentRepositoryProtocol,
    DoctorRepositoryProtocol,
    PatientRepositoryProtocol,
)
from clinic.records.service import SchedulingService
from clinic.records.store import AppointmentStore


class Repositories(NamedTuple):
    doctors: DoctorRepositoryProtocol
    patients: PatientRepositoryProtocol
    appointments: AppointmentRepositoryProtocol


class ClinicServices(NamedTuple):
    """Everything a console shell needs, loaded and wired together."""

    scheduling: SchedulingService
    doctors: DoctorDirectory
    patients: PatientDirectory
    warnings: list[str]


def _build_csv(config: ClinicConfig) -> Repositories:
    return Repositories(
        doctors=CsvDoctorRepository(config.doctors_path),
        patients=CsvPatientRepository(config.patients_path),
        appointments=CsvAppointmentRepository(config.appointments_path),
    )


def _build_memory(config: ClinicConfig) -> Repositories:
    return Repositories(
        doctors=InMemoryRepository(),
        patients=InMemoryRepository(),
        appointments=InMemoryRepository(),
    )


_BUILDERS: dict[StorageBackend, Callable[[ClinicConfig], Repositories]] = {
    StorageBackend.CSV: _build_csv,
    StorageBackend.MEMORY: _build_memory,
}


def build_clinic_services(config: ClinicConfig) -> ClinicServices:
    """Build and load the services for the configured storage backend."""
    backend = config.storage
    logger.info("Building clinic services with storage: {}", backend.value)
    repositories = _BUILDERS[backend](config)

    doctors = DoctorDirectory(repositories.doctors, removed_marker=config.removed_marker)
    patients = PatientDirectory(repositories.patients)
    store = AppointmentStore(repositories.appointments)

    warnings = [*doctors.load(), *patients.load(), *store.load()]
    scheduling = SchedulingService(store, doctors=doctors, patients=patients)
    return ClinicServices(
        scheduling=scheduling, doctors=doctors, patients=patients, warnings=warnings
    )
