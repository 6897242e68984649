import datetime as dt
from collections.abc import Callable

import pytest

from clinic.config import ClinicConfig, StorageBackend
from clinic.console.io import Console
from clinic.domain.models import Appointment, Doctor, Patient
from clinic.records.adapters.memory import InMemoryRepository
from clinic.records.directory import DoctorDirectory, PatientDirectory
from clinic.records.factory import ClinicServices
from clinic.records.service import SchedulingService
from clinic.records.store import AppointmentStore

NOW = dt.datetime(2026, 6, 1, 12, 0)

CARLA = "11122233344"
DIEGO = "55566677788"
ELISA = "99988877766"


@pytest.fixture
def appointment_repo() -> InMemoryRepository[Appointment]:
    return InMemoryRepository()


@pytest.fixture
def doctor_repo() -> InMemoryRepository[Doctor]:
    return InMemoryRepository(
        [Doctor(code="111", name="Ana Souza"), Doctor(code="222", name="Bruno Lima")]
    )


@pytest.fixture
def patient_repo() -> InMemoryRepository[Patient]:
    return InMemoryRepository(
        [
            Patient(cpf=CARLA, name="Carla Dias"),
            Patient(cpf=DIEGO, name="Diego Alves"),
            Patient(cpf=ELISA, name="Elisa Prado"),
        ]
    )


@pytest.fixture
def store(appointment_repo: InMemoryRepository[Appointment]) -> AppointmentStore:
    store = AppointmentStore(appointment_repo)
    store.load()
    return store


@pytest.fixture
def doctors(doctor_repo: InMemoryRepository[Doctor]) -> DoctorDirectory:
    directory = DoctorDirectory(doctor_repo)
    directory.load()
    return directory


@pytest.fixture
def patients(patient_repo: InMemoryRepository[Patient]) -> PatientDirectory:
    directory = PatientDirectory(patient_repo)
    directory.load()
    return directory


@pytest.fixture
def service(
    store: AppointmentStore, doctors: DoctorDirectory, patients: PatientDirectory
) -> SchedulingService:
    return SchedulingService(store, doctors=doctors, patients=patients, clock=lambda: NOW)


@pytest.fixture
def config() -> ClinicConfig:
    return ClinicConfig(storage=StorageBackend.MEMORY, log_file="", page_size=2, history_page_size=2)


@pytest.fixture
def services(
    service: SchedulingService, doctors: DoctorDirectory, patients: PatientDirectory
) -> ClinicServices:
    return ClinicServices(scheduling=service, doctors=doctors, patients=patients, warnings=[])


class ScriptedInput:
    """Feeds canned answers to a ``Console`` and records what it prints.

    Raises ``EOFError`` once the answers run out, like ``input`` at the end
    of stdin.
    """

    def __init__(self, *answers: str) -> None:
        self._answers = list(answers)
        self.prompts: list[str] = []
        self.output: list[str] = []

    def __call__(self, prompt: str = "") -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise EOFError
        return self._answers.pop(0)

    @property
    def remaining(self) -> int:
        return len(self._answers)

    @property
    def text(self) -> str:
        return "\n".join(self.output)

    def console(self) -> Console:
        return Console(self, self.output.append)


@pytest.fixture
def scripted() -> Callable[..., ScriptedInput]:
    return ScriptedInput
