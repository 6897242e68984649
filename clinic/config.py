from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from clinic.domain.models import REMOVED_MARKER


class StorageBackend(Enum):
    CSV = "csv"
    MEMORY = "memory"


class ClinicConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLINIC_", env_file=".env", extra="ignore")

    data_dir: Path = Path("data")
    doctors_file: str = "doctors.csv"
    patients_file: str = "patients.csv"
    appointments_file: str = "appointments.csv"
    storage: StorageBackend = StorageBackend.CSV

    page_size: int = Field(default=10, ge=1)
    history_page_size: int = Field(default=5, ge=1)
    removed_marker: str = REMOVED_MARKER

    log_level: str = "WARNING"
    # Written inside data_dir; empty disables the file sink.
    log_file: str = "clinic.log"

    @property
    def doctors_path(self) -> Path:
        return self.data_dir / self.doctors_file

    @property
    def patients_path(self) -> Path:
        return self.data_dir / self.patients_file

    @property
    def appointments_path(self) -> Path:
        return self.data_dir / self.appointments_file
