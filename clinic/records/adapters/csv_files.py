import csv
import os
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Generic, TypeVar

from loguru import logger

from clinic.domain.exceptions import RecordParseError, StorageError
from clinic.domain.models import Appointment, Doctor, LoadReport, Patient
from clinic.records.adapters.parsing_helpers import (
    APPOINTMENT_HEADER,
    DOCTOR_HEADER,
    PATIENT_HEADER,
    appointment_to_row,
    doctor_to_row,
    parse_appointment_row,
    parse_doctor_row,
    parse_patient_row,
    patient_to_row,
)

RecordT = TypeVar("RecordT")


class CsvTable(Generic[RecordT]):
    """One comma-separated file with a header line and one record per line.

    ``rewrite`` goes through a temporary file in the same directory and an
    ``os.replace``, so an interrupted write never leaves a truncated table.
    """

    def __init__(
        self,
        path: Path,
        header: list[str],
        parse_row: Callable[[list[str], int | None], RecordT],
        to_row: Callable[[RecordT], list[str]],
    ) -> None:
        self._path = Path(path)
        self._header = header
        self._parse_row = parse_row
        self._to_row = to_row

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> LoadReport[RecordT]:
        report: LoadReport[RecordT] = LoadReport()
        if not self._path.exists():
            logger.info("No file at {}; starting with an empty table", self._path)
            return report

        try:
            # surrogateescape keeps undecodable bytes so they fail one line, not the file
            with self._path.open(
                "r", encoding="utf-8", errors="surrogateescape", newline=""
            ) as handle:
                reader = csv.reader(handle)
                next(reader, None)
                for row in reader:
                    if not row or all(not cell.strip() for cell in row):
                        continue
                    try:
                        if not _is_valid_utf8(row):
                            raise RecordParseError("line is not valid UTF-8", reader.line_num)
                        report.records.append(self._parse_row(row, reader.line_num))
                    except RecordParseError as exc:
                        message = f"{self._path.name}: {exc}"
                        logger.warning("Skipping malformed record in {}", message)
                        report.warnings.append(message)
        except (OSError, csv.Error) as exc:
            raise StorageError(f"could not read {self._path}: {exc}", str(self._path)) from exc

        logger.debug(
            "Loaded {} record(s) from {} ({} skipped)",
            len(report.records),
            self._path,
            len(report.warnings),
        )
        return report

    def rewrite(self, records: Sequence[RecordT]) -> None:
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                newline="",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                writer = csv.writer(handle, lineterminator="\n")
                writer.writerow(self._header)
                writer.writerows(self._to_row(record) for record in records)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"could not write {self._path}: {exc}", str(self._path)) from exc

        logger.debug("Rewrote {} with {} record(s)", self._path, len(records))

    def append(self, record: RecordT) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            needs_header = not self._path.exists() or self._path.stat().st_size == 0
            needs_newline = not needs_header and not self._ends_with_newline()
            with self._path.open("a", encoding="utf-8", newline="") as handle:
                writer = csv.writer(handle, lineterminator="\n")
                if needs_header:
                    writer.writerow(self._header)
                elif needs_newline:
                    handle.write("\n")
                writer.writerow(self._to_row(record))
        except OSError as exc:
            raise StorageError(f"could not append to {self._path}: {exc}", str(self._path)) from exc

    def _ends_with_newline(self) -> bool:
        with self._path.open("rb") as handle:
            handle.seek(-1, os.SEEK_END)
            return handle.read(1) == b"\n"


def _is_valid_utf8(row: list[str]) -> bool:
    """False when a cell still holds bytes smuggled in by ``surrogateescape``."""
    try:
        "".join(row).encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class CsvAppointmentRepository(CsvTable[Appointment]):
    """Appointments stored as ``Date,Time,PatientCPF,DoctorCode,Status``."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, APPOINTMENT_HEADER, parse_appointment_row, appointment_to_row)


class CsvDoctorRepository(CsvTable[Doctor]):
    def __init__(self, path: Path) -> None:
        super().__init__(path, DOCTOR_HEADER, parse_doctor_row, doctor_to_row)


class CsvPatientRepository(CsvTable[Patient]):
    def __init__(self, path: Path) -> None:
        super().__init__(path, PATIENT_HEADER, parse_patient_row, patient_to_row)
