"""End-to-end scenarios over real CSV files in a temporary data directory.

Run explicitly with::

    pytest -m integration
"""

import datetime as dt
from pathlib import Path

import pytest

from clinic.config import ClinicConfig
from clinic.domain.exceptions import SlotConflictError, StorageError
from clinic.domain.models import AppointmentStatus
from clinic.records.factory import ClinicServices, build_clinic_services

pytestmark = pytest.mark.integration

HEADER = "Date,Time,PatientCPF,DoctorCode,Status\n"
DAY = dt.date(2099, 1, 10)
NINE = dt.time(9, 0)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    (tmp_path / "doctors.csv").write_text("Name,CRM\nAna Souza,111\nBruno Lima,222\n")
    (tmp_path / "patients.csv").write_text(
        "Name,CPF\nCarla Dias,11122233344\nDiego Alves,55566677788\nElisa Prado,99988877766\n"
    )
    return tmp_path


def _start(data_dir: Path) -> ClinicServices:
    return build_clinic_services(ClinicConfig(data_dir=data_dir, log_file=""))


class TestBookingLifecycle:
    def test_schedule_appends_and_survives_restart(self, data_dir: Path) -> None:
        services = _start(data_dir)

        services.scheduling.schedule("11122233344", "111", DAY, NINE)

        assert (data_dir / "appointments.csv").read_text() == (
            HEADER + "2099-01-10,09:00,11122233344,111,PENDING\n"
        )
        reloaded = _start(data_dir)
        assert [a.persisted_fields for a in reloaded.scheduling.store] == [
            (DAY, NINE, "11122233344", "111", AppointmentStatus.PENDING)
        ]

    def test_conflict_cancel_rebook(self, data_dir: Path) -> None:
        services = _start(data_dir)
        first = services.scheduling.schedule("11122233344", "111", DAY, NINE)

        with pytest.raises(SlotConflictError):
            services.scheduling.schedule("55566677788", "111", DAY, NINE)

        services.scheduling.cancel(first)
        services.scheduling.schedule("99988877766", "111", DAY, NINE)

        assert (data_dir / "appointments.csv").read_text() == (
            HEADER
            + "2099-01-10,09:00,11122233344,111,CANCELLED\n"
            + "2099-01-10,09:00,99988877766,111,PENDING\n"
        )

    def test_conflict_is_enforced_after_restart(self, data_dir: Path) -> None:
        _start(data_dir).scheduling.schedule("11122233344", "111", DAY, NINE)

        with pytest.raises(SlotConflictError):
            _start(data_dir).scheduling.schedule("55566677788", "111", DAY, NINE)

    def test_reschedule_rewrites_in_place(self, data_dir: Path) -> None:
        services = _start(data_dir)
        services.scheduling.schedule("55566677788", "222", DAY, NINE)
        original = services.scheduling.schedule("11122233344", "111", DAY, NINE)

        services.scheduling.reschedule(original, dt.date(2099, 1, 11), dt.time(14, 30))

        assert (data_dir / "appointments.csv").read_text() == (
            HEADER
            + "2099-01-10,09:00,55566677788,222,PENDING\n"
            + "2099-01-11,14:30,11122233344,111,PENDING\n"
        )

    def test_reschedule_after_restart_finds_record_by_key(self, data_dir: Path) -> None:
        _start(data_dir).scheduling.schedule("11122233344", "111", DAY, NINE)
        services = _start(data_dir)
        [stored] = services.scheduling.upcoming_for("11122233344")

        moved = services.scheduling.reschedule(stored, DAY, dt.time(10, 0))

        assert moved.time == dt.time(10, 0)
        assert len(_start(data_dir).scheduling.store) == 1


class TestDamagedFiles:
    def test_malformed_lines_are_skipped_with_warnings(self, data_dir: Path) -> None:
        (data_dir / "appointments.csv").write_text(
            HEADER
            + "2099-01-10,09:00,11122233344,111,PENDING\n"
            + "2099-01-11,09:00,11122233344,111,DONE\n"
            + "2099-01-12,09:00,11122233344\n"
            + "\n"
            + "2099-13-01,09:00,11122233344,111,PENDING\n"
        )

        services = _start(data_dir)

        assert len(services.scheduling.store) == 1
        assert services.warnings == [
            "appointments.csv: line 3: unknown status 'DONE'",
            "appointments.csv: line 4: expected 5 columns, got 3",
            "appointments.csv: line 6: unparsable date/time '2099-13-01 09:00'",
        ]

    def test_skipped_lines_are_dropped_on_next_rewrite(self, data_dir: Path) -> None:
        (data_dir / "appointments.csv").write_text(
            HEADER
            + "2099-01-10,09:00,11122233344,111,PENDING\n"
            + "garbage\n"
        )
        services = _start(data_dir)
        [appt] = services.scheduling.store

        services.scheduling.cancel(appt)

        assert (data_dir / "appointments.csv").read_text() == (
            HEADER + "2099-01-10,09:00,11122233344,111,CANCELLED\n"
        )

    def test_undecodable_line_does_not_cost_the_valid_records(self, data_dir: Path) -> None:
        (data_dir / "appointments.csv").write_bytes(
            HEADER.encode("utf-8")
            + b"2099-01-10,09:00,11122233344,111,PENDING\n"
            + b"2099-01-11,09:00,55566677788,\xff111,PENDING\n"
            + b"2099-01-12,09:00,99988877766,222,PENDING\n"
        )
        services = _start(data_dir)
        assert services.warnings == ["appointments.csv: line 3: line is not valid UTF-8"]

        booked = services.scheduling.schedule("11122233344", "111", dt.date(2099, 2, 1), NINE)
        services.scheduling.cancel(booked)

        assert (data_dir / "appointments.csv").read_text() == (
            HEADER
            + "2099-01-10,09:00,11122233344,111,PENDING\n"
            + "2099-01-12,09:00,99988877766,222,PENDING\n"
            + "2099-02-01,09:00,11122233344,111,CANCELLED\n"
        )

    def test_unreadable_file_is_never_overwritten(self, data_dir: Path) -> None:
        appointments = data_dir / "appointments.csv"
        appointments.mkdir()
        services = _start(data_dir)
        assert len(services.warnings) == 1

        with pytest.raises(StorageError, match="refusing to overwrite"):
            services.scheduling.store.rewrite()

        assert appointments.is_dir()

    def test_append_repairs_missing_trailing_newline(self, data_dir: Path) -> None:
        (data_dir / "appointments.csv").write_text(
            HEADER + "2099-01-10,09:00,11122233344,111,PENDING"
        )

        _start(data_dir).scheduling.schedule("55566677788", "111", DAY, dt.time(10, 0))

        reloaded = _start(data_dir)
        assert reloaded.warnings == []
        assert len(reloaded.scheduling.store) == 2

    def test_header_only_and_missing_files(self, tmp_path: Path) -> None:
        (tmp_path / "appointments.csv").write_text(HEADER)

        services = _start(tmp_path)

        assert len(services.scheduling.store) == 0
        assert len(services.doctors) == 0
        assert services.warnings == []


class TestIdentityTables:
    def test_doctor_removal_persists_marker(self, data_dir: Path) -> None:
        _start(data_dir).doctors.mark_removed("111")

        assert (data_dir / "doctors.csv").read_text() == (
            "Name,CRM\nAna Souza (Removed),111\nBruno Lima,222\n"
        )
        reloaded = _start(data_dir)
        assert [d.code for d in reloaded.doctors.active()] == ["222"]
        assert reloaded.doctors.is_removed("111")

    def test_registration_appends_rows(self, data_dir: Path) -> None:
        services = _start(data_dir)

        services.patients.register("Fabio Gomes", "12345678901")
        services.doctors.register("Caio Reis", "333")

        assert (data_dir / "patients.csv").read_text().endswith("Fabio Gomes,12345678901\n")
        assert (data_dir / "doctors.csv").read_text().endswith("Caio Reis,333\n")

    def test_resync_picks_up_rows_written_elsewhere(self, data_dir: Path) -> None:
        services = _start(data_dir)
        with (data_dir / "patients.csv").open("a") as handle:
            handle.write("Gabi Neves,22233344455\n")

        assert services.patients.resync() == 1
        assert services.patients.name_for("22233344455") == "Gabi Neves"
