import datetime as dt
from collections.abc import Callable
from typing import Any

from clinic.config import ClinicConfig
from clinic.console.admin import AdminMenu
from clinic.records.factory import ClinicServices

ScriptFactory = Callable[..., Any]

DAY = dt.date(2099, 1, 10)
NINE = dt.time(9, 0)


def _run(services: ClinicServices, config: ClinicConfig, script: Any) -> None:
    AdminMenu(services, script.console(), config).start()
    assert script.remaining == 0


class TestManageDoctors:
    def test_register_and_list(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted("1", "1", "Caio Reis", "333", "4", "0", "0")

        _run(services, config, script)

        assert "Doctor Caio Reis (CRM: 333) registered successfully!" in script.output
        assert "3 - Name: Caio Reis | CRM: 333" in script.output

    def test_remove_hides_from_booking(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted("1", "2", "111", "0", "0")

        _run(services, config, script)

        assert "Doctor marked as removed." in script.output
        assert [d.code for d in services.doctors.active()] == ["222"]

    def test_reintegrate_requires_removed(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted("1", "5", "222", "0", "0")

        _run(services, config, script)

        assert "Removed doctor '222' not found" in script.output

    def test_rename_unknown_doctor_stops_before_asking_name(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted("1", "3", "999", "0", "0")

        _run(services, config, script)

        assert "Doctor '999' not found" in script.output
        assert "New doctor name: " not in script.prompts

    def test_rename(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted("1", "3", "222", "Bruno L. Lima", "0", "0")

        _run(services, config, script)

        assert services.doctors.name_for("222") == "Bruno L. Lima"


class TestManagePatients:
    def test_register_then_schedule(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted(
            "2", "1", "Fabio Gomes", "12345678901", "y", "1", "2099-01-10", "09:00", "0", "0"
        )

        _run(services, config, script)

        assert "Patient Fabio Gomes (123.456.789-01) registered!" in script.output
        [appt] = services.scheduling.appointments_for("12345678901")
        assert appt.slot == ("111", DAY, NINE)

    def test_register_rejects_bad_cpf(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted("2", "1", "Fabio Gomes", "123", "0", "0")

        _run(services, config, script)

        assert "Invalid CPF: '123'" in script.output
        assert len(services.patients) == 3

    def test_delete(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted("2", "2", "55566677788", "0", "0")

        _run(services, config, script)

        assert not services.patients.exists("55566677788")

    def test_rename(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted("2", "3", "99988877766", "Elisa P. Prado", "0", "0")

        _run(services, config, script)

        assert services.patients.name_for("99988877766") == "Elisa P. Prado"


class TestManageAppointments:
    def test_cancel_for_patient(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        appt = services.scheduling.schedule("11122233344", "111", DAY, NINE)
        script = scripted("3", "11122233344", "1", "1", "y", "0")

        _run(services, config, script)

        assert "\nUpcoming appointments of Carla Dias:" in script.output
        assert appt.is_cancelled()

    def test_reschedule_for_patient(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        services.scheduling.schedule("11122233344", "111", DAY, NINE)
        script = scripted("3", "11122233344", "1", "2", "2099-02-01", "10:00", "0")

        _run(services, config, script)

        [appt] = services.scheduling.appointments_for("11122233344")
        assert appt.slot == ("111", dt.date(2099, 2, 1), dt.time(10, 0))

    def test_unknown_patient(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted("3", "00000000000", "0")

        _run(services, config, script)

        assert "Patient '00000000000' not found" in script.output

    def test_no_upcoming(
        self, services: ClinicServices, config: ClinicConfig, scripted: ScriptFactory
    ) -> None:
        script = scripted("3", "11122233344", "0")

        _run(services, config, script)

        assert "This patient has no upcoming appointments." in script.output
