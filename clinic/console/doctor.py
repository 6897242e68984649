from clinic.console.base import MenuView
from clinic.domain.identifiers import format_cpf
from clinic.domain.models import Doctor


class DoctorMenu(MenuView):
    """Read-only reports for one doctor picked from the roster."""

    def start(self) -> None:
        self.doctors.resync()
        doctor = self.pick_doctor(self.doctors.sorted_by_name())
        if doctor is None:
            return
        self.run_menu(
            f"**** MENU - Doctor {doctor.name} ****",
            {
                1: ("Patients seen", lambda: self.show_patients(doctor)),
                2: ("Appointments in a period", lambda: self.show_period(doctor)),
                3: ("Patients without a visit for X months", lambda: self.show_inactive(doctor)),
            },
            exit_label="Back to main menu",
        )

    def _patient_label(self, cpf: str) -> str:
        return f"{format_cpf(cpf)} - {self.patients.name_for(cpf)}"

    def show_patients(self, doctor: Doctor) -> None:
        cpfs = self.scheduling.patients_seen_by(doctor.code)
        self._console.say("Patients seen by the doctor:")
        if not cpfs:
            self._console.say("No patients found.")
            return
        for cpf in cpfs:
            self._console.say(self._patient_label(cpf))

    def show_period(self, doctor: Doctor) -> None:
        start = self._console.ask_date("Start date (YYYY-MM-DD): ")
        if start is None:
            return
        end = self._console.ask_date("End date (YYYY-MM-DD): ")
        if end is None:
            return

        agenda = self.scheduling.doctor_agenda(doctor.code, start, end)
        if not agenda:
            self._console.say("No appointments found in that period.")
            return
        lines = [
            f"{a.formatted_date_time()} - {self.patients.name_for(a.patient_cpf)} "
            f"({format_cpf(a.patient_cpf)}) [{a.status.description}]"
            for a in agenda
        ]
        self._console.paginate(lines, self._config.page_size)

    def show_inactive(self, doctor: Doctor) -> None:
        months = self._console.ask_int("Number of months: ")
        if months is None:
            return
        if months < 0:
            self._console.say("The number of months cannot be negative.")
            return

        cpfs = self.scheduling.inactive_patients(doctor.code, months)
        self._console.say(f"Patients without a visit for more than {months} month(s):")
        if not cpfs:
            self._console.say("No patients found.")
            return
        self._console.paginate([self._patient_label(cpf) for cpf in cpfs], self._config.page_size)
