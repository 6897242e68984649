from clinic.console.base import MenuView
from clinic.domain.identifiers import format_cpf


class AdminMenu(MenuView):
    """Administrator menu: identity tables and appointments of any patient."""

    def start(self) -> None:
        self.run_menu(
            "Administrator",
            {
                1: ("Manage doctors", self.manage_doctors),
                2: ("Manage patients", self.manage_patients),
                3: ("Manage appointments", self.manage_appointments),
            },
            exit_label="Back to main menu",
        )

    # Doctors

    def manage_doctors(self) -> None:
        self.run_menu(
            "Doctors",
            {
                1: ("Register doctor", self.register_doctor),
                2: ("Remove doctor", self.remove_doctor),
                3: ("Rename doctor", self.rename_doctor),
                4: ("List doctors", self.list_doctors),
                5: ("Reintegrate doctor", self.reintegrate_doctor),
            },
            exit_label="Back",
        )
        self.doctors.resync()

    def register_doctor(self) -> None:
        name = self._console.ask("Doctor name: ")
        code = self._console.ask("Doctor CRM: ")
        doctor = self.doctors.register(name, code)
        self._console.say(f"Doctor {doctor} registered successfully!")

    def remove_doctor(self) -> None:
        code = self._console.ask("CRM of the doctor to mark as removed: ")
        self.doctors.mark_removed(code)
        self._console.say("Doctor marked as removed.")

    def rename_doctor(self) -> None:
        code = self._console.ask("CRM of the doctor to rename: ")
        self.doctors.require(code)
        name = self._console.ask("New doctor name: ")
        self.doctors.rename(code, name)
        self._console.say("Doctor updated successfully!")

    def list_doctors(self) -> None:
        doctors = self.doctors.sorted_by_name()
        if not doctors:
            self._console.say("No doctors registered.")
            return
        self._console.say("\nRegistered doctors:")
        for number, doctor in enumerate(doctors, start=1):
            self._console.say(f"{number} - Name: {doctor.name} | CRM: {doctor.code}")

    def reintegrate_doctor(self) -> None:
        code = self._console.ask("CRM of the doctor to reintegrate: ")
        self.doctors.reintegrate(code)
        self._console.say("Doctor reintegrated successfully!")

    # Patients

    def manage_patients(self) -> None:
        self.run_menu(
            "Patients",
            {
                1: ("Register patient", self.register_patient),
                2: ("Delete patient", self.delete_patient),
                3: ("Rename patient", self.rename_patient),
            },
            exit_label="Back",
        )
        self.patients.resync()

    def register_patient(self) -> None:
        name = self._console.ask("Patient name: ")
        cpf = self._console.ask("Patient CPF: ")
        patient = self.patients.register(name, cpf)
        self._console.say(f"Patient {patient.name} ({format_cpf(patient.cpf)}) registered!")
        if self._console.confirm("Schedule an appointment for this patient?"):
            self.schedule_flow(patient)

    def delete_patient(self) -> None:
        cpf = self._console.ask("CPF of the patient to delete: ")
        self.patients.remove(cpf)
        self._console.say("Patient removed successfully!")

    def rename_patient(self) -> None:
        cpf = self._console.ask("CPF of the patient to rename: ")
        self.patients.require(cpf)
        name = self._console.ask("New patient name: ")
        self.patients.rename(cpf, name)
        self._console.say("Patient updated successfully!")

    # Appointments

    def manage_appointments(self) -> None:
        cpf = self._console.ask_cpf("Patient CPF: ")
        if cpf is None:
            return
        patient = self.patients.require(cpf)

        upcoming = self.scheduling.upcoming_for(cpf)
        if not upcoming:
            self._console.say("This patient has no upcoming appointments.")
            return

        self._console.say(f"\nUpcoming appointments of {patient.name}:")
        appointment = self._console.choose(upcoming, self.describe)
        if appointment is None:
            return

        self._console.say("\nWhat would you like to do with this appointment?")
        self._console.say("1 - Cancel")
        self._console.say("2 - Change date/time")
        self._console.say("0 - Back")
        action = self._console.ask_int("Choose an option: ")
        if action == 1:
            self.cancel_flow(appointment)
        elif action == 2:
            self.reschedule_flow(appointment)
        elif action not in (0, None):
            self._console.say("Invalid option.")
