from clinic.console.base import MenuView
from clinic.domain.models import Appointment, Patient


class PatientMenu(MenuView):
    """Self-service menu for a patient identified by CPF."""

    def start(self) -> None:
        patient = self.identify()
        if patient is None:
            return
        self._console.say(f"\nWelcome, {patient.name}!")
        self.run_menu(
            "===== PATIENT MENU =====",
            {
                1: ("Schedule a new appointment", lambda: self.schedule_flow(patient)),
                2: ("View upcoming appointments", lambda: self.show_upcoming(patient)),
                3: ("View past appointments", lambda: self.show_history(patient)),
                4: ("Reschedule an appointment", lambda: self.reschedule(patient)),
                5: ("Cancel an appointment", lambda: self.cancel(patient)),
            },
            exit_label="Exit",
        )

    def identify(self) -> Patient | None:
        while True:
            cpf = self._console.ask_cpf("Enter your CPF (digits only): ")
            if cpf is None:
                continue
            self.patients.resync()
            patient = self.patients.get(cpf)
            if patient is not None:
                return patient
            if not self._console.confirm("Patient not found. Try again?"):
                return None

    def _pick_upcoming(self, patient: Patient, empty_message: str) -> Appointment | None:
        upcoming = self.scheduling.upcoming_for(patient.cpf)
        if not upcoming:
            self._console.say(empty_message)
            return None
        self._console.say("\nYour scheduled appointments:")
        return self._console.choose(upcoming, self.describe)

    def show_upcoming(self, patient: Patient) -> None:
        appointment = self._pick_upcoming(patient, "You have no scheduled appointments.")
        if appointment is None:
            return

        self._console.say("\nWhat would you like to do with this appointment?")
        self._console.say("1 - Confirm presence")
        self._console.say("2 - Cancel appointment")
        self._console.say("3 - Reschedule appointment")
        self._console.say("0 - Back")
        action = self._console.ask_int("Choose an option: ")
        if action == 1:
            self._console.say(self.scheduling.confirm_presence(appointment))
        elif action == 2:
            self.cancel_flow(appointment, ask_confirmation=False)
        elif action == 3:
            self.reschedule_flow(appointment)
        elif action not in (0, None):
            self._console.say("Invalid option.")

    def show_history(self, patient: Patient) -> None:
        history = self.scheduling.history_for(patient.cpf)
        if not history:
            self._console.say("You have no past appointments.")
            return
        self._console.say("\nYour past appointments:")
        self._console.paginate([self.describe(a) for a in history], self._config.history_page_size)

    def reschedule(self, patient: Patient) -> None:
        appointment = self._pick_upcoming(
            patient, "You have no scheduled appointments to reschedule."
        )
        if appointment is not None:
            self.reschedule_flow(appointment)

    def cancel(self, patient: Patient) -> None:
        appointment = self._pick_upcoming(patient, "You have no scheduled appointments to cancel.")
        if appointment is not None:
            self.cancel_flow(appointment)
