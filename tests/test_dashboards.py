import datetime as dt

import pytest

from cabinet.core.exceptions import AppointmentNotFoundError, ClientValidationError, ConfirmationRequiredError
from cabinet.core.security import UserRole
from cabinet.models.appointment import AppointmentAction, normalize_appointments
from cabinet.schemas.care import MedicationCreate
from cabinet.services.appointment_service import AppointmentService
from cabinet.services.dashboards import (
    DoctorDashboardController,
    PatientDashboardController,
    SecretaryDashboardController,
    group_by_doctor,
    medication_payload,
    next_appointment,
    status_counts,
    todays_appointments,
)
from cabinet.services.gateway import (
    DoctorGateway,
    NotificationGateway,
    PatientGateway,
    SecretaryGateway,
    TreatmentGateway,
)
from tests.conftest import DOCTOR_ID, NOW, FakeBackend, flat_appointment, make_session, raw_appointment

OTHER_DOCTOR_ID = "64b7f0c2a1b2c3d4e5f60009"
NOTIFICATIONS = "/api/notifications"


def doctor_dashboard(backend):
    session = make_session(UserRole.DOCTOR)
    client = backend.client()
    doctor = DoctorGateway(client, session)
    service = AppointmentService(session, doctor=doctor, today=lambda: NOW.date())
    return DoctorDashboardController(
        session, doctor, TreatmentGateway(client, session), NotificationGateway(client, session), service, now=lambda: NOW
    )


def secretary_dashboard(backend):
    session = make_session(UserRole.SECRETARY)
    client = backend.client()
    secretary = SecretaryGateway(client, session)
    service = AppointmentService(session, secretary=secretary, today=lambda: NOW.date())
    return SecretaryDashboardController(session, secretary, NotificationGateway(client, session), service, now=lambda: NOW)


def patient_dashboard(backend):
    session = make_session(UserRole.PATIENT)
    client = backend.client()
    patient = PatientGateway(client, session)
    service = AppointmentService(session, patient=patient, today=lambda: NOW.date())
    return PatientDashboardController(session, patient, NotificationGateway(client, session), service, now=lambda: NOW)


def stub_patient_reads(backend, appointments):
    backend.add("GET", "/rdv/patient/me", appointments)
    backend.add("GET", "/ordonnances/patient", [])
    backend.add("GET", "/medicaments", [])
    backend.add("GET", NOTIFICATIONS, [])


class TestDerivedViews:

    def test_next_appointment_skips_cancelled_and_past(self):
        appointments = normalize_appointments([
            raw_appointment("cancelled", date="2025-06-01", heure="09:00", statut="annule"),
            raw_appointment("december", date="2025-12-01", heure="10:00", statut="en_attente"),
            raw_appointment("november", date="2025-11-01", heure="08:00", statut="confirme"),
        ])

        assert next_appointment(appointments, dt.datetime(2025, 10, 15, 12, 0)).id == "november"

    def test_next_appointment_is_strictly_future(self):
        appointments = normalize_appointments([
            raw_appointment("now", date="2025-10-01", heure="09:00"),
            raw_appointment("cancelled", date="2025-10-02", heure="09:00", statut="Annulé"),
        ])

        assert next_appointment(appointments, NOW) is None
        assert next_appointment([], NOW) is None

    def test_todays_appointments_sorted_by_time(self):
        appointments = normalize_appointments([
            raw_appointment("late", heure="16:00"),
            raw_appointment("tomorrow", date="2025-10-02"),
            raw_appointment("early", heure="08:30"),
        ])

        assert [a.id for a in todays_appointments(appointments, NOW.date())] == ["early", "late"]

    def test_status_counts(self):
        appointments = normalize_appointments([
            raw_appointment("a", statut="en_attente"),
            raw_appointment("b", statut="terminé"),
            raw_appointment("c", statut="consulté"),
            raw_appointment("d", statut="bizarre"),
        ])

        counts = status_counts(appointments)
        assert counts["total"] == 4
        assert counts["consulté"] == 2
        assert counts["en_attente"] == 1
        assert counts["confirme"] == 0

    def test_group_by_doctor(self):
        appointments = normalize_appointments([
            flat_appointment("a"),
            flat_appointment("b", medecin_id=OTHER_DOCTOR_ID),
            flat_appointment("c"),
        ])

        groups = group_by_doctor(appointments)
        assert [a.id for a in groups[DOCTOR_ID]] == ["a", "c"]
        assert [a.id for a in groups[OTHER_DOCTOR_ID]] == ["b"]


class TestMedicationForm:

    def _form(self, **overrides):
        data = {
            "nom_commercial": "Amoxicilline",
            "dosage": "500mg",
            "frequence": 3,
            "voie_administration": "Orale",
            "date_debut": dt.date(2025, 10, 1),
            "date_fin": dt.date(2025, 10, 7),
            "horaires": "08:00, 14:00, 20:00",
        }
        data.update(overrides)
        return MedicationCreate(**data)

    def test_schedule_text_is_split(self):
        payload = medication_payload(self._form())
        assert payload["horaires"] == ["08:00", "14:00", "20:00"]
        assert payload["frequence"] == 3
        assert payload["dateDebut"] == "2025-10-01"

    def test_missing_required_field(self):
        with pytest.raises(ClientValidationError) as exc_info:
            medication_payload(self._form(dosage="  "))
        assert exc_info.value.message == "Tous les champs obligatoires doivent être remplis."

    @pytest.mark.parametrize("frequence", [0, -2, None, 2.7, float("nan"), float("inf")])
    def test_frequency_must_be_a_positive_whole_number(self, frequence):
        with pytest.raises(ClientValidationError) as exc_info:
            medication_payload(self._form(frequence=frequence))
        assert exc_info.value.field == "frequence"
        assert exc_info.value.message == "La fréquence doit être un nombre entier positif."

    def test_whole_float_frequency_is_sent_as_int(self):
        payload = medication_payload(self._form(frequence=2.0))
        assert payload["frequence"] == 2
        assert isinstance(payload["frequence"], int)


class TestDoctorDashboard:

    @pytest.mark.asyncio
    async def test_sections_fail_independently(self, backend):
        backend.add("GET", "/rdv/aujourdhui", [raw_appointment("r1"), raw_appointment("r2", statut="consulté")])
        backend.add("GET", "/ordonnances/medecin", {"message": "Erreur serveur"}, status_code=500)
        backend.add("GET", "/traitements", [{"_id": "t1", "nom": "Antibiothérapie", "medicaments": []}])
        backend.add("GET", NOTIFICATIONS, [{"_id": "n1", "contenu": "Prendre Doliprane", "lu": False}])

        dashboard = await doctor_dashboard(backend).load()

        assert [a.id for a in dashboard.rendez_vous_aujourdhui] == ["r1", "r2"]
        assert dashboard.ordonnances == []
        assert dashboard.errors == {"ordonnances": "Erreur serveur"}
        assert dashboard.traitements[0].nom == "Antibiothérapie"
        assert dashboard.notifications.unread == 1
        assert dashboard.statistiques["consulté"] == 1
        assert dashboard.rendez_vous_aujourdhui[0].actions == [AppointmentAction.CONSULT]
        assert dashboard.rendez_vous_aujourdhui[1].actions == []

    @pytest.mark.asyncio
    async def test_mark_consulted_then_reload(self, backend):
        backend.add("GET", "/rdv/aujourdhui", [raw_appointment("r1")])
        backend.add("PUT", "/rdv/consulter/r1", {"ok": True})
        backend.add("GET", "/ordonnances/medecin", [])
        backend.add("GET", "/traitements", [])
        backend.add("GET", NOTIFICATIONS, [])

        await doctor_dashboard(backend).mark_consulted("r1")

        assert len(backend.calls("PUT")) == 1
        assert len(backend.calls("GET", "/rdv/aujourdhui")) == 2

    @pytest.mark.asyncio
    async def test_unknown_appointment(self, backend):
        backend.add("GET", "/rdv/aujourdhui", [raw_appointment("r1")])

        with pytest.raises(AppointmentNotFoundError):
            await doctor_dashboard(backend).mark_consulted("r404")
        assert backend.calls("PUT") == []


class TestSecretaryDashboard:

    @pytest.mark.asyncio
    async def test_one_failure_discards_both_lists(self, backend):
        backend.add("GET", "/patients-by-secretaire", {"patients": [{"_id": "p1", "nom": "Trabelsi"}]})
        backend.add("GET", "/rendez-vous", {"message": "boom"}, status_code=500)
        backend.add("GET", NOTIFICATIONS, [])

        dashboard = await secretary_dashboard(backend).load()

        assert dashboard.error == "Erreur lors du chargement des données. Veuillez réessayer."
        assert dashboard.patients == []
        assert dashboard.rendez_vous == []
        assert dashboard.notifications.error is None

    @pytest.mark.asyncio
    async def test_load_groups_and_counts(self, backend):
        backend.add("GET", "/patients-by-secretaire", {"patients": [{"_id": "p1", "nom": "Trabelsi", "prenom": "Amel"}]})
        backend.add("GET", "/rendez-vous", [
            flat_appointment("a"),
            flat_appointment("b", date="2025-10-03", medecin_id=OTHER_DOCTOR_ID, statut="Confirmé"),
        ])
        backend.add("GET", NOTIFICATIONS, {"message": "indisponible"}, status_code=503)

        dashboard = await secretary_dashboard(backend).load()

        assert dashboard.error is None
        assert dashboard.patients[0].nom_complet == "Amel Trabelsi"
        assert [a.id for a in dashboard.rendez_vous_aujourdhui] == ["a"]
        assert set(dashboard.par_medecin) == {DOCTOR_ID, OTHER_DOCTOR_ID}
        assert dashboard.statistiques["confirme"] == 1
        assert dashboard.notifications.error == "indisponible"

    @pytest.mark.asyncio
    async def test_delete_without_confirmation_leaves_list_untouched(self, backend):
        with pytest.raises(ConfirmationRequiredError) as exc_info:
            await secretary_dashboard(backend).delete("a")

        assert exc_info.value.message == "Voulez-vous vraiment supprimer ce rendez-vous ?"
        assert backend.requests == []


class TestPatientDashboard:

    @pytest.mark.asyncio
    async def test_load_computes_next_appointment(self, backend):
        stub_patient_reads(backend, [
            raw_appointment("past", date="2025-09-01"),
            raw_appointment("soon", date="2025-10-05", heure="11:00", statut="confirme"),
        ])

        dashboard = await patient_dashboard(backend).load()

        assert dashboard.prochain_rendez_vous.id == "soon"
        assert AppointmentAction.COMMENT in dashboard.rendez_vous[1].actions

    @pytest.mark.asyncio
    async def test_strict_load(self, backend):
        stub_patient_reads(backend, [])
        backend.add("GET", "/medicaments", {"message": "boom"}, status_code=500)

        dashboard = await patient_dashboard(backend).load()

        assert dashboard.error == "Erreur lors du chargement des données. Veuillez réessayer."
        assert dashboard.rendez_vous == []

    @pytest.mark.asyncio
    async def test_empty_comment_makes_no_call(self, backend):
        with pytest.raises(ClientValidationError):
            await patient_dashboard(backend).add_comment("r1", "   ")
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_comment_sends_once_then_reloads(self, backend):
        stub_patient_reads(backend, [raw_appointment("r1", date="2025-10-05")])
        backend.add("PUT", "/rdv/patient/r1/commentaire", {"ok": True})

        dashboard = await patient_dashboard(backend).add_comment("r1", "Je serai en retard")

        puts = backend.calls("PUT")
        assert len(puts) == 1
        assert FakeBackend.body(puts[0]) == {"commentaire": "Je serai en retard"}
        # the reload happens after the update
        reload_index = backend.requests.index(puts[0]) + 1
        assert any(r.url.path == "/rdv/patient/me" for r in backend.requests[reload_index:])
        assert dashboard.rendez_vous[0].id == "r1"

    @pytest.mark.asyncio
    async def test_cancel_then_reload(self, backend):
        stub_patient_reads(backend, [raw_appointment("r1", date="2025-10-05")])
        backend.add("PUT", "/rdv/annuler/r1", {"ok": True})

        await patient_dashboard(backend).cancel("r1")

        assert len(backend.calls("PUT", "/rdv/annuler/r1")) == 1
        assert len(backend.calls("GET", "/ordonnances/patient")) == 1

    @pytest.mark.asyncio
    async def test_add_medication(self, backend):
        stub_patient_reads(backend, [])
        backend.add("POST", "/medicaments", {"_id": "m1"}, status_code=201)

        await patient_dashboard(backend).add_medication(MedicationCreate(
            nom_commercial="Doliprane",
            dosage="1g",
            frequence=2,
            voie_administration="Orale",
            date_debut=dt.date(2025, 10, 1),
            date_fin=dt.date(2025, 10, 3),
            horaires="08:00,20:00",
        ))

        body = FakeBackend.body(backend.calls("POST", "/medicaments")[0])
        assert body["horaires"] == ["08:00", "20:00"]
        assert body["nomCommercial"] == "Doliprane"


class TestNotifications:

    @pytest.mark.asyncio
    async def test_mark_all_read_only_touches_unread(self, backend):
        backend.add("GET", NOTIFICATIONS, [
            {"_id": "n1", "contenu": "a", "lu": False},
            {"_id": "n2", "contenu": "b", "lu": True},
            {"_id": "n3", "contenu": "c", "lu": False},
        ])
        backend.add("PUT", f"{NOTIFICATIONS}/n1/lire", {"ok": True})
        backend.add("PUT", f"{NOTIFICATIONS}/n3/lire", {"ok": True})

        await patient_dashboard(backend).mark_all_notifications_read()

        assert sorted(r.url.path for r in backend.calls("PUT")) == [
            f"{NOTIFICATIONS}/n1/lire",
            f"{NOTIFICATIONS}/n3/lire",
        ]
