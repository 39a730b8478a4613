import datetime as dt

import pytest

from cabinet.core.security import UserRole
from cabinet.models.appointment import (
    AppointmentAction,
    AppointmentStatus,
    normalize_appointment,
    normalize_appointments,
    normalize_status,
    status_badge,
)
from cabinet.models.care import normalize_medication, parse_schedule
from cabinet.services.appointment_service import allowed_actions
from tests.conftest import DOCTOR_ID, PATIENT_ID, flat_appointment, raw_appointment


class TestStatusVocabulary:

    @pytest.mark.parametrize("raw, expected", [
        ("en_attente", AppointmentStatus.PENDING),
        ("En attente", AppointmentStatus.PENDING),
        ("confirme", AppointmentStatus.CONFIRMED),
        ("Confirmé", AppointmentStatus.CONFIRMED),
        ("consulté", AppointmentStatus.COMPLETED),
        ("terminé", AppointmentStatus.COMPLETED),
        ("annule", AppointmentStatus.CANCELLED),
        ("annulé", AppointmentStatus.CANCELLED),
        ("Annulé", AppointmentStatus.CANCELLED),
    ])
    def test_legacy_spellings_map_to_one_status(self, raw, expected):
        assert normalize_status(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "reporté", 42])
    def test_unknown_status_is_none(self, raw):
        assert normalize_status(raw) is None

    def test_unknown_status_gets_neutral_badge(self):
        badge = status_badge(None, "reporté")
        assert badge.color == "gray"
        assert badge.label == "reporté"

    def test_known_badges(self):
        assert status_badge(AppointmentStatus.CANCELLED).color == "red"
        assert status_badge(AppointmentStatus.PENDING).label == "En attente"


class TestNormalization:

    def test_populated_shape(self):
        appointment = normalize_appointment(raw_appointment("r1", statut="Annulé"))
        assert appointment.id == "r1"
        assert appointment.medecin_id == DOCTOR_ID
        assert appointment.medecin == "Sami Ben Ali"
        assert appointment.specialite == "Cardiologue"
        assert appointment.patient_id == PATIENT_ID
        assert appointment.date == dt.date(2025, 10, 1)
        assert appointment.statut == AppointmentStatus.CANCELLED
        assert appointment.statut_brut == "Annulé"
        assert appointment.starts_at == dt.datetime(2025, 10, 1, 10, 0)

    def test_flat_secretary_shape(self):
        appointment = normalize_appointment(flat_appointment("r2", heure="14:30:00"))
        assert appointment.id == "r2"
        assert appointment.medecin == "Sami Ben Ali"
        assert appointment.patient_nom == "Trabelsi"
        assert appointment.heure == "14:30"

    def test_wrapped_list_and_garbage(self):
        payload = {"rendezVous": [raw_appointment("r1"), "not-a-record"]}
        assert [a.id for a in normalize_appointments(payload)] == ["r1"]
        assert normalize_appointments(None) == []

    def test_badge_is_serialized(self):
        data = normalize_appointment(raw_appointment("r1", statut="confirme")).model_dump()
        assert data["badge"] == {"label": "Confirmé", "color": "blue"}


class TestAllowedActions:

    def _appointment(self, statut):
        return normalize_appointment(raw_appointment("r1", statut=statut))

    def test_cancel_not_offered_once_cancelled(self):
        cancelled = self._appointment("annule")
        for role in UserRole:
            assert AppointmentAction.CANCEL not in allowed_actions(cancelled, role)

    def test_pending_transitions_per_role(self):
        pending = self._appointment("en_attente")
        assert allowed_actions(pending, UserRole.DOCTOR) == [AppointmentAction.CONSULT]
        assert set(allowed_actions(pending, UserRole.SECRETARY)) == {
            AppointmentAction.CONFIRM,
            AppointmentAction.CANCEL,
            AppointmentAction.EDIT,
            AppointmentAction.DELETE,
        }
        assert set(allowed_actions(pending, UserRole.PATIENT)) == {
            AppointmentAction.CANCEL,
            AppointmentAction.COMMENT,
        }

    def test_confirmed_cannot_be_confirmed_again(self):
        confirmed = self._appointment("confirme")
        assert AppointmentAction.CONFIRM not in allowed_actions(confirmed, UserRole.SECRETARY)
        assert AppointmentAction.CONSULT in allowed_actions(confirmed, UserRole.DOCTOR)

    def test_terminal_states_allow_no_transition(self):
        for statut in ("consulté", "annule"):
            appointment = self._appointment(statut)
            assert allowed_actions(appointment, UserRole.DOCTOR) == []
            assert allowed_actions(appointment, UserRole.PATIENT) == []
            assert set(allowed_actions(appointment, UserRole.SECRETARY)) == {
                AppointmentAction.EDIT,
                AppointmentAction.DELETE,
            }


class TestSchedule:

    def test_split_keeps_order_and_drops_blanks(self):
        assert parse_schedule("08:00, 12:00, 20:00") == ["08:00", "12:00", "20:00"]
        assert parse_schedule("08:00;; 20:00 ;") == ["08:00", "20:00"]
        assert parse_schedule("") == []

    def test_medication_with_text_schedule(self):
        medication = normalize_medication({"_id": "m1", "nomCommercial": "Doliprane", "frequence": "3", "horaires": "08:00,14:00"})
        assert medication.horaires == ["08:00", "14:00"]
        assert medication.frequence == 3
