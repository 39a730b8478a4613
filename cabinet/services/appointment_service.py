"""Appointment lifecycle: validation, availability and status transitions.

Status is owned by the backend. This module only decides which transitions
an actor may request, checks the preconditions locally and then issues the
matching gateway call. Every validation failure is raised before the first
network round trip.
"""

import datetime as dt
import logging
import re
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence

from ..core.config import settings
from ..core.exceptions import (
    BackendError,
    ClientValidationError,
    ConfirmationRequiredError,
    InvalidTransitionError,
    SlotUnavailableError,
)
from ..core.security import AuthorizationError, Session, UserRole
from ..models.appointment import (
    Appointment,
    AppointmentAction,
    AppointmentStatus,
    normalize_status,
    status_badge,
)
from ..schemas.appointment import AppointmentUpdate, ScheduleRequest
from .gateway import DoctorGateway, PatientGateway, SecretaryGateway

logger = logging.getLogger(__name__)

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

SLOT_UNAVAILABLE_MESSAGE = "Le médecin n'est pas disponible à ce créneau."
SLOT_TAKEN_MESSAGE = "Ce créneau vient d'être réservé. Veuillez vérifier les disponibilités et réessayer."
EMPTY_COMMENT_MESSAGE = "Le commentaire ne peut pas être vide."
DELETE_CONFIRMATION_MESSAGE = "Voulez-vous vraiment supprimer ce rendez-vous ?"

D, S, P = UserRole.DOCTOR, UserRole.SECRETARY, UserRole.PATIENT

# status -> action -> roles allowed to request it
TRANSITIONS: Dict[AppointmentStatus, Dict[AppointmentAction, FrozenSet[UserRole]]] = {
    AppointmentStatus.PENDING: {
        AppointmentAction.CONSULT: frozenset({D}),
        AppointmentAction.CONFIRM: frozenset({S}),
        AppointmentAction.CANCEL: frozenset({P, S}),
    },
    AppointmentStatus.CONFIRMED: {
        AppointmentAction.CONSULT: frozenset({D}),
        AppointmentAction.CANCEL: frozenset({P, S}),
    },
    AppointmentStatus.COMPLETED: {},
    AppointmentStatus.CANCELLED: {},
}

# status an edit may move to -> action it stands for
EDIT_STATUS_ACTIONS: Dict[AppointmentStatus, AppointmentAction] = {
    AppointmentStatus.CONFIRMED: AppointmentAction.CONFIRM,
    AppointmentStatus.CANCELLED: AppointmentAction.CANCEL,
}

_ACTION_ORDER = list(AppointmentAction)


def allowed_actions(appointment: Appointment, role: UserRole) -> List[AppointmentAction]:
    """Actions ``role`` may request on ``appointment`` in its current status."""
    actions = set()
    if appointment.statut is not None:
        for action, roles in TRANSITIONS[appointment.statut].items():
            if role in roles:
                actions.add(action)
    if role == P and not appointment.is_terminal:
        actions.add(AppointmentAction.COMMENT)
    if role == S:
        actions.update({AppointmentAction.EDIT, AppointmentAction.DELETE})
    return sorted(actions, key=_ACTION_ORDER.index)


def with_actions(appointments: Iterable[Appointment], role: UserRole) -> List[Appointment]:
    return [a.model_copy(update={"actions": allowed_actions(a, role)}) for a in appointments]


def validate_object_id(field: str, value: Optional[str]) -> str:
    if not value or not OBJECT_ID_PATTERN.match(value):
        raise ClientValidationError(field, f"Identifiant invalide pour {field}.")
    return value


def clean_comment(text: Optional[str]) -> str:
    text = (text or "").strip()
    if not text:
        raise ClientValidationError("commentaire", EMPTY_COMMENT_MESSAGE)
    return text


def validate_slot(date: dt.date, heure: str, today: dt.date, time_slots: Sequence[str]) -> None:
    if date < today:
        raise ClientValidationError("date", "La date du rendez-vous ne peut pas être dans le passé.")
    if heure not in time_slots:
        raise ClientValidationError("heure", f"Créneau horaire invalide: {heure}.")


class AppointmentService:
    """Coordinates lifecycle actions for one authenticated actor.

    Only the gateway matching the actor's role needs to be supplied; ``today``
    is injectable so date checks can be tested.
    """

    def __init__(
        self,
        session: Session,
        secretary: Optional[SecretaryGateway] = None,
        patient: Optional[PatientGateway] = None,
        doctor: Optional[DoctorGateway] = None,
        today: Callable[[], dt.date] = dt.date.today,
        time_slots: Optional[Sequence[str]] = None,
    ):
        self.session = session
        self.secretary = secretary
        self.patient = patient
        self.doctor = doctor
        self.today = today
        self.time_slots = list(time_slots) if time_slots is not None else settings.APPOINTMENT_TIME_SLOTS

    def _require_role(self, *roles: UserRole) -> None:
        if self.session.role not in roles:
            raise AuthorizationError(
                f"Access denied. Required roles: {[role.value for role in roles]}"
            )

    def _ensure_allowed(self, appointment: Appointment, action: AppointmentAction) -> None:
        if action not in allowed_actions(appointment, self.session.role):
            label = status_badge(appointment.statut, appointment.statut_brut).label
            raise InvalidTransitionError(
                f"Action '{action.value}' impossible pour un rendez-vous au statut '{label}'."
            )

    async def check_availability(self, medecin_id: str, date: dt.date, heure: str) -> bool:
        self._require_role(S)
        validate_object_id("medecin_id", medecin_id)
        return await self.secretary.check_availability(medecin_id, date, heure)

    async def schedule(self, request: ScheduleRequest) -> Optional[Appointment]:
        """Create an appointment after confirming the doctor is free.

        A conflict on creation means someone took the slot between the check
        and the create; availability is re-queried and the error is marked
        retryable.
        """
        self._require_role(S)
        validate_object_id("medecin_id", request.medecin_id)
        validate_object_id("patient_id", request.patient_id)
        validate_slot(request.date, request.heure, self.today(), self.time_slots)

        if not await self.secretary.check_availability(request.medecin_id, request.date, request.heure):
            raise SlotUnavailableError(SLOT_UNAVAILABLE_MESSAGE)

        try:
            created = await self.secretary.create_appointment(request.to_backend())
        except BackendError as e:
            if e.status_code != 409:
                raise
            still_free = await self.secretary.check_availability(
                request.medecin_id, request.date, request.heure
            )
            logger.warning(
                f"Slot {request.date} {request.heure} for doctor {request.medecin_id} "
                f"rejected on create (available on re-check: {still_free})"
            )
            message = SLOT_TAKEN_MESSAGE if still_free else SLOT_UNAVAILABLE_MESSAGE
            raise SlotUnavailableError(message, retryable=True) from e

        logger.info(f"Appointment scheduled for patient {request.patient_id} with doctor {request.medecin_id}")
        return created

    async def edit(self, appointment_id: str, update: AppointmentUpdate, override: bool = False):
        """Apply a partial edit.

        Moving the appointment to another doctor, date or time re-runs the
        availability check unless ``override`` is set. A status change must be
        a transition the secretary could request directly; terminal
        appointments cannot be edited at all.
        """
        self._require_role(S)
        validate_object_id("appointment_id", appointment_id)
        if update.medecin_id is not None:
            validate_object_id("medecin_id", update.medecin_id)
        if update.patient_id is not None:
            validate_object_id("patient_id", update.patient_id)
        if update.date is not None and update.date < self.today():
            raise ClientValidationError("date", "La date du rendez-vous ne peut pas être dans le passé.")
        if update.heure is not None and update.heure not in self.time_slots:
            raise ClientValidationError("heure", f"Créneau horaire invalide: {update.heure}.")

        payload = update.to_backend()
        status = None
        if update.statut is not None:
            status = normalize_status(update.statut)
            if status is None:
                raise ClientValidationError("statut", f"Statut inconnu: {update.statut}.")
            payload["statut"] = status.value

        current = await self.secretary.get_appointment(appointment_id)
        if current.is_terminal:
            label = status_badge(current.statut, current.statut_brut).label
            raise InvalidTransitionError(f"Un rendez-vous au statut '{label}' ne peut plus être modifié.")
        if status is not None and status != current.statut:
            action = EDIT_STATUS_ACTIONS.get(status)
            if action is None:
                raise InvalidTransitionError(f"Passage au statut '{status_badge(status).label}' impossible.")
            self._ensure_allowed(current, action)

        target = (
            update.medecin_id or current.medecin_id,
            update.date or current.date,
            update.heure or current.heure,
        )
        moved = target != (current.medecin_id, current.date, current.heure)
        if moved and not override:
            if not await self.secretary.check_availability(*target):
                raise SlotUnavailableError(SLOT_UNAVAILABLE_MESSAGE)

        return await self.secretary.update_appointment(appointment_id, payload)

    async def confirm(self, appointment: Appointment):
        self._require_role(S)
        self._ensure_allowed(appointment, AppointmentAction.CONFIRM)
        return await self.secretary.update_appointment(
            appointment.id, {"statut": AppointmentStatus.CONFIRMED.value}
        )

    async def cancel(self, appointment: Appointment, reason: Optional[str] = None):
        self._require_role(P, S)
        self._ensure_allowed(appointment, AppointmentAction.CANCEL)
        reason = reason.strip() if reason else None
        logger.info(f"Cancelling appointment {appointment.id} as {self.session.role.value}")
        if self.session.role == P:
            return await self.patient.cancel_appointment(appointment.id, reason)
        return await self.secretary.cancel_appointment(appointment.id, reason)

    async def delete(self, appointment: Appointment, confirmed: bool = False):
        self._require_role(S)
        if not confirmed:
            raise ConfirmationRequiredError(DELETE_CONFIRMATION_MESSAGE)
        logger.info(f"Deleting appointment {appointment.id}")
        return await self.secretary.delete_appointment(appointment.id)

    async def mark_consulted(self, appointment: Appointment):
        self._require_role(D)
        self._ensure_allowed(appointment, AppointmentAction.CONSULT)
        return await self.doctor.mark_consulted(appointment.id)

    async def add_comment(self, appointment: Appointment, text: Optional[str]):
        self._require_role(P)
        text = clean_comment(text)
        self._ensure_allowed(appointment, AppointmentAction.COMMENT)
        return await self.patient.add_comment(appointment.id, text)
