"""Role dashboards.

Each controller is built per request, loads its role's data concurrently and
derives the summary views from the loaded lists. Lifecycle actions go through
``AppointmentService`` and are followed by a fresh load, so the caller always
gets back the dashboard as the backend now sees it.
"""

import asyncio
import datetime as dt
import logging
import math
from collections import Counter
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..core.exceptions import AppointmentNotFoundError, ClientValidationError, ConfirmationRequiredError, PortalError
from ..core.security import Session
from ..models.appointment import Appointment, AppointmentStatus
from ..models.care import parse_schedule
from ..models.dashboard import DoctorDashboard, NotificationPanel, PatientDashboard, SecretaryDashboard
from ..schemas.appointment import AppointmentUpdate, ScheduleRequest
from ..schemas.care import MedicationCreate
from .appointment_service import DELETE_CONFIRMATION_MESSAGE, AppointmentService, clean_comment, with_actions
from .gateway import DoctorGateway, NotificationGateway, PatientGateway, SecretaryGateway, TreatmentGateway

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Erreur lors du chargement des données. Veuillez réessayer."
REQUIRED_FIELDS_MESSAGE = "Tous les champs obligatoires doivent être remplis."
FREQUENCY_MESSAGE = "La fréquence doit être un nombre entier positif."

UNASSIGNED_DOCTOR = "inconnu"


def todays_appointments(appointments: List[Appointment], today: dt.date) -> List[Appointment]:
    todays = [a for a in appointments if a.date == today]
    return sorted(todays, key=lambda a: a.starts_at)


def next_appointment(appointments: List[Appointment], now: dt.datetime) -> Optional[Appointment]:
    """Earliest appointment strictly after ``now`` that is not cancelled."""
    upcoming = [
        a for a in appointments
        if a.starts_at is not None and a.starts_at > now and a.statut != AppointmentStatus.CANCELLED
    ]
    return min(upcoming, key=lambda a: a.starts_at, default=None)


def status_counts(appointments: List[Appointment]) -> Dict[str, int]:
    counts = Counter(a.statut for a in appointments if a.statut is not None)
    result = {"total": len(appointments)}
    for status in AppointmentStatus:
        result[status.value] = counts.get(status, 0)
    return result


def group_by_doctor(appointments: List[Appointment]) -> Dict[str, List[Appointment]]:
    groups: Dict[str, List[Appointment]] = {}
    for appointment in appointments:
        groups.setdefault(appointment.medecin_id or UNASSIGNED_DOCTOR, []).append(appointment)
    return groups


def medication_payload(request: MedicationCreate) -> Dict[str, Any]:
    """Validate a patient's medication form and shape it for the backend."""
    required = (request.nom_commercial, request.dosage, request.voie_administration)
    if not request.date_debut or not request.date_fin or not all(v.strip() for v in required):
        raise ClientValidationError("medicament", REQUIRED_FIELDS_MESSAGE)
    frequence = request.frequence
    if frequence is None or not math.isfinite(frequence) or not float(frequence).is_integer() or frequence <= 0:
        raise ClientValidationError("frequence", FREQUENCY_MESSAGE)
    frequence = int(frequence)
    horaires = request.horaires if isinstance(request.horaires, list) else parse_schedule(request.horaires)
    return {
        "nomCommercial": request.nom_commercial.strip(),
        "dosage": request.dosage.strip(),
        "frequence": frequence,
        "voieAdministration": request.voie_administration.strip(),
        "dateDebut": request.date_debut.isoformat(),
        "dateFin": request.date_fin.isoformat(),
        "horaires": [h.strip() for h in horaires if h.strip()],
    }


def find_appointment(appointments: List[Appointment], appointment_id: str) -> Appointment:
    for appointment in appointments:
        if appointment.id == appointment_id:
            return appointment
    raise AppointmentNotFoundError(f"Rendez-vous {appointment_id} introuvable")


class DashboardController:
    def __init__(
        self,
        session: Session,
        notifications: NotificationGateway,
        appointments: AppointmentService,
        now: Callable[[], dt.datetime] = dt.datetime.now,
    ):
        self.session = session
        self.notifications = notifications
        self.appointments = appointments
        self.now = now

    async def load_notifications(self) -> NotificationPanel:
        try:
            items = await self.notifications.list()
        except PortalError as e:
            logger.warning(f"Notifications unavailable for {self.session.user_id}: {e.message}")
            return NotificationPanel(error=e.message)
        return NotificationPanel(items=items, unread=sum(1 for n in items if not n.lu))

    async def mark_notification_read(self, notification_id: str) -> NotificationPanel:
        await self.notifications.mark_read(notification_id)
        return await self.load_notifications()

    async def mark_all_notifications_read(self) -> NotificationPanel:
        items = await self.notifications.list()
        await self.notifications.mark_all_read(items)
        return await self.load_notifications()


class DoctorDashboardController(DashboardController):
    """Today's consultations plus prescriptions and treatments.

    Sections load independently: one failing leaves an empty list and an
    entry in ``errors`` while the rest still render.
    """

    def __init__(self, session, doctor: DoctorGateway, treatments: TreatmentGateway, notifications, appointments, now=dt.datetime.now):
        super().__init__(session, notifications, appointments, now)
        self.doctor = doctor
        self.treatments = treatments

    async def _section(self, name: str, call: Awaitable[list], errors: Dict[str, str]) -> list:
        try:
            return await call
        except PortalError as e:
            logger.warning(f"Doctor dashboard section '{name}' failed: {e.message}")
            errors[name] = e.message
            return []

    async def load(self) -> DoctorDashboard:
        errors: Dict[str, str] = {}
        appointments, prescriptions, treatments, panel = await asyncio.gather(
            self._section("rendez_vous_aujourdhui", self.doctor.list_today_appointments(), errors),
            self._section("ordonnances", self.doctor.list_prescriptions(), errors),
            self._section("traitements", self.treatments.list(), errors),
            self.load_notifications(),
        )
        return DoctorDashboard(
            rendez_vous_aujourdhui=with_actions(appointments, self.session.role),
            ordonnances=prescriptions,
            traitements=treatments,
            statistiques=status_counts(appointments),
            notifications=panel,
            errors=errors,
        )

    async def mark_consulted(self, appointment_id: str) -> DoctorDashboard:
        appointment = find_appointment(await self.doctor.list_today_appointments(), appointment_id)
        await self.appointments.mark_consulted(appointment)
        return await self.load()


class SecretaryDashboardController(DashboardController):
    def __init__(self, session, secretary: SecretaryGateway, notifications, appointments, now=dt.datetime.now):
        super().__init__(session, notifications, appointments, now)
        self.secretary = secretary

    async def _load_core(self) -> SecretaryDashboard:
        try:
            patients, appointments = await asyncio.gather(
                self.secretary.list_patients(),
                self.secretary.list_appointments(),
            )
        except PortalError as e:
            logger.warning(f"Secretary dashboard load failed: {e.message}")
            return SecretaryDashboard(error=LOAD_ERROR_MESSAGE)

        appointments = with_actions(appointments, self.session.role)
        return SecretaryDashboard(
            patients=patients,
            rendez_vous=appointments,
            rendez_vous_aujourdhui=todays_appointments(appointments, self.now().date()),
            par_medecin=group_by_doctor(appointments),
            statistiques=status_counts(appointments),
        )

    async def load(self) -> SecretaryDashboard:
        dashboard, panel = await asyncio.gather(self._load_core(), self.load_notifications())
        dashboard.notifications = panel
        return dashboard

    async def _resolve(self, appointment_id: str) -> Appointment:
        return find_appointment(await self.secretary.list_appointments(), appointment_id)

    async def schedule(self, request: ScheduleRequest) -> SecretaryDashboard:
        created = await self.appointments.schedule(request)
        dashboard = await self.load()
        if created is not None:
            dashboard.cree = with_actions([created], self.session.role)[0]
        return dashboard

    async def edit(self, appointment_id: str, update: AppointmentUpdate, override: bool = False) -> SecretaryDashboard:
        await self.appointments.edit(appointment_id, update, override=override)
        return await self.load()

    async def confirm(self, appointment_id: str) -> SecretaryDashboard:
        await self.appointments.confirm(await self._resolve(appointment_id))
        return await self.load()

    async def cancel(self, appointment_id: str, reason: Optional[str] = None) -> SecretaryDashboard:
        await self.appointments.cancel(await self._resolve(appointment_id), reason)
        return await self.load()

    async def delete(self, appointment_id: str, confirmed: bool = False) -> SecretaryDashboard:
        if not confirmed:
            raise ConfirmationRequiredError(DELETE_CONFIRMATION_MESSAGE)
        await self.appointments.delete(await self._resolve(appointment_id), confirmed=True)
        return await self.load()


class PatientDashboardController(DashboardController):
    def __init__(self, session, patient: PatientGateway, notifications, appointments, now=dt.datetime.now):
        super().__init__(session, notifications, appointments, now)
        self.patient = patient

    async def _load_core(self) -> PatientDashboard:
        try:
            appointments, prescriptions, medications = await asyncio.gather(
                self.patient.list_appointments(),
                self.patient.list_prescriptions(),
                self.patient.list_medications(),
            )
        except PortalError as e:
            logger.warning(f"Patient dashboard load failed: {e.message}")
            return PatientDashboard(error=LOAD_ERROR_MESSAGE)

        appointments = with_actions(appointments, self.session.role)
        return PatientDashboard(
            rendez_vous=appointments,
            prochain_rendez_vous=next_appointment(appointments, self.now()),
            ordonnances=prescriptions,
            medicaments=medications,
            statistiques=status_counts(appointments),
        )

    async def load(self) -> PatientDashboard:
        dashboard, panel = await asyncio.gather(self._load_core(), self.load_notifications())
        dashboard.notifications = panel
        return dashboard

    async def cancel(self, appointment_id: str, reason: Optional[str] = None) -> PatientDashboard:
        appointment = find_appointment(await self.patient.list_appointments(), appointment_id)
        await self.appointments.cancel(appointment, reason)
        return await self.load()

    async def add_comment(self, appointment_id: str, text: Optional[str]) -> PatientDashboard:
        text = clean_comment(text)
        appointment = find_appointment(await self.patient.list_appointments(), appointment_id)
        await self.appointments.add_comment(appointment, text)
        return await self.load()

    async def add_medication(self, request: MedicationCreate) -> PatientDashboard:
        payload = medication_payload(request)
        await self.patient.add_medication(payload)
        return await self.load()
