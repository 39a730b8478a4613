import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from ...api.deps import (
    get_appointment_service,
    get_current_session,
    get_dashboard,
    get_doctor_dashboard,
    get_patient_dashboard,
    get_secretary_dashboard,
    require_role,
)
from ...core.config import settings
from ...core.http import BackendClient, get_backend
from ...core.security import Session, UserRole
from ...models.appointment import Appointment
from ...schemas.appointment import AppointmentUpdate, CancelRequest, CommentRequest, ScheduleRequest
from ...services.appointment_service import AppointmentService, with_actions
from ...services.dashboards import (
    DashboardController,
    DoctorDashboardController,
    PatientDashboardController,
    SecretaryDashboardController,
)
from ...services.gateway import DoctorGateway, PatientGateway, SecretaryGateway

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.get("/slots")
async def list_slots():
    """The bookable times of day."""
    return {"slots": settings.APPOINTMENT_TIME_SLOTS}

@router.get("", response_model=List[Appointment])
async def list_appointments(
    date: Optional[dt.date] = None,
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(get_current_session),
):
    """Every appointment visible to the actor, with the actions it may take."""
    if session.role == UserRole.DOCTOR:
        appointments = await DoctorGateway(backend, session).list_appointments()
    elif session.role == UserRole.SECRETARY:
        appointments = await SecretaryGateway(backend, session).list_appointments(date)
    else:
        appointments = await PatientGateway(backend, session).list_appointments()
    return with_actions(appointments, session.role)

@router.get("/availability")
async def check_availability(
    medecin_id: str,
    date: dt.date,
    heure: str,
    service: AppointmentService = Depends(get_appointment_service),
    _: Session = Depends(require_role([UserRole.SECRETARY])),
):
    return {"disponible": await service.check_availability(medecin_id, date, heure)}

@router.post("", status_code=201)
async def schedule_appointment(
    request: ScheduleRequest,
    dashboard: SecretaryDashboardController = Depends(get_secretary_dashboard),
):
    return await dashboard.schedule(request)

@router.put("/{appointment_id}")
async def edit_appointment(
    appointment_id: str,
    update: AppointmentUpdate,
    override: bool = False,
    dashboard: SecretaryDashboardController = Depends(get_secretary_dashboard),
):
    """Partial edit. ``override`` skips the availability re-check on a move."""
    return await dashboard.edit(appointment_id, update, override=override)

@router.post("/{appointment_id}/confirm")
async def confirm_appointment(
    appointment_id: str,
    dashboard: SecretaryDashboardController = Depends(get_secretary_dashboard),
):
    return await dashboard.confirm(appointment_id)

@router.post("/{appointment_id}/cancel")
async def cancel_appointment(
    appointment_id: str,
    request: Optional[CancelRequest] = Body(default=None),
    dashboard: DashboardController = Depends(get_dashboard),
    _: Session = Depends(require_role([UserRole.PATIENT, UserRole.SECRETARY])),
):
    return await dashboard.cancel(appointment_id, request.reason if request else None)

@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    confirm: bool = Query(False, description="Must be true; deletion cannot be undone"),
    dashboard: SecretaryDashboardController = Depends(get_secretary_dashboard),
):
    return await dashboard.delete(appointment_id, confirmed=confirm)

@router.post("/{appointment_id}/consult")
async def mark_consulted(
    appointment_id: str,
    dashboard: DoctorDashboardController = Depends(get_doctor_dashboard),
):
    return await dashboard.mark_consulted(appointment_id)

@router.post("/{appointment_id}/comment")
async def add_comment(
    appointment_id: str,
    request: CommentRequest,
    dashboard: PatientDashboardController = Depends(get_patient_dashboard),
):
    return await dashboard.add_comment(appointment_id, request.commentaire)
