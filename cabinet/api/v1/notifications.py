from fastapi import APIRouter, Depends

from ...api.deps import get_dashboard, get_notification_gateway, require_role
from ...core.security import Session, UserRole
from ...models.dashboard import NotificationPanel
from ...services.dashboards import DashboardController
from ...services.gateway import NotificationGateway

router = APIRouter(prefix="/notifications", tags=["Notifications"])

@router.get("", response_model=NotificationPanel)
async def list_notifications(dashboard: DashboardController = Depends(get_dashboard)):
    return await dashboard.load_notifications()

@router.post("/read-all", response_model=NotificationPanel)
async def mark_all_read(dashboard: DashboardController = Depends(get_dashboard)):
    return await dashboard.mark_all_notifications_read()

@router.post("/{notification_id}/read", response_model=NotificationPanel)
async def mark_read(
    notification_id: str,
    dashboard: DashboardController = Depends(get_dashboard),
):
    return await dashboard.mark_notification_read(notification_id)

@router.post("/generate/{medicament_id}", status_code=201)
async def generate_reminders(
    medicament_id: str,
    notifications: NotificationGateway = Depends(get_notification_gateway),
    _: Session = Depends(require_role([UserRole.PATIENT, UserRole.DOCTOR])),
):
    """Ask the backend to schedule intake reminders for a medication."""
    await notifications.generate(medicament_id)
    return {"message": "Rappels générés"}
