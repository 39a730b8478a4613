from fastapi import APIRouter, Depends

from ...api.deps import get_dashboard
from ...services.dashboards import DashboardController

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

@router.get("")
async def get_dashboard_view(dashboard: DashboardController = Depends(get_dashboard)):
    """The dashboard of the logged-in actor's role."""
    return await dashboard.load()
