"""
Dashboard Routes
Role-specific summary for the signed-in user
"""

from typing import Any

from fastapi import APIRouter, Depends

from claimdesk.api.deps import get_current_active_user, get_dashboard_service
from claimdesk.models.user import User
from claimdesk.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("")
async def get_dashboard(
    current_user: User = Depends(get_current_active_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, Any]:
    """Counters relevant to the caller's role."""
    return await service.summary(current_user)
