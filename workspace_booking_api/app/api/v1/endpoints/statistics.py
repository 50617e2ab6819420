"""
Statistics endpoints for API v1.

Only administrators may read the dashboard aggregates.
"""

from fastapi import APIRouter, Depends

from workspace_booking_api.app.core.security import ROLE_ADMIN, require_roles
from workspace_booking_api.app.schemas.common import DataResponse
from workspace_booking_api.app.schemas.statistics import Dashboard
from workspace_booking_api.app.services.statistics_service import StatisticsService

router = APIRouter()


@router.get("/dashboard", response_model=DataResponse[Dashboard])
async def get_dashboard(current_user: dict = Depends(require_roles(ROLE_ADMIN))) -> DataResponse[Dashboard]:
    """Headline counts, weekly activity, upcoming reservations and top spaces/clients."""
    return DataResponse[Dashboard](data=await StatisticsService.dashboard())
