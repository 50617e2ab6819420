"""
Space endpoints for API v1.

Any authenticated caller may list spaces and look at a space's
availability (clients need both to pick a slot).  Creating, editing and
deleting spaces is restricted to administrators.
"""

from fastapi import APIRouter, Depends, Path, Query, status

from workspace_booking_api.app.core.errors import FieldValidationError
from workspace_booking_api.app.core.security import ROLE_ADMIN, get_current_user, require_roles
from workspace_booking_api.app.core.timeutils import parse_day
from workspace_booking_api.app.schemas.common import MAX_ID, DataResponse, ListResponse
from workspace_booking_api.app.schemas.space import (
    SpaceAvailability,
    SpaceCreate,
    SpaceDeleteResult,
    SpaceRead,
    SpaceUpdate,
)
from workspace_booking_api.app.services.space_service import SpaceService

router = APIRouter()


@router.get("", response_model=ListResponse[SpaceRead])
async def list_spaces(current_user: dict = Depends(get_current_user)) -> ListResponse[SpaceRead]:
    return ListResponse[SpaceRead](data=await SpaceService.list_spaces())


@router.get("/{space_id}", response_model=DataResponse[SpaceRead])
async def get_space(
    space_id: int = Path(..., ge=1, le=MAX_ID, description="ID of the space"),
    current_user: dict = Depends(get_current_user),
) -> DataResponse[SpaceRead]:
    return DataResponse[SpaceRead](data=await SpaceService.get_space(space_id))


@router.get("/{space_id}/availability", response_model=DataResponse[SpaceAvailability])
async def get_space_availability(
    space_id: int = Path(..., ge=1, le=MAX_ID, description="ID of the space"),
    day: str = Query(..., alias="date", description="Day to inspect (YYYY-MM-DD)"),
    current_user: dict = Depends(get_current_user),
) -> DataResponse[SpaceAvailability]:
    """Booked slots and free gaps (within operating hours) of a space on a day."""
    parsed = parse_day(day)
    if parsed is None:
        raise FieldValidationError("date", "date must be YYYY-MM-DD")
    return DataResponse[SpaceAvailability](data=await SpaceService.availability(space_id, parsed))


@router.post("", response_model=DataResponse[SpaceRead], status_code=status.HTTP_201_CREATED)
async def create_space(
    space: SpaceCreate,
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> DataResponse[SpaceRead]:
    return DataResponse[SpaceRead](data=await SpaceService.create_space(space))


@router.put("/{space_id}", response_model=DataResponse[SpaceRead])
async def update_space(
    updates: SpaceUpdate,
    space_id: int = Path(..., ge=1, le=MAX_ID, description="ID of the space"),
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> DataResponse[SpaceRead]:
    """Partially update a space; omitted fields are left unchanged."""
    return DataResponse[SpaceRead](data=await SpaceService.update_space(space_id, updates))


@router.delete("/{space_id}", response_model=DataResponse[SpaceDeleteResult])
async def delete_space(
    space_id: int = Path(..., ge=1, le=MAX_ID, description="ID of the space"),
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> DataResponse[SpaceDeleteResult]:
    """Delete a space together with all of its reservations.

    The response carries ``deletedReservations`` so the caller sees
    exactly what the cascade removed.
    """
    return DataResponse[SpaceDeleteResult](data=await SpaceService.delete_space(space_id))
