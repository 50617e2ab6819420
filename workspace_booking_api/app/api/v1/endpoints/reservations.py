"""
Reservation endpoints for API v1.

Clients may create, view, edit and cancel only their own reservations;
administrators may act on anyone's.  The booking rules themselves
(no overlapping bookings of a space, weekly quota per person, dates
and times well-formed) are enforced by ``ReservationService`` through
the admission engine, whatever the caller's role.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from workspace_booking_api.app.core.config import settings
from workspace_booking_api.app.core.security import ROLE_ADMIN, get_current_user, is_admin, require_roles
from workspace_booking_api.app.schemas.common import MAX_ID, DataResponse, PageResponse
from workspace_booking_api.app.schemas.reservation import (
    ReservationCreate,
    ReservationRead,
    ReservationUpdate,
)
from workspace_booking_api.app.services.query_service import Page, QueryService, ReservationFilter
from workspace_booking_api.app.services.reservation_service import ReservationService

router = APIRouter()


def _page_response(page: Page) -> PageResponse[ReservationRead]:
    return PageResponse[ReservationRead](data=page.items, pagination=page.pagination)


def _caller_person_id(current_user: dict) -> int:
    person_id = current_user.get("person_id")
    if person_id is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Caller has no person record")
    return person_id


def _ensure_can_access(reservation: ReservationRead, current_user: dict, action: str) -> None:
    if is_admin(current_user):
        return
    if reservation.person_id != current_user.get("person_id"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient permissions to {action} this reservation",
        )


def _owner_scope(current_user: dict) -> Optional[int]:
    """``None`` for administrators, otherwise the caller's own person id."""
    if is_admin(current_user):
        return None
    return _caller_person_id(current_user)


def _ensure_can_book_for(person_id: Optional[int], current_user: dict) -> None:
    if person_id is None or is_admin(current_user):
        return
    if person_id != current_user.get("person_id"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Clients can only book for themselves",
        )


@router.get("", response_model=PageResponse[ReservationRead])
async def list_reservations(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, alias="pageSize"),
    person_id: Optional[int] = Query(None, ge=1, le=MAX_ID, alias="personId"),
    space_id: Optional[int] = Query(None, ge=1, le=MAX_ID, alias="spaceId"),
    date_from: Optional[str] = Query(None, alias="dateFrom", description="YYYY-MM-DD, inclusive"),
    date_to: Optional[str] = Query(None, alias="dateTo", description="YYYY-MM-DD, inclusive"),
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> PageResponse[ReservationRead]:
    """List all reservations, ordered by date, start time and id.

    Administrators only.  Supports 1-based ``page``/``pageSize``
    pagination and optional filters by person, space and date range.
    """
    filters = ReservationFilter(person_id=person_id, space_id=space_id, date_from=date_from, date_to=date_to)
    return _page_response(await QueryService.list_reservations(page, page_size, filters))


@router.get("/my-reservations", response_model=PageResponse[ReservationRead])
async def list_my_reservations(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, alias="pageSize"),
    current_user: dict = Depends(get_current_user),
) -> PageResponse[ReservationRead]:
    """List the caller's own reservations."""
    person_id = _caller_person_id(current_user)
    return _page_response(await QueryService.list_reservations_for_person(person_id, page, page_size))


@router.get("/{reservation_id}", response_model=DataResponse[ReservationRead])
async def get_reservation(
    reservation_id: int = Path(..., ge=1, le=MAX_ID, description="ID of the reservation"),
    current_user: dict = Depends(get_current_user),
) -> DataResponse[ReservationRead]:
    reservation = await QueryService.get_reservation(reservation_id)
    _ensure_can_access(reservation, current_user, "view")
    return DataResponse[ReservationRead](data=reservation)


@router.post("", response_model=DataResponse[ReservationRead], status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation: ReservationCreate,
    current_user: dict = Depends(get_current_user),
) -> DataResponse[ReservationRead]:
    """Book a space.

    ``personId`` defaults to the caller.  Rejections come back as
    structured errors: ``SPACE_CONFLICT`` (409, with the conflicting
    reservation id), ``QUOTA_EXCEEDED`` (409, with the current count and
    limit), ``INVALID_INTERVAL``, ``PAST_DATE`` or ``UNKNOWN_REFERENCE``
    (400).
    """
    _ensure_can_book_for(reservation.person_id, current_user)
    if reservation.person_id is None:
        reservation = reservation.model_copy(update={"person_id": _caller_person_id(current_user)})
    return DataResponse[ReservationRead](data=await ReservationService.create_reservation(reservation))


@router.put("/{reservation_id}", response_model=DataResponse[ReservationRead])
async def update_reservation(
    updates: ReservationUpdate,
    reservation_id: int = Path(..., ge=1, le=MAX_ID, description="ID of the reservation"),
    current_user: dict = Depends(get_current_user),
) -> DataResponse[ReservationRead]:
    """Move or reassign a reservation.

    The merged reservation is re-admitted against all other
    reservations, with the same errors as creation.  A client's
    ownership is checked on the row read inside the write transaction.
    """
    updated = await ReservationService.update_reservation(reservation_id, updates, owner_id=_owner_scope(current_user))
    return DataResponse[ReservationRead](data=updated)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: int = Path(..., ge=1, le=MAX_ID, description="ID of the reservation"),
    current_user: dict = Depends(get_current_user),
) -> None:
    """Cancel a reservation (owner or administrator)."""
    await ReservationService.delete_reservation(reservation_id, owner_id=_owner_scope(current_user))
    return None
