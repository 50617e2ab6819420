"""
Person endpoints for API v1.

Managing persons is an administrator task; every route here except
``/persons/me`` requires the ``admin`` role.  Validation and
uniqueness of emails are handled by ``PersonService``.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from workspace_booking_api.app.core.security import ROLE_ADMIN, get_current_user, require_roles
from workspace_booking_api.app.schemas.common import MAX_ID, DataResponse, ListResponse
from workspace_booking_api.app.schemas.person import (
    PersonCreate,
    PersonDeleteResult,
    PersonRead,
    PersonUpdate,
)
from workspace_booking_api.app.services.person_service import PersonService

router = APIRouter()


@router.get("", response_model=ListResponse[PersonRead])
async def list_persons(current_user: dict = Depends(require_roles(ROLE_ADMIN))) -> ListResponse[PersonRead]:
    """List all persons ordered by id."""
    return ListResponse[PersonRead](data=await PersonService.list_persons())


@router.get("/search", response_model=DataResponse[PersonRead])
async def search_person(
    email: str = Query(..., description="Email to look up (case-insensitive)"),
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> DataResponse[PersonRead]:
    """Find a person by email."""
    return DataResponse[PersonRead](data=await PersonService.get_person_by_email(email))


@router.get("/me", response_model=DataResponse[PersonRead])
async def read_me(current_user: dict = Depends(get_current_user)) -> DataResponse[PersonRead]:
    """Return the caller's own person record."""
    if current_user.get("person_id") is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Caller has no person record")
    return DataResponse[PersonRead](data=await PersonService.get_person(current_user["person_id"]))


@router.get("/{person_id}", response_model=DataResponse[PersonRead])
async def get_person(
    person_id: int = Path(..., ge=1, le=MAX_ID, description="ID of the person"),
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> DataResponse[PersonRead]:
    return DataResponse[PersonRead](data=await PersonService.get_person(person_id))


@router.post("", response_model=DataResponse[PersonRead], status_code=status.HTTP_201_CREATED)
async def create_person(
    person: PersonCreate,
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> DataResponse[PersonRead]:
    """Create a person.

    The email is lower-cased and must be unique; a duplicate answers
    409 ``DUPLICATE_EMAIL``.
    """
    return DataResponse[PersonRead](data=await PersonService.create_person(person))


@router.put("/{person_id}", response_model=DataResponse[PersonRead])
async def update_person(
    updates: PersonUpdate,
    person_id: int = Path(..., ge=1, le=MAX_ID, description="ID of the person"),
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> DataResponse[PersonRead]:
    """Partially update a person's email and/or role."""
    return DataResponse[PersonRead](data=await PersonService.update_person(person_id, updates))


@router.delete("/{person_id}", response_model=DataResponse[PersonDeleteResult])
async def delete_person(
    person_id: int = Path(..., ge=1, le=MAX_ID, description="ID of the person"),
    cascade: bool = Query(False, description="Also delete the person's reservations"),
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> DataResponse[PersonDeleteResult]:
    """Delete a person.

    Refused with 409 ``HAS_RESERVATIONS`` while the person owns
    reservations, unless ``cascade=true`` is passed; the response then
    reports how many reservations were removed.
    """
    return DataResponse[PersonDeleteResult](data=await PersonService.delete_person(person_id, cascade=cascade))
