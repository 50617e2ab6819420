"""
Pydantic models for reservations.

Dates and times travel as strings (``YYYY-MM-DD`` and ``HH:mm``).  They
are not parsed here: the admission engine parses them and
reports malformed values as ``INVALID_INTERVAL`` or
``VALIDATION_ERROR`` together with the other booking rules.
"""

from typing import Optional

from pydantic import Field

from .common import MAX_ID, ApiModel
from .person import PersonSummary
from .space import SpaceSummary


class ReservationCreate(ApiModel):
    # Defaults to the caller when omitted.
    person_id: Optional[int] = Field(None, ge=1, le=MAX_ID, examples=[1])
    space_id: int = Field(..., ge=1, le=MAX_ID, examples=[1])
    reservation_date: str = Field(..., examples=["2025-09-01"])
    start_time: str = Field(..., examples=["09:00"])
    end_time: str = Field(..., examples=["10:00"])


class ReservationUpdate(ApiModel):
    """Partial update.

    Omitted fields keep their stored value; the merged result is
    validated as a whole, so moving a reservation to a new date is
    checked against the new date's bookings and week.
    """

    person_id: Optional[int] = Field(None, ge=1, le=MAX_ID)
    space_id: Optional[int] = Field(None, ge=1, le=MAX_ID)
    reservation_date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class ReservationRead(ApiModel):
    id: int
    person_id: int
    space_id: int
    reservation_date: str
    start_time: str
    end_time: str
    created_at: str
    updated_at: str
    person: Optional[PersonSummary] = None
    space: Optional[SpaceSummary] = None
