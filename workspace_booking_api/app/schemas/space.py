"""
Pydantic models for bookable spaces.
"""

from typing import List, Optional

from pydantic import Field

from .common import ApiModel


class SpaceCreate(ApiModel):
    name: str = Field(..., examples=["Conference Room A"])
    location: str = Field(..., examples=["Building 1, Floor 2"])
    capacity: int = Field(..., examples=[12])
    description: Optional[str] = Field(None, examples=["Projector and whiteboard"])


class SpaceUpdate(ApiModel):
    """Partial update; omitted fields keep their stored value."""

    name: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = None
    description: Optional[str] = None


class SpaceSummary(ApiModel):
    id: int
    name: str
    location: str
    capacity: int


class SpaceRead(SpaceSummary):
    description: Optional[str] = None
    created_at: str
    updated_at: str


class SpaceDeleteResult(ApiModel):
    """Returned by space deletion so the cascade is visible to the caller."""

    id: int
    deleted_reservations: int


class TimeSlot(ApiModel):
    start_time: str
    end_time: str


class BookedSlot(TimeSlot):
    reservation_id: int


class SpaceAvailability(ApiModel):
    space_id: int
    reservation_date: str
    booked: List[BookedSlot]
    free: List[TimeSlot]
