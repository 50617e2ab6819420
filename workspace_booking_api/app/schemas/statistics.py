"""
Pydantic models for the dashboard statistics.
"""

from typing import List

from .common import ApiModel
from .reservation import ReservationRead


class SpaceUsage(ApiModel):
    id: int
    name: str
    location: str
    reservation_count: int


class ClientActivity(ApiModel):
    id: int
    email: str
    reservation_count: int


class Dashboard(ApiModel):
    total_persons: int
    total_spaces: int
    total_reservations: int
    today_reservations: int
    this_week_reservations: int
    weekly_activity_ratio: int
    upcoming: List[ReservationRead]
    busiest_spaces: List[SpaceUsage]
    most_active_clients: List[ClientActivity]
