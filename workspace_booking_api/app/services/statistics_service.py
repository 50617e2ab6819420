"""
Service layer for the administrator dashboard.

The dashboard shows headline counts (persons, spaces, reservations,
reservations today and this week), the share of reservations that fall
in the current week, the next upcoming reservations, the most booked
spaces and the clients with the most reservations.  Aggregation is done
in Python over the loaded records with the helpers in
``query_service``, so the numbers match what those helpers return for
the same input.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from workspace_booking_api.app.schemas.statistics import ClientActivity, Dashboard, SpaceUsage
from workspace_booking_api.app.services.person_service import PersonService
from workspace_booking_api.app.services.query_service import (
    QueryService,
    busiest_spaces,
    count_in_current_week,
    count_on,
    most_active_clients,
    upcoming,
    weekly_activity_ratio,
)
from workspace_booking_api.app.services.space_service import SpaceService

UPCOMING_LIMIT = 5
TOP_N = 3


class StatisticsService:
    """Aggregated metrics for administrators."""

    @classmethod
    async def dashboard(cls, today: Optional[date] = None) -> Dashboard:
        today = today or date.today()
        persons = await PersonService.list_persons()
        spaces = await SpaceService.list_spaces()
        reservations = await QueryService.all_reservations()
        return Dashboard(
            total_persons=len(persons),
            total_spaces=len(spaces),
            total_reservations=len(reservations),
            today_reservations=count_on(reservations, today),
            this_week_reservations=count_in_current_week(reservations, today),
            weekly_activity_ratio=weekly_activity_ratio(reservations, today),
            upcoming=upcoming(reservations, today, UPCOMING_LIMIT),
            busiest_spaces=[
                SpaceUsage(id=space.id, name=space.name, location=space.location, reservation_count=count)
                for space, count in busiest_spaces(spaces, reservations, TOP_N)
            ],
            most_active_clients=[
                ClientActivity(id=person.id, email=person.email, reservation_count=count)
                for person, count in most_active_clients(persons, reservations, TOP_N)
            ],
        )
