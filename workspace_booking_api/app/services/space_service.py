"""
Business logic for bookable spaces.

Deleting a space removes its reservations (``ON DELETE CASCADE`` on
``reservations.space_id``).  The number of removed reservations is
counted before the delete and returned, so callers always learn what
the cascade took with it.
"""

import logging
import sqlite3
from datetime import date
from typing import Any, Dict, List, Optional

from workspace_booking_api.app.core.db import get_connection, transaction
from workspace_booking_api.app.core.errors import FieldValidationError, NotFoundError
from workspace_booking_api.app.core.timeutils import format_clock, utc_timestamp
from workspace_booking_api.app.schemas.space import (
    BookedSlot,
    SpaceAvailability,
    SpaceCreate,
    SpaceDeleteResult,
    SpaceRead,
    SpaceUpdate,
    TimeSlot,
)
from workspace_booking_api.app.services.admission import AdmissionPolicy
from workspace_booking_api.app.services.availability import booked_intervals, free_intervals

logger = logging.getLogger(__name__)

SPACE_COLUMNS = "id, name, location, capacity, description, created_at, updated_at"

# (min, max) lengths after trimming
NAME_BOUNDS = (2, 100)
LOCATION_BOUNDS = (2, 200)
DESCRIPTION_MAX = 500
CAPACITY_BOUNDS = (1, 1000)


def _text(field: str, label: str, value: Optional[str], bounds: tuple) -> str:
    text = (value or "").strip()
    if not text:
        raise FieldValidationError(field, f"{label} is required")
    low, high = bounds
    if len(text) < low:
        raise FieldValidationError(field, f"{label} must be at least {low} characters")
    if len(text) > high:
        raise FieldValidationError(field, f"{label} must be at most {high} characters")
    return text


def _capacity(value: int) -> int:
    low, high = CAPACITY_BOUNDS
    if value < low or value > high:
        raise FieldValidationError("capacity", f"Capacity must be between {low} and {high}")
    return value


def _description(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    if len(text) > DESCRIPTION_MAX:
        raise FieldValidationError("description", f"Description must be at most {DESCRIPTION_MAX} characters")
    return text or None


def _row_to_space(row: sqlite3.Row) -> SpaceRead:
    return SpaceRead(
        id=row["id"],
        name=row["name"],
        location=row["location"],
        capacity=row["capacity"],
        description=row["description"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def find_space(cursor: sqlite3.Cursor, space_id: int) -> Optional[sqlite3.Row]:
    return cursor.execute(
        f"SELECT {SPACE_COLUMNS} FROM spaces WHERE id = ?", (space_id,)
    ).fetchone()


class SpaceService:
    """Service for managing spaces and reading their availability."""

    @classmethod
    async def create_space(cls, data: SpaceCreate) -> SpaceRead:
        name = _text("name", "Space name", data.name, NAME_BOUNDS)
        location = _text("location", "Location", data.location, LOCATION_BOUNDS)
        capacity = _capacity(data.capacity)
        description = _description(data.description)
        now = utc_timestamp()
        with transaction() as cursor:
            cursor.execute(
                "INSERT INTO spaces (name, location, capacity, description, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (name, location, capacity, description, now, now),
            )
            space_id = cursor.lastrowid
            row = find_space(cursor, space_id)
        logger.info("Created space %s (%s)", space_id, name)
        return _row_to_space(row)

    @classmethod
    async def list_spaces(cls) -> List[SpaceRead]:
        conn = get_connection()
        try:
            rows = conn.execute(f"SELECT {SPACE_COLUMNS} FROM spaces ORDER BY id").fetchall()
            return [_row_to_space(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_space(cls, space_id: int) -> SpaceRead:
        conn = get_connection()
        try:
            row = find_space(conn.cursor(), space_id)
        finally:
            conn.close()
        if not row:
            raise NotFoundError(f"Space {space_id} not found")
        return _row_to_space(row)

    @classmethod
    async def update_space(cls, space_id: int, data: SpaceUpdate) -> SpaceRead:
        updates: Dict[str, Any] = {}
        if data.name is not None:
            updates["name"] = _text("name", "Space name", data.name, NAME_BOUNDS)
        if data.location is not None:
            updates["location"] = _text("location", "Location", data.location, LOCATION_BOUNDS)
        if data.capacity is not None:
            updates["capacity"] = _capacity(data.capacity)
        if data.description is not None:
            updates["description"] = _description(data.description)
        with transaction() as cursor:
            if not find_space(cursor, space_id):
                raise NotFoundError(f"Space {space_id} not found")
            if updates:
                updates["updated_at"] = utc_timestamp()
                assignments = ", ".join(f"{column} = ?" for column in updates)
                cursor.execute(
                    f"UPDATE spaces SET {assignments} WHERE id = ?",
                    (*updates.values(), space_id),
                )
                logger.info("Updated space %s: %s", space_id, sorted(updates))
            row = find_space(cursor, space_id)
        return _row_to_space(row)

    @classmethod
    async def delete_space(cls, space_id: int) -> SpaceDeleteResult:
        with transaction() as cursor:
            if not find_space(cursor, space_id):
                raise NotFoundError(f"Space {space_id} not found")
            removed = cursor.execute(
                "SELECT COUNT(*) FROM reservations WHERE space_id = ?", (space_id,)
            ).fetchone()[0]
            cursor.execute("DELETE FROM spaces WHERE id = ?", (space_id,))
        logger.info("Deleted space %s; cascade removed %s reservation(s)", space_id, removed)
        return SpaceDeleteResult(id=space_id, deleted_reservations=removed)

    @classmethod
    async def availability(cls, space_id: int, day: date) -> SpaceAvailability:
        """Booked and free slots of a space on ``day``.

        Free slots are the gaps inside the configured operating hours.
        """
        policy = AdmissionPolicy.from_settings()
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if not find_space(cursor, space_id):
                raise NotFoundError(f"Space {space_id} not found")
            booked = booked_intervals(cursor, space_id, day)
        finally:
            conn.close()
        free = free_intervals(booked, policy.opening, policy.closing)
        return SpaceAvailability(
            space_id=space_id,
            reservation_date=day.isoformat(),
            booked=[
                BookedSlot(
                    reservation_id=item.reservation_id,
                    start_time=format_clock(item.start),
                    end_time=format_clock(item.end),
                )
                for item in booked
            ],
            free=[TimeSlot(start_time=format_clock(gap.start), end_time=format_clock(gap.end)) for gap in free],
        )
