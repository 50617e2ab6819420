"""
Business logic for reservations.

Every create and update goes through ``AdmissionEngine`` and the write
happens in the same ``transaction()``: the engine reads the space's
bookings and the person's week, and nothing can be committed for that
space/date in between.  A rejected candidate raises ``AdmissionError``
and the transaction rolls back, so no partial write survives.

Deleting a reservation is a cancellation: it frees the interval and
lowers the owner's weekly count immediately.
"""

import logging
import sqlite3
from datetime import date
from typing import Callable, Optional

from workspace_booking_api.app.core.db import transaction
from workspace_booking_api.app.core.errors import AccessDeniedError, FieldValidationError, NotFoundError
from workspace_booking_api.app.core.timeutils import utc_timestamp
from workspace_booking_api.app.schemas.reservation import (
    ReservationCreate,
    ReservationRead,
    ReservationUpdate,
)
from workspace_booking_api.app.services.admission import (
    MODE_CREATE,
    MODE_UPDATE,
    AdmissionEngine,
    AdmissionPolicy,
    AdmissionResult,
    Candidate,
)
from workspace_booking_api.app.services.query_service import find_reservation


def insert_reservation(cursor: sqlite3.Cursor, person_id: int, space_id: int, result: AdmissionResult) -> int:
    """Write an admitted reservation and return its id."""
    now = utc_timestamp()
    cursor.execute(
        "INSERT INTO reservations "
        "(person_id, space_id, reservation_date, start_time, end_time, created_at, updated_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?)",
        (
            person_id,
            space_id,
            result.reservation_date.isoformat(),
            result.start_time,
            result.end_time,
            now,
            now,
        ),
    )
    return cursor.lastrowid


def update_reservation(
    cursor: sqlite3.Cursor, reservation_id: int, person_id: int, space_id: int, result: AdmissionResult
) -> None:
    cursor.execute(
        "UPDATE reservations SET person_id = ?, space_id = ?, reservation_date = ?, "
        "start_time = ?, end_time = ?, updated_at = ? WHERE id = ?",
        (
            person_id,
            space_id,
            result.reservation_date.isoformat(),
            result.start_time,
            result.end_time,
            utc_timestamp(),
            reservation_id,
        ),
    )


def delete_reservation(cursor: sqlite3.Cursor, reservation_id: int) -> bool:
    cursor.execute("DELETE FROM reservations WHERE id = ?", (reservation_id,))
    return cursor.rowcount > 0


def _ensure_owner(reservation: ReservationRead, owner_id: Optional[int], action: str) -> None:
    if owner_id is not None and reservation.person_id != owner_id:
        raise AccessDeniedError(f"Insufficient permissions to {action} this reservation")


class ReservationService:
    """Service for creating, changing and cancelling reservations."""

    # Source of "today" for the past-date rule.
    clock: Callable[[], date] = staticmethod(date.today)

    @classmethod
    def _engine(cls, cursor) -> AdmissionEngine:
        return AdmissionEngine(cursor, AdmissionPolicy.from_settings(), today=cls.clock)

    @classmethod
    async def create_reservation(cls, data: ReservationCreate) -> ReservationRead:
        """Admit and store a new reservation.

        ``data.person_id`` must already be resolved (the endpoint fills
        it with the caller when omitted).
        """
        logger = logging.getLogger(__name__)
        if data.person_id is None:
            raise FieldValidationError("personId", "personId is required")
        candidate = Candidate(
            person_id=data.person_id,
            space_id=data.space_id,
            reservation_date=data.reservation_date,
            start_time=data.start_time,
            end_time=data.end_time,
        )
        with transaction() as cursor:
            result = cls._engine(cursor).validate(candidate, MODE_CREATE).raise_for_violation()
            reservation_id = insert_reservation(cursor, candidate.person_id, candidate.space_id, result)
            reservation = find_reservation(cursor, reservation_id)
        logger.info(
            "Created reservation %s: person=%s space=%s %s %s-%s",
            reservation.id,
            reservation.person_id,
            reservation.space_id,
            reservation.reservation_date,
            reservation.start_time,
            reservation.end_time,
        )
        return reservation

    @classmethod
    async def update_reservation(
        cls, reservation_id: int, data: ReservationUpdate, owner_id: Optional[int] = None
    ) -> ReservationRead:
        """Apply a partial update after re-admitting the merged reservation.

        The merged values are validated against every other
        reservation; the reservation's own stored state is excluded from
        the overlap and quota checks.  With ``owner_id`` the stored row
        must belong to that person and may not be handed to anyone else.
        """
        logger = logging.getLogger(__name__)
        with transaction() as cursor:
            current = find_reservation(cursor, reservation_id)
            if current is None:
                raise NotFoundError(f"Reservation {reservation_id} not found")
            _ensure_owner(current, owner_id, "update")
            if owner_id is not None and data.person_id not in (None, owner_id):
                raise AccessDeniedError("Clients can only book for themselves")
            candidate = Candidate(
                person_id=data.person_id if data.person_id is not None else current.person_id,
                space_id=data.space_id if data.space_id is not None else current.space_id,
                reservation_date=data.reservation_date if data.reservation_date is not None else current.reservation_date,
                start_time=data.start_time if data.start_time is not None else current.start_time,
                end_time=data.end_time if data.end_time is not None else current.end_time,
            )
            result = cls._engine(cursor).validate(
                candidate, MODE_UPDATE, existing_id=reservation_id
            ).raise_for_violation()
            update_reservation(cursor, reservation_id, candidate.person_id, candidate.space_id, result)
            reservation = find_reservation(cursor, reservation_id)
        logger.info("Updated reservation %s", reservation_id)
        return reservation

    @classmethod
    async def delete_reservation(cls, reservation_id: int, owner_id: Optional[int] = None) -> ReservationRead:
        """Cancel a reservation and return what was removed.

        With ``owner_id`` only that person's reservation may be cancelled.
        """
        logger = logging.getLogger(__name__)
        with transaction() as cursor:
            current = find_reservation(cursor, reservation_id)
            if current is None:
                raise NotFoundError(f"Reservation {reservation_id} not found")
            _ensure_owner(current, owner_id, "cancel")
            delete_reservation(cursor, reservation_id)
        logger.info("Deleted reservation %s (person=%s)", reservation_id, current.person_id)
        return current
