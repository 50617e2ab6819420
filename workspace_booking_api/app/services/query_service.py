"""
Read side for reservations: paginated listings and dashboard aggregates.

Listings are ordered by ``reservation_date``, ``start_time`` and ``id``
ascending, use 1-based page numbers and report
``total_pages = ceil(total / page_size)``.  A page past the end is
empty rather than an error.

The aggregate helpers (``upcoming``, ``busiest_spaces``,
``most_active_clients``, ``weekly_activity_ratio``, ``count_on``) are
plain functions over already-loaded records so they can be reused and
tested without a database.  Sorting is stable, so ties keep the order
of the input.
"""

import math
import sqlite3
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from workspace_booking_api.app.core.db import get_connection
from workspace_booking_api.app.core.errors import FieldValidationError, NotFoundError
from workspace_booking_api.app.core.timeutils import in_same_week, parse_day
from workspace_booking_api.app.schemas.common import Pagination
from workspace_booking_api.app.schemas.person import PersonSummary
from workspace_booking_api.app.schemas.reservation import ReservationRead
from workspace_booking_api.app.schemas.space import SpaceSummary

RESERVATION_SELECT = (
    "SELECT r.id, r.person_id, r.space_id, r.reservation_date, r.start_time, r.end_time, "
    "r.created_at, r.updated_at, "
    "p.email AS person_email, p.role AS person_role, "
    "s.name AS space_name, s.location AS space_location, s.capacity AS space_capacity "
    "FROM reservations r "
    "JOIN persons p ON p.id = r.person_id "
    "JOIN spaces s ON s.id = r.space_id"
)
RESERVATION_ORDER = " ORDER BY r.reservation_date, r.start_time, r.id"


def row_to_reservation(row: sqlite3.Row) -> ReservationRead:
    return ReservationRead(
        id=row["id"],
        person_id=row["person_id"],
        space_id=row["space_id"],
        reservation_date=row["reservation_date"],
        start_time=row["start_time"],
        end_time=row["end_time"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        person=PersonSummary(id=row["person_id"], email=row["person_email"], role=row["person_role"]),
        space=SpaceSummary(
            id=row["space_id"],
            name=row["space_name"],
            location=row["space_location"],
            capacity=row["space_capacity"],
        ),
    )


def find_reservation(cursor: sqlite3.Cursor, reservation_id: int) -> Optional[ReservationRead]:
    row = cursor.execute(f"{RESERVATION_SELECT} WHERE r.id = ?", (reservation_id,)).fetchone()
    return row_to_reservation(row) if row else None


@dataclass
class ReservationFilter:
    person_id: Optional[int] = None
    space_id: Optional[int] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None

    def where(self) -> Tuple[str, Tuple[Any, ...]]:
        clauses: List[str] = []
        params: List[Any] = []
        if self.person_id is not None:
            clauses.append("r.person_id = ?")
            params.append(self.person_id)
        if self.space_id is not None:
            clauses.append("r.space_id = ?")
            params.append(self.space_id)
        for column, op, value, name in (
            ("r.reservation_date", ">=", self.date_from, "dateFrom"),
            ("r.reservation_date", "<=", self.date_to, "dateTo"),
        ):
            if value is None:
                continue
            day = parse_day(value)
            if day is None:
                raise FieldValidationError(name, f"{name} must be YYYY-MM-DD")
            clauses.append(f"{column} {op} ?")
            params.append(day.isoformat())
        if not clauses:
            return "", ()
        return " WHERE " + " AND ".join(clauses), tuple(params)


@dataclass
class Page:
    items: List[ReservationRead]
    page: int
    page_size: int
    total: int
    total_pages: int = field(init=False)

    def __post_init__(self) -> None:
        self.total_pages = math.ceil(self.total / self.page_size) if self.total else 0

    @property
    def pagination(self) -> Pagination:
        return Pagination(
            page=self.page,
            page_size=self.page_size,
            total=self.total,
            total_pages=self.total_pages,
        )


def query_reservations(
    cursor: sqlite3.Cursor,
    filters: Optional[ReservationFilter] = None,
    page: int = 1,
    page_size: int = 10,
) -> Page:
    """One page of reservations matching ``filters``, with the total count."""
    where, params = (filters or ReservationFilter()).where()
    total = cursor.execute(f"SELECT COUNT(*) FROM reservations r{where}", params).fetchone()[0]
    rows = cursor.execute(
        f"{RESERVATION_SELECT}{where}{RESERVATION_ORDER} LIMIT ? OFFSET ?",
        (*params, page_size, (page - 1) * page_size),
    ).fetchall()
    return Page(items=[row_to_reservation(row) for row in rows], page=page, page_size=page_size, total=total)


class QueryService:
    """Paginated reservation listings."""

    @classmethod
    async def list_reservations(
        cls,
        page: int = 1,
        page_size: int = 10,
        filters: Optional[ReservationFilter] = None,
    ) -> Page:
        if page < 1:
            raise FieldValidationError("page", "page must be at least 1")
        if page_size < 1:
            raise FieldValidationError("pageSize", "pageSize must be at least 1")
        conn = get_connection()
        try:
            return query_reservations(conn.cursor(), filters, page, page_size)
        finally:
            conn.close()

    @classmethod
    async def list_reservations_for_person(cls, person_id: int, page: int = 1, page_size: int = 10) -> Page:
        return await cls.list_reservations(page, page_size, ReservationFilter(person_id=person_id))

    @classmethod
    async def get_reservation(cls, reservation_id: int) -> ReservationRead:
        conn = get_connection()
        try:
            reservation = find_reservation(conn.cursor(), reservation_id)
        finally:
            conn.close()
        if reservation is None:
            raise NotFoundError(f"Reservation {reservation_id} not found")
        return reservation

    @classmethod
    async def all_reservations(cls) -> List[ReservationRead]:
        conn = get_connection()
        try:
            rows = conn.execute(f"{RESERVATION_SELECT}{RESERVATION_ORDER}").fetchall()
        finally:
            conn.close()
        return [row_to_reservation(row) for row in rows]


def _day(reservation: Any) -> Optional[date]:
    return parse_day(reservation.reservation_date)


def upcoming(reservations: Iterable[Any], today: date, limit: int = 5) -> List[Any]:
    """Reservations dated today or later, soonest first, at most ``limit``."""
    future = [r for r in reservations if _day(r) is not None and _day(r) >= today]
    future.sort(key=lambda r: (r.reservation_date, r.start_time))
    return future[:limit]


def _counts(values: Iterable[int]) -> Dict[int, int]:
    counts: Dict[int, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts


def busiest_spaces(spaces: Sequence[Any], reservations: Iterable[Any], top_n: int = 3) -> List[Tuple[Any, int]]:
    """``(space, reservation_count)`` pairs, most booked first."""
    counts = _counts(r.space_id for r in reservations)
    ranked = [(space, counts.get(space.id, 0)) for space in spaces]
    ranked.sort(key=lambda pair: -pair[1])
    return ranked[:top_n]


def most_active_clients(persons: Sequence[Any], reservations: Iterable[Any], top_n: int = 3) -> List[Tuple[Any, int]]:
    """``(person, reservation_count)`` pairs for client-role persons, busiest first."""
    counts = _counts(r.person_id for r in reservations)
    ranked = [(person, counts.get(person.id, 0)) for person in persons if person.role == "client"]
    ranked.sort(key=lambda pair: -pair[1])
    return ranked[:top_n]


def count_on(reservations: Iterable[Any], day: date) -> int:
    return sum(1 for r in reservations if _day(r) == day)


def count_in_current_week(reservations: Iterable[Any], today: date) -> int:
    return sum(1 for r in reservations if _day(r) is not None and in_same_week(_day(r), today))


def weekly_activity_ratio(reservations: Sequence[Any], today: date) -> int:
    """Share of all reservations dated in the current week, as a rounded percentage."""
    total = len(reservations)
    if total == 0:
        return 0
    # half-up rounding in integers
    return (count_in_current_week(reservations, today) * 200 + total) // (2 * total)
