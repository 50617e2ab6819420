"""
Availability index: which intervals of a space are booked on a day.

The index is a read over the ``reservations`` table, never a separate
store, so it cannot drift from the committed bookings.  Intervals are
half-open, ``[start, end)``: a booking that ends at 10:00 leaves 10:00
free for the next one.
"""

import sqlite3
from datetime import date, time
from typing import Iterable, List, NamedTuple, Optional

from workspace_booking_api.app.core.timeutils import parse_clock


class Interval(NamedTuple):
    start: time
    end: time


class BookedInterval(NamedTuple):
    reservation_id: int
    start: time
    end: time

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)


def intervals_overlap(a: Interval, b: Interval) -> bool:
    """``[a.start, a.end)`` and ``[b.start, b.end)`` share an instant."""
    return a.start < b.end and b.start < a.end


def first_conflict(candidate: Interval, existing: Iterable[BookedInterval]) -> Optional[BookedInterval]:
    for booked in existing:
        if intervals_overlap(candidate, booked.interval):
            return booked
    return None


def overlaps(candidate: Interval, existing: Iterable) -> bool:
    """Return True if ``candidate`` overlaps any interval in ``existing``.

    ``existing`` may hold ``Interval`` or ``BookedInterval`` items.
    """
    for item in existing:
        other = item.interval if isinstance(item, BookedInterval) else item
        if intervals_overlap(candidate, other):
            return True
    return False


def booked_intervals(
    cursor: sqlite3.Cursor,
    space_id: int,
    reservation_date: date,
    exclude_id: Optional[int] = None,
) -> List[BookedInterval]:
    """Booked intervals of ``space_id`` on ``reservation_date``, by start time.

    ``exclude_id`` leaves one reservation out, which is how an update is
    validated without colliding with its own previous state.
    """
    query = (
        "SELECT id, start_time, end_time FROM reservations "
        "WHERE space_id = ? AND reservation_date = ?"
    )
    params: list = [space_id, reservation_date.isoformat()]
    if exclude_id is not None:
        query += " AND id != ?"
        params.append(exclude_id)
    query += " ORDER BY start_time, id"
    rows = cursor.execute(query, tuple(params)).fetchall()
    return [
        BookedInterval(row["id"], parse_clock(row["start_time"]), parse_clock(row["end_time"]))
        for row in rows
    ]


def free_intervals(booked: Iterable[BookedInterval], day_start: time, day_end: time) -> List[Interval]:
    """Gaps between bookings within ``[day_start, day_end)``.

    ``booked`` must be sorted by start time, as ``booked_intervals``
    returns it.
    """
    gaps: List[Interval] = []
    cursor_time = day_start
    for item in booked:
        if item.end <= cursor_time:
            continue
        if item.start >= day_end:
            break
        if item.start > cursor_time:
            gaps.append(Interval(cursor_time, item.start))
        cursor_time = max(cursor_time, item.end)
    if cursor_time < day_end:
        gaps.append(Interval(cursor_time, day_end))
    return gaps
