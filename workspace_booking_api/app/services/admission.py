"""
Admission engine: the single gate for creating or changing a reservation.

``AdmissionEngine.validate`` decides whether a candidate
(person, space, date, start, end) may be committed.  Checks run in a
fixed order and stop at the first failure:

1. references   - person and space exist            -> UNKNOWN_REFERENCE
2. interval     - well-formed ``HH:mm``, start < end,
                  inside operating hours if enforced -> INVALID_INTERVAL
3. date         - well-formed ``YYYY-MM-DD``         -> VALIDATION_ERROR
                  not before today if enforced       -> PAST_DATE
4. overlap      - no other booking of the space on
                  that date intersects the interval  -> SPACE_CONFLICT
5. quota        - the person holds fewer than the
                  weekly quota in the candidate's
                  Monday-Sunday week                 -> QUOTA_EXCEEDED

The engine only reads.  Callers run ``validate`` and their write inside
the same ``db.transaction()`` so that the snapshot the engine saw is
still the truth when the row is written.  On update, ``existing_id``
removes the reservation's own previous state from both the overlap and
the quota check, so re-saving a reservation unchanged is always
accepted.
"""

import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, time
from typing import Callable, Optional

from workspace_booking_api.app.core.config import Settings, settings
from workspace_booking_api.app.core.errors import AdmissionError, ViolationKind
from workspace_booking_api.app.core.timeutils import format_clock, parse_clock, parse_day, week_bounds
from workspace_booking_api.app.schemas.common import MAX_ID
from workspace_booking_api.app.services.availability import Interval, booked_intervals, first_conflict

logger = logging.getLogger(__name__)

MODE_CREATE = "create"
MODE_UPDATE = "update"


def _storable(value: int) -> bool:
    return 1 <= value <= MAX_ID


@dataclass(frozen=True)
class AdmissionPolicy:
    weekly_quota: int = 3
    enforce_past_date: bool = True
    enforce_operating_hours: bool = False
    opening: time = time(8, 0)
    closing: time = time(20, 0)

    @classmethod
    def from_settings(cls, source: Settings = settings) -> "AdmissionPolicy":
        opening = parse_clock(source.operating_hours_start)
        closing = parse_clock(source.operating_hours_end)
        if opening is None or closing is None or opening >= closing:
            raise ValueError(
                f"Invalid operating hours {source.operating_hours_start!r}-{source.operating_hours_end!r}"
            )
        if source.weekly_reservation_quota < 1:
            raise ValueError("WEEKLY_RESERVATION_QUOTA must be at least 1")
        return cls(
            weekly_quota=source.weekly_reservation_quota,
            enforce_past_date=source.enforce_past_date,
            enforce_operating_hours=source.enforce_operating_hours,
            opening=opening,
            closing=closing,
        )


@dataclass(frozen=True)
class Candidate:
    """A proposed reservation, with date and times as submitted."""

    person_id: int
    space_id: int
    reservation_date: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class Violation:
    kind: ViolationKind
    message: str
    field: Optional[str] = None
    conflicting_reservation_id: Optional[int] = None
    current_count: Optional[int] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of ``validate``.

    On success ``reservation_date`` and ``interval`` hold the parsed
    candidate, ready to be stored in normalised form.
    """

    violation: Optional[Violation] = None
    reservation_date: Optional[date] = None
    interval: Optional[Interval] = None

    @property
    def ok(self) -> bool:
        return self.violation is None

    @property
    def start_time(self) -> str:
        return format_clock(self.interval.start)

    @property
    def end_time(self) -> str:
        return format_clock(self.interval.end)

    def raise_for_violation(self) -> "AdmissionResult":
        if self.violation is not None:
            raise AdmissionError(self.violation)
        return self


class AdmissionEngine:
    def __init__(
        self,
        cursor: sqlite3.Cursor,
        policy: Optional[AdmissionPolicy] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.cursor = cursor
        self.policy = policy or AdmissionPolicy.from_settings()
        self.today = today

    def validate(
        self,
        candidate: Candidate,
        mode: str = MODE_CREATE,
        existing_id: Optional[int] = None,
    ) -> AdmissionResult:
        if mode not in (MODE_CREATE, MODE_UPDATE):
            raise ValueError(f"Unknown admission mode {mode!r}")
        stored_date = None
        if mode == MODE_UPDATE:
            if existing_id is None:
                raise ValueError("existing_id is required when validating an update")
            stored = None
            if _storable(existing_id):
                stored = self.cursor.execute(
                    "SELECT reservation_date FROM reservations WHERE id = ?", (existing_id,)
                ).fetchone()
            if not stored:
                return self._reject(
                    candidate,
                    Violation(ViolationKind.NOT_FOUND, f"Reservation {existing_id} not found"),
                )
            stored_date = stored["reservation_date"]
        else:
            existing_id = None

        violation = self.check_references(candidate)
        if violation:
            return self._reject(candidate, violation)

        interval = parse_interval(candidate)
        violation = self.check_interval(candidate)
        if violation:
            return self._reject(candidate, violation)

        day = parse_day(candidate.reservation_date)
        violation = self.check_date(candidate, stored_date)
        if violation:
            return self._reject(candidate, violation)

        violation = self.check_overlap(candidate.space_id, day, interval, existing_id)
        if violation:
            return self._reject(candidate, violation)

        violation = self.check_quota(candidate.person_id, day, existing_id)
        if violation:
            return self._reject(candidate, violation)

        return AdmissionResult(reservation_date=day, interval=interval)

    def _reject(self, candidate: Candidate, violation: Violation) -> AdmissionResult:
        logger.warning(
            "Rejected reservation person=%s space=%s date=%s %s-%s: %s",
            candidate.person_id,
            candidate.space_id,
            candidate.reservation_date,
            candidate.start_time,
            candidate.end_time,
            violation.kind.value,
        )
        return AdmissionResult(violation=violation)

    def check_references(self, candidate: Candidate) -> Optional[Violation]:
        person = _storable(candidate.person_id) and self.cursor.execute(
            "SELECT 1 FROM persons WHERE id = ?", (candidate.person_id,)
        ).fetchone()
        if not person:
            return Violation(
                ViolationKind.UNKNOWN_REFERENCE,
                f"Person {candidate.person_id} does not exist",
                field="personId",
            )
        space = _storable(candidate.space_id) and self.cursor.execute(
            "SELECT 1 FROM spaces WHERE id = ?", (candidate.space_id,)
        ).fetchone()
        if not space:
            return Violation(
                ViolationKind.UNKNOWN_REFERENCE,
                f"Space {candidate.space_id} does not exist",
                field="spaceId",
            )
        return None

    def check_interval(self, candidate: Candidate) -> Optional[Violation]:
        start = parse_clock(candidate.start_time)
        end = parse_clock(candidate.end_time)
        if start is None:
            return Violation(ViolationKind.INVALID_INTERVAL, "Start time must be HH:mm", field="startTime")
        if end is None:
            return Violation(ViolationKind.INVALID_INTERVAL, "End time must be HH:mm", field="endTime")
        if start >= end:
            return Violation(ViolationKind.INVALID_INTERVAL, "Start time must be before end time", field="endTime")
        policy = self.policy
        if policy.enforce_operating_hours and (start < policy.opening or end > policy.closing):
            return Violation(
                ViolationKind.INVALID_INTERVAL,
                f"Reservations must fall between {format_clock(policy.opening)} and {format_clock(policy.closing)}",
                field="startTime" if start < policy.opening else "endTime",
            )
        return None

    def check_date(self, candidate: Candidate, stored_date: Optional[str] = None) -> Optional[Violation]:
        """Reject malformed dates and, when enforced, dates before today.

        ``stored_date`` is the date an updated reservation already has;
        keeping that date is allowed even once it lies in the past.
        """
        day = parse_day(candidate.reservation_date)
        if day is None:
            return Violation(
                ViolationKind.VALIDATION_ERROR,
                "Reservation date must be YYYY-MM-DD",
                field="reservationDate",
            )
        if stored_date is not None and day.isoformat() == stored_date:
            return None
        if self.policy.enforce_past_date and day < self.today():
            return Violation(
                ViolationKind.PAST_DATE,
                "Reservation date is in the past",
                field="reservationDate",
            )
        return None

    def check_overlap(
        self,
        space_id: int,
        day: date,
        interval: Interval,
        existing_id: Optional[int] = None,
    ) -> Optional[Violation]:
        conflict = first_conflict(interval, booked_intervals(self.cursor, space_id, day, existing_id))
        if conflict is None:
            return None
        return Violation(
            ViolationKind.SPACE_CONFLICT,
            f"Space is already booked from {format_clock(conflict.start)} to {format_clock(conflict.end)}",
            conflicting_reservation_id=conflict.reservation_id,
        )

    def check_quota(self, person_id: int, day: date, existing_id: Optional[int] = None) -> Optional[Violation]:
        count = count_in_week(self.cursor, person_id, day, existing_id)
        limit = self.policy.weekly_quota
        if count < limit:
            return None
        return Violation(
            ViolationKind.QUOTA_EXCEEDED,
            f"Weekly limit of {limit} reservations reached",
            current_count=count,
            limit=limit,
        )


def parse_interval(candidate: Candidate) -> Optional[Interval]:
    start = parse_clock(candidate.start_time)
    end = parse_clock(candidate.end_time)
    if start is None or end is None:
        return None
    return Interval(start, end)


def count_in_week(
    cursor: sqlite3.Cursor,
    person_id: int,
    day: date,
    exclude_id: Optional[int] = None,
) -> int:
    """Reservations of ``person_id`` dated in the Monday-Sunday week of ``day``."""
    monday, sunday = week_bounds(day)
    query = (
        "SELECT COUNT(*) FROM reservations "
        "WHERE person_id = ? AND reservation_date BETWEEN ? AND ?"
    )
    params: list = [person_id, monday.isoformat(), sunday.isoformat()]
    if exclude_id is not None:
        query += " AND id != ?"
        params.append(exclude_id)
    return cursor.execute(query, tuple(params)).fetchone()[0]
