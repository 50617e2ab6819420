"""
Date and wall-clock helpers shared by the admission and query code.

Reservations carry a calendar date (``YYYY-MM-DD``) and two wall-clock
times (``HH:mm``) with no time zone.  Hours may be written with one or
two digits on input; storage always uses the zero-padded form so that
string order equals time order.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

_CLOCK_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_clock(value: str) -> Optional[time]:
    """Parse ``H:mm``/``HH:mm`` into a ``time``; ``None`` when malformed."""
    if not isinstance(value, str):
        return None
    match = _CLOCK_RE.match(value.strip())
    if not match:
        return None
    return time(int(match.group(1)), int(match.group(2)))


def parse_day(value: str) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` into a ``date``; ``None`` when malformed."""
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        # Matches the pattern but is not a calendar day (e.g. 2025-02-30).
        return None


def format_clock(value: time) -> str:
    return value.strftime("%H:%M")


def week_bounds(day: date) -> Tuple[date, date]:
    """Return the Monday and Sunday of the week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def in_same_week(day: date, reference: date) -> bool:
    monday, sunday = week_bounds(reference)
    return monday <= day <= sunday


def utc_timestamp() -> str:
    """Current UTC time as an ISO 8601 string, used for created/updated stamps."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
