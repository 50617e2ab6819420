"""
Caller-facing error types.

Services raise subclasses of ``BookingError`` for every recoverable
failure: unknown references, rejected admissions, missing entities and
malformed fields.  ``BookingError`` derives from ``ValueError`` so
callers that only care about "the request was wrong" can keep catching
``ValueError``.  The exception handlers in ``core.exception_handlers``
turn these into the structured JSON error envelope.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ViolationKind(str, Enum):
    UNKNOWN_REFERENCE = "UNKNOWN_REFERENCE"
    INVALID_INTERVAL = "INVALID_INTERVAL"
    PAST_DATE = "PAST_DATE"
    SPACE_CONFLICT = "SPACE_CONFLICT"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    HAS_RESERVATIONS = "HAS_RESERVATIONS"
    FORBIDDEN = "FORBIDDEN"


# HTTP status returned for each kind.
STATUS_BY_KIND: Dict[ViolationKind, int] = {
    ViolationKind.UNKNOWN_REFERENCE: 400,
    ViolationKind.INVALID_INTERVAL: 400,
    ViolationKind.PAST_DATE: 400,
    ViolationKind.SPACE_CONFLICT: 409,
    ViolationKind.QUOTA_EXCEEDED: 409,
    ViolationKind.NOT_FOUND: 404,
    ViolationKind.VALIDATION_ERROR: 422,
    ViolationKind.DUPLICATE_EMAIL: 409,
    ViolationKind.HAS_RESERVATIONS: 409,
    ViolationKind.FORBIDDEN: 403,
}


class BookingError(ValueError):
    """Base class for recoverable, caller-facing errors."""

    kind: ViolationKind = ViolationKind.VALIDATION_ERROR

    def __init__(self, message: str, kind: Optional[ViolationKind] = None, **details: Any) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.message = message
        self.details = {k: v for k, v in details.items() if v is not None}

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class NotFoundError(BookingError):
    kind = ViolationKind.NOT_FOUND


class FieldValidationError(BookingError):
    """A single field failed validation (``field`` names it)."""

    kind = ViolationKind.VALIDATION_ERROR

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message, field=field)
        self.field = field


class AccessDeniedError(BookingError):
    """The caller may not act on this record."""

    kind = ViolationKind.FORBIDDEN


class ConflictError(BookingError):
    """The operation clashes with existing data (duplicate email, dependants)."""

    kind = ViolationKind.DUPLICATE_EMAIL


class AdmissionError(BookingError):
    """A candidate reservation was rejected by the admission engine.

    Carries the ``Violation`` produced by the engine so handlers can
    report the conflicting reservation id or the quota numbers.
    """

    def __init__(self, violation: Any) -> None:
        super().__init__(
            violation.message,
            kind=violation.kind,
            field=violation.field,
            conflictingReservationId=violation.conflicting_reservation_id,
            currentCount=violation.current_count,
            limit=violation.limit,
        )
        self.violation = violation
