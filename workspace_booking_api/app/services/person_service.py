"""
Business logic for persons.

Emails are the login identity, so they are normalised (trimmed,
lower-cased) before storage and compared case-insensitively.  A person
who still owns reservations cannot be deleted unless the caller asks
for the reservations to be removed with them.
"""

import logging
import re
import sqlite3
from typing import Any, Dict, List, Optional

from workspace_booking_api.app.core.db import get_connection, transaction
from workspace_booking_api.app.core.errors import (
    ConflictError,
    FieldValidationError,
    NotFoundError,
    ViolationKind,
)
from workspace_booking_api.app.core.security import ROLES
from workspace_booking_api.app.core.timeutils import utc_timestamp
from workspace_booking_api.app.schemas.person import (
    PersonCreate,
    PersonDeleteResult,
    PersonRead,
    PersonUpdate,
)

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PERSON_COLUMNS = "id, email, role, created_at, updated_at"


def normalize_email(value: Optional[str]) -> str:
    email = (value or "").strip().lower()
    if not email:
        raise FieldValidationError("email", "Email is required")
    if not EMAIL_RE.match(email):
        raise FieldValidationError("email", "Please enter a valid email address")
    return email


def _validate_role(role: str) -> str:
    if role not in ROLES:
        raise FieldValidationError("role", f"Role must be one of {', '.join(ROLES)}")
    return role


def _row_to_person(row: sqlite3.Row) -> PersonRead:
    return PersonRead(
        id=row["id"],
        email=row["email"],
        role=row["role"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def find_person(cursor: sqlite3.Cursor, person_id: int) -> Optional[sqlite3.Row]:
    return cursor.execute(
        f"SELECT {PERSON_COLUMNS} FROM persons WHERE id = ?", (person_id,)
    ).fetchone()


def _email_taken(cursor: sqlite3.Cursor, email: str, exclude_id: Optional[int] = None) -> bool:
    row = cursor.execute(
        "SELECT id FROM persons WHERE email = ? COLLATE NOCASE", (email,)
    ).fetchone()
    return bool(row) and row["id"] != exclude_id


class PersonService:
    """Service for managing persons (admins and clients)."""

    @classmethod
    async def create_person(cls, data: PersonCreate) -> PersonRead:
        email = normalize_email(data.email)
        role = _validate_role(data.role)
        now = utc_timestamp()
        with transaction() as cursor:
            if _email_taken(cursor, email):
                raise ConflictError(f"Email {email} is already in use", kind=ViolationKind.DUPLICATE_EMAIL, field="email")
            cursor.execute(
                "INSERT INTO persons (email, role, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (email, role, now, now),
            )
            person_id = cursor.lastrowid
            row = find_person(cursor, person_id)
        logger.info("Created person %s (%s, %s)", person_id, email, role)
        return _row_to_person(row)

    @classmethod
    async def list_persons(cls) -> List[PersonRead]:
        conn = get_connection()
        try:
            rows = conn.execute(f"SELECT {PERSON_COLUMNS} FROM persons ORDER BY id").fetchall()
            return [_row_to_person(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_person(cls, person_id: int) -> PersonRead:
        conn = get_connection()
        try:
            row = find_person(conn.cursor(), person_id)
        finally:
            conn.close()
        if not row:
            raise NotFoundError(f"Person {person_id} not found")
        return _row_to_person(row)

    @classmethod
    async def get_person_by_email(cls, email: str) -> PersonRead:
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {PERSON_COLUMNS} FROM persons WHERE email = ? COLLATE NOCASE",
                ((email or "").strip(),),
            ).fetchone()
        finally:
            conn.close()
        if not row:
            raise NotFoundError(f"Person {email} not found")
        return _row_to_person(row)

    @classmethod
    async def update_person(cls, person_id: int, data: PersonUpdate) -> PersonRead:
        updates: Dict[str, Any] = {}
        if data.email is not None:
            updates["email"] = normalize_email(data.email)
        if data.role is not None:
            updates["role"] = _validate_role(data.role)
        with transaction() as cursor:
            if not find_person(cursor, person_id):
                raise NotFoundError(f"Person {person_id} not found")
            if "email" in updates and _email_taken(cursor, updates["email"], exclude_id=person_id):
                raise ConflictError(
                    f"Email {updates['email']} is already in use",
                    kind=ViolationKind.DUPLICATE_EMAIL,
                    field="email",
                )
            if updates:
                updates["updated_at"] = utc_timestamp()
                assignments = ", ".join(f"{column} = ?" for column in updates)
                cursor.execute(
                    f"UPDATE persons SET {assignments} WHERE id = ?",
                    (*updates.values(), person_id),
                )
                logger.info("Updated person %s: %s", person_id, sorted(updates))
            row = find_person(cursor, person_id)
        return _row_to_person(row)

    @classmethod
    async def delete_person(cls, person_id: int, cascade: bool = False) -> PersonDeleteResult:
        """Delete a person.

        Without ``cascade`` the call fails with ``HAS_RESERVATIONS`` while
        any reservation references the person.  With ``cascade`` those
        reservations are removed in the same transaction and their count
        is returned.
        """
        with transaction() as cursor:
            if not find_person(cursor, person_id):
                raise NotFoundError(f"Person {person_id} not found")
            owned = cursor.execute(
                "SELECT COUNT(*) FROM reservations WHERE person_id = ?", (person_id,)
            ).fetchone()[0]
            if owned and not cascade:
                raise ConflictError(
                    f"Person {person_id} still has {owned} reservation(s)",
                    kind=ViolationKind.HAS_RESERVATIONS,
                    currentCount=owned,
                )
            if owned:
                cursor.execute("DELETE FROM reservations WHERE person_id = ?", (person_id,))
            cursor.execute("DELETE FROM persons WHERE id = ?", (person_id,))
        logger.info("Deleted person %s with %s reservation(s)", person_id, owned)
        return PersonDeleteResult(id=person_id, deleted_reservations=owned)
