from __future__ import annotations

from datetime import date
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from workspace_booking_api.app.core.config import settings
from workspace_booking_api.app.core.db import get_connection, get_cursor, init_db
from workspace_booking_api.app.core.security import create_access_token
from workspace_booking_api.app.core.timeutils import utc_timestamp
from workspace_booking_api.app.services.reservation_service import ReservationService

# A Monday, far enough ahead that real "today" never makes it past.
TODAY = date(2030, 1, 7)


class Store:
    """Direct SQL helpers to seed the database without the admission rules."""

    def add_person(self, email: str = "ana@example.com", role: str = "client") -> int:
        now = utc_timestamp()
        with get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO persons (email, role, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (email, role, now, now),
            )
            return cursor.lastrowid

    def add_space(self, name: str = "Room A", location: str = "Floor 1", capacity: int = 8) -> int:
        now = utc_timestamp()
        with get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO spaces (name, location, capacity, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (name, location, capacity, now, now),
            )
            return cursor.lastrowid

    def add_reservation(self, person_id: int, space_id: int, day: str, start: str, end: str) -> int:
        now = utc_timestamp()
        with get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO reservations "
                "(person_id, space_id, reservation_date, start_time, end_time, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (person_id, space_id, day, start, end, now, now),
            )
            return cursor.lastrowid

    def person_id(self, email: str) -> Optional[int]:
        conn = get_connection()
        try:
            row = conn.execute("SELECT id FROM persons WHERE email = ?", (email,)).fetchone()
            return row["id"] if row else None
        finally:
            conn.close()

    def count(self, table: str, where: str = "", params: tuple = ()) -> int:
        conn = get_connection()
        try:
            return conn.execute(f"SELECT COUNT(*) FROM {table} {where}", params).fetchone()[0]
        finally:
            conn.close()


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Fresh SQLite file and default policy for every test."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "booking.db"))
    monkeypatch.setattr(settings, "weekly_reservation_quota", 3)
    monkeypatch.setattr(settings, "enforce_past_date", True)
    monkeypatch.setattr(settings, "enforce_operating_hours", False)
    monkeypatch.setattr(settings, "operating_hours_start", "08:00")
    monkeypatch.setattr(settings, "operating_hours_end", "20:00")
    monkeypatch.setattr(settings, "admin_static_token", "")
    monkeypatch.setattr(ReservationService, "clock", staticmethod(lambda: TODAY))
    init_db()
    yield tmp_path / "booking.db"


@pytest.fixture
def store() -> Store:
    return Store()


@pytest.fixture
def cursor():
    conn = get_connection()
    try:
        yield conn.cursor()
    finally:
        conn.close()


@pytest.fixture
def client():
    from workspace_booking_api.app.main import app

    with TestClient(app) as test_client:
        yield test_client


def _auth(email: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': email})}"}


@pytest.fixture
def auth():
    return _auth


@pytest.fixture
def admin_headers(store) -> Dict[str, str]:
    store.add_person("admin@example.com", "admin")
    return _auth("admin@example.com")


@pytest.fixture
def client_headers(store) -> Dict[str, str]:
    store.add_person("client@example.com", "client")
    return _auth("client@example.com")
