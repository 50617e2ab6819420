import asyncio
from datetime import date
from types import SimpleNamespace

import pytest

from workspace_booking_api.app.core.errors import FieldValidationError, NotFoundError
from workspace_booking_api.app.services.query_service import (
    Page,
    QueryService,
    ReservationFilter,
    busiest_spaces,
    count_in_current_week,
    count_on,
    most_active_clients,
    upcoming,
    weekly_activity_ratio,
)
from workspace_booking_api.app.services.statistics_service import StatisticsService

TODAY = date(2030, 1, 7)


def run(coro):
    return asyncio.run(coro)


def res(day, start="09:00", person_id=1, space_id=1):
    return SimpleNamespace(reservation_date=day, start_time=start, person_id=person_id, space_id=space_id)


@pytest.fixture
def seeded(store):
    """25 reservations spread over five days and two spaces."""
    ana = store.add_person("ana@example.com")
    bo = store.add_person("bo@example.com")
    room_a = store.add_space("Room A")
    room_b = store.add_space("Room B")
    for n in range(25):
        day = f"2030-01-{8 + n % 5:02d}"
        start = f"{8 + n // 5:02d}:00"
        end = f"{9 + n // 5:02d}:00"
        store.add_reservation(ana if n % 2 else bo, room_a if n % 3 else room_b, day, start, end)
    return SimpleNamespace(ana=ana, bo=bo, room_a=room_a, room_b=room_b)


class TestListing:
    def test_second_page(self, seeded):
        page = run(QueryService.list_reservations(page=2, page_size=10))

        assert len(page.items) == 10
        assert (page.total, page.total_pages) == (25, 3)
        everything = run(QueryService.list_reservations(page=1, page_size=100)).items
        assert [r.id for r in page.items] == [r.id for r in everything[10:20]]

    def test_ordered_by_date_then_start_then_id(self, seeded):
        items = run(QueryService.list_reservations(page=1, page_size=100)).items
        keys = [(r.reservation_date, r.start_time, r.id) for r in items]
        assert keys == sorted(keys)

    def test_page_past_the_end_is_empty(self, seeded):
        page = run(QueryService.list_reservations(page=9, page_size=10))
        assert page.items == []
        assert page.total == 25

    def test_empty_store(self):
        page = run(QueryService.list_reservations())
        assert (page.total, page.total_pages, page.items) == (0, 0, [])

    def test_filters(self, seeded):
        by_person = run(QueryService.list_reservations_for_person(seeded.ana, page_size=100))
        assert by_person.total == 12
        assert {r.person_id for r in by_person.items} == {seeded.ana}

        filters = ReservationFilter(space_id=seeded.room_b, date_from="2030-01-09", date_to="2030-01-10")
        page = run(QueryService.list_reservations(page_size=100, filters=filters))
        assert page.items
        assert all(r.space_id == seeded.room_b for r in page.items)
        assert all("2030-01-09" <= r.reservation_date <= "2030-01-10" for r in page.items)

    def test_bad_filter_date(self):
        with pytest.raises(FieldValidationError):
            run(QueryService.list_reservations(filters=ReservationFilter(date_from="tomorrow")))

    def test_get_missing_reservation(self):
        with pytest.raises(NotFoundError):
            run(QueryService.get_reservation(1))

    def test_pagination_model(self):
        pagination = Page(items=[], page=3, page_size=10, total=21).pagination
        assert pagination.model_dump(by_alias=True) == {"page": 3, "pageSize": 10, "total": 21, "totalPages": 3}


class TestAggregates:
    def test_upcoming_skips_past_and_sorts(self):
        reservations = [
            res("2030-01-09", "10:00"),
            res("2030-01-06"),
            res("2030-01-07", "15:00"),
            res("2030-01-07", "08:00"),
        ]
        result = upcoming(reservations, TODAY, limit=2)
        assert [(r.reservation_date, r.start_time) for r in result] == [("2030-01-07", "08:00"), ("2030-01-07", "15:00")]

    def test_busiest_spaces_keep_input_order_on_ties(self):
        spaces = [SimpleNamespace(id=n) for n in (1, 2, 3, 4)]
        reservations = [res("2030-01-07", space_id=s) for s in (2, 3, 3, 4, 2)]
        ranked = busiest_spaces(spaces, reservations, top_n=3)
        assert [(space.id, count) for space, count in ranked] == [(2, 2), (3, 2), (4, 1)]

    def test_most_active_clients_ignore_admins(self):
        persons = [
            SimpleNamespace(id=1, role="admin"),
            SimpleNamespace(id=2, role="client"),
            SimpleNamespace(id=3, role="client"),
        ]
        reservations = [res("2030-01-07", person_id=p) for p in (1, 1, 1, 3)]
        ranked = most_active_clients(persons, reservations)
        assert [(person.id, count) for person, count in ranked] == [(3, 1), (2, 0)]

    def test_counts(self):
        reservations = [res("2030-01-06"), res("2030-01-07"), res("2030-01-07"), res("2030-01-13"), res("2030-01-14")]
        assert count_on(reservations, TODAY) == 2
        assert count_in_current_week(reservations, TODAY) == 3

    def test_weekly_activity_ratio(self):
        assert weekly_activity_ratio([], TODAY) == 0
        assert weekly_activity_ratio([res("2030-01-08"), res("2030-01-20")], TODAY) == 50
        # 1 of 8 is 12.5%, rounded half up
        assert weekly_activity_ratio([res("2030-01-08")] + [res("2030-02-01")] * 7, TODAY) == 13
        assert weekly_activity_ratio([res("2030-01-08")] * 3, TODAY) == 100


def test_dashboard(store):
    admin = store.add_person("admin@example.com", "admin")
    ana = store.add_person("ana@example.com")
    room = store.add_space("Room A")
    store.add_space("Room B")
    store.add_reservation(admin, room, "2030-01-07", "09:00", "10:00")
    store.add_reservation(ana, room, "2030-01-07", "10:00", "11:00")
    store.add_reservation(ana, room, "2030-01-15", "10:00", "11:00")
    store.add_reservation(ana, room, "2030-01-01", "10:00", "11:00")

    dashboard = run(StatisticsService.dashboard(today=TODAY))

    assert (dashboard.total_persons, dashboard.total_spaces, dashboard.total_reservations) == (2, 2, 4)
    assert dashboard.today_reservations == 2
    assert dashboard.this_week_reservations == 2
    assert dashboard.weekly_activity_ratio == 50
    assert [r.reservation_date for r in dashboard.upcoming] == ["2030-01-07", "2030-01-07", "2030-01-15"]
    assert [(s.name, s.reservation_count) for s in dashboard.busiest_spaces] == [("Room A", 4), ("Room B", 0)]
    assert [(c.email, c.reservation_count) for c in dashboard.most_active_clients] == [("ana@example.com", 3)]


def test_store_primitives_share_a_cursor(store, cursor):
    from workspace_booking_api.app.services.query_service import find_reservation, query_reservations
    from workspace_booking_api.app.services.reservation_service import delete_reservation

    ana = store.add_person("ana@example.com")
    room = store.add_space()
    first = store.add_reservation(ana, room, "2030-01-08", "09:00", "10:00")
    store.add_reservation(ana, room, "2030-01-08", "10:00", "11:00")

    page = query_reservations(cursor, ReservationFilter(space_id=room), page=1, page_size=1)
    assert [r.id for r in page.items] == [first]
    assert page.total_pages == 2

    assert delete_reservation(cursor, first) is True
    assert find_reservation(cursor, first) is None
    assert delete_reservation(cursor, first) is False
    cursor.connection.rollback()
    assert find_reservation(cursor, first) is not None
