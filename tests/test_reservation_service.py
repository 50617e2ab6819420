import asyncio

import pytest

from workspace_booking_api.app.core.errors import (
    AccessDeniedError,
    AdmissionError,
    BookingError,
    ConflictError,
    FieldValidationError,
    NotFoundError,
    ViolationKind,
)
from workspace_booking_api.app.schemas.person import PersonCreate, PersonUpdate
from workspace_booking_api.app.schemas.reservation import ReservationCreate, ReservationUpdate
from workspace_booking_api.app.schemas.space import SpaceCreate, SpaceUpdate
from workspace_booking_api.app.services.person_service import PersonService
from workspace_booking_api.app.services.reservation_service import ReservationService
from workspace_booking_api.app.services.space_service import SpaceService


def run(coro):
    return asyncio.run(coro)


def book(person_id, space_id, day="2030-01-08", start="09:00", end="10:00"):
    return run(
        ReservationService.create_reservation(
            ReservationCreate(
                person_id=person_id,
                space_id=space_id,
                reservation_date=day,
                start_time=start,
                end_time=end,
            )
        )
    )


@pytest.fixture
def person(store):
    return store.add_person()


@pytest.fixture
def room(store):
    return store.add_space()


class TestReservations:
    def test_create_stores_normalised_times(self, person, room):
        reservation = book(person, room, start="9:00", end="9:30")
        assert reservation.start_time == "09:00"
        assert reservation.end_time == "09:30"
        assert reservation.person.email == "ana@example.com"
        assert reservation.space.name == "Room A"

    def test_rejected_create_writes_nothing(self, store, person, room):
        book(person, room)
        with pytest.raises(AdmissionError) as excinfo:
            book(person, room, start="09:30", end="10:30")
        assert excinfo.value.kind is ViolationKind.SPACE_CONFLICT
        assert store.count("reservations") == 1

    def test_create_requires_person(self, room):
        with pytest.raises(FieldValidationError):
            book(None, room)

    def test_cancelling_frees_interval_and_quota(self, store, person, room):
        first = book(person, room, day="2030-01-08")
        book(person, room, day="2030-01-09")
        book(person, room, day="2030-01-10")
        with pytest.raises(AdmissionError) as excinfo:
            book(person, room, day="2030-01-11")
        assert excinfo.value.details == {"currentCount": 3, "limit": 3}

        removed = run(ReservationService.delete_reservation(first.id))
        assert removed.id == first.id

        book(person, room, day="2030-01-11")
        book(store.add_person("bo@example.com"), room, day="2030-01-08")

    def test_update_unchanged_is_accepted(self, person, room):
        book(person, room, day="2030-01-08")
        book(person, room, day="2030-01-09")
        third = book(person, room, day="2030-01-10")

        updated = run(ReservationService.update_reservation(third.id, ReservationUpdate()))

        assert updated.reservation_date == "2030-01-10"
        assert updated.start_time == "09:00"

    def test_update_merges_partial_fields(self, person, room):
        reservation = book(person, room)
        updated = run(ReservationService.update_reservation(reservation.id, ReservationUpdate(end_time="11:30")))
        assert (updated.start_time, updated.end_time) == ("09:00", "11:30")

    def test_update_conflict_keeps_stored_row(self, person, room):
        book(person, room, start="11:00", end="12:00")
        reservation = book(person, room)
        with pytest.raises(AdmissionError):
            run(ReservationService.update_reservation(reservation.id, ReservationUpdate(end_time="11:30")))
        assert run(ReservationService.update_reservation(reservation.id, ReservationUpdate())).end_time == "10:00"

    def test_owner_scope_is_checked_on_the_stored_row(self, store, person, room):
        reservation = book(person, room)
        other = store.add_person("bo@example.com")
        run(ReservationService.update_reservation(reservation.id, ReservationUpdate(person_id=other)))

        with pytest.raises(AccessDeniedError) as excinfo:
            run(ReservationService.delete_reservation(reservation.id, owner_id=person))
        assert excinfo.value.status_code == 403
        with pytest.raises(AccessDeniedError):
            run(ReservationService.update_reservation(reservation.id, ReservationUpdate(end_time="11:00"), owner_id=person))
        assert store.count("reservations", "WHERE person_id = ?", (other,)) == 1

        assert run(ReservationService.delete_reservation(reservation.id, owner_id=other)).id == reservation.id

    def test_owner_cannot_hand_reservation_to_someone_else(self, store, person, room):
        reservation = book(person, room)
        other = store.add_person("bo@example.com")
        with pytest.raises(AccessDeniedError):
            run(ReservationService.update_reservation(reservation.id, ReservationUpdate(person_id=other), owner_id=person))
        assert store.count("reservations", "WHERE person_id = ?", (person,)) == 1

    def test_update_and_delete_missing(self):
        with pytest.raises(NotFoundError):
            run(ReservationService.update_reservation(99, ReservationUpdate()))
        with pytest.raises(NotFoundError):
            run(ReservationService.delete_reservation(99))

    def test_unknown_reference(self, person):
        with pytest.raises(AdmissionError) as excinfo:
            book(person, 42)
        assert excinfo.value.kind is ViolationKind.UNKNOWN_REFERENCE
        assert excinfo.value.status_code == 400


class TestPersons:
    def test_email_is_normalised_and_unique(self):
        person = run(PersonService.create_person(PersonCreate(email="  Ana@Example.COM ")))
        assert person.email == "ana@example.com"
        assert person.role == "client"
        with pytest.raises(ConflictError) as excinfo:
            run(PersonService.create_person(PersonCreate(email="ANA@example.com", role="admin")))
        assert excinfo.value.kind is ViolationKind.DUPLICATE_EMAIL

    @pytest.mark.parametrize("email", ["", "   ", "not-an-email", "a@b", "a b@c.d"])
    def test_invalid_email(self, email):
        with pytest.raises(FieldValidationError) as excinfo:
            run(PersonService.create_person(PersonCreate(email=email)))
        assert excinfo.value.field == "email"

    def test_update_rejects_taken_email(self, store):
        store.add_person("bo@example.com")
        ana = store.add_person("ana@example.com")
        with pytest.raises(ConflictError):
            run(PersonService.update_person(ana, PersonUpdate(email="Bo@example.com")))
        updated = run(PersonService.update_person(ana, PersonUpdate(email="ANA@example.com", role="admin")))
        assert (updated.email, updated.role) == ("ana@example.com", "admin")

    def test_lookup_by_email_ignores_case(self, store):
        ana = store.add_person("ana@example.com")
        assert run(PersonService.get_person_by_email("ANA@EXAMPLE.com")).id == ana
        with pytest.raises(NotFoundError):
            run(PersonService.get_person_by_email("nobody@example.com"))

    def test_delete_is_blocked_by_reservations(self, store, person, room):
        book(person, room)
        with pytest.raises(ConflictError) as excinfo:
            run(PersonService.delete_person(person))
        assert excinfo.value.kind is ViolationKind.HAS_RESERVATIONS
        assert store.count("persons") == 1

        result = run(PersonService.delete_person(person, cascade=True))
        assert result.deleted_reservations == 1
        assert store.count("persons") == 0
        assert store.count("reservations") == 0

    def test_delete_without_reservations(self, store, person):
        assert run(PersonService.delete_person(person)).deleted_reservations == 0
        with pytest.raises(NotFoundError):
            run(PersonService.get_person(person))


class TestSpaces:
    def test_create_trims_and_validates(self):
        space = run(SpaceService.create_space(SpaceCreate(name="  Focus Room ", location="Floor 2", capacity=4)))
        assert space.name == "Focus Room"
        assert space.description is None

    @pytest.mark.parametrize(
        "payload,field",
        [
            ({"name": "A", "location": "Floor 2", "capacity": 4}, "name"),
            ({"name": "Room", "location": " ", "capacity": 4}, "location"),
            ({"name": "Room", "location": "Floor 2", "capacity": 0}, "capacity"),
            ({"name": "Room", "location": "Floor 2", "capacity": 1001}, "capacity"),
            ({"name": "Room", "location": "Floor 2", "capacity": 4, "description": "x" * 501}, "description"),
        ],
    )
    def test_invalid_fields(self, payload, field):
        with pytest.raises(BookingError) as excinfo:
            run(SpaceService.create_space(SpaceCreate(**payload)))
        assert excinfo.value.details == {"field": field}
        assert excinfo.value.status_code == 422

    def test_update_space(self, room):
        updated = run(SpaceService.update_space(room, SpaceUpdate(capacity=12)))
        assert updated.capacity == 12
        assert updated.name == "Room A"

    def test_delete_cascades_reservations(self, store, person, room):
        other_room = store.add_space("Room B")
        book(person, room, day="2030-01-08")
        book(person, room, day="2030-01-09")
        book(person, other_room, day="2030-01-09")

        result = run(SpaceService.delete_space(room))

        assert result.deleted_reservations == 2
        assert store.count("reservations") == 1
        assert store.count("reservations", "WHERE space_id = ?", (room,)) == 0

    def test_availability(self, store, person, room):
        from datetime import date

        book(person, room, start="09:00", end="10:00")
        book(store.add_person("bo@example.com"), room, start="13:00", end="14:30")

        availability = run(SpaceService.availability(room, date(2030, 1, 8)))

        assert [(slot.start_time, slot.end_time) for slot in availability.booked] == [
            ("09:00", "10:00"),
            ("13:00", "14:30"),
        ]
        assert [(slot.start_time, slot.end_time) for slot in availability.free] == [
            ("08:00", "09:00"),
            ("10:00", "13:00"),
            ("14:30", "20:00"),
        ]

    def test_availability_of_missing_space(self):
        from datetime import date

        with pytest.raises(NotFoundError):
            run(SpaceService.availability(5, date(2030, 1, 8)))
