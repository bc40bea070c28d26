"""
Tests for the local SQLite booking collaborator.
"""
import sqlite3

import pytest

from conftest import NOW
from lodgedesk.adapters.sqlite_adapter import SQLiteBookingAdapter
from lodgedesk.exceptions import (
    CapacityExceededError,
    CancellationWindowExpiredError,
    ConflictError,
    DuplicateGuestIdError,
    IllegalTransitionError,
    InvalidRoomError,
    NotFoundError,
    RoomNotFoundError,
    ServerValidationError,
)
from lodgedesk.models import LifecycleAction


def reservation_payload(room_id, check_in="2024-06-01T00:00:00.000Z", check_out="2024-06-03T00:00:00.000Z", cpfs=("12345678901", "10987654321")):
    return {
        "roomId": room_id,
        "numGuests": len(cpfs),
        "checkIn": check_in,
        "checkOut": check_out,
        "guests": [
            {"name": f"Hóspede {i}", "cpf": cpf, "contactPhone": "11999990000"}
            for i, cpf in enumerate(cpfs, start=1)
        ],
    }


# ============================================================================
# Rooms
# ============================================================================

class TestRooms:

    def test_crud_flow(self, db):
        rooms = db.list_rooms()
        assert len(rooms) == 4

        created = db.create_room({"name": "Chalé", "number": "401", "capacity": 5, "notes": "Vista para o mar"})
        assert created["status"] == "AVAILABLE"
        assert db.get_room(created["id"])["notes"] == "Vista para o mar"

        updated = db.update_room(created["id"], {"status": "CLEANING", "capacity": 6})
        assert updated["status"] == "CLEANING"
        assert updated["capacity"] == 6

        db.delete_room(created["id"])
        assert db.get_room(created["id"]) is None

    def test_list_by_status(self, db):
        cleaning = db.list_rooms(status="CLEANING")
        assert [r["number"] for r in cleaning] == ["301"]

    def test_capacity_must_be_positive(self, db):
        with pytest.raises(InvalidRoomError):
            db.create_room({"name": "Closet", "number": "000", "capacity": 0})

    def test_update_missing_room(self, db):
        with pytest.raises(NotFoundError):
            db.update_room(9999, {"name": "Nada"})

    def test_delete_room_with_reservations_conflicts(self, db, standard_room):
        db.create_reservation(reservation_payload(standard_room["id"]))
        with pytest.raises(ConflictError):
            db.delete_room(standard_room["id"])


# ============================================================================
# Reservations
# ============================================================================

class TestCreateReservation:

    def test_create_and_read_back(self, db, standard_room):
        created = db.create_reservation(reservation_payload(standard_room["id"]))

        assert isinstance(created["id"], int)
        assert created["status"] == "CONFIRMED"
        assert created["checkIn"] == "2024-06-01T00:00:00.000Z"
        assert created["room"]["number"] == "101"
        assert [g["cpf"] for g in created["guests"]] == ["12345678901", "10987654321"]
        assert db.get_reservation(created["id"]) == created

    def test_rules_are_enforced_locally(self, db, standard_room):
        with pytest.raises(CapacityExceededError):
            db.create_reservation(reservation_payload(standard_room["id"], cpfs=("1", "2", "3")))
        with pytest.raises(DuplicateGuestIdError):
            db.create_reservation(reservation_payload(standard_room["id"], cpfs=("1", "1")))
        with pytest.raises(RoomNotFoundError):
            db.create_reservation(reservation_payload(9999))

    def test_overlapping_booking_conflicts(self, db, standard_room):
        db.create_reservation(reservation_payload(standard_room["id"]))
        with pytest.raises(ConflictError):
            db.create_reservation(
                reservation_payload(
                    standard_room["id"],
                    check_in="2024-06-02T00:00:00.000Z",
                    check_out="2024-06-05T00:00:00.000Z",
                    cpfs=("55555555555",),
                )
            )

    def test_back_to_back_booking_allowed(self, db, standard_room):
        db.create_reservation(reservation_payload(standard_room["id"]))
        second = db.create_reservation(
            reservation_payload(
                standard_room["id"],
                check_in="2024-06-03T00:00:00.000Z",
                check_out="2024-06-04T00:00:00.000Z",
                cpfs=("55555555555",),
            )
        )
        assert second["status"] == "CONFIRMED"

    def test_date_only_instants_are_normalised(self, db, standard_room):
        created = db.create_reservation(
            reservation_payload(standard_room["id"], check_in="2024-07-10", check_out="2024-07-12")
        )
        assert created["checkIn"] == "2024-07-10T00:00:00.000Z"
        assert created["checkOut"] == "2024-07-12T00:00:00.000Z"


class TestAvailability:

    def test_reserved_room_is_excluded_only_when_overlapping(self, db, standard_room):
        from lodgedesk.clock import parse_instant

        db.create_reservation(reservation_payload(standard_room["id"]))

        overlapping = db.list_available_rooms(parse_instant("2024-06-02"), parse_instant("2024-06-04"))
        assert standard_room["id"] not in [r["id"] for r in overlapping]

        later = db.list_available_rooms(parse_instant("2024-06-10"), parse_instant("2024-06-12"))
        assert standard_room["id"] in [r["id"] for r in later]

    def test_cancelled_reservation_frees_the_room(self, db, standard_room):
        from lodgedesk.clock import parse_instant

        created = db.create_reservation(reservation_payload(standard_room["id"]))
        db.transition_reservation(created["id"], LifecycleAction.CANCEL)

        rooms = db.list_available_rooms(parse_instant("2024-06-01"), parse_instant("2024-06-03"))
        assert standard_room["id"] in [r["id"] for r in rooms]


class TestListReservations:

    def test_filters(self, db, standard_room):
        deluxe = next(r for r in db.list_rooms() if r["number"] == "201")
        first = db.create_reservation(reservation_payload(standard_room["id"]))
        second = db.create_reservation(
            reservation_payload(deluxe["id"], check_in="2024-06-20", check_out="2024-06-22", cpfs=("1",))
        )
        db.transition_reservation(second["id"], LifecycleAction.CHECK_IN)

        assert [r["id"] for r in db.list_reservations()] == [first["id"], second["id"]]
        assert [r["id"] for r in db.list_reservations({"roomId": deluxe["id"]})] == [second["id"]]
        assert [r["id"] for r in db.list_reservations({"status": "CHECKED_IN"})] == [second["id"]]
        window = db.list_reservations({"startDate": "2024-06-02", "endDate": "2024-06-10"})
        assert [r["id"] for r in window] == [first["id"]]


class TestUpdateReservation:

    def test_change_dates_and_guests(self, db, standard_room):
        created = db.create_reservation(reservation_payload(standard_room["id"]))
        updated = db.update_reservation(
            created["id"],
            {
                "checkIn": "2024-06-05",
                "checkOut": "2024-06-08",
                "numGuests": 1,
                "guests": [{"name": "Ana", "cpf": "99999999999", "contactPhone": "11988887777"}],
            },
        )
        assert updated["checkIn"] == "2024-06-05T00:00:00.000Z"
        assert updated["numGuests"] == 1
        assert [g["name"] for g in updated["guests"]] == ["Ana"]

    def test_cannot_edit_cancelled(self, db, standard_room):
        created = db.create_reservation(reservation_payload(standard_room["id"]))
        db.transition_reservation(created["id"], LifecycleAction.CANCEL)
        with pytest.raises(ServerValidationError):
            db.update_reservation(created["id"], {"checkOut": "2024-06-04"})


class TestTransitions:

    def test_full_lifecycle(self, db, standard_room):
        created = db.create_reservation(reservation_payload(standard_room["id"]))
        checked_in = db.transition_reservation(created["id"], LifecycleAction.CHECK_IN)
        assert checked_in["status"] == "CHECKED_IN"
        checked_out = db.transition_reservation(created["id"], "check-out")
        assert checked_out["status"] == "CHECKED_OUT"
        with pytest.raises(IllegalTransitionError):
            db.transition_reservation(created["id"], LifecycleAction.CANCEL)

    def test_late_cancellation_rejected(self, db, standard_room):
        # fixed clock is 2024-05-20 12:00 UTC
        created = db.create_reservation(
            reservation_payload(standard_room["id"], check_in="2024-05-21T12:00:00Z", check_out="2024-05-23T12:00:00Z")
        )
        with pytest.raises(CancellationWindowExpiredError):
            db.transition_reservation(created["id"], LifecycleAction.CANCEL)
        assert db.get_reservation(created["id"])["status"] == "CONFIRMED"

    def test_missing_reservation(self, db):
        with pytest.raises(NotFoundError):
            db.transition_reservation(9999, LifecycleAction.CHECK_IN)

    def test_concurrent_status_change_conflicts(self, db, standard_room):
        created = db.create_reservation(reservation_payload(standard_room["id"]))

        def clock_with_concurrent_check_in():
            # Another desk checks the guests in between our read and our write.
            conn = sqlite3.connect(db.db_path)
            with conn:
                conn.execute("UPDATE reservations SET status = 'CHECKED_IN' WHERE id = ?", (created["id"],))
            conn.close()
            return NOW

        racing = SQLiteBookingAdapter(f"sqlite:///{db.db_path}", clock=clock_with_concurrent_check_in)
        with pytest.raises(ConflictError):
            racing.transition_reservation(created["id"], LifecycleAction.CANCEL)
        assert db.get_reservation(created["id"])["status"] == "CHECKED_IN"


class TestGuests:

    def test_registry(self, db):
        guest = db.create_guest({"name": "Maria", "cpf": "12345678901", "contactPhone": "11911112222"})
        assert guest["cpf"] == "12345678901"
        assert [g["name"] for g in db.list_guests()] == ["Maria"]

    def test_cpf_is_unique_in_registry(self, db):
        db.create_guest({"name": "Maria", "cpf": "12345678901", "contactPhone": "11911112222"})
        with pytest.raises(ConflictError):
            db.create_guest({"name": "Outra", "cpf": "12345678901", "contactPhone": "11933334444"})
