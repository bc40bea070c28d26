from __future__ import annotations

import sqlite3
import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from lodgedesk import rules
from lodgedesk.clock import format_instant, parse_instant, utc_now
from lodgedesk.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ServerValidationError,
)
from lodgedesk.models import LifecycleAction, ReservationStatus, Room

logger = logging.getLogger(__name__)

_HOLDING_STATUSES = tuple(s.value for s in ReservationStatus if s.holds_room)


class SQLiteBookingAdapter:
    """
    Local booking collaborator on SQLite.

    Enforces the same rules as the remote API: reservations are validated with
    ``lodgedesk.rules``, double bookings of a room are refused, and status
    changes are compare-and-set on the current status so a concurrent change
    surfaces as ``ConflictError``.
    """

    def __init__(
        self,
        db_url: str,
        clock: Callable[[], datetime] = utc_now,
        cancellation_cutoff_days: int = rules.DEFAULT_CANCELLATION_CUTOFF_DAYS,
    ):
        # Format: sqlite:///path
        if db_url.startswith("sqlite:///"):
            self.db_path = db_url.replace("sqlite:///", "", 1)
        else:
            self.db_path = db_url
        self.clock = clock
        self.cancellation_cutoff_days = cancellation_cutoff_days

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"SQLiteBookingAdapter ready. Database: {self.db_path}")

    def _conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            return conn
        except sqlite3.Error as e:
            logger.error(f"Database connection error: {e}")
            raise DatabaseError(f"Could not open database: {e}") from e

    @contextmanager
    def _transaction(self, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        conn = self._conn()
        try:
            with conn:
                if immediate:
                    # Serialises check-then-write sequences across connections.
                    conn.execute("BEGIN IMMEDIATE")
                yield conn
        except sqlite3.IntegrityError as e:
            logger.warning(f"Integrity error: {e}")
            raise ConflictError(f"Conflicting change rejected: {e}") from e
        except sqlite3.Error as e:
            logger.error(f"SQLite error: {e}")
            raise DatabaseError(f"Database operation failed: {e}") from e
        finally:
            conn.close()

    # ------------------------------------
    # Lifecycle
    # ------------------------------------
    def init(self) -> None:
        """Creates the tables if they do not exist."""
        logger.info("Checking/creating database tables...")
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS rooms (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    number TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    capacity INTEGER NOT NULL CHECK (capacity >= 1),
                    status TEXT NOT NULL DEFAULT 'AVAILABLE',
                    notes TEXT,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS guests (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    cpf TEXT NOT NULL UNIQUE,
                    contact_phone TEXT NOT NULL,
                    support_contact TEXT,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS reservations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    room_id INTEGER NOT NULL,
                    num_guests INTEGER NOT NULL,
                    check_in TEXT NOT NULL,
                    check_out TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'CONFIRMED',
                    version INTEGER NOT NULL DEFAULT 1,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY(room_id) REFERENCES rooms(id)
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS reservation_guests (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    reservation_id INTEGER NOT NULL,
                    position INTEGER NOT NULL,
                    guest_id INTEGER,
                    name TEXT,
                    cpf TEXT,
                    contact_phone TEXT,
                    support_contact TEXT,
                    FOREIGN KEY(reservation_id) REFERENCES reservations(id) ON DELETE CASCADE,
                    FOREIGN KEY(guest_id) REFERENCES guests(id)
                )
                """
            )
        logger.info("Tables ready.")

    # ------------------------------------
    # Row helpers
    # ------------------------------------
    @staticmethod
    def _room_dict(row: sqlite3.Row) -> Dict[str, Any]:
        return {
            "id": row["id"],
            "name": row["name"],
            "number": row["number"],
            "description": row["description"],
            "capacity": row["capacity"],
            "status": row["status"],
            "notes": row["notes"],
        }

    @staticmethod
    def _guest_dict(row: sqlite3.Row) -> Dict[str, Any]:
        return {
            "id": row["id"],
            "name": row["name"],
            "cpf": row["cpf"],
            "contactPhone": row["contact_phone"],
            "supportContact": row["support_contact"],
        }

    def _reservation_dict(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Dict[str, Any]:
        room_row = conn.execute("SELECT * FROM rooms WHERE id = ?", (row["room_id"],)).fetchone()
        guest_rows = conn.execute(
            "SELECT * FROM reservation_guests WHERE reservation_id = ? ORDER BY position",
            (row["id"],),
        ).fetchall()
        return {
            "id": row["id"],
            "roomId": row["room_id"],
            "room": self._room_dict(room_row) if room_row else None,
            "numGuests": row["num_guests"],
            "checkIn": row["check_in"],
            "checkOut": row["check_out"],
            "status": row["status"],
            "guests": [
                {
                    "id": g["id"],
                    "reservationId": row["id"],
                    "guestId": g["guest_id"],
                    "name": g["name"],
                    "cpf": g["cpf"],
                    "contactPhone": g["contact_phone"],
                    "supportContact": g["support_contact"],
                }
                for g in guest_rows
            ],
        }

    def _fetch_room(self, conn: sqlite3.Connection, room_id: int) -> Optional[Room]:
        row = conn.execute("SELECT * FROM rooms WHERE id = ?", (room_id,)).fetchone()
        return Room.from_dict(self._room_dict(row)) if row else None

    @staticmethod
    def _has_overlap(
        conn: sqlite3.Connection,
        room_id: int,
        check_in: str,
        check_out: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        placeholders = ", ".join("?" * len(_HOLDING_STATUSES))
        query = (
            f"SELECT 1 FROM reservations WHERE room_id = ? AND status IN ({placeholders}) "
            "AND check_in < ? AND check_out > ?"
        )
        params: List[Any] = [room_id, *_HOLDING_STATUSES, check_out, check_in]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        return conn.execute(query, params).fetchone() is not None

    @staticmethod
    def _insert_guests(conn: sqlite3.Connection, reservation_id: int, guests: List[Dict[str, Any]]) -> None:
        conn.execute("DELETE FROM reservation_guests WHERE reservation_id = ?", (reservation_id,))
        for position, guest in enumerate(guests):
            conn.execute(
                """
                INSERT INTO reservation_guests
                    (reservation_id, position, guest_id, name, cpf, contact_phone, support_contact)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    reservation_id,
                    position,
                    guest.get("guestId"),
                    guest.get("name"),
                    guest.get("cpf"),
                    guest.get("contactPhone"),
                    guest.get("supportContact"),
                ),
            )

    # ------------------------------------
    # Rooms
    # ------------------------------------
    def create_room(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        rules.check_room_data(
            name=payload.get("name"),
            number=payload.get("number"),
            capacity=payload.get("capacity"),
            status=payload.get("status"),
        )
        logger.info(f"Creating room {payload.get('number')} ({payload.get('name')})")
        with self._transaction() as conn:
            cur = conn.execute(
                """
                INSERT INTO rooms (name, number, description, capacity, status, notes)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    payload["name"],
                    payload["number"],
                    payload.get("description") or "",
                    payload["capacity"],
                    payload.get("status") or "AVAILABLE",
                    payload.get("notes"),
                ),
            )
            room_id = cur.lastrowid
        return self.get_room(room_id)

    def get_room(self, room_id: int) -> Optional[Dict[str, Any]]:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM rooms WHERE id = ?", (room_id,)).fetchone()
            return self._room_dict(row) if row else None

    def list_rooms(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        with self._transaction() as conn:
            if status:
                rows = conn.execute("SELECT * FROM rooms WHERE status = ? ORDER BY id", (status,)).fetchall()
            else:
                rows = conn.execute("SELECT * FROM rooms ORDER BY id").fetchall()
            return [self._room_dict(r) for r in rows]

    def list_available_rooms(self, check_in: datetime, check_out: datetime) -> List[Dict[str, Any]]:
        placeholders = ", ".join("?" * len(_HOLDING_STATUSES))
        with self._transaction() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM rooms WHERE id NOT IN (
                    SELECT room_id FROM reservations
                    WHERE status IN ({placeholders}) AND check_in < ? AND check_out > ?
                )
                ORDER BY id
                """,
                (*_HOLDING_STATUSES, format_instant(check_out), format_instant(check_in)),
            ).fetchall()
            return [self._room_dict(r) for r in rows]

    def update_room(self, room_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        columns = ("name", "number", "description", "capacity", "status", "notes")
        data = {k: payload[k] for k in columns if k in payload}
        rules.check_room_data(
            name=data.get("name"),
            number=data.get("number"),
            capacity=data.get("capacity"),
            status=data.get("status"),
            partial=True,
        )
        if self.get_room(room_id) is None:
            raise NotFoundError(f"Room {room_id} not found")
        if data:
            logger.info(f"Updating room {room_id}: {list(data.keys())}")
            with self._transaction() as conn:
                set_clause = ", ".join(f"{k} = ?" for k in data)
                conn.execute(f"UPDATE rooms SET {set_clause} WHERE id = ?", (*data.values(), room_id))
        return self.get_room(room_id)

    def delete_room(self, room_id: int) -> None:
        with self._transaction() as conn:
            cur = conn.execute("DELETE FROM rooms WHERE id = ?", (room_id,))
            if cur.rowcount == 0:
                raise NotFoundError(f"Room {room_id} not found")
        logger.info(f"Room {room_id} deleted")

    # ------------------------------------
    # Reservations
    # ------------------------------------
    def create_reservation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        room_id = payload["roomId"]
        guests = list(payload.get("guests") or [])
        check_in = parse_instant(payload["checkIn"])
        check_out = parse_instant(payload["checkOut"])
        check_in_str, check_out_str = format_instant(check_in), format_instant(check_out)

        with self._transaction(immediate=True) as conn:
            rules.validate_reservation(
                room_id,
                self._fetch_room(conn, room_id),
                payload["numGuests"],
                check_in,
                check_out,
                [g.get("cpf") for g in guests],
            )
            if self._has_overlap(conn, room_id, check_in_str, check_out_str):
                logger.warning(f"Room {room_id} already reserved between {check_in_str} and {check_out_str}")
                raise ConflictError(f"Room {room_id} is already reserved for the requested period")

            cur = conn.execute(
                """
                INSERT INTO reservations (room_id, num_guests, check_in, check_out, status)
                VALUES (?, ?, ?, ?, ?)
                """,
                (room_id, payload["numGuests"], check_in_str, check_out_str, ReservationStatus.CONFIRMED.value),
            )
            reservation_id = cur.lastrowid
            self._insert_guests(conn, reservation_id, guests)

        logger.info(f"Reservation {reservation_id} created for room {room_id}")
        return self.get_reservation(reservation_id)

    def get_reservation(self, reservation_id: int) -> Optional[Dict[str, Any]]:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM reservations WHERE id = ?", (reservation_id,)).fetchone()
            return self._reservation_dict(conn, row) if row else None

    def list_reservations(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        params = params or {}
        clauses: List[str] = []
        values: List[Any] = []
        # startDate/endDate select stays that intersect the window
        if params.get("startDate"):
            clauses.append("check_out > ?")
            values.append(format_instant(parse_instant(params["startDate"])))
        if params.get("endDate"):
            clauses.append("check_in < ?")
            values.append(format_instant(parse_instant(params["endDate"])))
        if params.get("roomId") is not None:
            clauses.append("room_id = ?")
            values.append(params["roomId"])
        if params.get("status"):
            clauses.append("status = ?")
            values.append(params["status"])

        query = "SELECT * FROM reservations"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY check_in, id"
        with self._transaction() as conn:
            rows = conn.execute(query, values).fetchall()
            return [self._reservation_dict(conn, r) for r in rows]

    def update_reservation(self, reservation_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        with self._transaction(immediate=True) as conn:
            row = conn.execute("SELECT * FROM reservations WHERE id = ?", (reservation_id,)).fetchone()
            if row is None:
                raise NotFoundError(f"Reservation {reservation_id} not found")
            if ReservationStatus(row["status"]).is_terminal:
                raise ServerValidationError(
                    f"Reservation {reservation_id} is {row['status']} and can no longer be edited"
                )

            room_id = payload.get("roomId", row["room_id"])
            num_guests = payload.get("numGuests", row["num_guests"])
            check_in = parse_instant(payload.get("checkIn", row["check_in"]))
            check_out = parse_instant(payload.get("checkOut", row["check_out"]))
            if "guests" in payload and payload["guests"] is not None:
                guests = list(payload["guests"])
            else:
                guests = [
                    {"cpf": g["cpf"]}
                    for g in conn.execute(
                        "SELECT cpf FROM reservation_guests WHERE reservation_id = ? ORDER BY position",
                        (reservation_id,),
                    ).fetchall()
                ]

            rules.validate_reservation(
                room_id,
                self._fetch_room(conn, room_id),
                num_guests,
                check_in,
                check_out,
                [g.get("cpf") for g in guests],
            )
            check_in_str, check_out_str = format_instant(check_in), format_instant(check_out)
            if self._has_overlap(conn, room_id, check_in_str, check_out_str, exclude_id=reservation_id):
                raise ConflictError(f"Room {room_id} is already reserved for the requested period")

            conn.execute(
                """
                UPDATE reservations
                SET room_id = ?, num_guests = ?, check_in = ?, check_out = ?, version = version + 1
                WHERE id = ?
                """,
                (room_id, num_guests, check_in_str, check_out_str, reservation_id),
            )
            if "guests" in payload and payload["guests"] is not None:
                self._insert_guests(conn, reservation_id, guests)

        logger.info(f"Reservation {reservation_id} updated")
        return self.get_reservation(reservation_id)

    def transition_reservation(self, reservation_id: int, action: LifecycleAction) -> Dict[str, Any]:
        action = LifecycleAction(action)
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM reservations WHERE id = ?", (reservation_id,)).fetchone()
            if row is None:
                raise NotFoundError(f"Reservation {reservation_id} not found")

            current = ReservationStatus(row["status"])
            target = rules.check_transition(
                current,
                action,
                parse_instant(row["check_in"]),
                self.clock(),
                self.cancellation_cutoff_days,
            )
            cur = conn.execute(
                "UPDATE reservations SET status = ?, version = version + 1 WHERE id = ? AND status = ?",
                (target.value, reservation_id, current.value),
            )
            if cur.rowcount == 0:
                raise ConflictError(f"Reservation {reservation_id} was changed concurrently")

        logger.info(f"Reservation {reservation_id}: {current.value} -> {target.value}")
        return self.get_reservation(reservation_id)

    # ------------------------------------
    # Guest registry
    # ------------------------------------
    def list_guests(self) -> List[Dict[str, Any]]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT * FROM guests ORDER BY name").fetchall()
            return [self._guest_dict(r) for r in rows]

    def create_guest(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        with self._transaction() as conn:
            cur = conn.execute(
                "INSERT INTO guests (name, cpf, contact_phone, support_contact) VALUES (?, ?, ?, ?)",
                (payload["name"], payload["cpf"], payload["contactPhone"], payload.get("supportContact")),
            )
            row = conn.execute("SELECT * FROM guests WHERE id = ?", (cur.lastrowid,)).fetchone()
            return self._guest_dict(row)
