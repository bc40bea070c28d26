from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List

from lodgedesk.clock import parse_instant
from lodgedesk.models.room import Room


class ReservationStatus(str, Enum):
    """
    Reservation lifecycle.

    - CONFIRMED  : initial state, room held for the stay
    - CHECKED_IN : guests arrived
    - CHECKED_OUT: stay finished (terminal)
    - CANCELLED  : cancelled before check-in (terminal)
    """

    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (ReservationStatus.CHECKED_OUT, ReservationStatus.CANCELLED)

    @property
    def holds_room(self) -> bool:
        """Statuses that block the room for other bookings."""
        return self in (ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_IN)


class LifecycleAction(str, Enum):
    # Values double as the API path segment.
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"
    CANCEL = "cancel"


@dataclass
class Guest:
    """Standalone guest record that reservation guests may link to."""

    id: int
    name: str
    cpf: str
    contact_phone: str
    support_contact: Optional[str] = field(default=None)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Guest:
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            cpf=data.get("cpf", ""),
            contact_phone=data.get("contactPhone", ""),
            support_contact=data.get("supportContact"),
        )


@dataclass
class ReservationGuest:
    """A guest entry embedded in a reservation's guest list."""

    name: Optional[str] = field(default=None)
    cpf: Optional[str] = field(default=None)
    contact_phone: Optional[str] = field(default=None)
    support_contact: Optional[str] = field(default=None)
    guest_id: Optional[int] = field(default=None)
    id: Optional[int] = field(default=None)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ReservationGuest:
        # Linked entries may only carry the nested guest record.
        linked = data.get("guest") or {}
        return cls(
            id=data.get("id"),
            guest_id=data.get("guestId"),
            name=data.get("name") or linked.get("name"),
            cpf=data.get("cpf") or linked.get("cpf"),
            contact_phone=data.get("contactPhone") or linked.get("contactPhone"),
            support_contact=data.get("supportContact") or linked.get("supportContact"),
        )


@dataclass
class Reservation:
    """A booking of one room for one contiguous interval for a fixed set of guests."""

    id: int
    room_id: int
    num_guests: int
    check_in: datetime
    check_out: datetime
    status: ReservationStatus = field(default=ReservationStatus.CONFIRMED)
    guests: List[ReservationGuest] = field(default_factory=list)
    room: Optional[Room] = field(default=None)

    def get_reference_code(self) -> str:
        """Reference code in 'RSV-000123' format."""
        return f"RSV-{self.id:06d}"

    def is_confirmed(self) -> bool:
        return self.status == ReservationStatus.CONFIRMED

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Reservation:
        room_data = data.get("room")
        room = Room.from_dict(room_data) if room_data else None
        room_id = data.get("roomId")
        if room_id is None and room is not None:
            room_id = room.id
        return cls(
            id=data["id"],
            room_id=room_id,
            num_guests=data["numGuests"],
            check_in=parse_instant(data["checkIn"]),
            check_out=parse_instant(data["checkOut"]),
            status=ReservationStatus(data.get("status", ReservationStatus.CONFIRMED.value)),
            guests=[ReservationGuest.from_dict(g) for g in data.get("guests") or []],
            room=room,
        )
