"""
Input schemas for data sent to the booking API.

These only coerce types; booking rules live in ``lodgedesk.rules`` so that a
bad guest count or date order is reported as a booking error, not a schema error.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from lodgedesk.clock import format_instant, parse_instant
from lodgedesk.models import ReservationStatus, RoomStatus


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        """camelCase JSON-ready dict without unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class _WithInstants(_Payload):
    @field_validator("check_in", "check_out", "start_date", "end_date", mode="before", check_fields=False)
    @classmethod
    def _parse_instant(cls, value: Any) -> Any:
        if isinstance(value, (str, datetime)):
            return parse_instant(value)
        return value

    @field_serializer("check_in", "check_out", "start_date", "end_date", check_fields=False)
    def _format_instant(self, value: Optional[datetime]) -> Optional[str]:
        return format_instant(value) if value is not None else None


# --- RESERVATIONS ---

class GuestInput(_Payload):
    """Guest entry of a reservation being created or edited."""
    guest_id: Optional[int] = Field(default=None, alias="guestId")
    name: Optional[str] = Field(default=None)
    cpf: Optional[str] = Field(default=None, description="CPF, 11 digits expected")
    contact_phone: Optional[str] = Field(default=None, alias="contactPhone")
    support_contact: Optional[str] = Field(default=None, alias="supportContact")


class ReservationCandidate(_WithInstants):
    """A reservation as gathered by the operator, before submission."""
    room_id: int = Field(alias="roomId")
    num_guests: int = Field(alias="numGuests")
    check_in: datetime = Field(alias="checkIn")
    check_out: datetime = Field(alias="checkOut")
    guests: List[GuestInput] = Field(default_factory=list)


class ReservationUpdate(_WithInstants):
    """Partial change to an existing reservation. Status is not editable here."""
    room_id: Optional[int] = Field(default=None, alias="roomId")
    num_guests: Optional[int] = Field(default=None, alias="numGuests")
    check_in: Optional[datetime] = Field(default=None, alias="checkIn")
    check_out: Optional[datetime] = Field(default=None, alias="checkOut")
    guests: Optional[List[GuestInput]] = Field(default=None)


class ReservationFilter(_WithInstants):
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    room_id: Optional[int] = Field(default=None, alias="roomId")
    status: Optional[ReservationStatus] = Field(default=None)


# --- ROOMS ---

class RoomInput(_Payload):
    name: str
    number: str
    capacity: int
    description: str = Field(default="")
    status: RoomStatus = Field(default=RoomStatus.AVAILABLE)
    notes: Optional[str] = Field(default=None)


class RoomUpdate(_Payload):
    name: Optional[str] = Field(default=None)
    number: Optional[str] = Field(default=None)
    capacity: Optional[int] = Field(default=None)
    description: Optional[str] = Field(default=None)
    status: Optional[RoomStatus] = Field(default=None)
    notes: Optional[str] = Field(default=None)


# --- USERS & GUEST REGISTRY ---

class UserInput(_Payload):
    name: str
    username: str
    password: str = Field(repr=False)


class UserUpdate(_Payload):
    name: Optional[str] = Field(default=None)
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None, repr=False)


class GuestRecordInput(_Payload):
    name: str
    cpf: str
    contact_phone: str = Field(alias="contactPhone")
    support_contact: Optional[str] = Field(default=None, alias="supportContact")
