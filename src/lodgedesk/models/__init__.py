from .room import Room, RoomStatus
from .reservation import (
    Guest,
    LifecycleAction,
    Reservation,
    ReservationGuest,
    ReservationStatus,
)
from .user import User

__all__ = [
    "Guest",
    "LifecycleAction",
    "Reservation",
    "ReservationGuest",
    "ReservationStatus",
    "Room",
    "RoomStatus",
    "User",
]
