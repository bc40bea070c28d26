"""Custom exceptions for LodgeDesk."""
from __future__ import annotations

from datetime import datetime
from typing import Optional


class LodgeDeskError(Exception):
    """Base exception for all LodgeDesk errors."""
    pass


class ConfigurationError(LodgeDeskError):
    """Raised when configuration is invalid or missing."""
    pass


# ------------------------------------
# Booking rules (local, recoverable)
# ------------------------------------
class BookingError(LodgeDeskError):
    """Raised when a reservation or lifecycle action breaks a booking rule."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class RoomNotFoundError(BookingError):
    def __init__(self, room_id: int):
        super().__init__(f"Room {room_id} not found")
        self.room_id = room_id


class CapacityExceededError(BookingError):
    def __init__(self, num_guests: int, capacity: int):
        super().__init__(
            f"Number of guests ({num_guests}) exceeds room capacity ({capacity})"
        )
        self.num_guests = num_guests
        self.capacity = capacity


class GuestCountMismatchError(BookingError):
    def __init__(self, provided: int, expected: int):
        super().__init__(
            f"Number of guests provided ({provided}) does not match numGuests ({expected})"
        )
        self.provided = provided
        self.expected = expected


class InvalidDateRangeError(BookingError):
    def __init__(self, check_in: datetime, check_out: datetime):
        super().__init__(
            f"Check-out ({check_out.isoformat()}) must be after check-in ({check_in.isoformat()})"
        )
        self.check_in = check_in
        self.check_out = check_out


class DuplicateGuestIdError(BookingError):
    def __init__(self, cpf: str):
        super().__init__(f"Duplicate CPF: {cpf}")
        self.cpf = cpf


class IllegalTransitionError(BookingError):
    """``status`` is None when the collaborator rejected the action without naming it."""

    def __init__(self, status: Optional[str], action: str, reason: Optional[str] = None):
        super().__init__(reason or f"Cannot {action} a reservation in status {status}")
        self.status = status
        self.action = action


class CancellationWindowExpiredError(BookingError):
    """Cancellation requested after the cutoff before check-in."""

    def __init__(self, deadline: datetime):
        super().__init__(
            f"Cancellations are only allowed until {deadline.isoformat()}"
        )
        self.deadline = deadline


class ReservationNotFoundError(BookingError):
    def __init__(self, reservation_id: int):
        super().__init__(f"Reservation {reservation_id} not found")
        self.reservation_id = reservation_id


class InvalidRoomError(BookingError):
    """Raised when room data breaks the room invariants (capacity, name, status)."""
    pass


class InvalidUserError(BookingError):
    """Raised when user data is incomplete."""
    pass


# ------------------------------------
# Collaborator errors
# ------------------------------------
class AdapterError(LodgeDeskError):
    """Raised when adapter operations fail."""
    pass


class TransportError(AdapterError):
    """The collaborator was unreachable or answered with an unexpected failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ConflictError(AdapterError):
    """Another operator changed the same reservation or room concurrently. Retry after re-reading."""
    pass


class NotFoundError(AdapterError):
    """The collaborator does not know the requested entity."""
    pass


class ServerValidationError(AdapterError):
    """The collaborator rejected the submitted data."""
    pass


class DatabaseError(AdapterError):
    """Raised when the local database fails."""
    pass


class AuthenticationError(AdapterError):
    """Login failed or the session expired and could not be refreshed."""
    pass
