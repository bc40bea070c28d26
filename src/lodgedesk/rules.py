"""
Booking rule-set shared by every enforcement point.

Pure functions: no I/O, no clock reads. The client services call them before
submitting, and the local SQLite collaborator calls the same functions when it
persists, so both sides enforce identical rules.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from lodgedesk.clock import to_utc
from lodgedesk.exceptions import (
    CancellationWindowExpiredError,
    CapacityExceededError,
    DuplicateGuestIdError,
    GuestCountMismatchError,
    IllegalTransitionError,
    InvalidDateRangeError,
    InvalidRoomError,
    RoomNotFoundError,
)
from lodgedesk.models import LifecycleAction, ReservationStatus, Room, RoomStatus

DEFAULT_CANCELLATION_CUTOFF_DAYS = 2

TRANSITIONS: Dict[ReservationStatus, Dict[LifecycleAction, ReservationStatus]] = {
    ReservationStatus.CONFIRMED: {
        LifecycleAction.CHECK_IN: ReservationStatus.CHECKED_IN,
        LifecycleAction.CANCEL: ReservationStatus.CANCELLED,
    },
    ReservationStatus.CHECKED_IN: {
        LifecycleAction.CHECK_OUT: ReservationStatus.CHECKED_OUT,
    },
    ReservationStatus.CHECKED_OUT: {},
    ReservationStatus.CANCELLED: {},
}


# ------------------------------------
# Reservation validation
# ------------------------------------
def check_room(room: Optional[Room], room_id: int) -> Room:
    if room is None:
        raise RoomNotFoundError(room_id)
    return room


def check_capacity(num_guests: int, room: Room) -> None:
    if num_guests > room.capacity:
        raise CapacityExceededError(num_guests, room.capacity)


def check_guest_count(guest_cpfs: Sequence[Optional[str]], num_guests: int) -> None:
    if len(guest_cpfs) != num_guests:
        raise GuestCountMismatchError(len(guest_cpfs), num_guests)


def check_date_range(check_in: datetime, check_out: datetime) -> None:
    if to_utc(check_out) <= to_utc(check_in):
        raise InvalidDateRangeError(check_in, check_out)


def find_duplicate_cpf(cpfs: Iterable[Optional[str]]) -> Optional[str]:
    """First CPF seen twice, in list order. Absent CPFs never collide."""
    seen = set()
    for cpf in cpfs:
        if not cpf:
            continue
        if cpf in seen:
            return cpf
        seen.add(cpf)
    return None


def check_unique_cpfs(cpfs: Iterable[Optional[str]]) -> None:
    duplicate = find_duplicate_cpf(cpfs)
    if duplicate is not None:
        raise DuplicateGuestIdError(duplicate)


def validate_reservation(
    room_id: int,
    room: Optional[Room],
    num_guests: int,
    check_in: datetime,
    check_out: datetime,
    guest_cpfs: Sequence[Optional[str]],
) -> Room:
    """
    Runs every reservation check in order, stopping at the first failure:
    room existence, capacity, guest count, date order, CPF uniqueness.

    Returns the resolved room.
    """
    room = check_room(room, room_id)
    check_capacity(num_guests, room)
    check_guest_count(guest_cpfs, num_guests)
    check_date_range(check_in, check_out)
    check_unique_cpfs(guest_cpfs)
    return room


# ------------------------------------
# Room invariants
# ------------------------------------
def check_room_data(
    name: Optional[str] = None,
    number: Optional[str] = None,
    capacity: Optional[int] = None,
    status: Optional[str] = None,
    partial: bool = False,
) -> None:
    """Checks room fields. With ``partial`` only the fields that were given are checked."""
    if not partial or name is not None:
        if not name or not name.strip():
            raise InvalidRoomError("Room name is required")
    if not partial or number is not None:
        if not number or not str(number).strip():
            raise InvalidRoomError("Room number is required")
    if not partial or capacity is not None:
        if capacity is None or capacity < 1:
            raise InvalidRoomError(f"Room capacity must be at least 1, got {capacity}")
    if status is not None:
        try:
            RoomStatus(status)
        except ValueError as exc:
            raise InvalidRoomError(f"Unknown room status '{status}'") from exc


# ------------------------------------
# Lifecycle
# ------------------------------------
def next_status(status: ReservationStatus, action: LifecycleAction) -> ReservationStatus:
    """Target status for ``action`` from ``status``, per the transition table."""
    status = ReservationStatus(status)
    action = LifecycleAction(action)
    target = TRANSITIONS[status].get(action)
    if target is None:
        raise IllegalTransitionError(status.value, action.value)
    return target


def cancellation_deadline(check_in: datetime, cutoff_days: int = DEFAULT_CANCELLATION_CUTOFF_DAYS) -> datetime:
    return to_utc(check_in) - timedelta(days=cutoff_days)


def can_cancel_at(check_in: datetime, now: datetime, cutoff_days: int = DEFAULT_CANCELLATION_CUTOFF_DAYS) -> bool:
    return to_utc(now) <= cancellation_deadline(check_in, cutoff_days)


def check_transition(
    status: ReservationStatus,
    action: LifecycleAction,
    check_in: datetime,
    now: datetime,
    cutoff_days: int = DEFAULT_CANCELLATION_CUTOFF_DAYS,
) -> ReservationStatus:
    """
    Validates a lifecycle action against the current status and, for
    cancellations, the cutoff before check-in. Returns the target status.

    Raises:
        IllegalTransitionError: the action is not legal from ``status``.
        CancellationWindowExpiredError: a legal cancellation past the cutoff.
    """
    target = next_status(status, action)
    if LifecycleAction(action) == LifecycleAction.CANCEL and not can_cancel_at(check_in, now, cutoff_days):
        raise CancellationWindowExpiredError(cancellation_deadline(check_in, cutoff_days))
    return target


def allowed_actions(
    status: ReservationStatus,
    check_in: datetime,
    now: datetime,
    cutoff_days: int = DEFAULT_CANCELLATION_CUTOFF_DAYS,
) -> List[LifecycleAction]:
    """Lifecycle actions the operator may trigger right now."""
    actions = []
    for action in TRANSITIONS[ReservationStatus(status)]:
        if action == LifecycleAction.CANCEL and not can_cancel_at(check_in, now, cutoff_days):
            continue
        actions.append(action)
    return actions
