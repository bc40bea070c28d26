from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable, Optional, Dict, Any, List

from lodgedesk.models import LifecycleAction


@runtime_checkable
class BookingAdapter(Protocol):
    """
    Contract of the collaborator that persists rooms and reservations.

    Payloads and results are API-shaped dicts (camelCase keys, ISO instants).
    Single-entity reads return None when the entity does not exist.
    """

    # rooms
    def get_room(self, room_id: int) -> Optional[Dict[str, Any]]: ...
    def list_rooms(self, status: Optional[str] = None) -> List[Dict[str, Any]]: ...
    def list_available_rooms(self, check_in: datetime, check_out: datetime) -> List[Dict[str, Any]]: ...
    def create_room(self, payload: Dict[str, Any]) -> Dict[str, Any]: ...
    def update_room(self, room_id: int, payload: Dict[str, Any]) -> Dict[str, Any]: ...
    def delete_room(self, room_id: int) -> None: ...

    # reservations
    def create_reservation(self, payload: Dict[str, Any]) -> Dict[str, Any]: ...
    def get_reservation(self, reservation_id: int) -> Optional[Dict[str, Any]]: ...
    def update_reservation(self, reservation_id: int, payload: Dict[str, Any]) -> Dict[str, Any]: ...
    def list_reservations(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]: ...
    def transition_reservation(self, reservation_id: int, action: LifecycleAction) -> Dict[str, Any]: ...

    # guest registry
    def list_guests(self) -> List[Dict[str, Any]]: ...
    def create_guest(self, payload: Dict[str, Any]) -> Dict[str, Any]: ...


@runtime_checkable
class AccountAdapter(Protocol):
    """Authentication and staff accounts. Only remote collaborators provide it."""

    def login(self, username: str, password: str) -> Dict[str, Any]: ...
    def logout(self) -> None: ...
    def get_auth_status(self) -> Dict[str, Any]: ...

    def list_users(self) -> List[Dict[str, Any]]: ...
    def create_user(self, payload: Dict[str, Any]) -> Dict[str, Any]: ...
    def update_user(self, user_id: int, payload: Dict[str, Any]) -> Dict[str, Any]: ...
    def delete_user(self, user_id: int) -> None: ...
