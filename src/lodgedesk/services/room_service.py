from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from lodgedesk import rules
from lodgedesk.exceptions import NotFoundError, RoomNotFoundError
from lodgedesk.models import Room, RoomStatus
from lodgedesk.schemas import RoomInput, RoomUpdate
from lodgedesk.session import Session

logger = logging.getLogger(__name__)


class RoomService:
    """Room management. Rooms have no status machine: they are edited directly."""

    def __init__(self, session: Session):
        self.session = session

    def list_rooms(self, status: Optional[Union[RoomStatus, str]] = None) -> List[Room]:
        status_value = RoomStatus(status).value if status else None
        return [Room.from_dict(r) for r in self.session.adapter.list_rooms(status_value)]

    def get_room(self, room_id: int) -> Room:
        data = self.session.adapter.get_room(room_id)
        if not data:
            raise RoomNotFoundError(room_id)
        return Room.from_dict(data)

    def create_room(self, room: Union[RoomInput, Dict[str, Any]]) -> Room:
        room = RoomInput.model_validate(room)
        rules.check_room_data(room.name, room.number, room.capacity, room.status)
        created = Room.from_dict(self.session.adapter.create_room(room.to_payload()))
        logger.info(f"Room {created.number} created (id {created.id})")
        return created

    def update_room(self, room_id: int, changes: Union[RoomUpdate, Dict[str, Any]]) -> Room:
        changes = RoomUpdate.model_validate(changes)
        rules.check_room_data(changes.name, changes.number, changes.capacity, changes.status, partial=True)
        try:
            data = self.session.adapter.update_room(room_id, changes.to_payload())
        except NotFoundError as e:
            raise RoomNotFoundError(room_id) from e
        return Room.from_dict(data)

    def delete_room(self, room_id: int) -> None:
        try:
            self.session.adapter.delete_room(room_id)
        except NotFoundError as e:
            raise RoomNotFoundError(room_id) from e
        logger.info(f"Room {room_id} deleted")
