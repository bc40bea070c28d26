from __future__ import annotations

from typing import Any, Dict, List, Union

from lodgedesk.models import Guest
from lodgedesk.schemas import GuestRecordInput
from lodgedesk.session import Session


class GuestService:
    """Standalone guest records that reservation guests can link to by ``guestId``."""

    def __init__(self, session: Session):
        self.session = session

    def list_guests(self) -> List[Guest]:
        return [Guest.from_dict(g) for g in self.session.adapter.list_guests()]

    def create_guest(self, guest: Union[GuestRecordInput, Dict[str, Any]]) -> Guest:
        guest = GuestRecordInput.model_validate(guest)
        return Guest.from_dict(self.session.adapter.create_guest(guest.to_payload()))
