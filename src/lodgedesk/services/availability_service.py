from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from lodgedesk import rules
from lodgedesk.clock import to_utc
from lodgedesk.exceptions import TransportError
from lodgedesk.models import Room
from lodgedesk.session import Session

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Answers "which rooms are free for [check_in, check_out)".

    The overlap computation belongs to the collaborator; this service only
    shapes the query and holds it back until both bounds are known.
    """

    def __init__(self, session: Session):
        self.session = session

    def find_available_rooms(
        self,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        guests: Optional[int] = None,
    ) -> List[Room]:
        """
        Distinct rooms without a CONFIRMED or CHECKED_IN reservation overlapping the interval.

        Returns an empty list while either bound is missing (no date filter yet).
        With ``guests`` only rooms that can hold that many guests are kept.

        Raises:
            InvalidDateRangeError: check_out is not after check_in.
            TransportError: availability could not be determined.
        """
        if check_in is None or check_out is None:
            return []
        rules.check_date_range(check_in, check_out)

        try:
            rows = self.session.adapter.list_available_rooms(to_utc(check_in), to_utc(check_out))
        except TransportError as e:
            logger.error(f"Availability unknown for {check_in} - {check_out}: {e}")
            raise

        rooms: List[Room] = []
        seen = set()
        for row in rows:
            room = Room.from_dict(row)
            if room.id in seen:
                continue
            seen.add(room.id)
            if guests is not None and room.capacity < guests:
                continue
            rooms.append(room)
        return rooms

    def is_room_available(self, room_id: int, check_in: datetime, check_out: datetime) -> bool:
        return any(room.id == room_id for room in self.find_available_rooms(check_in, check_out))
