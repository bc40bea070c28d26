from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from lodgedesk import rules
from lodgedesk.exceptions import BookingError, NotFoundError, ReservationNotFoundError
from lodgedesk.models import Reservation, Room
from lodgedesk.schemas import ReservationCandidate, ReservationFilter, ReservationUpdate
from lodgedesk.session import Session

logger = logging.getLogger(__name__)


class ReservationService:
    """
    Validates reservations before they are submitted and reads them back.

    Client-side checks are advisory: the collaborator enforces the same rules
    again, so a passing ``validate`` never guarantees the create succeeds.
    """

    def __init__(self, session: Session):
        self.session = session

    def _fetch_room(self, room_id: int) -> Optional[Room]:
        """Fresh read; capacity may have changed since the form was loaded."""
        data = self.session.adapter.get_room(room_id)
        return Room.from_dict(data) if data else None

    def validate(self, candidate: Union[ReservationCandidate, Dict[str, Any]]) -> Room:
        """
        Checks a candidate in order (room exists, capacity, guest count, date
        order, CPF uniqueness), stopping at the first violation.

        Returns the resolved room on success.
        """
        candidate = ReservationCandidate.model_validate(candidate)
        try:
            return rules.validate_reservation(
                candidate.room_id,
                self._fetch_room(candidate.room_id),
                candidate.num_guests,
                candidate.check_in,
                candidate.check_out,
                [g.cpf for g in candidate.guests],
            )
        except BookingError as e:
            logger.warning(f"Reservation rejected for room {candidate.room_id}: {e.reason}")
            raise

    def create_reservation(self, candidate: Union[ReservationCandidate, Dict[str, Any]]) -> Reservation:
        candidate = ReservationCandidate.model_validate(candidate)
        self.validate(candidate)

        data = self.session.adapter.create_reservation(candidate.to_payload())
        reservation = Reservation.from_dict(data)
        logger.info(
            f"Reservation {reservation.get_reference_code()} created for room {reservation.room_id} "
            f"({reservation.num_guests} guests)"
        )
        return reservation

    def get_reservation(self, reservation_id: int) -> Reservation:
        data = self.session.adapter.get_reservation(reservation_id)
        if not data:
            raise ReservationNotFoundError(reservation_id)
        return Reservation.from_dict(data)

    def list_reservations(
        self, filters: Union[ReservationFilter, Dict[str, Any], None] = None
    ) -> List[Reservation]:
        filters = ReservationFilter.model_validate(filters or {})
        rows = self.session.adapter.list_reservations(filters.to_payload())
        return [Reservation.from_dict(r) for r in rows]

    def update_reservation(
        self, reservation_id: int, changes: Union[ReservationUpdate, Dict[str, Any]]
    ) -> Reservation:
        """
        Applies a partial change after re-checking the rules it touches,
        merged with the reservation as it is stored now.
        """
        changes = ReservationUpdate.model_validate(changes)
        current = self.get_reservation(reservation_id)

        room_id = changes.room_id if changes.room_id is not None else current.room_id
        num_guests = changes.num_guests if changes.num_guests is not None else current.num_guests
        check_in = changes.check_in or current.check_in
        check_out = changes.check_out or current.check_out
        if changes.guests is not None:
            cpfs = [g.cpf for g in changes.guests]
        else:
            cpfs = [g.cpf for g in current.guests]

        try:
            if changes.room_id is not None or changes.num_guests is not None:
                room = rules.check_room(self._fetch_room(room_id), room_id)
                rules.check_capacity(num_guests, room)
            if changes.guests is not None or changes.num_guests is not None:
                rules.check_guest_count(cpfs, num_guests)
            if changes.check_in is not None or changes.check_out is not None:
                rules.check_date_range(check_in, check_out)
            if changes.guests is not None:
                rules.check_unique_cpfs(cpfs)
        except BookingError as e:
            logger.warning(f"Update of reservation {reservation_id} rejected: {e.reason}")
            raise

        try:
            data = self.session.adapter.update_reservation(reservation_id, changes.to_payload())
        except NotFoundError as e:
            raise ReservationNotFoundError(reservation_id) from e
        logger.info(f"Reservation {reservation_id} updated: {sorted(changes.to_payload())}")
        return Reservation.from_dict(data)
