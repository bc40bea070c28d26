from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Union

from lodgedesk import rules
from lodgedesk.exceptions import (
    BookingError,
    CancellationWindowExpiredError,
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    ReservationNotFoundError,
)
from lodgedesk.models import LifecycleAction, Reservation
from lodgedesk.session import Session

logger = logging.getLogger(__name__)


class LifecycleService:
    """
    Governs status changes of a created reservation.

    CONFIRMED -> CHECKED_IN -> CHECKED_OUT, or CONFIRMED -> CANCELLED while the
    cancellation window is open. Every action is checked against a fresh read
    of the reservation, never against what the caller last displayed.
    Nothing is retried here: after a failure the caller re-reads and decides.
    """

    def __init__(self, session: Session):
        self.session = session

    @property
    def cutoff_days(self) -> int:
        return self.session.cancellation_cutoff_days

    def _current(self, reservation_id: int) -> Reservation:
        data = self.session.adapter.get_reservation(reservation_id)
        if not data:
            raise ReservationNotFoundError(reservation_id)
        return Reservation.from_dict(data)

    def cancellation_deadline(self, reservation: Reservation) -> datetime:
        return rules.cancellation_deadline(reservation.check_in, self.cutoff_days)

    def allowed_actions(self, reservation: Reservation) -> List[LifecycleAction]:
        """Actions to enable for ``reservation`` as displayed; cancel drops out past the cutoff."""
        return rules.allowed_actions(reservation.status, reservation.check_in, self.session.now(), self.cutoff_days)

    def apply_action(
        self, reservation: Union[Reservation, int], action: Union[LifecycleAction, str]
    ) -> Reservation:
        """
        Re-reads the reservation, checks the action against its current status
        (and the cancellation cutoff) and sends it to the collaborator.

        Raises:
            ReservationNotFoundError: the reservation no longer exists.
            IllegalTransitionError: the action is not legal from the current status.
            CancellationWindowExpiredError: cancellation requested after the cutoff,
                here or as judged by the collaborator.
            ConflictError: another operator changed the reservation meanwhile.
        """
        action = LifecycleAction(action)
        reservation_id = reservation.id if isinstance(reservation, Reservation) else reservation

        current = self._current(reservation_id)
        if isinstance(reservation, Reservation) and reservation.status != current.status:
            logger.warning(
                f"Reservation {reservation_id} changed since it was displayed "
                f"({reservation.status.value} -> {current.status.value})"
            )

        try:
            rules.check_transition(
                current.status, action, current.check_in, self.session.now(), self.cutoff_days
            )
        except BookingError as e:
            logger.warning(f"{action.value} refused for reservation {reservation_id}: {e.reason}")
            raise

        try:
            data = self.session.adapter.transition_reservation(reservation_id, action)
        except NotFoundError as e:
            raise ReservationNotFoundError(reservation_id) from e
        except ConflictError:
            logger.warning(f"Conflict while applying {action.value} to reservation {reservation_id}")
            raise
        except IllegalTransitionError as e:
            # The collaborator applies the cutoff with its own clock.
            if action == LifecycleAction.CANCEL and self._current(reservation_id).is_confirmed():
                logger.warning(f"Cancellation of reservation {reservation_id} refused past the cutoff")
                raise CancellationWindowExpiredError(self.cancellation_deadline(current)) from e
            raise

        updated = Reservation.from_dict(data)
        logger.info(
            f"Reservation {updated.get_reference_code()}: {current.status.value} -> {updated.status.value}"
        )
        return updated

    def check_in(self, reservation: Union[Reservation, int]) -> Reservation:
        return self.apply_action(reservation, LifecycleAction.CHECK_IN)

    def check_out(self, reservation: Union[Reservation, int]) -> Reservation:
        return self.apply_action(reservation, LifecycleAction.CHECK_OUT)

    def cancel(self, reservation: Union[Reservation, int]) -> Reservation:
        return self.apply_action(reservation, LifecycleAction.CANCEL)
