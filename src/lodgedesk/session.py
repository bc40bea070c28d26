"""
Explicit operator session.

Booking services receive a ``Session`` instead of reading ambient login
state, so they can run (and be tested) without any front end.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from lodgedesk.adapters.base import AccountAdapter, BookingAdapter
from lodgedesk.clock import to_utc, utc_now
from lodgedesk.exceptions import AuthenticationError
from lodgedesk.models import User
from lodgedesk.rules import DEFAULT_CANCELLATION_CUTOFF_DAYS

logger = logging.getLogger(__name__)


@dataclass
class Session:
    adapter: BookingAdapter
    user: Optional[User] = field(default=None)
    clock: Callable[[], datetime] = field(default=utc_now)
    cancellation_cutoff_days: int = field(default=DEFAULT_CANCELLATION_CUTOFF_DAYS)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def now(self) -> datetime:
        return to_utc(self.clock())

    def accounts(self) -> AccountAdapter:
        """The adapter as an ``AccountAdapter``; raises if it cannot authenticate."""
        if not isinstance(self.adapter, AccountAdapter):
            raise AuthenticationError(f"{type(self.adapter).__name__} does not support authentication")
        return self.adapter

    @classmethod
    def local(cls, adapter: BookingAdapter, **kwargs) -> Session:
        """Session for collaborators without authentication."""
        return cls(adapter=adapter, **kwargs)

    @classmethod
    def login(cls, adapter: BookingAdapter, username: str, password: str, **kwargs) -> Session:
        session = cls(adapter=adapter, **kwargs)
        user_data = session.accounts().login(username, password)
        session.user = User.from_dict(user_data)
        logger.info(f"User '{session.user.username}' logged in")
        return session

    @classmethod
    def restore(cls, adapter: BookingAdapter, **kwargs) -> Session:
        """
        Rebuilds the session from the collaborator's auth status (e.g. an
        existing cookie). A rejected status check leaves the session signed out.
        """
        session = cls(adapter=adapter, **kwargs)
        accounts = session.accounts()
        try:
            status = accounts.get_auth_status()
        except AuthenticationError as e:
            logger.info(f"No active session to restore: {e}")
            return session
        if status.get("isAuthenticated") and status.get("user"):
            session.user = User.from_dict(status["user"])
        return session

    def logout(self) -> None:
        self.accounts().logout()
        if self.user is not None:
            logger.info(f"User '{self.user.username}' logged out")
        self.user = None
