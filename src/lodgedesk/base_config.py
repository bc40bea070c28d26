"""
Base configuration abstractions for LodgeDesk.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Union

from lodgedesk.adapters.base import BookingAdapter
from lodgedesk.rules import DEFAULT_CANCELLATION_CUTOFF_DAYS


class LodgeDeskConfig(ABC):
    """Abstract configuration contract for every backend / front end."""

    @abstractmethod
    def get_backend(self) -> str: pass

    @abstractmethod
    def get_api_url(self) -> str: pass

    @abstractmethod
    def get_request_timeout(self) -> int: pass

    @abstractmethod
    def get_database_url(self) -> str: pass

    @abstractmethod
    def create_adapter(self) -> BookingAdapter: pass

    def get_cancellation_cutoff_days(self) -> int: return DEFAULT_CANCELLATION_CUTOFF_DAYS
    def get_username(self) -> Optional[str]: return None
    def get_password(self) -> Optional[str]: return None
    def get_log_level(self) -> Union[int, str]: return "INFO"
