from .base import AccountAdapter, BookingAdapter
from .http_adapter import HTTPBookingAdapter
from .sqlite_adapter import SQLiteBookingAdapter

__all__ = [
    "AccountAdapter",
    "BookingAdapter",
    "HTTPBookingAdapter",
    "SQLiteBookingAdapter",
]
