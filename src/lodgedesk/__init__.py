"""LodgeDesk - booking rules and console for a small lodging business"""

__version__ = "0.1.0"

# Core abstractions
from .base_config import LodgeDeskConfig
from .session import Session

# Exceptions
from .exceptions import (
    LodgeDeskError,
    ConfigurationError,
    BookingError,
    RoomNotFoundError,
    CapacityExceededError,
    GuestCountMismatchError,
    InvalidDateRangeError,
    DuplicateGuestIdError,
    IllegalTransitionError,
    CancellationWindowExpiredError,
    ReservationNotFoundError,
    InvalidRoomError,
    InvalidUserError,
    AdapterError,
    TransportError,
    ConflictError,
    NotFoundError,
    ServerValidationError,
    DatabaseError,
    AuthenticationError,
)

# Config management
from .config import get_config, set_config

# Adapters
from .adapters.base import AccountAdapter, BookingAdapter
from .adapters.http_adapter import HTTPBookingAdapter
from .adapters.sqlite_adapter import SQLiteBookingAdapter

# Services
from .services import (
    AvailabilityService,
    ReservationService,
    LifecycleService,
    RoomService,
    UserService,
    GuestService,
)

__all__ = [
    # Version
    "__version__",

    # Core
    "LodgeDeskConfig",
    "Session",

    # Exceptions
    "LodgeDeskError",
    "ConfigurationError",
    "BookingError",
    "RoomNotFoundError",
    "CapacityExceededError",
    "GuestCountMismatchError",
    "InvalidDateRangeError",
    "DuplicateGuestIdError",
    "IllegalTransitionError",
    "CancellationWindowExpiredError",
    "ReservationNotFoundError",
    "InvalidRoomError",
    "InvalidUserError",
    "AdapterError",
    "TransportError",
    "ConflictError",
    "NotFoundError",
    "ServerValidationError",
    "DatabaseError",
    "AuthenticationError",

    # Config
    "get_config",
    "set_config",

    # Adapters
    "AccountAdapter",
    "BookingAdapter",
    "HTTPBookingAdapter",
    "SQLiteBookingAdapter",

    # Services
    "AvailabilityService",
    "ReservationService",
    "LifecycleService",
    "RoomService",
    "UserService",
    "GuestService",
]
