from .availability_service import AvailabilityService
from .reservation_service import ReservationService
from .lifecycle_service import LifecycleService
from .room_service import RoomService
from .user_service import UserService
from .guest_service import GuestService

__all__ = [
    "AvailabilityService",
    "ReservationService",
    "LifecycleService",
    "RoomService",
    "UserService",
    "GuestService",
]
