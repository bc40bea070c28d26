from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any


class RoomStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    CLEANING = "CLEANING"
    REPAIRS_NEEDED = "REPAIRS_NEEDED"


@dataclass
class Room:
    """A bookable room. Capacity is authoritative only as of the read that produced it."""

    id: int
    name: str
    number: str
    capacity: int
    status: RoomStatus = field(default=RoomStatus.AVAILABLE)
    description: Optional[str] = field(default=None)
    notes: Optional[str] = field(default=None)

    def is_available(self) -> bool:
        return self.status == RoomStatus.AVAILABLE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Room:
        field_names = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in field_names}
        if filtered_data.get("status") is not None:
            filtered_data["status"] = RoomStatus(filtered_data["status"])
        else:
            filtered_data.pop("status", None)
        return cls(**filtered_data)
