from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Any


@dataclass
class User:
    """Staff account. The password is write-only and never part of this model."""

    id: int
    name: str
    username: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> User:
        return cls(id=data["id"], name=data.get("name", ""), username=data["username"])
