from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

UTC = timezone.utc

# Fixed width so stored instants compare correctly as strings.
INSTANT_FORMAT = "%Y-%m-%dT%H:%M:%S.{ms}Z"


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def to_utc(dt: datetime) -> datetime:
    """
    Normalises any datetime to UTC.
    - naive: interpreted as UTC
    - aware: converted to UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_instant(value: Union[str, datetime]) -> datetime:
    """Parses an ISO-8601 string (date-only and trailing ``Z`` accepted) into an aware UTC datetime."""
    if isinstance(value, datetime):
        return to_utc(value)
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid instant '{value}'. Expected ISO-8601.") from exc
    return to_utc(dt)


def format_instant(dt: datetime) -> str:
    """Formats as ``2024-06-01T00:00:00.000Z``, the same shape the API emits."""
    dt = to_utc(dt)
    ms = f"{dt.microsecond // 1000:03d}"
    return dt.strftime(INSTANT_FORMAT.format(ms=ms))
