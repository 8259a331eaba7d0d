"""Clock and timestamp helpers shared by stores and services."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]

WIRE_FORMAT = "%Y-%m-%d %H:%M:%S"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp the way API clients expect it (UTC, second precision)."""
    return value.astimezone(timezone.utc).strftime(WIRE_FORMAT)


def to_storage(value: datetime) -> str:
    """Fixed-width ISO text so timestamps sort and compare lexically in SQLite."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_storage(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


__all__ = ["Clock", "WIRE_FORMAT", "format_timestamp", "from_storage", "to_storage", "utcnow"]
