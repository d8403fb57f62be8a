"""Datetime helpers.

Datetimes are stored as naive UTC (SQLite keeps no offset); values read back
are normalised with ``as_utc`` before comparing.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (storage format)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime; naive input is taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_storage(value: datetime) -> datetime:
    """Convert any datetime to the naive UTC storage format."""
    return as_utc(value).replace(tzinfo=None)


def start_of_local_day(now: datetime) -> datetime:
    """Midnight of ``now``'s calendar day in the server's local timezone (aware)."""
    local = as_utc(now).astimezone()
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def from_unix(ts: int) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def to_unix(value: datetime) -> int:
    return int(as_utc(value).timestamp())


def system_clock() -> datetime:
    """Default clock for the auto-response pipeline (aware UTC)."""
    return datetime.now(timezone.utc)
