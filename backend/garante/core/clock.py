"""Clock Helpers - timezone normalization for persisted timestamps.

Invariants:
    - Core compares only timezone-aware UTC datetimes
    - Naive datetimes (SQLite drops tzinfo) are interpreted as UTC
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_past(expires_at: datetime | None, now: datetime) -> bool:
    """True when expires_at is set and strictly before now."""
    if expires_at is None:
        return False
    return as_utc(expires_at) < as_utc(now)
