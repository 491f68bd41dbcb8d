"""UTC time helpers for SRS scheduling.

Persisted timestamps are integer milliseconds since the Unix epoch (UTC).
ISO strings produced by this module are UTC and end with 'Z', with second precision:
YYYY-MM-DDTHH:MM:SSZ
"""

from __future__ import annotations

from datetime import datetime, timezone

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


def utc_now() -> datetime:
    """Return timezone-aware UTC 'now'."""
    return datetime.now(timezone.utc)


def utc_now_ms() -> int:
    """Return current time as integer milliseconds since the epoch."""
    return datetime_to_ms(utc_now())


def datetime_to_ms(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def ms_to_datetime(ms: int) -> datetime:
    """Convert epoch milliseconds to a timezone-aware UTC datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def utc_datetime_to_iso_z(dt: datetime) -> str:
    """Format a datetime as UTC ISO string with second precision and trailing 'Z'."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    dt = dt.replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


def ms_to_iso_z(ms: int) -> str:
    return utc_datetime_to_iso_z(ms_to_datetime(ms))


def add_hours_ms(now_ms: int, hours: int) -> int:
    return now_ms + hours * HOUR_MS


def add_days_ms(now_ms: int, days: int) -> int:
    return now_ms + days * DAY_MS
