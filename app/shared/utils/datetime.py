"""Timezone-aware UTC helpers.

Due dates, approvals and comments are stored as timestamptz; every datetime
crossing a layer boundary is aware and in UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Treat a naive value as UTC and convert an aware one to UTC."""
    if dt is None:
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)
