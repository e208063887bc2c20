"""Timestamp helpers.

Timestamps are persisted as naive UTC so SQLite and PostgreSQL agree on the
stored value; calendar questions ("today", "this week") are answered in the
server's local timezone.
"""

from datetime import date, datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as a naive UTC ``datetime`` suitable for storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_local(dt: datetime) -> datetime:
    """Convert a stored (naive UTC) or aware ``datetime`` to server-local time."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone()


def local_now(now: Optional[datetime] = None) -> datetime:
    if now is None:
        return datetime.now().astimezone()
    return to_local(now)


def local_today(now: Optional[datetime] = None) -> date:
    return local_now(now).date()
