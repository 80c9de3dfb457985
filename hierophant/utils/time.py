"""Time helpers."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (the form stored in SQLite)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
