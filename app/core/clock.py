"""Time helpers."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    SQLite drops tzinfo on the way back, so every timestamp the store
    compares is kept naive-UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
