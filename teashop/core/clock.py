# teashop/core/clock.py
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Normalize a datetime read back from the database.

    Timestamp columns are timezone-aware. Postgres returns aware values in
    the session time zone; SQLite drops the offset and returns naive values,
    which are UTC because everything is written as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
