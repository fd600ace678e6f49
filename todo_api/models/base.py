from datetime import datetime, timedelta, timezone

from sqlalchemy import DateTime
from sqlmodel import Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive value; SQLite hands timestamps back without tzinfo."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_timestamp(previous: datetime) -> datetime:
    """A timestamp strictly after ``previous``, even if the clock has not moved."""
    previous = as_utc(previous)
    now = utcnow()
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def timestamp_field():
    """Timezone-aware UTC column defaulting to now."""
    return Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
