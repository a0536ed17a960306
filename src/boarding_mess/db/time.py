"""Time utilities for database models."""

from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and normalize aware ones to UTC.

    SQLite hands back naive values for timestamp columns; PostgreSQL keeps the zone.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def database_now(db: Session) -> datetime:
    """Return the transactional clock of the database behind ``db``."""
    value = db.execute(select(func.now())).scalar_one()
    if isinstance(value, str):
        # SQLite renders CURRENT_TIMESTAMP as text in UTC.
        value = datetime.fromisoformat(value)
    return as_utc(value)
