"""Trusted clock sources.

Components that need the current instant take a ``Clock`` argument instead of
calling ``datetime.now`` so tests can pin time and production can use the
database's transactional clock.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from sqlalchemy.orm import Session

from boarding_mess.db.time import database_now, utcnow


class Clock(Protocol):
    """Anything that can report the current UTC instant."""

    def now(self) -> datetime:
        """Return the current instant as a timezone-aware datetime."""
        ...


class SystemClock:
    """Clock backed by the host's wall clock."""

    def now(self) -> datetime:
        return utcnow()


class DatabaseClock:
    """Clock backed by the database serving ``db``.

    Cutoff checks made inside a write transaction use this clock so that the
    check and the write agree on time, whatever the client's device says.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def now(self) -> datetime:
        return database_now(self.db)
