"""In-process feed of committed changes for polling clients.

SQLAlchemy session hooks record inserts, updates and deletes on the watched
tables at flush time and publish them only once the transaction commits, so
clients never see rows that were rolled back.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import event
from sqlalchemy.orm import Session

from boarding_mess.core.settings import settings
from boarding_mess.db.time import utcnow

logger = logging.getLogger(__name__)

WATCHED_TABLES = frozenset({"meal_registration", "chat_message"})
_PENDING_KEY = "change_feed_pending"


@dataclass(frozen=True)
class ChangeEvent:
    """One committed row change."""

    seq: int
    table: str
    action: str
    row_id: int
    recorded_at: datetime


class ChangeFeed:
    """Bounded ring buffer of ``ChangeEvent`` objects with a monotonic sequence."""

    def __init__(self, capacity: int = 1_000) -> None:
        self._events: deque[ChangeEvent] = deque(maxlen=max(1, capacity))
        self._seq = 0
        self._lock = threading.Lock()

    @property
    def last_seq(self) -> int:
        with self._lock:
            return self._seq

    def publish(self, table: str, action: str, row_id: int) -> ChangeEvent:
        with self._lock:
            self._seq += 1
            change = ChangeEvent(self._seq, table, action, row_id, utcnow())
            self._events.append(change)
        return change

    def since(self, after: int = 0, limit: int | None = None) -> list[ChangeEvent]:
        """Return events with ``seq > after`` in sequence order.

        Callers that fall further behind than the buffer capacity get the
        oldest retained events and should refetch full state.
        """
        with self._lock:
            changes = [change for change in self._events if change.seq > after]
        if limit is not None:
            changes = changes[:limit]
        return changes

    def oldest_seq(self) -> int | None:
        with self._lock:
            return self._events[0].seq if self._events else None


_change_feed: ChangeFeed | None = None


def get_change_feed() -> ChangeFeed:
    """Return the process-wide change feed."""
    global _change_feed
    if _change_feed is None:
        _change_feed = ChangeFeed(settings.change_feed_capacity)
    return _change_feed


def _collect(session: Session, flush_context: Any) -> None:
    pending: list[tuple[str, str, int]] = session.info.setdefault(_PENDING_KEY, [])
    groups = (
        ("insert", session.new),
        ("update", (obj for obj in session.dirty if session.is_modified(obj))),
        ("delete", session.deleted),
    )
    for action, objects in groups:
        for obj in objects:
            table = getattr(obj, "__tablename__", None)
            row_id = getattr(obj, "id", None)
            if table in WATCHED_TABLES and row_id is not None:
                pending.append((table, action, row_id))


def _publish(session: Session) -> None:
    pending = session.info.pop(_PENDING_KEY, None)
    if not pending:
        return
    feed = get_change_feed()
    for table, action, row_id in pending:
        feed.publish(table, action, row_id)
    logger.debug("Published %d change events", len(pending))


def _discard(session: Session, previous_transaction: Any) -> None:
    # A rolled-back savepoint leaves earlier flushes of the outer transaction intact.
    if previous_transaction.nested:
        return
    session.info.pop(_PENDING_KEY, None)


def install_change_feed_hooks() -> None:
    """Attach the feed hooks to every SQLAlchemy session; safe to call twice."""
    if event.contains(Session, "after_flush", _collect):
        return
    event.listen(Session, "after_flush", _collect)
    event.listen(Session, "after_commit", _publish)
    event.listen(Session, "after_soft_rollback", _discard)

