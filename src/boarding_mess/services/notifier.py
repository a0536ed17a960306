"""Chat notices emitted as a side effect of registration writes."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from boarding_mess.db.time import as_utc
from boarding_mess.models import ChatMessage, Member
from boarding_mess.services.clock import Clock, DatabaseClock
from boarding_mess.services.errors import NotificationDeliveryFailure

logger = logging.getLogger(__name__)

ACTION_ADDED = "added"
ACTION_REMOVED = "removed"


def violation_body(member_name: str, action: str, cutoff_label: str) -> str:
    """Return the chat text announcing an after-cutoff change."""
    return f"{member_name} has {action} their meal after {cutoff_label}"


class ViolationNotifier:
    """Appends chat messages inside a savepoint of the caller's transaction.

    A failed append rolls back only its own savepoint, so the registration
    write that triggered it still commits.
    """

    def __init__(self, db: Session, clock: Clock | None = None) -> None:
        self.db = db
        self.clock = clock or DatabaseClock(db)

    def notify(
        self,
        member: Member,
        action: str,
        period: str,
        cutoff_label: str,
    ) -> ChatMessage | None:
        """Append a violation message for ``member``; return it, or None on failure."""
        body = violation_body(member.name, action, cutoff_label)
        message = self._append(member.id, body, is_violation=True)
        if message is not None:
            logger.info(
                "Recorded %s meal violation for member %s (%s)",
                period,
                member.id,
                action,
            )
        return message

    def announce(self, sender: Member, body: str) -> ChatMessage | None:
        """Append a plain, non-violation message on behalf of ``sender``."""
        return self._append(sender.id, body, is_violation=False)

    def _append(self, sender_id: int, body: str, *, is_violation: bool) -> ChatMessage | None:
        try:
            message = ChatMessage(
                sender_id=sender_id,
                body=body,
                mentions=[],
                is_violation=is_violation,
                created_at=as_utc(self.clock.now()),
            )
            with self.db.begin_nested():
                self.db.add(message)
        except SQLAlchemyError as exc:
            failure = NotificationDeliveryFailure(f"Could not append chat message: {exc}")
            logger.warning("%s", failure)
            return None
        return message
