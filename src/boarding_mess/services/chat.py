"""Household group chat: posting, listing and retention."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from boarding_mess.core.settings import settings
from boarding_mess.db.time import as_utc
from boarding_mess.models import ChatMessage, Member
from boarding_mess.services.clock import Clock, DatabaseClock
from boarding_mess.services.errors import MemberNotFound

logger = logging.getLogger(__name__)

MAX_BODY_LENGTH = 2_000
DEFAULT_PAGE_SIZE = 50


def _unique_in_order(values: Iterable[int]) -> list[int]:
    seen: set[int] = set()
    ordered: list[int] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


class ChatService:
    """Append-only chat log shared by every member."""

    def __init__(self, db: Session, clock: Clock | None = None) -> None:
        self.db = db
        self.clock = clock or DatabaseClock(db)

    def post_message(
        self,
        sender: Member,
        body: str,
        mentions: Iterable[int] = (),
    ) -> ChatMessage:
        """Append a human message.

        Raises:
            ValueError: the body is blank or longer than 2000 characters.
            MemberNotFound: a mention refers to an unknown member.
        """
        text = body.strip()
        if not text or len(text) > MAX_BODY_LENGTH:
            raise ValueError(f"Message body must be 1 to {MAX_BODY_LENGTH} characters")

        mention_ids = _unique_in_order(mentions)
        if mention_ids:
            known = set(self.db.scalars(select(Member.id).where(Member.id.in_(mention_ids))))
            for member_id in mention_ids:
                if member_id not in known:
                    raise MemberNotFound(member_id)

        message = ChatMessage(
            sender_id=sender.id,
            body=text,
            mentions=mention_ids,
            created_at=as_utc(self.clock.now()),
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def list_messages(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        before: int | None = None,
    ) -> list[ChatMessage]:
        """Return up to ``limit`` messages older than ``before``, oldest first."""
        stmt = select(ChatMessage).order_by(ChatMessage.id.desc()).limit(limit)
        if before is not None:
            stmt = stmt.where(ChatMessage.id < before)
        newest_first = list(self.db.scalars(stmt))
        newest_first.reverse()
        return newest_first

    def purge_older_than(self, days: int | None = None) -> int:
        """Delete messages older than the retention horizon; return how many."""
        retention = settings.chat_retention_days if days is None else days
        horizon = as_utc(self.clock.now()) - timedelta(days=retention)
        # Deleted through the session so the change feed sees each row.
        expired = list(self.db.scalars(select(ChatMessage).where(ChatMessage.created_at < horizon)))
        for message in expired:
            self.db.delete(message)
        self.db.commit()
        deleted = len(expired)
        logger.info("Purged %d chat messages older than %d days", deleted, retention)
        return deleted
