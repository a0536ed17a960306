"""Models for the shared household chat log."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from boarding_mess.db.session import Base
from boarding_mess.db.time import utcnow


class ChatMessage(Base):
    """Append-only chat entry.

    System-generated violation notices differ from human messages only by
    ``is_violation``.
    """

    __tablename__ = "chat_message"
    __table_args__ = (Index("ix_chat_message_created_at", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_id: Mapped[int] = mapped_column(Integer, ForeignKey("member.id"), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    # Ordered list of mentioned member ids.
    mentions: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    is_violation: Mapped[bool] = mapped_column(nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
