# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Question, chat session and chat message models."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column

from expertchat.infrastructure.database.models.base import Base, TimestampMixin

SESSION_ID_LENGTH = 64


class Question(TimestampMixin, Base):
    """A question and the expert it was routed to.

    Immutable once created. ``assigned_to`` is None when no expert matched.
    """

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(
        String(SESSION_ID_LENGTH), unique=True, index=True, nullable=False
    )
    topic: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    asked_by: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    assigned_to: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)

    def __repr__(self) -> str:
        return f"<Question session_id={self.session_id!r} assigned_to={self.assigned_to!r}>"


class ChatSession(TimestampMixin, Base):
    """Open/ended state of one chat.

    ``ended`` only ever goes from False to True. ``message_count`` is bumped
    by the same conditional UPDATE that checks ``ended`` and doubles as the
    per-session message sequence.
    """

    __tablename__ = "chat_sessions"

    session_id: Mapped[str] = mapped_column(String(SESSION_ID_LENGTH), primary_key=True)
    ended: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False
    )
    message_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<ChatSession session_id={self.session_id!r} ended={self.ended}>"


class ChatMessage(TimestampMixin, Base):
    """A persisted chat message. Immutable."""

    __tablename__ = "chat_messages"
    __table_args__ = (UniqueConstraint("session_id", "sequence"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("chat_sessions.session_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    sender: Mapped[str] = mapped_column(String(255), nullable=False)
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    stored_text: Mapped[str] = mapped_column(Text, nullable=False)

    @property
    def redacted(self) -> bool:
        """Whether moderation changed the text."""
        return self.stored_text != self.original_text

    def __repr__(self) -> str:
        return f"<ChatMessage session_id={self.session_id!r} sequence={self.sequence}>"
