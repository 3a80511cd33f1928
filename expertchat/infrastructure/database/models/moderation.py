# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Moderation audit and access-control models."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from expertchat.infrastructure.database.models.base import Base, TimestampMixin


class ModerationRecord(TimestampMixin, Base):
    """Audit entry for one redacted chat message.

    Write-once. The unique ``message_id`` keeps it to at most one record per
    message; participant and question data are copied in at violation time.
    """

    __tablename__ = "moderation_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message_id: Mapped[int] = mapped_column(
        ForeignKey("chat_messages.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
    )
    session_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    sender: Mapped[str] = mapped_column(String(255), nullable=False)
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    redacted_text: Mapped[str] = mapped_column(Text, nullable=False)
    offending_token: Mapped[str] = mapped_column(Text, nullable=False)
    # 1 = asker, 2 = expert, None = sender is neither participant
    moderated_participant: Mapped[int | None] = mapped_column(Integer, nullable=True)
    asker_snapshot: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    expert_snapshot: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    question_topic: Mapped[str | None] = mapped_column(String(255), nullable=True)
    question_body: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<ModerationRecord id={self.id} message_id={self.message_id}>"


class BannedAddress(TimestampMixin, Base):
    """A client address refused by the access guard."""

    __tablename__ = "banned_addresses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    address: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    reason: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    banned_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
