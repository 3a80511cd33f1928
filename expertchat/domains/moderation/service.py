# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Moderation pipeline for chat messages.

Every posted message goes through ``ModerationPipeline.submit``:

1. The chat session gate claims a sequence number, or refuses the
   message if the session has ended.
2. The redactor masks blocklisted words.
3. The message is stored with the redacted text. When something was
   masked, a ModerationRecord with participant and question snapshots is
   stored in the same transaction.
4. After commit, one alert job per record is handed to the dispatcher.
   A failed hand-off is logged and does not undo the message or record.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.domains.chat.service import ChatSessionService, message_to_response
from expertchat.domains.errors import InvalidInputError
from expertchat.domains.matching.directory import ExpertDirectory
from expertchat.domains.moderation.alerts import AlertDispatcher
from expertchat.domains.moderation.redaction import RedactionResult, Redactor
from expertchat.infrastructure.database.models import (
    ChatMessage,
    ModerationRecord,
    Question,
    User,
)
from expertchat.models.chat import ChatMessageResponse
from expertchat.utils.datetime import format_iso
logger = logging.getLogger(__name__)

ASKER = 1
EXPERT = 2


def user_snapshot(user: User | None) -> dict[str, Any]:
    """Copy the identity fields of a user for the audit trail.

    Credentials are never included. Unknown users snapshot as ``{}``.
    """
    if user is None:
        return {}
    return {
        "email": user.email,
        "name": user.name,
        "created_at": format_iso(user.created_at),
        "is_admin": user.is_admin,
        "is_banned": user.is_banned,
    }


class ModerationPipeline:
    """Redacts, stores and audits chat messages.

    Attributes:
        _db: Async database session; ``submit`` commits it.
        _redactor: Blocklist redactor.
        _dispatcher: Alert hand-off, None to disable alerts.
    """

    def __init__(
        self,
        db: AsyncSession,
        redactor: Redactor,
        dispatcher: AlertDispatcher | None = None,
    ) -> None:
        self._db = db
        self._redactor = redactor
        self._dispatcher = dispatcher
        self._sessions = ChatSessionService(db)
        self._directory = ExpertDirectory(db)

    async def submit(self, session_id: str, sender: str, text: str) -> ChatMessageResponse:
        """Moderate and store one chat message.

        Args:
            session_id: Target chat session.
            sender: Sender's email.
            text: Message text as typed.

        Returns:
            The stored message (with redacted text when applicable).

        Raises:
            InvalidInputError: If sender or text is blank.
            SessionClosedError: If the session has ended.
            ConflictError: If the session row could not be claimed.
        """
        if not sender.strip() or not text.strip():
            raise InvalidInputError("Sender and text are required")

        sequence = await self._sessions.reserve_sequence(session_id)

        result = self._redactor.redact(text)
        message = ChatMessage(
            session_id=session_id,
            sequence=sequence,
            sender=sender,
            original_text=text,
            stored_text=result.text,
        )
        self._db.add(message)
        await self._db.flush()

        record: ModerationRecord | None = None
        if result.violated:
            record = await self._build_record(message, result)
            self._db.add(record)
            await self._db.flush()

        await self._db.commit()
        await self._db.refresh(message)

        if record is not None:
            logger.warning(
                "Message %d in session %s from %s redacted (record %d)",
                message.sequence,
                session_id,
                sender,
                record.id,
            )
            await self._dispatch_alert(record.id)
        else:
            logger.debug("Message %d stored in session %s", sequence, session_id)

        return message_to_response(message)

    async def _build_record(
        self,
        message: ChatMessage,
        result: RedactionResult,
    ) -> ModerationRecord:
        question = await self._db.scalar(
            select(Question).where(Question.session_id == message.session_id)
        )

        asker: User | None = None
        expert: User | None = None
        moderated_participant: int | None = None
        if question is not None:
            asker = await self._directory.get_by_email(question.asked_by)
            if question.assigned_to:
                expert = await self._directory.get_by_email(question.assigned_to)

            if message.sender == question.asked_by:
                moderated_participant = ASKER
            elif message.sender == question.assigned_to:
                moderated_participant = EXPERT

        return ModerationRecord(
            message_id=message.id,
            session_id=message.session_id,
            sender=message.sender,
            original_text=message.original_text,
            redacted_text=result.text,
            offending_token=result.offending_token or "",
            moderated_participant=moderated_participant,
            asker_snapshot=user_snapshot(asker),
            expert_snapshot=user_snapshot(expert),
            question_topic=question.topic if question else None,
            question_body=question.body if question else None,
        )

    async def _dispatch_alert(self, record_id: int) -> None:
        if self._dispatcher is None:
            logger.info("Alert dispatch disabled, skipping record %d", record_id)
            return
        try:
            await self._dispatcher.dispatch(record_id)
        except Exception as e:
            logger.error(
                "Failed to dispatch moderation alert for record %d: %s",
                record_id,
                e,
                exc_info=True,
            )
