# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Chat session state machine.

A chat session is either Open or Ended, and only ever moves from Open to
Ended. All writes go through conditional UPDATEs on the ``chat_sessions``
row, so the store (not the process) decides the outcome when an end
request races a message post:

- ``reserve_sequence`` bumps ``message_count`` only while ``ended`` is
  false and returns the new count as the message's sequence number.
- ``end_session`` flips ``ended`` only while it is still false.

Session rows are created when a question is assigned, and lazily (insert
or ignore) on the first message or end request if they are missing.

Example:
    >>> service = ChatSessionService(db)
    >>> sequence = await service.reserve_sequence(session_id)
    >>> await service.end_session(session_id)
    >>> transcript = await service.get_transcript(session_id)
"""

import logging
from typing import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.domains.errors import ConflictError, InvalidInputError, SessionClosedError
from expertchat.infrastructure.database.connection import insert_ignore
from expertchat.infrastructure.database.models import ChatMessage, ChatSession
from expertchat.models.chat import ChatMessageResponse, TranscriptResponse
from expertchat.utils.datetime import utc_now

logger = logging.getLogger(__name__)


def message_to_response(message: ChatMessage) -> ChatMessageResponse:
    """Convert a stored message to its API representation."""
    return ChatMessageResponse(
        id=message.id,
        session_id=message.session_id,
        sequence=message.sequence,
        sender=message.sender,
        text=message.stored_text,
        redacted=message.redacted,
        created_at=message.created_at,
    )


class ChatSessionService:
    """Open/Ended state and message sequencing for chat sessions.

    Methods other than ``end_session`` do not commit; the caller owns the
    transaction so the gate and the message insert commit together.

    Attributes:
        _db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the chat session service.

        Args:
            db: Async database session.
        """
        self._db = db

    @staticmethod
    def _validate_session_id(session_id: str) -> None:
        if not session_id or not session_id.strip():
            raise InvalidInputError("Session id is required")

    async def ensure_session(self, session_id: str) -> None:
        """Create the session row as Open unless it already exists.

        Idempotent. Never changes an existing row.
        """
        stmt = insert_ignore(
            self._db,
            ChatSession,
            {"session_id": session_id, "ended": False, "message_count": 0},
            index_elements=["session_id"],
        )
        await self._db.execute(stmt)

    async def is_ended(self, session_id: str) -> bool:
        """Read the ended flag. Missing sessions read as not ended."""
        ended = await self._db.scalar(
            select(ChatSession.ended).where(ChatSession.session_id == session_id)
        )
        return bool(ended)

    async def end_session(self, session_id: str) -> bool:
        """End a session, materializing it first if needed.

        Idempotent: ending an already ended session writes nothing.

        Args:
            session_id: Session to end.

        Returns:
            True if this call performed the transition, False if the
            session was already ended.

        Raises:
            InvalidInputError: If the session id is blank.
        """
        self._validate_session_id(session_id)

        await self.ensure_session(session_id)
        result = await self._db.execute(
            update(ChatSession)
            .where(
                ChatSession.session_id == session_id,
                ChatSession.ended.is_(False),
            )
            .values(ended=True, ended_at=utc_now())
            .returning(ChatSession.session_id)
            .execution_options(synchronize_session=False)
        )
        transitioned = result.scalar_one_or_none() is not None
        await self._db.commit()

        if transitioned:
            logger.info("Chat session ended: %s", session_id)
        else:
            logger.debug("Chat session %s was already ended", session_id)

        return transitioned

    async def reserve_sequence(self, session_id: str) -> int:
        """Check the session is open and claim the next message sequence.

        A single conditional UPDATE does both, so a message can never be
        accepted after the end transition has committed.

        Args:
            session_id: Session to post into.

        Returns:
            The sequence number for the new message (1-based).

        Raises:
            InvalidInputError: If the session id is blank.
            SessionClosedError: If the session has ended.
            ConflictError: If the row could neither be found open nor
                ended after one lazy creation attempt.
        """
        self._validate_session_id(session_id)

        for attempt in range(2):
            result = await self._db.execute(
                update(ChatSession)
                .where(
                    ChatSession.session_id == session_id,
                    ChatSession.ended.is_(False),
                )
                .values(message_count=ChatSession.message_count + 1)
                .returning(ChatSession.message_count)
                .execution_options(synchronize_session=False)
            )
            sequence = result.scalar_one_or_none()
            if sequence is not None:
                return sequence

            if await self.is_ended(session_id):
                raise SessionClosedError()

            if attempt == 0:
                logger.debug("Materializing missing chat session %s", session_id)
                await self.ensure_session(session_id)

        raise ConflictError(f"Could not reserve a message slot in session {session_id}")

    async def get_messages(self, session_id: str) -> Sequence[ChatMessage]:
        """Messages of one session in sequence order."""
        result = await self._db.execute(
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.sequence)
        )
        return result.scalars().all()

    async def get_transcript(self, session_id: str) -> TranscriptResponse:
        """Read a session's messages and its ended flag.

        Missing sessions read as empty and not ended.

        Raises:
            InvalidInputError: If the session id is blank.
        """
        self._validate_session_id(session_id)

        messages = await self.get_messages(session_id)
        ended = await self.is_ended(session_id)

        return TranscriptResponse(
            session_id=session_id,
            messages=[message_to_response(m) for m in messages],
            ended=ended,
        )

    async def list_transcripts(self) -> list[TranscriptResponse]:
        """All sessions that have messages, most recent activity first."""
        last_activity = func.max(ChatMessage.created_at).label("last_activity")
        result = await self._db.execute(
            select(ChatMessage.session_id, last_activity)
            .group_by(ChatMessage.session_id)
            .order_by(last_activity.desc(), ChatMessage.session_id)
        )
        session_ids = [row.session_id for row in result]

        return [await self.get_transcript(session_id) for session_id in session_ids]
