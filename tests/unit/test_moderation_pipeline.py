# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the chat moderation pipeline."""

import asyncio
import logging

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from expertchat.domains.chat.service import ChatSessionService
from expertchat.domains.errors import InvalidInputError, SessionClosedError
from expertchat.domains.matching.service import AssignmentService
from expertchat.domains.moderation.service import (
    ASKER,
    EXPERT,
    ModerationPipeline,
    user_snapshot,
)
from expertchat.infrastructure.database.models import ChatMessage, ChatSession, ModerationRecord


class FailingDispatcher:
    """Dispatcher whose broker is unreachable."""

    def __init__(self) -> None:
        self.attempts = 0

    async def dispatch(self, record_id: int) -> None:
        self.attempts += 1
        raise ConnectionError("broker down")


async def _count(db, model) -> int:
    return await db.scalar(select(func.count()).select_from(model))


@pytest_asyncio.fixture
async def question(db, make_user, resolver):
    """A question from amy routed to vera."""
    await make_user("amy@example.com", name="Amy")
    await make_user("vera@example.com", name="Vera", expertise=["volcanology"])
    return await AssignmentService(db, resolver).assign(
        "volcanoes", "Why do they erupt?", "amy@example.com"
    )


class TestUserSnapshot:
    """Tests for user_snapshot."""

    def test_none_snapshots_empty(self) -> None:
        """Test that unknown users snapshot as an empty mapping."""
        assert user_snapshot(None) == {}


class TestSubmit:
    """Tests for ModerationPipeline.submit."""

    @pytest.mark.asyncio
    async def test_clean_message_is_stored_unchanged(self, db, redactor, dispatcher, question) -> None:
        """Test that clean text passes through without a record."""
        pipeline = ModerationPipeline(db, redactor, dispatcher)

        message = await pipeline.submit(question.session_id, "amy@example.com", "hello there")

        assert message.text == "hello there"
        assert message.redacted is False
        assert message.sequence == 1
        assert await _count(db, ModerationRecord) == 0
        assert dispatcher.record_ids == []

    @pytest.mark.asyncio
    async def test_blocked_word_is_masked_and_audited(self, db, redactor, dispatcher, question) -> None:
        """Test the full violation path for an asker message."""
        pipeline = ModerationPipeline(db, redactor, dispatcher)

        message = await pipeline.submit(question.session_id, "amy@example.com", "you idiot")

        assert message.text == "you #####"
        assert message.redacted is True

        records = (await db.execute(select(ModerationRecord))).scalars().all()
        assert len(records) == 1
        record = records[0]
        assert record.message_id == message.id
        assert record.session_id == question.session_id
        assert record.sender == "amy@example.com"
        assert record.original_text == "you idiot"
        assert record.redacted_text == "you #####"
        assert record.offending_token == "idiot"
        assert record.moderated_participant == ASKER
        assert record.question_topic == "volcanoes"
        assert record.question_body == "Why do they erupt?"
        assert record.asker_snapshot["email"] == "amy@example.com"
        assert record.asker_snapshot["name"] == "Amy"
        assert record.asker_snapshot["created_at"]
        assert "password_hash" not in record.asker_snapshot
        assert record.expert_snapshot["email"] == "vera@example.com"
        assert dispatcher.record_ids == [record.id]

    @pytest.mark.asyncio
    async def test_original_text_is_kept_for_audit(self, db, redactor, question) -> None:
        """Test that the stored message keeps what was typed."""
        pipeline = ModerationPipeline(db, redactor)

        message = await pipeline.submit(question.session_id, "amy@example.com", "Moron!")

        stored = await db.get(ChatMessage, message.id)
        assert stored.original_text == "Moron!"
        assert stored.stored_text == "#####!"

    @pytest.mark.asyncio
    async def test_expert_violation_marks_participant_two(self, db, redactor, dispatcher, question) -> None:
        """Test participant detection for the assigned expert."""
        pipeline = ModerationPipeline(db, redactor, dispatcher)

        await pipeline.submit(question.session_id, "vera@example.com", "what a moron")

        record = await db.scalar(select(ModerationRecord))
        assert record.moderated_participant == EXPERT

    @pytest.mark.asyncio
    async def test_session_without_question_still_audits(self, db, redactor, dispatcher) -> None:
        """Test a violation in a session with no question behind it."""
        pipeline = ModerationPipeline(db, redactor, dispatcher)

        await pipeline.submit("orphan", "someone@example.com", "shit happens")

        record = await db.scalar(select(ModerationRecord))
        assert record.moderated_participant is None
        assert record.asker_snapshot == {}
        assert record.expert_snapshot == {}
        assert record.question_topic is None
        assert len(dispatcher.record_ids) == 1

    @pytest.mark.asyncio
    async def test_dispatch_failure_keeps_message_and_record(self, db, redactor, question) -> None:
        """Test that a broken alert hand-off does not undo the write."""
        failing = FailingDispatcher()
        pipeline = ModerationPipeline(db, redactor, failing)

        message = await pipeline.submit(question.session_id, "amy@example.com", "you idiot")

        assert failing.attempts == 1
        assert message.text == "you #####"
        assert await _count(db, ChatMessage) == 1
        assert await _count(db, ModerationRecord) == 1

    @pytest.mark.asyncio
    async def test_alerts_disabled_without_dispatcher(self, db, redactor, question) -> None:
        """Test that a missing dispatcher only skips the alert."""
        pipeline = ModerationPipeline(db, redactor, None)

        await pipeline.submit(question.session_id, "amy@example.com", "testfilter")

        assert await _count(db, ModerationRecord) == 1

    @pytest.mark.asyncio
    async def test_ended_session_stores_nothing(self, db, redactor, dispatcher, question) -> None:
        """Test that a closed session refuses the message before moderation."""
        await ChatSessionService(db).end_session(question.session_id)
        pipeline = ModerationPipeline(db, redactor, dispatcher)

        with pytest.raises(SessionClosedError):
            await pipeline.submit(question.session_id, "amy@example.com", "you idiot")

        await db.rollback()
        assert await _count(db, ChatMessage) == 0
        assert await _count(db, ModerationRecord) == 0
        assert dispatcher.record_ids == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sender,text", [("", "hello"), ("amy@example.com", "   ")])
    async def test_blank_input_is_rejected(self, db, redactor, sender, text) -> None:
        """Test validation of sender and text."""
        with pytest.raises(InvalidInputError):
            await ModerationPipeline(db, redactor).submit("s1", sender, text)

    @pytest.mark.asyncio
    async def test_messages_are_sequenced(self, db, redactor, question) -> None:
        """Test that consecutive posts get consecutive sequence numbers."""
        pipeline = ModerationPipeline(db, redactor)

        first = await pipeline.submit(question.session_id, "amy@example.com", "one")
        second = await pipeline.submit(question.session_id, "vera@example.com", "two")

        assert (first.sequence, second.sequence) == (1, 2)

    @pytest.mark.asyncio
    async def test_redaction_is_logged(self, db, redactor, dispatcher, question, caplog) -> None:
        """Test that a redaction is logged on the module logger."""
        pipeline = ModerationPipeline(db, redactor, dispatcher)

        with caplog.at_level(logging.WARNING, logger="expertchat.domains.moderation.service"):
            await pipeline.submit(question.session_id, "amy@example.com", "you idiot")

        records = [r for r in caplog.records if r.name == "expertchat.domains.moderation.service"]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert records[0].getMessage() == (
            f"Message 1 in session {question.session_id} from amy@example.com redacted "
            f"(record {dispatcher.record_ids[0]})"
        )

    @pytest.mark.asyncio
    async def test_long_offending_token_is_kept_whole(self, db, redactor, dispatcher, question) -> None:
        """Test that an offending token of any length is stored in full."""
        pipeline = ModerationPipeline(db, redactor, dispatcher)
        token = "idiot" + "!" * 300

        await pipeline.submit(question.session_id, "amy@example.com", f"you {token}")

        record = await db.scalar(select(ModerationRecord))
        assert record.offending_token == token
        assert ModerationRecord.__table__.c.offending_token.type.length is None


class TestConcurrentWriters:
    """Posts and end requests from separate database sessions at once."""

    @staticmethod
    async def _post(sessionmaker, redactor, session_id: str, text: str):
        async with sessionmaker() as session:
            return await ModerationPipeline(session, redactor).submit(
                session_id, "amy@example.com", text
            )

    @staticmethod
    async def _end(sessionmaker, session_id: str) -> bool:
        async with sessionmaker() as session:
            return await ChatSessionService(session).end_session(session_id)

    @staticmethod
    async def _open(sessionmaker, session_id: str) -> None:
        async with sessionmaker() as session:
            await ChatSessionService(session).ensure_session(session_id)
            await session.commit()

    @pytest.mark.asyncio
    async def test_parallel_posts_get_contiguous_sequences(self, file_sessionmaker, redactor) -> None:
        """Test that concurrent posts to one session never share or skip a slot."""
        await self._open(file_sessionmaker, "busy")

        messages = await asyncio.gather(
            *(self._post(file_sessionmaker, redactor, "busy", f"message {i}") for i in range(20))
        )

        assert sorted(m.sequence for m in messages) == list(range(1, 21))

        async with file_sessionmaker() as session:
            transcript = await ChatSessionService(session).get_transcript("busy")
            row = await session.get(ChatSession, "busy")

        assert [m.sequence for m in transcript.messages] == list(range(1, 21))
        assert {m.text for m in transcript.messages} == {f"message {i}" for i in range(20)}
        assert row.message_count == 20

    @pytest.mark.asyncio
    async def test_end_racing_posts_freezes_the_transcript(self, file_sessionmaker, redactor) -> None:
        """Test that nothing is accepted once the end transition has committed."""
        await self._open(file_sessionmaker, "racy")

        results = await asyncio.gather(
            *(self._post(file_sessionmaker, redactor, "racy", f"early {i}") for i in range(10)),
            self._end(file_sessionmaker, "racy"),
            self._end(file_sessionmaker, "racy"),
            *(self._post(file_sessionmaker, redactor, "racy", f"late {i}") for i in range(10)),
            return_exceptions=True,
        )

        ends = results[10:12]
        posts = results[:10] + results[12:]
        assert sorted(ends) == [False, True]

        accepted = [r for r in posts if not isinstance(r, BaseException)]
        refused = [r for r in posts if isinstance(r, BaseException)]
        assert all(isinstance(r, SessionClosedError) for r in refused)
        assert len(accepted) + len(refused) == 20

        async with file_sessionmaker() as session:
            transcript = await ChatSessionService(session).get_transcript("racy")
            row = await session.get(ChatSession, "racy")

        assert transcript.ended is True
        assert row.message_count == len(accepted)
        assert [m.sequence for m in transcript.messages] == list(range(1, len(accepted) + 1))
        assert {m.id for m in transcript.messages} == {m.id for m in accepted}

        # After the end has committed every post is refused and nothing moves.
        late = await asyncio.gather(
            *(self._post(file_sessionmaker, redactor, "racy", "too late") for _ in range(5)),
            return_exceptions=True,
        )

        assert all(isinstance(r, SessionClosedError) for r in late)
        async with file_sessionmaker() as session:
            assert await _count(session, ChatMessage) == len(accepted)
            row = await session.get(ChatSession, "racy")
        assert row.message_count == len(accepted)
