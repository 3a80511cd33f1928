# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Question assignment service.

Routes a new question to an expert:

1. Expand the topic into a candidate set: the related terms from the
   similarity resolver plus the normalized topic itself.
2. Ask the expert directory for the first eligible user whose expertise
   intersects the candidates.
3. Mint a random session id and persist the Question together with an
   open ChatSession in one transaction.

Finding no expert is a normal outcome: the question is stored with no
assignee and the chat session is still opened.

Example:
    >>> service = AssignmentService(db, resolver)
    >>> question = await service.assign("Volcanoes", "Why do they erupt?", "amy@example.com")
    >>> question.assigned_to
    'vera@example.com'
"""

import logging
import secrets

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.domains.errors import InvalidInputError, NotFoundError
from expertchat.domains.matching.directory import ExpertDirectory
from expertchat.infrastructure.database.connection import insert_ignore
from expertchat.infrastructure.database.models import ChatSession, Question
from expertchat.infrastructure.similarity import SimilarityResolver, normalize_term
from expertchat.models.question import QuestionResponse

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 16


def new_session_id() -> str:
    """Generate an opaque, unguessable session identifier (128 bits)."""
    return secrets.token_hex(SESSION_ID_BYTES)


class AssignmentService:
    """Creates questions and routes them to experts.

    Attributes:
        _db: Async database session.
        _resolver: Topic similarity resolver.
        _directory: Expert lookup over the same session.
    """

    def __init__(
        self,
        db: AsyncSession,
        resolver: SimilarityResolver | None = None,
    ) -> None:
        """Initialize the assignment service.

        Args:
            db: Async database session.
            resolver: Similarity resolver used to widen the topic. Without
                one, only the topic itself is matched.
        """
        self._db = db
        self._resolver = resolver
        self._directory = ExpertDirectory(db)

    async def candidate_terms(self, topic: str) -> set[str]:
        """Related terms for a topic, always including the topic itself."""
        candidates: set[str] = set()
        if self._resolver is not None:
            candidates.update(await self._resolver.resolve(topic))
        normalized = normalize_term(topic)
        if normalized:
            candidates.add(normalized)
        return candidates

    async def assign(self, topic: str, body: str, asked_by: str) -> QuestionResponse:
        """Create a question and route it to the best-matching expert.

        Args:
            topic: Free-text topic.
            body: Question text.
            asked_by: Asker's email.

        Returns:
            The stored question; ``assigned_to`` is None when nobody matched.

        Raises:
            InvalidInputError: If topic, body or asker is blank.
        """
        if not topic.strip() or not body.strip() or not asked_by.strip():
            raise InvalidInputError("Topic, question and asker are required")

        candidates = await self.candidate_terms(topic)
        expert = await self._directory.find_expert(candidates, exclude=asked_by)
        assigned_to = expert.email if expert else None

        session_id = new_session_id()
        question = Question(
            session_id=session_id,
            topic=topic.strip(),
            body=body.strip(),
            asked_by=asked_by,
            assigned_to=assigned_to,
        )
        self._db.add(question)
        await self._db.execute(
            insert_ignore(
                self._db,
                ChatSession,
                {"session_id": session_id, "ended": False, "message_count": 0},
                index_elements=["session_id"],
            )
        )
        await self._db.commit()
        await self._db.refresh(question)

        if assigned_to is None:
            logger.info(
                "Question %s on %r has no matching expert (%d candidate terms)",
                session_id,
                topic,
                len(candidates),
            )
        else:
            logger.info("Question %s assigned to %s", session_id, assigned_to)

        return QuestionResponse.model_validate(question)

    async def get_by_session(self, session_id: str) -> QuestionResponse:
        """Get the question behind a chat session.

        Raises:
            NotFoundError: If no question has that session id.
        """
        question = await self._db.scalar(
            select(Question).where(Question.session_id == session_id)
        )
        if question is None:
            raise NotFoundError(f"No question for session {session_id}")
        return QuestionResponse.model_validate(question)

    async def list_for_identity(self, email: str) -> list[QuestionResponse]:
        """Questions an identity asked or was assigned, newest first.

        Admins see every question.

        Raises:
            NotFoundError: If the identity is unknown.
        """
        user = await self._directory.get_by_email(email)
        if user is None:
            raise NotFoundError(f"User {email} not found")

        stmt = select(Question).order_by(Question.id.desc())
        if not user.is_admin:
            stmt = stmt.where(or_(Question.asked_by == email, Question.assigned_to == email))

        result = await self._db.execute(stmt)
        return [QuestionResponse.model_validate(q) for q in result.scalars().all()]
