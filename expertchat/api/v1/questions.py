# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Question endpoints.

This module provides endpoints for asking and listing questions:
- POST / - Ask a question and get routed to an expert
- GET / - List questions asked by or assigned to an identity
- GET /{session_id} - Get the question behind a chat session

Example:
    POST /api/v1/questions
    {
        "topic": "volcanoes",
        "body": "Why do some volcanoes explode?",
        "askedBy": "amy@example.com"
    }
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.api.dependencies import get_client_address, get_db, get_similarity_resolver
from expertchat.domains.access.service import AccessGuard
from expertchat.domains.errors import ForbiddenError, InvalidInputError, NotFoundError
from expertchat.domains.matching.service import AssignmentService
from expertchat.infrastructure.similarity import SimilarityResolver
from expertchat.models.question import (
    QuestionCreateRequest,
    QuestionListResponse,
    QuestionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ask a question",
    description="Create a question and assign it to the first matching expert.",
)
async def ask_question(
    data: QuestionCreateRequest,
    address: str = Depends(get_client_address),
    resolver: SimilarityResolver = Depends(get_similarity_resolver),
    db: AsyncSession = Depends(get_db),
) -> QuestionResponse:
    """Ask a question.

    Raises:
        HTTPException: 403 if the asker or address is banned, 400 on
            blank input.
    """
    try:
        await AccessGuard(db).enforce(identity=data.asked_by, address=address)
        return await AssignmentService(db, resolver).assign(
            topic=data.topic,
            body=data.body,
            asked_by=data.asked_by,
        )
    except ForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.code)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get(
    "",
    response_model=QuestionListResponse,
    summary="List questions",
    description="Questions asked by or assigned to an identity. Admins see all questions.",
)
async def list_questions(
    email: Annotated[str, Query(min_length=1, description="Identity to list questions for")],
    db: AsyncSession = Depends(get_db),
) -> QuestionListResponse:
    """List questions for an identity.

    Raises:
        HTTPException: 404 if the identity is unknown.
    """
    try:
        questions = await AssignmentService(db).list_for_identity(email)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return QuestionListResponse(questions=questions, total=len(questions))


@router.get(
    "/{session_id}",
    response_model=QuestionResponse,
    summary="Get question by session",
)
async def get_question(
    session_id: str,
    db: AsyncSession = Depends(get_db),
) -> QuestionResponse:
    """Get the question behind a chat session.

    Raises:
        HTTPException: 404 if no question has that session id.
    """
    try:
        return await AssignmentService(db).get_by_session(session_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
