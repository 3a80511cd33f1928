# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Chat endpoints.

This module provides endpoints for two-party chat sessions:
- GET /{session_id} - Get the transcript and ended flag
- POST /{session_id} - Post a moderated message
- POST /{session_id}/end - End the session

Posting to an ended session returns 403 with detail "session closed";
requests from banned identities or addresses return 403 with detail
"banned".
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.api.dependencies import (
    get_alert_dispatcher,
    get_client_address,
    get_db,
    get_redactor,
)
from expertchat.domains.access.service import AccessGuard
from expertchat.domains.chat.service import ChatSessionService
from expertchat.domains.errors import ConflictError, ForbiddenError, InvalidInputError
from expertchat.domains.moderation.alerts import AlertDispatcher
from expertchat.domains.moderation.redaction import Redactor
from expertchat.domains.moderation.service import ModerationPipeline
from expertchat.infrastructure.database.models import SESSION_ID_LENGTH
from expertchat.models.chat import (
    ChatMessageResponse,
    EndSessionResponse,
    MessageCreateRequest,
    TranscriptResponse,
)
from expertchat.utils.logging import bind_context

logger = logging.getLogger(__name__)

router = APIRouter()

SessionId = Annotated[str, Path(min_length=1, max_length=SESSION_ID_LENGTH)]


@router.get(
    "/{session_id}",
    response_model=TranscriptResponse,
    summary="Get chat transcript",
)
async def get_transcript(
    session_id: SessionId,
    db: AsyncSession = Depends(get_db),
) -> TranscriptResponse:
    """Get all messages of a session in order, plus whether it has ended."""
    try:
        return await ChatSessionService(db).get_transcript(session_id)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post(
    "/{session_id}",
    response_model=ChatMessageResponse,
    summary="Post chat message",
    description="Store a message after moderation. Profanity is masked and audited.",
)
async def post_message(
    session_id: SessionId,
    data: MessageCreateRequest,
    address: str = Depends(get_client_address),
    redactor: Redactor = Depends(get_redactor),
    dispatcher: AlertDispatcher | None = Depends(get_alert_dispatcher),
    db: AsyncSession = Depends(get_db),
) -> ChatMessageResponse:
    """Post a message to a chat session.

    Raises:
        HTTPException: 403 if banned or the session has ended, 400 on
            blank input, 409 if the session row could not be claimed.
    """
    bind_context(session_id=session_id)

    try:
        await AccessGuard(db).enforce(identity=data.sender, address=address)
        pipeline = ModerationPipeline(db, redactor, dispatcher)
        return await pipeline.submit(session_id, data.sender, data.text)
    except ForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.code)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post(
    "/{session_id}/end",
    response_model=EndSessionResponse,
    summary="End chat session",
    description="End a chat session. Ending an ended session succeeds without changes.",
)
async def end_session(
    session_id: SessionId,
    address: str = Depends(get_client_address),
    db: AsyncSession = Depends(get_db),
) -> EndSessionResponse:
    """End a chat session.

    Raises:
        HTTPException: 403 if the address is banned.
    """
    bind_context(session_id=session_id)

    try:
        await AccessGuard(db).enforce(address=address)
        await ChatSessionService(db).end_session(session_id)
    except ForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.code)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return EndSessionResponse(ok=True, ended=True)
