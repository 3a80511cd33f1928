# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Question API schemas."""

from pydantic import Field

from expertchat.models.common import APIModel, UTCDateTime


class QuestionCreateRequest(APIModel):
    """Request to ask a question and be routed to an expert."""

    topic: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1, max_length=10000)
    asked_by: str = Field(min_length=1, max_length=255)


class QuestionResponse(APIModel):
    """A routed question. ``assigned_to`` is null when no expert matched."""

    id: int
    session_id: str
    topic: str
    body: str
    asked_by: str
    assigned_to: str | None = None
    created_at: UTCDateTime


class QuestionListResponse(APIModel):
    """Questions visible to one identity."""

    questions: list[QuestionResponse]
    total: int
