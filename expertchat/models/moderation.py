# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Moderation and access-control API schemas."""

from typing import Any

from pydantic import ConfigDict, Field

from expertchat.models.common import APIModel, UTCDateTime


class ModerationRecordResponse(APIModel):
    """Audit entry for one redacted message. Texts are returned as stored."""

    model_config = ConfigDict(str_strip_whitespace=False)

    id: int
    message_id: int
    session_id: str
    sender: str
    original_text: str
    redacted_text: str
    offending_token: str
    moderated_participant: int | None = None
    asker_snapshot: dict[str, Any]
    expert_snapshot: dict[str, Any]
    question_topic: str | None = None
    question_body: str | None = None
    created_at: UTCDateTime


class ModerationRecordListResponse(APIModel):
    """Paginated moderation records, newest first."""

    records: list[ModerationRecordResponse]
    total: int
    limit: int
    offset: int


class BannedAddressCreateRequest(APIModel):
    """Request to ban a client address."""

    address: str = Field(min_length=1, max_length=64)
    reason: str = Field(default="", max_length=500)


class BannedAddressResponse(APIModel):
    """A banned client address."""

    id: int
    address: str
    reason: str
    banned_by: str | None = None
    created_at: UTCDateTime


class BannedAddressListResponse(APIModel):
    """All banned addresses."""

    addresses: list[BannedAddressResponse]
    total: int
