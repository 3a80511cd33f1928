# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API request and response schemas."""

from expertchat.models.chat import (
    ChatListResponse,
    ChatMessageResponse,
    EndSessionResponse,
    MessageCreateRequest,
    TranscriptResponse,
)
from expertchat.models.common import APIModel, OkResponse, UTCDateTime
from expertchat.models.moderation import (
    BannedAddressCreateRequest,
    BannedAddressListResponse,
    BannedAddressResponse,
    ModerationRecordListResponse,
    ModerationRecordResponse,
)
from expertchat.models.question import (
    QuestionCreateRequest,
    QuestionListResponse,
    QuestionResponse,
)
from expertchat.models.user import (
    SigninRequest,
    SigninResponse,
    SignupRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)

__all__ = [
    "APIModel",
    "OkResponse",
    "UTCDateTime",
    "ChatListResponse",
    "ChatMessageResponse",
    "EndSessionResponse",
    "MessageCreateRequest",
    "TranscriptResponse",
    "BannedAddressCreateRequest",
    "BannedAddressListResponse",
    "BannedAddressResponse",
    "ModerationRecordListResponse",
    "ModerationRecordResponse",
    "QuestionCreateRequest",
    "QuestionListResponse",
    "QuestionResponse",
    "SigninRequest",
    "SigninResponse",
    "SignupRequest",
    "UserListResponse",
    "UserResponse",
    "UserUpdateRequest",
]
