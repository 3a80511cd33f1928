# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Chat API schemas."""

from typing import Annotated

from pydantic import ConfigDict, Field, StringConstraints

from expertchat.models.common import APIModel, UTCDateTime


class MessageCreateRequest(APIModel):
    """Request to post a chat message.

    ``text`` is kept exactly as typed, surrounding whitespace included, so
    the stored original and its redaction have the posted length.
    """

    model_config = ConfigDict(str_strip_whitespace=False)

    sender: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    text: str = Field(min_length=1, max_length=10000)


class ChatMessageResponse(APIModel):
    """A stored chat message. ``text`` is the post-moderation text."""

    model_config = ConfigDict(str_strip_whitespace=False)

    id: int
    session_id: str
    sequence: int
    sender: str
    text: str
    redacted: bool
    created_at: UTCDateTime


class TranscriptResponse(APIModel):
    """All messages of one chat in sequence order."""

    session_id: str
    messages: list[ChatMessageResponse]
    ended: bool


class EndSessionResponse(APIModel):
    """Acknowledgement of an end request."""

    ok: bool = True
    ended: bool = True


class ChatListResponse(APIModel):
    """Chat transcripts grouped by session, newest activity first."""

    chats: list[TranscriptResponse]
    total: int
