# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database models.

Importing this package registers every table on ``Base.metadata``.
"""

from expertchat.infrastructure.database.models.base import Base, TimestampMixin
from expertchat.infrastructure.database.models.chat import (
    SESSION_ID_LENGTH,
    ChatMessage,
    ChatSession,
    Question,
)
from expertchat.infrastructure.database.models.moderation import BannedAddress, ModerationRecord
from expertchat.infrastructure.database.models.user import User, UserExpertise

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "UserExpertise",
    "Question",
    "ChatSession",
    "ChatMessage",
    "SESSION_ID_LENGTH",
    "ModerationRecord",
    "BannedAddress",
]
