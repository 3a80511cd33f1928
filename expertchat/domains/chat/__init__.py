# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Chat session domain."""

from expertchat.domains.chat.service import ChatSessionService, message_to_response

__all__ = ["ChatSessionService", "message_to_response"]
