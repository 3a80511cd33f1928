# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    questions: Ask and list questions.
    chat: Chat transcripts, moderated posting, ending sessions.
    auth: Signup and signin.
    admin: User, ban and moderation review endpoints.
"""

from fastapi import APIRouter

from expertchat.api.v1 import admin, auth, chat, questions

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(questions.router, prefix="/questions", tags=["Questions"])
router.include_router(chat.router, prefix="/chat", tags=["Chat"])
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(admin.router, prefix="/admin", tags=["Admin"])

__all__ = ["router"]
