# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ASGI entry point.

Usage:
    uvicorn expertchat.main:app
    expertchat-api
"""

import uvicorn

from expertchat.api.app import create_app
from expertchat.core.config import get_settings

app = create_app()


def run() -> None:
    """Run the API server with settings from the environment."""
    settings = get_settings()
    uvicorn.run(
        "expertchat.main:app",
        host=settings.api.host,
        port=settings.api.port,
        workers=1 if settings.api.reload else settings.api.workers,
        reload=settings.api.reload,
        log_config=None,
    )
