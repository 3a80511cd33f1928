# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

Dependencies are used to:
- Get database sessions
- Get the app-scoped resolver, redactor and alert dispatcher
- Resolve the client address
- Authorize admin requests

App-scoped collaborators are created once in the application lifespan and
stored on ``app.state``.

Example:
    @router.post("/{session_id}")
    async def post_message(
        db: AsyncSession = Depends(get_db),
        redactor: Redactor = Depends(get_redactor),
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Header, HTTPException, Request, status
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.domains.access.service import AccessGuard
from expertchat.domains.admin.service import AdminService
from expertchat.domains.errors import ForbiddenError
from expertchat.domains.moderation.alerts import AlertDispatcher
from expertchat.domains.moderation.redaction import Redactor
from expertchat.infrastructure.database.connection import get_session
from expertchat.infrastructure.database.models import User
from expertchat.infrastructure.similarity import SimilarityResolver

logger = logging.getLogger(__name__)

ADMIN_HEADER = "X-User-Email"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for one request.

    Yields:
        AsyncSession, rolled back if the request fails.
    """
    async with get_session() as session:
        yield session


def _app_state(request: Request, name: str) -> object:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} not initialized",
        )
    return value


def get_similarity_resolver(request: Request) -> SimilarityResolver:
    """Get the app-scoped similarity resolver."""
    return _app_state(request, "similarity_resolver")  # type: ignore[return-value]


def get_redactor(request: Request) -> Redactor:
    """Get the app-scoped redactor."""
    return _app_state(request, "redactor")  # type: ignore[return-value]


def get_alert_dispatcher(request: Request) -> AlertDispatcher | None:
    """Get the app-scoped alert dispatcher, None when alerts are off."""
    return getattr(request.app.state, "alert_dispatcher", None)


def get_client_address(request: Request) -> str:
    """Get the client address the access guard checks."""
    return get_remote_address(request)


async def require_admin(
    admin_email: Annotated[str | None, Header(alias=ADMIN_HEADER)] = None,
    address: str = Depends(get_client_address),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Require the acting identity to be an admin.

    Banned addresses are refused first, like every other mutating entry
    point.

    Raises:
        HTTPException: 403 if banned or not an admin.
    """
    try:
        await AccessGuard(db).enforce(address=address)
        return await AdminService(db).require_admin(admin_email)
    except ForbiddenError as e:
        logger.info("Admin access refused for %s: %s", admin_email, e.code)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.code)

