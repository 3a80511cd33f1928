# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API test fixtures.

The app runs in-process over ``httpx.ASGITransport``. The lifespan does not
run there, so the app-scoped collaborators are placed on ``app.state`` by
hand and ``get_db`` is pointed at the in-memory test database.
"""

from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expertchat.api.app import create_app
from expertchat.api.dependencies import get_db
from expertchat.infrastructure.database.connection import session_scope

CLIENT_ADDRESS = "203.0.113.5"


@pytest.fixture
def app(
    sessionmaker: async_sessionmaker[AsyncSession],
    redactor,
    resolver,
    dispatcher,
) -> FastAPI:
    """Application wired to the test database and fakes."""
    app = create_app()

    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_scope(sessionmaker) as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.state.redactor = redactor
    app.state.similarity_resolver = resolver
    app.state.alert_dispatcher = dispatcher
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client calling the app from CLIENT_ADDRESS."""
    transport = httpx.ASGITransport(app=app, client=(CLIENT_ADDRESS, 1234))
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def client_address() -> str:
    """Address the test client connects from."""
    return CLIENT_ADDRESS
