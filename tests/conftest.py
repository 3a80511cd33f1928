# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests against an in-memory SQLite database
- API tests over the ASGI app with httpx
"""

import os

# Must be set before any expertchat module reads settings.
os.environ["ENVIRONMENT"] = "test"
os.environ["DRAMATIQ_TEST_MODE"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "DEBUG"

from collections.abc import AsyncGenerator, Awaitable, Callable, Iterable
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from expertchat.core.config import clear_settings_cache
from expertchat.domains.auth.password import PasswordHasher
from expertchat.domains.auth.service import expertise_rows, normalize_expertise
from expertchat.domains.moderation.redaction import Redactor
from expertchat.infrastructure.database.connection import create_sessionmaker
from expertchat.infrastructure.database.models import Base, User

clear_settings_cache()

# Low cost keeps bcrypt fast in tests.
FAST_HASHER = PasswordHasher(rounds=4)

BLOCKLIST = ["idiot", "moron", "shit", "testfilter"]


class FakeResolver:
    """Similarity resolver returning canned related terms."""

    def __init__(self, related: dict[str, set[str]] | None = None) -> None:
        self.related = related or {}
        self.calls: list[str] = []

    async def resolve(self, topic: str) -> set[str]:
        self.calls.append(topic)
        return set(self.related.get(topic.strip().lower(), set()))

    async def aclose(self) -> None:
        pass


class RecordingDispatcher:
    """Alert dispatcher that remembers what it was handed."""

    def __init__(self) -> None:
        self.record_ids: list[int] = []

    async def dispatch(self, record_id: int) -> None:
        self.record_ids.append(record_id)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def file_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with a real connection pool.

    Each session gets its own connection, so concurrent writers contend
    on the database lock the way separate requests do.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'expertchat.db'}",
        connect_args={"timeout": 30},
        pool_size=25,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def file_sessionmaker(file_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory over the file-backed engine."""
    return create_sessionmaker(file_engine)


@pytest.fixture
def sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like the application's."""
    return create_sessionmaker(engine)


@pytest_asyncio.fixture
async def db(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """A database session for one test."""
    async with sessionmaker() as session:
        yield session


@pytest.fixture
def make_user(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[User]]:
    """Factory inserting a user, committed in its own session."""

    async def _make_user(
        email: str,
        expertise: Iterable[str] = (),
        name: str = "",
        password: str = "password123",
        is_admin: bool = False,
        is_banned: bool = False,
    ) -> User:
        async with sessionmaker() as session:
            user = User(
                email=email,
                name=name or email.split("@")[0].title(),
                password_hash=FAST_HASHER.hash(password),
                is_admin=is_admin,
                is_banned=is_banned,
                expertise=expertise_rows(normalize_expertise(expertise)),
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make_user


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def hasher() -> PasswordHasher:
    """Low-cost password hasher."""
    return FAST_HASHER


@pytest.fixture
def redactor() -> Redactor:
    """Redactor with a small fixed blocklist."""
    return Redactor(BLOCKLIST)


@pytest.fixture
def resolver() -> FakeResolver:
    """Resolver that knows volcanoes are related to volcanology."""
    return FakeResolver({"volcanoes": {"volcano", "volcanology", "lava"}})


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    """Alert dispatcher that records record ids."""
    return RecordingDispatcher()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark test as an API test over the ASGI app"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[Any]) -> None:
    """Mark tests by directory."""
    for item in items:
        path = str(item.fspath)
        if "/unit/" in path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in path:
            item.add_marker(pytest.mark.integration)
