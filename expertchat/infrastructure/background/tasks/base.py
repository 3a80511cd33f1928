# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Base utilities for Dramatiq tasks.

Thread-Local Event Loop Management:
    Dramatiq workers run actors on several threads (--threads N). SQLAlchemy
    async engines are bound to the event loop they were created on, so each
    worker thread keeps one persistent event loop and one engine created on
    that loop, and reuses both for every task it runs.
"""

import asyncio
import logging
import threading
from typing import Any, Coroutine, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expertchat.core.config import get_settings
from expertchat.infrastructure.database.connection import (
    create_engine_from_settings,
    create_sessionmaker,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Thread-local storage for event loops and sessionmakers
_thread_local = threading.local()


def _get_thread_event_loop() -> asyncio.AbstractEventLoop:
    """Get or create a persistent event loop for the current thread.

    A new loop invalidates the thread's cached sessionmaker, since its
    engine belongs to the old loop.
    """
    loop = getattr(_thread_local, "event_loop", None)

    if loop is None or loop.is_closed():
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        _thread_local.event_loop = loop
        _thread_local.sessionmaker = None

        logger.debug(
            "Created new event loop for thread %s",
            threading.current_thread().name,
        )

    return loop


def get_worker_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Sessionmaker bound to an engine owned by the current worker thread."""
    sessionmaker = getattr(_thread_local, "sessionmaker", None)
    if sessionmaker is None:
        engine = create_engine_from_settings(get_settings())
        sessionmaker = create_sessionmaker(engine)
        _thread_local.sessionmaker = sessionmaker
    return sessionmaker


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine from a sync Dramatiq actor.

    Args:
        coro: Coroutine to run.

    Returns:
        Result of coroutine.

    Example:
        @dramatiq.actor
        def my_task(record_id: int):
            async def _process():
                async with session_scope(get_worker_sessionmaker()) as session:
                    ...
            return run_async(_process())
    """
    loop = _get_thread_event_loop()
    return loop.run_until_complete(coro)
