# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Moderation alert background task.

The API hands each new ModerationRecord id to the ``alerts`` queue through
``DramatiqAlertDispatcher``; a worker then runs ``send_moderation_alert``
which emails the admin inbox. Actors never retry, so a record produces at
most one alert.
"""

import asyncio
import logging
from typing import Any

import dramatiq
import redis
from dramatiq.errors import DramatiqError

from expertchat.core.config import get_settings
from expertchat.domains.errors import NotFoundError
from expertchat.domains.moderation.alerts import ModerationAlertService
from expertchat.infrastructure.background.broker import Queues, setup_dramatiq
from expertchat.infrastructure.background.tasks.base import get_worker_sessionmaker, run_async
from expertchat.infrastructure.database.connection import session_scope
from expertchat.infrastructure.notifications.channels import EmailChannel

# Setup broker before defining actors
setup_dramatiq()

logger = logging.getLogger(__name__)


@dramatiq.actor(
    queue_name=Queues.ALERTS,
    max_retries=0,
    time_limit=60000,  # 1 minute
)
def send_moderation_alert(record_id: int) -> dict[str, Any]:
    """Email the admin inbox about one moderation record.

    Args:
        record_id: ModerationRecord primary key.

    Returns:
        Channel result as a dictionary.
    """

    async def _send() -> dict[str, Any]:
        settings = get_settings()
        async with session_scope(get_worker_sessionmaker()) as session:
            service = ModerationAlertService(
                session,
                EmailChannel(settings.alerts),
                settings.alerts.recipient_email,
            )
            result = await service.deliver(record_id)
            return result.to_dict()

    try:
        return run_async(_send())
    except NotFoundError:
        logger.warning("Moderation record %d vanished before its alert was sent", record_id)
        return {"status": "missing", "record_id": record_id}


class DramatiqAlertDispatcher:
    """Enqueues moderation alerts on the ``alerts`` queue.

    ``actor.send`` is blocking network I/O for the Redis broker, so it runs
    in a thread and is bounded by ``enqueue_timeout``. Failures are logged
    and never raised.
    """

    def __init__(self, enqueue_timeout: float = 2.0) -> None:
        self._enqueue_timeout = enqueue_timeout

    async def dispatch(self, record_id: int) -> None:
        """Hand one record id to the alert worker."""
        try:
            await asyncio.wait_for(
                asyncio.to_thread(send_moderation_alert.send, record_id),
                timeout=self._enqueue_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Timed out enqueuing moderation alert for record %d after %.1fs",
                record_id,
                self._enqueue_timeout,
            )
            return
        except (DramatiqError, redis.RedisError, OSError) as e:
            logger.error(
                "Failed to enqueue moderation alert for record %d: %s",
                record_id,
                str(e),
                exc_info=True,
            )
            return

        logger.debug("Moderation alert enqueued for record %d", record_id)


def create_alert_dispatcher() -> DramatiqAlertDispatcher:
    """Build the dispatcher from settings."""
    return DramatiqAlertDispatcher(enqueue_timeout=get_settings().alerts.enqueue_timeout)
