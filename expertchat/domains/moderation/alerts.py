# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Moderation alert hand-off and delivery.

The request path only hands a record id to an ``AlertDispatcher``; the
email itself is built and sent later by ``ModerationAlertService`` in a
background worker, reading the record back from the store.
"""

import logging
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.domains.errors import NotFoundError
from expertchat.infrastructure.database.models import ModerationRecord
from expertchat.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    NotificationPayload,
)
from expertchat.utils.datetime import format_iso

logger = logging.getLogger(__name__)

ALERT_NOTIFICATION_TYPE = "moderation_alert"
ALERT_SUBJECT = "Moderation Alert"


class AlertDispatcher(Protocol):
    """Hands one moderation alert to an out-of-band sender.

    Implementations must not raise: failures are logged and the caller's
    write stands.
    """

    async def dispatch(self, record_id: int) -> None: ...


def _snapshot_created(snapshot: dict[str, Any]) -> str | None:
    created = snapshot.get("created_at")
    return created if isinstance(created, str) else None


def build_alert_payload(
    record: ModerationRecord,
    recipient_email: str | None,
) -> NotificationPayload:
    """Render a moderation record into an email notification.

    Args:
        record: The persisted moderation record.
        recipient_email: Admin inbox.

    Returns:
        Payload with the message details in ``data``.
    """
    asker = record.asker_snapshot or {}
    expert = record.expert_snapshot or {}

    message = (
        f"A message from {record.sender} in chat {record.session_id} "
        f"was redacted for containing \"{record.offending_token}\"."
    )

    data: dict[str, Any] = {
        "Record": record.id,
        "Session": record.session_id,
        "From": record.sender,
        "Original text": record.original_text,
        "Redacted text": record.redacted_text,
        "Offending word": record.offending_token,
        "Asker": asker.get("email"),
        "Asker created": _snapshot_created(asker),
        "Expert": expert.get("email"),
        "Expert created": _snapshot_created(expert),
        "Topic": record.question_topic,
        "Question": record.question_body,
        "Recorded at": format_iso(record.created_at) or None,
    }

    return NotificationPayload(
        notification_type=ALERT_NOTIFICATION_TYPE,
        title=ALERT_SUBJECT,
        message=message,
        recipient_email=recipient_email,
        data=data,
        priority="high",
    )


class ModerationAlertService:
    """Delivers the alert email for one moderation record."""

    def __init__(
        self,
        session: AsyncSession,
        channel: BaseChannel,
        recipient_email: str | None,
    ) -> None:
        self._session = session
        self._channel = channel
        self._recipient_email = recipient_email

    async def deliver(self, record_id: int) -> ChannelResult:
        """Load the record and send its alert.

        Args:
            record_id: ModerationRecord primary key.

        Returns:
            Channel result; delivery failures are reported, not raised.

        Raises:
            NotFoundError: If the record does not exist.
        """
        record = await self._session.get(ModerationRecord, record_id)
        if record is None:
            raise NotFoundError(f"Moderation record {record_id} not found")

        payload = build_alert_payload(record, self._recipient_email)
        result = await self._channel.send(payload)

        logger.info(
            "Moderation alert for record %d: %s",
            record_id,
            result.status.value,
        )
        return result
