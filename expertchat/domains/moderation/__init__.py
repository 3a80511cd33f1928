# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Chat moderation: redaction, audit records and alerts."""

from expertchat.domains.moderation.alerts import (
    AlertDispatcher,
    ModerationAlertService,
    build_alert_payload,
)
from expertchat.domains.moderation.redaction import RedactionResult, Redactor
from expertchat.domains.moderation.service import ModerationPipeline, user_snapshot

__all__ = [
    "AlertDispatcher",
    "ModerationAlertService",
    "build_alert_payload",
    "RedactionResult",
    "Redactor",
    "ModerationPipeline",
    "user_snapshot",
]
