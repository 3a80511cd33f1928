# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Dramatiq actors.

Running Workers:
    dramatiq expertchat.infrastructure.background.tasks --processes 1 --threads 4
"""

from expertchat.infrastructure.background.tasks.alerts import (
    DramatiqAlertDispatcher,
    create_alert_dispatcher,
    send_moderation_alert,
)
from expertchat.infrastructure.background.tasks.base import get_worker_sessionmaker, run_async

__all__ = [
    "DramatiqAlertDispatcher",
    "create_alert_dispatcher",
    "send_moderation_alert",
    "get_worker_sessionmaker",
    "run_async",
]
