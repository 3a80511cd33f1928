# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Background task infrastructure.

Quick Start:
    # Setup broker (call once at startup)
    from expertchat.infrastructure.background import setup_dramatiq
    setup_dramatiq()

    # Enqueue an alert
    from expertchat.infrastructure.background.tasks import send_moderation_alert
    send_moderation_alert.send(record_id)

Running Workers:
    dramatiq expertchat.infrastructure.background.tasks --processes 1 --threads 4
"""

from expertchat.infrastructure.background.broker import (
    BrokerManager,
    Queues,
    get_broker,
    get_broker_manager,
    setup_dramatiq,
    shutdown_dramatiq,
)

# Task actors are imported lazily to avoid circular imports:
# from expertchat.infrastructure.background.tasks import send_moderation_alert

__all__ = [
    "BrokerManager",
    "Queues",
    "get_broker",
    "get_broker_manager",
    "setup_dramatiq",
    "shutdown_dramatiq",
]
