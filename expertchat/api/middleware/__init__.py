# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware."""

from expertchat.api.middleware.rate_limit import (
    SIGNIN_LIMIT,
    limiter,
    rate_limit_exceeded_handler,
)
from expertchat.api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "SIGNIN_LIMIT",
    "limiter",
    "rate_limit_exceeded_handler",
    "RequestContextMiddleware",
]
