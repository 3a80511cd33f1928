# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access control for banned identities and addresses."""

from expertchat.domains.access.service import (
    AccessDecision,
    AccessGuard,
    normalize_address,
)

__all__ = ["AccessDecision", "AccessGuard", "normalize_address"]
