# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admin operations."""

from expertchat.domains.admin.service import AdminService

__all__ = ["AdminService"]
