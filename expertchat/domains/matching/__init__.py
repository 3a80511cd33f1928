# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Question routing: expert directory and assignment engine."""

from expertchat.domains.matching.directory import ExpertDirectory
from expertchat.domains.matching.service import AssignmentService, new_session_id

__all__ = ["AssignmentService", "ExpertDirectory", "new_session_id"]
