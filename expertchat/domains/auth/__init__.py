# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User registration and credential checks."""

from expertchat.domains.auth.password import PasswordHasher
from expertchat.domains.auth.service import (
    AuthService,
    InvalidCredentialsError,
    normalize_expertise,
    user_to_response,
)

__all__ = [
    "AuthService",
    "InvalidCredentialsError",
    "PasswordHasher",
    "normalize_expertise",
    "user_to_response",
]
