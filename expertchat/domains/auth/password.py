# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing with bcrypt.

bcrypt is deliberately slow, so the async helpers run it in a worker
thread instead of blocking the event loop.

Example:
    >>> hasher = PasswordHasher(rounds=4)
    >>> hashed = await hasher.hash_async("s3cret")
    >>> await hasher.verify_async("s3cret", hashed)
    True
"""

import asyncio
import logging

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt ignores input past 72 bytes and newer releases reject it.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt hashing with a configurable cost.

    Attributes:
        _rounds: bcrypt cost factor.
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:MAX_PASSWORD_BYTES]

    def hash(self, password: str) -> str:
        """Hash a password.

        Raises:
            ValueError: If password is empty.
        """
        if not password:
            raise ValueError("Password cannot be empty")

        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a stored hash. Malformed hashes never match."""
        if not password or not password_hash:
            return False

        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.warning("Password verification failed: %s", str(e))
            return False

    async def hash_async(self, password: str) -> str:
        """Hash a password off the event loop."""
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        """Verify a password off the event loop."""
        return await asyncio.to_thread(self.verify, password, password_hash)
