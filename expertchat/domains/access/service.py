# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access guard for banned identities and client addresses.

The guard is consulted at every mutating entry point before any other
work happens. It only reads ban state; bans are managed by the admin
service.

Example:
    >>> guard = AccessGuard(db)
    >>> await guard.enforce(identity="amy@example.com", address="203.0.113.7")
"""

import ipaddress
import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.domains.errors import BannedError
from expertchat.infrastructure.database.models import BannedAddress, User

logger = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    """Canonical text form of a client address.

    IP addresses are normalized (``::ffff:1.2.3.4`` becomes ``1.2.3.4``,
    IPv6 is compressed and lowercased). Anything that does not parse as an
    IP is only stripped and lowercased.
    """
    candidate = address.strip()
    try:
        ip = ipaddress.ip_address(candidate)
    except ValueError:
        return candidate.lower()

    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return str(ip)


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an access check.

    Attributes:
        allowed: Whether the request may proceed.
        reason: Why it was refused, None when allowed.
    """

    allowed: bool
    reason: str | None = None


ALLOWED = AccessDecision(allowed=True)


class AccessGuard:
    """Refuses requests from banned identities or addresses."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def is_identity_banned(self, identity: str) -> bool:
        """Whether a user with this email exists and is banned."""
        banned = await self._db.scalar(select(User.is_banned).where(User.email == identity))
        return bool(banned)

    async def is_address_banned(self, address: str) -> bool:
        """Whether the normalized address is on the ban list."""
        found = await self._db.scalar(
            select(BannedAddress.id).where(BannedAddress.address == normalize_address(address))
        )
        return found is not None

    async def check(
        self,
        identity: str | None = None,
        address: str | None = None,
    ) -> AccessDecision:
        """Decide whether a request may proceed.

        Args:
            identity: Acting user's email, if known.
            address: Client address, if known.

        Returns:
            AccessDecision; unknown identities are allowed.
        """
        if address and await self.is_address_banned(address):
            return AccessDecision(allowed=False, reason="address banned")
        if identity and await self.is_identity_banned(identity):
            return AccessDecision(allowed=False, reason="identity banned")
        return ALLOWED

    async def enforce(
        self,
        identity: str | None = None,
        address: str | None = None,
    ) -> None:
        """Raise if the request must be refused.

        Raises:
            BannedError: If the identity or address is banned.
        """
        decision = await self.check(identity=identity, address=address)
        if not decision.allowed:
            logger.warning(
                "Access refused (%s): identity=%s address=%s",
                decision.reason,
                identity,
                address,
            )
            raise BannedError()
