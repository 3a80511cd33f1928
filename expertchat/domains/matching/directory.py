# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Expert directory lookups over the user store."""

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.infrastructure.database.models import User, UserExpertise


class ExpertDirectory:
    """Finds users whose declared expertise matches a set of terms.

    Users are enumerated in insertion order (ascending id); the first
    eligible match wins. There is no ranking by overlap size or recency.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_by_email(self, email: str) -> User | None:
        """Look up a user by identity reference."""
        result = await self._db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_expert(
        self,
        candidates: Iterable[str],
        exclude: str | None = None,
    ) -> User | None:
        """Return the first user with any expertise term in candidates.

        Args:
            candidates: Normalized topic terms.
            exclude: Email that is never eligible (the asker).

        Returns:
            Matching user, or None. Banned users are never returned.
        """
        terms = sorted(set(candidates))
        if not terms:
            return None

        stmt = (
            select(User)
            .join(UserExpertise, UserExpertise.user_id == User.id)
            .where(
                UserExpertise.term.in_(terms),
                User.is_banned.is_(False),
            )
            .order_by(User.id)
            .limit(1)
        )
        if exclude:
            stmt = stmt.where(User.email != exclude)

        result = await self._db.execute(stmt)
        return result.scalars().first()
