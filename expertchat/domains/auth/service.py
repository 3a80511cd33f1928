# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Signup and signin.

Session tokens are out of scope: signin only verifies credentials and
reports whether the user is an admin.
"""

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.domains.auth.password import PasswordHasher
from expertchat.domains.errors import ConflictError, ServiceError
from expertchat.infrastructure.database.models import User, UserExpertise
from expertchat.infrastructure.similarity import normalize_term
from expertchat.models.user import SigninResponse, SignupRequest, UserResponse

logger = logging.getLogger(__name__)


class InvalidCredentialsError(ServiceError):
    """Raised when email or password does not match."""

    pass


def normalize_expertise(terms: Iterable[str]) -> list[str]:
    """Normalize expertise terms, dropping blanks and duplicates, keeping order."""
    seen: dict[str, None] = {}
    for term in terms:
        normalized = normalize_term(term)
        if normalized:
            seen.setdefault(normalized, None)
    return list(seen)


def expertise_rows(terms: Iterable[str]) -> list[UserExpertise]:
    """Build expertise rows for already normalized terms."""
    return [UserExpertise(term=term, position=i) for i, term in enumerate(terms)]


def user_to_response(user: User) -> UserResponse:
    """Convert a user to its API representation."""
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        expertise=user.expertise_terms,
        is_admin=user.is_admin,
        is_banned=user.is_banned,
        banned_at=user.banned_at,
        created_at=user.created_at,
    )


class AuthService:
    """Registers users and verifies credentials.

    Attributes:
        _db: Async database session.
        _hasher: Password hasher.
    """

    def __init__(self, db: AsyncSession, hasher: PasswordHasher | None = None) -> None:
        self._db = db
        self._hasher = hasher or PasswordHasher()

    async def _get_by_email(self, email: str) -> User | None:
        return await self._db.scalar(select(User).where(User.email == email))

    async def signup(self, request: SignupRequest) -> UserResponse:
        """Create a user with hashed password and normalized expertise.

        Raises:
            ConflictError: If the email is already registered.
        """
        if await self._get_by_email(request.email) is not None:
            raise ConflictError(f"User with email {request.email} already exists")

        user = User(
            email=request.email,
            name=request.name,
            password_hash=await self._hasher.hash_async(request.password),
            expertise=expertise_rows(normalize_expertise(request.expertise)),
        )
        self._db.add(user)

        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise ConflictError(f"User with email {request.email} already exists") from e

        await self._db.refresh(user)
        logger.info("User registered: %s (%d expertise terms)", user.email, len(user.expertise))

        return user_to_response(user)

    async def signin(self, email: str, password: str) -> SigninResponse:
        """Verify credentials.

        Raises:
            InvalidCredentialsError: If the user is unknown or the password
                does not match.
        """
        user = await self._get_by_email(email)
        if user is None or not await self._hasher.verify_async(password, user.password_hash):
            logger.info("Failed signin for %s", email)
            raise InvalidCredentialsError("Invalid credentials")

        return SigninResponse(success=True, is_admin=user.is_admin)
