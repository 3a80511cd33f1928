# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admin operations.

This module provides the AdminService that handles:
- Admin authorization by identity
- User listing and updates (name, email, admin flag, expertise)
- Identity and address bans
- Moderation record and chat transcript review

Example:
    >>> service = AdminService(db)
    >>> admin = await service.require_admin("root@example.com")
    >>> await service.ban_address("203.0.113.7", reason="spam", banned_by=admin.email)
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.domains.access.service import normalize_address
from expertchat.domains.auth.service import (
    expertise_rows,
    normalize_expertise,
    user_to_response,
)
from expertchat.domains.chat.service import ChatSessionService
from expertchat.domains.errors import (
    AdminRequiredError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from expertchat.infrastructure.database.models import BannedAddress, ModerationRecord, User
from expertchat.models.chat import ChatListResponse
from expertchat.models.moderation import (
    BannedAddressListResponse,
    BannedAddressResponse,
    ModerationRecordListResponse,
    ModerationRecordResponse,
)
from expertchat.models.user import UserListResponse, UserResponse, UserUpdateRequest
from expertchat.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class AdminService:
    """Service for admin screens.

    Attributes:
        _db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the admin service.

        Args:
            db: Async database session.
        """
        self._db = db

    async def _get_by_email(self, email: str) -> User | None:
        return await self._db.scalar(select(User).where(User.email == email))

    async def _get_user(self, email: str) -> User:
        user = await self._get_by_email(email)
        if user is None:
            raise NotFoundError(f"User {email} not found")
        return user

    async def require_admin(self, email: str | None) -> User:
        """Resolve an identity that must be an admin.

        Raises:
            AdminRequiredError: If the identity is missing, unknown, banned,
                or not an admin.
        """
        user = await self._get_by_email(email) if email else None
        if user is None or not user.is_admin or user.is_banned:
            raise AdminRequiredError()
        return user

    # =========================================================================
    # Users
    # =========================================================================

    async def list_users(self) -> UserListResponse:
        """All users in registration order."""
        result = await self._db.execute(select(User).order_by(User.id))
        users = [user_to_response(u) for u in result.scalars().all()]
        return UserListResponse(users=users, total=len(users))

    async def update_user(self, user_id: int, request: UserUpdateRequest) -> UserResponse:
        """Apply an admin edit to a user.

        Raises:
            NotFoundError: If the user does not exist.
            ConflictError: If the new email belongs to another user.
        """
        user = await self._db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        if request.email is not None and request.email != user.email:
            if await self._get_by_email(request.email) is not None:
                raise ConflictError(f"User with email {request.email} already exists")
            user.email = request.email
        if request.name is not None:
            user.name = request.name
        if request.is_admin is not None:
            user.is_admin = request.is_admin
        if request.expertise is not None:
            # Old rows go first so re-adding a term does not hit (user_id, term).
            user.expertise.clear()
            await self._db.flush()
            user.expertise.extend(expertise_rows(normalize_expertise(request.expertise)))

        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise ConflictError(f"Could not update user {user_id}") from e

        await self._db.refresh(user)
        logger.info("User updated: %s", user.email)

        return user_to_response(user)

    async def set_identity_ban(self, email: str, banned: bool) -> UserResponse:
        """Ban or unban an identity.

        Raises:
            NotFoundError: If the user does not exist.
        """
        user = await self._get_user(email)
        user.is_banned = banned
        user.banned_at = utc_now() if banned else None
        await self._db.commit()
        await self._db.refresh(user)

        logger.info("Identity %s: %s", "banned" if banned else "unbanned", email)
        return user_to_response(user)

    # =========================================================================
    # Addresses
    # =========================================================================

    async def list_addresses(self) -> BannedAddressListResponse:
        """All banned addresses, oldest first."""
        result = await self._db.execute(select(BannedAddress).order_by(BannedAddress.id))
        addresses = [BannedAddressResponse.model_validate(a) for a in result.scalars().all()]
        return BannedAddressListResponse(addresses=addresses, total=len(addresses))

    async def ban_address(
        self,
        address: str,
        reason: str = "",
        banned_by: str | None = None,
    ) -> BannedAddressResponse:
        """Add an address to the ban list. Banning twice returns the existing entry.

        Raises:
            InvalidInputError: If the address is blank.
        """
        normalized = normalize_address(address)
        if not normalized:
            raise InvalidInputError("Address is required")

        existing = await self._db.scalar(
            select(BannedAddress).where(BannedAddress.address == normalized)
        )
        if existing is not None:
            return BannedAddressResponse.model_validate(existing)

        entry = BannedAddress(address=normalized, reason=reason, banned_by=banned_by)
        self._db.add(entry)
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise ConflictError(f"Address {normalized} is already banned") from e
        await self._db.refresh(entry)

        logger.info("Address banned: %s by %s", normalized, banned_by)
        return BannedAddressResponse.model_validate(entry)

    async def unban_address(self, address: str) -> None:
        """Remove an address from the ban list.

        Raises:
            NotFoundError: If the address is not banned.
        """
        normalized = normalize_address(address)
        entry = await self._db.scalar(
            select(BannedAddress).where(BannedAddress.address == normalized)
        )
        if entry is None:
            raise NotFoundError(f"Address {normalized} is not banned")

        await self._db.delete(entry)
        await self._db.commit()
        logger.info("Address unbanned: %s", normalized)

    # =========================================================================
    # Review
    # =========================================================================

    async def list_records(
        self,
        session_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> ModerationRecordListResponse:
        """Moderation records, newest first, optionally for one session."""
        stmt = select(ModerationRecord)
        count_stmt = select(func.count()).select_from(ModerationRecord)
        if session_id:
            stmt = stmt.where(ModerationRecord.session_id == session_id)
            count_stmt = count_stmt.where(ModerationRecord.session_id == session_id)

        total = await self._db.scalar(count_stmt) or 0
        result = await self._db.execute(
            stmt.order_by(ModerationRecord.id.desc()).limit(limit).offset(offset)
        )
        records = [ModerationRecordResponse.model_validate(r) for r in result.scalars().all()]

        return ModerationRecordListResponse(
            records=records,
            total=total,
            limit=limit,
            offset=offset,
        )

    async def list_chats(self) -> ChatListResponse:
        """Every chat transcript, most recent activity first."""
        chats = await ChatSessionService(self._db).list_transcripts()
        return ChatListResponse(chats=chats, total=len(chats))
