# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admin endpoints.

Every route requires the ``X-User-Email`` header to name an admin user.

- GET /users - List users
- PATCH /users/{user_id} - Update name, email, admin flag, expertise
- POST /users/{email}/ban - Ban an identity
- POST /users/{email}/unban - Unban an identity
- GET /addresses - List banned addresses
- POST /addresses - Ban an address
- DELETE /addresses/{address} - Unban an address
- GET /moderation - List moderation records
- GET /chats - List chat transcripts
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.api.dependencies import get_db, require_admin
from expertchat.domains.admin.service import AdminService
from expertchat.domains.errors import ConflictError, InvalidInputError, NotFoundError
from expertchat.infrastructure.database.models import User
from expertchat.models.chat import ChatListResponse
from expertchat.models.common import OkResponse
from expertchat.models.moderation import (
    BannedAddressCreateRequest,
    BannedAddressListResponse,
    BannedAddressResponse,
    ModerationRecordListResponse,
)
from expertchat.models.user import UserListResponse, UserResponse, UserUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/users", response_model=UserListResponse, summary="List users")
async def list_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserListResponse:
    """List all users in registration order."""
    return await AdminService(db).list_users()


@router.patch("/users/{user_id}", response_model=UserResponse, summary="Update user")
async def update_user(
    user_id: int,
    data: UserUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Update a user.

    Raises:
        HTTPException: 404 if the user does not exist, 409 on email clash.
    """
    logger.info("Updating user %d by %s", user_id, admin.email)

    try:
        return await AdminService(db).update_user(user_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/users/{email}/ban", response_model=UserResponse, summary="Ban identity")
async def ban_user(
    email: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Ban an identity."""
    logger.info("Banning %s by %s", email, admin.email)

    try:
        return await AdminService(db).set_identity_ban(email, banned=True)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/users/{email}/unban", response_model=UserResponse, summary="Unban identity")
async def unban_user(
    email: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Lift an identity ban."""
    try:
        return await AdminService(db).set_identity_ban(email, banned=False)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/addresses",
    response_model=BannedAddressListResponse,
    summary="List banned addresses",
)
async def list_addresses(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> BannedAddressListResponse:
    """List banned addresses."""
    return await AdminService(db).list_addresses()


@router.post(
    "/addresses",
    response_model=BannedAddressResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ban address",
)
async def ban_address(
    data: BannedAddressCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> BannedAddressResponse:
    """Ban a client address."""
    try:
        return await AdminService(db).ban_address(
            data.address,
            reason=data.reason,
            banned_by=admin.email,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete("/addresses/{address}", response_model=OkResponse, summary="Unban address")
async def unban_address(
    address: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> OkResponse:
    """Remove an address from the ban list."""
    try:
        await AdminService(db).unban_address(address)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return OkResponse()


@router.get(
    "/moderation",
    response_model=ModerationRecordListResponse,
    summary="List moderation records",
)
async def list_moderation_records(
    session_id: Annotated[str | None, Query(alias="sessionId")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ModerationRecordListResponse:
    """List moderation records, newest first."""
    return await AdminService(db).list_records(session_id=session_id, limit=limit, offset=offset)


@router.get("/chats", response_model=ChatListResponse, summary="List chats")
async def list_chats(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ChatListResponse:
    """List chat transcripts grouped by session, most recent activity first."""
    return await AdminService(db).list_chats()
