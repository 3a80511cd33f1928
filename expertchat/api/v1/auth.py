# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication endpoints.

This module provides:
- POST /signup - Register a user with optional expertise
- POST /signin - Verify credentials

Signin is rate limited per client address.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from expertchat.api.dependencies import get_client_address, get_db
from expertchat.api.middleware.rate_limit import SIGNIN_LIMIT, limiter
from expertchat.domains.access.service import AccessGuard
from expertchat.domains.auth.service import AuthService, InvalidCredentialsError
from expertchat.domains.errors import ConflictError, ForbiddenError
from expertchat.models.user import SigninRequest, SigninResponse, SignupRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
)
async def signup(
    data: SignupRequest,
    address: str = Depends(get_client_address),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Register a new user.

    Raises:
        HTTPException: 403 if the address is banned, 409 if the email is
            taken.
    """
    try:
        await AccessGuard(db).enforce(address=address)
        return await AuthService(db).signup(data)
    except ForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.code)
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User with email {data.email} already exists",
        )


@router.post(
    "/signin",
    response_model=SigninResponse,
    summary="Sign in",
)
@limiter.limit(SIGNIN_LIMIT)
async def signin(
    request: Request,
    data: SigninRequest,
    address: str = Depends(get_client_address),
    db: AsyncSession = Depends(get_db),
) -> SigninResponse:
    """Verify credentials and report the admin flag.

    Raises:
        HTTPException: 403 if banned, 401 on bad credentials.
    """
    try:
        await AccessGuard(db).enforce(identity=data.email, address=address)
        return await AuthService(db).signin(data.email, data.password)
    except ForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.code)
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
