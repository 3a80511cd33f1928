# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User and authentication API schemas."""

from typing import Annotated

from pydantic import Field, StringConstraints

from expertchat.models.common import APIModel, UTCDateTime


class SignupRequest(APIModel):
    """Request to register a new user."""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)
    expertise: list[Annotated[str, StringConstraints(max_length=255)]] = Field(
        default_factory=list,
        description="Topics the user can answer questions about",
    )


class SigninRequest(APIModel):
    """Request to verify credentials."""

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class SigninResponse(APIModel):
    """Result of a successful signin."""

    success: bool = True
    is_admin: bool = False


class UserResponse(APIModel):
    """User as shown to clients. Never carries the password hash."""

    id: int
    email: str
    name: str
    expertise: list[str]
    is_admin: bool
    is_banned: bool
    banned_at: UTCDateTime | None = None
    created_at: UTCDateTime


class UserUpdateRequest(APIModel):
    """Admin update of a user. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    is_admin: bool | None = None
    expertise: list[Annotated[str, StringConstraints(max_length=255)]] | None = None


class UserListResponse(APIModel):
    """Response for the user list endpoint."""

    users: list[UserResponse]
    total: int
