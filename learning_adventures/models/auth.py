# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication request and response schemas."""

from pydantic import BaseModel, Field

from learning_adventures.models.base import CamelModel


class SignupRequest(CamelModel):
    """Adult account registration."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = Field(default=None, description="STUDENT, PARENT or TEACHER")
    grade_level: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class RefreshTokenRequest(CamelModel):
    """Request to refresh access token."""

    refresh_token: str = Field(description="Refresh token")


class TokenResponse(BaseModel):
    """Access and refresh token pair returned by login and refresh."""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = Field(description="Access token lifetime in seconds")
    refresh_expires_in: int = Field(description="Refresh token lifetime in seconds")


class LoginResponse(TokenResponse):
    user: dict


class ChildLoginRequest(CamelModel):
    username: str | None = None
    pin: str | None = None


class CreateChildRequest(CamelModel):
    display_name: str | None = None
    grade_level: str | None = None
    pin: str | None = None
    avatar_id: str | None = None


class UpdateChildRequest(CamelModel):
    display_name: str | None = None
    grade_level: str | None = None
    pin: str | None = None
    avatar_id: str | None = None
