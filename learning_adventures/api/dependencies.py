# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

Dependencies are used to:
- Get database sessions
- Get the authenticated user (token claims or the loaded User row)
- Enforce role requirements
- Build auth helpers

Example:
    @router.get("/goals")
    async def list_goals(
        db: AsyncSession = Depends(get_db),
        current_user: CurrentUser = Depends(require_auth),
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.middleware.auth import CurrentUser, get_current_user
from learning_adventures.core.config import get_settings
from learning_adventures.domains.auth.jwt import JWTManager
from learning_adventures.domains.auth.password import PasswordHasher
from learning_adventures.infrastructure.database import get_session
from learning_adventures.infrastructure.database.models import User

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session that commits on success and rolls back on error."""
    async with get_session() as session:
        yield session


# =========================================================================
# Authentication Dependencies
# =========================================================================


def get_optional_user(request: Request) -> CurrentUser | None:
    return get_current_user(request)


def require_auth(request: Request) -> CurrentUser:
    """Require an authenticated user.

    Raises:
        HTTPException: 401 if not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(request: Request) -> CurrentUser:
    """Require an admin (ADMIN role or admin email domain).

    Raises:
        HTTPException: 401 if not authenticated, 403 if not admin.
    """
    user = require_auth(request)
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


class RequireRole:
    """Dependency requiring one of the given roles. Admins always pass.

    Example:
        @router.get("/children")
        async def children(
            user: CurrentUser = Depends(RequireRole("PARENT")),
        ):
            ...
    """

    def __init__(self, *roles: str) -> None:
        self.roles = roles

    def __call__(self, request: Request) -> CurrentUser:
        user = require_auth(request)
        if not user.has_any_role(*self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(self.roles)}",
            )
        return user


async def get_current_db_user(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the authenticated user's row.

    Raises:
        HTTPException: 404 if the account no longer exists.
    """
    user = await db.get(User, current_user.id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def get_jwt_manager() -> JWTManager:
    return JWTManager(get_settings().jwt)


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=12)


# Type aliases for cleaner endpoint signatures
DB = Annotated[AsyncSession, Depends(get_db)]
OptionalUser = Annotated[CurrentUser | None, Depends(get_optional_user)]
AuthenticatedUser = Annotated[CurrentUser, Depends(require_auth)]
AdminUser = Annotated[CurrentUser, Depends(require_admin)]
DBUser = Annotated[User, Depends(get_current_db_user)]
