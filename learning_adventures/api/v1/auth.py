# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

- POST /signup - Register an adult account
- POST /login - Email/password login, returns a token pair
- POST /refresh - Exchange a refresh token for a new pair
- GET /me - Current user
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.dependencies import (
    get_current_db_user,
    get_db,
    get_jwt_manager,
    get_password_hasher,
)
from learning_adventures.api.middleware.rate_limit import RATE_LIMIT_AUTH, get_ip_only, limiter
from learning_adventures.domains.auth.jwt import JWTManager
from learning_adventures.domains.auth.password import PasswordHasher
from learning_adventures.domains.auth.service import (
    AuthService,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    RestrictedDomainError,
    SignupValidationError,
    TokenRefreshError,
    is_admin_user,
    user_summary,
)
from learning_adventures.infrastructure.database.models import User
from learning_adventures.models.auth import (
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    SignupRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(
    db: AsyncSession = Depends(get_db),
    jwt_manager: JWTManager = Depends(get_jwt_manager),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> AuthService:
    return AuthService(db, jwt_manager, hasher)


@router.post("/signup", status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def signup(
    request: Request,
    data: SignupRequest,
    service: AuthService = Depends(_get_service),
) -> dict:
    """Register a student, parent or teacher account."""
    try:
        user = await service.signup(
            name=data.name,
            email=data.email,
            password=data.password,
            role=data.role,
            grade_level=data.grade_level,
        )
    except SignupValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RestrictedDomainError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except EmailAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return {"message": "User created successfully", "user": user_summary(user)}


@router.post("/login", response_model=LoginResponse)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def login(
    request: Request,
    data: LoginRequest,
    service: AuthService = Depends(_get_service),
) -> LoginResponse:
    """Authenticate with email and password."""
    try:
        user, tokens = await service.login(data.email or "", data.password or "")
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    return LoginResponse(**tokens.model_dump(), user=user_summary(user))


@router.post("/refresh", response_model=TokenResponse)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def refresh(
    request: Request,
    data: RefreshTokenRequest,
    service: AuthService = Depends(_get_service),
) -> TokenResponse:
    try:
        tokens = await service.refresh_tokens(data.refresh_token)
    except TokenRefreshError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid refresh token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(**tokens.model_dump())


@router.get("/me")
async def me(user: User = Depends(get_current_db_user)) -> dict:
    summary = user_summary(user)
    summary["image"] = user.image
    summary["isAdmin"] = is_admin_user(user.role, user.email)
    return {"user": summary}
