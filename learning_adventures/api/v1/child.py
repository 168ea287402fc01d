# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Child login endpoints.

Children authenticate with a username and 4-digit PIN. The session
token travels in an httponly cookie rather than a bearer header.
"""

import logging

from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.dependencies import get_db
from learning_adventures.api.middleware.rate_limit import RATE_LIMIT_AUTH, get_ip_only, limiter
from learning_adventures.core.config import get_settings
from learning_adventures.domains.child_auth import ChildAuthService, child_summary
from learning_adventures.domains.child_auth.service import (
    ChildInvalidCredentialsError,
    ChildLoginValidationError,
    ParentNotVerifiedError,
)
from learning_adventures.models.auth import ChildLoginRequest

logger = logging.getLogger(__name__)

router = APIRouter()

COOKIE_NAME = get_settings().child_session.cookie_name


def _get_service(db: AsyncSession = Depends(get_db)) -> ChildAuthService:
    return ChildAuthService(db)


@router.post("/login")
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def child_login(
    request: Request,
    response: Response,
    data: ChildLoginRequest,
    service: ChildAuthService = Depends(_get_service),
) -> dict:
    """PIN login; sets the session cookie on success."""
    try:
        child, token = await service.login(data.username, data.pin)
    except ChildLoginValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ChildInvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except ParentNotVerifiedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=service.session_max_age,
        httponly=True,
        samesite="lax",
        secure=get_settings().environment == "production",
        path="/",
    )

    return {
        "success": True,
        "child": child_summary(child),
        "message": f"Welcome back, {child.display_name}!",
    }


@router.post("/logout")
async def child_logout(
    response: Response,
    child_session: str | None = Cookie(default=None, alias=COOKIE_NAME),
    service: ChildAuthService = Depends(_get_service),
) -> dict:
    if child_session:
        await service.delete_session(child_session)
    response.delete_cookie(COOKIE_NAME, path="/")
    return {"success": True, "message": "Logged out successfully"}


@router.get("/session")
async def current_child(
    child_session: str | None = Cookie(default=None, alias=COOKIE_NAME),
    service: ChildAuthService = Depends(_get_service),
) -> dict:
    """Resolve the session cookie to the signed-in child."""
    child = await service.get_session_child(child_session)
    if child is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No valid child session",
        )
    return {"authenticated": True, "child": child_summary(child)}
