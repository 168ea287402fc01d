# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent dashboard endpoints: child profiles and age verification."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.dependencies import get_current_db_user, get_db
from learning_adventures.domains.parent import (
    ChildNotFoundError,
    ChildValidationError,
    NotAParentError,
    ParentNotVerifiedError,
    ParentService,
    serialize_child,
)
from learning_adventures.infrastructure.database.models import User, UserRole
from learning_adventures.models.auth import CreateChildRequest, UpdateChildRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> ParentService:
    return ParentService(db)


@router.get("/children")
async def list_children(
    user: User = Depends(get_current_db_user),
    service: ParentService = Depends(_get_service),
) -> dict:
    try:
        return await service.list_children(user)
    except NotAParentError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.post("/children", status_code=status.HTTP_201_CREATED)
async def create_child(
    data: CreateChildRequest,
    user: User = Depends(get_current_db_user),
    service: ParentService = Depends(_get_service),
) -> dict:
    """Create a child profile with a generated username."""
    try:
        child = await service.create_child(
            user,
            display_name=data.display_name,
            grade_level=data.grade_level,
            pin=data.pin,
            avatar_id=data.avatar_id,
        )
    except (NotAParentError, ParentNotVerifiedError) as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ChildValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {
        "success": True,
        "child": serialize_child(child),
        "message": f"Child profile created! Username: {child.username}",
    }


@router.get("/children/{child_id}")
async def get_child(
    child_id: str,
    user: User = Depends(get_current_db_user),
    service: ParentService = Depends(_get_service),
) -> dict:
    try:
        child = await service.get_child(user, child_id)
    except ChildNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"child": serialize_child(child)}


@router.patch("/children/{child_id}")
async def update_child(
    child_id: str,
    data: UpdateChildRequest,
    user: User = Depends(get_current_db_user),
    service: ParentService = Depends(_get_service),
) -> dict:
    try:
        child = await service.update_child(
            user,
            child_id,
            display_name=data.display_name,
            grade_level=data.grade_level,
            avatar_id=data.avatar_id,
            pin=data.pin,
        )
    except ChildNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ChildValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"success": True, "child": serialize_child(child)}


@router.delete("/children/{child_id}")
async def delete_child(
    child_id: str,
    user: User = Depends(get_current_db_user),
    service: ParentService = Depends(_get_service),
) -> dict:
    try:
        await service.delete_child(user, child_id)
    except ChildNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, "message": "Child profile deleted"}


@router.get("/verify")
async def verification_status(user: User = Depends(get_current_db_user)) -> dict:
    if user.role != UserRole.PARENT.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only parent accounts can be verified",
        )
    return {"verified": bool(user.is_verified_adult)}


@router.post("/verify")
async def verify_parent(
    user: User = Depends(get_current_db_user),
    service: ParentService = Depends(_get_service),
) -> dict:
    """Mock age verification."""
    try:
        parent = await service.verify_parent(user)
    except NotAParentError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return {"success": True, "verified": parent.is_verified_adult}
