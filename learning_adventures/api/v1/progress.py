# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Adventure progress and achievement endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.dependencies import get_db, require_auth
from learning_adventures.api.middleware.auth import CurrentUser
from learning_adventures.domains.progress import (
    AchievementService,
    ProgressNotFoundError,
    ProgressService,
    ProgressValidationError,
)
from learning_adventures.domains.progress.service import serialize_progress
from learning_adventures.models.learning import (
    CompleteAdventureRequest,
    StartAdventureRequest,
    UpdateProgressRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()
achievements_router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> ProgressService:
    return ProgressService(db)


@router.get("")
async def get_progress(
    current_user: CurrentUser = Depends(require_auth),
    service: ProgressService = Depends(_get_service),
) -> dict:
    """All of the user's progress with aggregate stats."""
    return await service.get_user_progress(current_user.id)


@router.get("/games")
async def get_game_progress(
    current_user: CurrentUser = Depends(require_auth),
    service: ProgressService = Depends(_get_service),
) -> dict:
    return {"progress": await service.get_game_progress(current_user.id)}


@router.post("/start")
async def start_adventure(
    data: StartAdventureRequest,
    current_user: CurrentUser = Depends(require_auth),
    service: ProgressService = Depends(_get_service),
) -> dict:
    try:
        progress, is_new = await service.start_adventure(
            current_user.id, data.adventure_id, data.adventure_type, data.category
        )
    except ProgressValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {"success": True, "progress": serialize_progress(progress), "isNew": is_new}


@router.post("/update")
async def update_progress(
    data: UpdateProgressRequest,
    current_user: CurrentUser = Depends(require_auth),
    service: ProgressService = Depends(_get_service),
) -> dict:
    try:
        progress = await service.update_progress(
            current_user.id,
            data.adventure_id,
            time_spent=data.time_spent,
            score=data.score,
            status=data.status,
        )
    except ProgressValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProgressNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return {"success": True, "progress": serialize_progress(progress)}


@router.post("/complete")
async def complete_adventure(
    data: CompleteAdventureRequest,
    current_user: CurrentUser = Depends(require_auth),
    service: ProgressService = Depends(_get_service),
) -> dict:
    """Complete an adventure; the response lists newly unlocked achievements."""
    try:
        progress, achievements = await service.complete_adventure(
            current_user.id, data.adventure_id, score=data.score, time_spent=data.time_spent
        )
    except ProgressValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProgressNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return {
        "success": True,
        "progress": serialize_progress(progress),
        "newAchievements": achievements,
    }


@achievements_router.get("")
async def list_achievements(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await AchievementService(db).list_achievements(current_user.id)
