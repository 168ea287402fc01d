# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""XP, level and leaderboard endpoints."""

import logging
from datetime import timedelta
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.dependencies import get_db, require_auth
from learning_adventures.api.middleware.auth import CurrentUser
from learning_adventures.domains.gamification import LeaderboardService, XPService
from learning_adventures.domains.gamification.leaderboard import DEFAULT_LIMIT, MAX_LIMIT
from learning_adventures.utils.datetime import utc_today

logger = logging.getLogger(__name__)

router = APIRouter()
leaderboard_router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> XPService:
    return XPService(db)


@router.get("/level")
async def get_level(
    current_user: CurrentUser = Depends(require_auth),
    service: XPService = Depends(_get_service),
) -> dict:
    """Level, streak and today's XP; creates the level row on first use."""
    return await service.level_status(current_user.id)


@router.get("/daily")
async def get_daily_xp(
    current_user: CurrentUser = Depends(require_auth),
    service: XPService = Depends(_get_service),
) -> dict:
    return {"dailyXP": await service.get_daily_xp(current_user.id)}


@router.get("/history")
async def get_xp_history(
    days: int = Query(default=7, ge=1, le=365),
    current_user: CurrentUser = Depends(require_auth),
    service: XPService = Depends(_get_service),
) -> dict:
    end = utc_today()
    start = end - timedelta(days=days - 1)
    history = await service.get_xp_history(current_user.id, start, end)
    return {
        "history": history,
        "recentXP": await service.get_recent_xp(current_user.id),
        "days": days,
    }


@leaderboard_router.get("")
async def get_leaderboard(
    period: Literal["weekly", "monthly", "all-time"] = Query(default="all-time"),
    type: Literal["xp", "adventures", "score"] = Query(default="xp"),
    category: str | None = Query(default=None),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = LeaderboardService(db)
    return await service.get_leaderboard(
        current_user.id,
        period=period,
        leaderboard_type=type,
        category=category if category and category != "all" else None,
        limit=limit,
    )
