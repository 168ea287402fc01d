# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Adventure progress tracking.

A progress row is keyed by (user, adventure). Starting an adventure creates
the row; updates and completion require it to exist.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.domains.progress.achievements import (
    AchievementService,
    serialize_achievement,
)
from learning_adventures.infrastructure.database.models import ProgressStatus, UserProgress
from learning_adventures.utils.datetime import utc_now

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10
DONE_STATUSES = {ProgressStatus.COMPLETED.value, ProgressStatus.MASTERED.value}
VALID_STATUSES = {s.value for s in ProgressStatus}


class ProgressServiceError(Exception):
    """Base exception for progress operations."""

    pass


class ProgressNotFoundError(ProgressServiceError):
    """Raised when no progress row exists for the adventure."""

    def __init__(self) -> None:
        super().__init__("Progress not found. Please start the adventure first.")


class ProgressValidationError(ProgressServiceError):
    """Raised for invalid progress input."""

    pass


def serialize_progress(progress: UserProgress) -> dict[str, Any]:
    return {
        "id": progress.id,
        "adventureId": progress.adventure_id,
        "adventureType": progress.adventure_type,
        "category": progress.category,
        "status": progress.status,
        "score": progress.score,
        "timeSpent": progress.time_spent,
        "attempts": progress.attempts,
        "completedAt": progress.completed_at.isoformat() if progress.completed_at else None,
        "lastAccessed": progress.last_accessed.isoformat() if progress.last_accessed else None,
    }


def calculate_user_stats(progress: list[UserProgress]) -> dict[str, Any]:
    """Aggregate totals, per-category breakdown and recent completions."""
    completed = sum(1 for p in progress if p.status in DONE_STATUSES)
    in_progress = sum(1 for p in progress if p.status == ProgressStatus.IN_PROGRESS.value)
    scored = [p.score for p in progress if p.score is not None]

    by_category: dict[str, dict[str, Any]] = {}
    for p in progress:
        bucket = by_category.setdefault(p.category, {"total": 0, "completed": 0, "averageScore": 0})
        bucket["total"] += 1
        if p.status in DONE_STATUSES:
            bucket["completed"] += 1

    for category, bucket in by_category.items():
        scores = [p.score for p in progress if p.category == category and p.score is not None]
        if scores:
            bucket["averageScore"] = round(sum(scores) / len(scores))

    recent = sorted(
        (p for p in progress if p.completed_at is not None),
        key=lambda p: p.completed_at,
        reverse=True,
    )[:RECENT_ACTIVITY_LIMIT]

    return {
        "totalAdventures": len(progress),
        "completed": completed,
        "inProgress": in_progress,
        "totalTimeSpent": sum(p.time_spent or 0 for p in progress),
        "averageScore": round(sum(scored) / len(scored)) if scored else 0,
        "byCategory": by_category,
        "recentActivity": [serialize_progress(p) for p in recent],
    }


class ProgressService:
    """Service for per-adventure progress."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get(self, user_id: str, adventure_id: str) -> UserProgress | None:
        result = await self.db.execute(
            select(UserProgress).where(
                UserProgress.user_id == user_id,
                UserProgress.adventure_id == adventure_id,
            )
        )
        return result.scalar_one_or_none()

    async def start_adventure(
        self,
        user_id: str,
        adventure_id: str | None,
        adventure_type: str | None,
        category: str | None,
    ) -> tuple[UserProgress, bool]:
        """Start (or resume) an adventure.

        Returns:
            The progress row and whether it was newly created.

        Raises:
            ProgressValidationError: If a required field is missing.
        """
        if not adventure_id or not adventure_type or not category:
            raise ProgressValidationError(
                "Missing required fields: adventureId, adventureType, category"
            )

        now = utc_now()
        progress = await self._get(user_id, adventure_id)

        if progress is not None:
            progress.last_accessed = now
            if progress.status == ProgressStatus.NOT_STARTED.value:
                progress.status = ProgressStatus.IN_PROGRESS.value
            await self.db.commit()
            await self.db.refresh(progress)
            return progress, False

        progress = UserProgress(
            user_id=user_id,
            adventure_id=adventure_id,
            adventure_type=adventure_type,
            category=category,
            status=ProgressStatus.IN_PROGRESS.value,
            time_spent=0,
            attempts=0,
            last_accessed=now,
        )
        self.db.add(progress)
        await self.db.commit()
        await self.db.refresh(progress)

        logger.info("Adventure started: user=%s, adventure=%s", user_id, adventure_id)
        return progress, True

    async def update_progress(
        self,
        user_id: str,
        adventure_id: str | None,
        time_spent: int | None = None,
        score: int | None = None,
        status: str | None = None,
    ) -> UserProgress:
        """Update an in-flight adventure.

        Raises:
            ProgressValidationError: Missing adventure id or unknown status.
            ProgressNotFoundError: If the adventure was never started.
        """
        if not adventure_id:
            raise ProgressValidationError("Missing required field: adventureId")
        if status and status not in VALID_STATUSES:
            raise ProgressValidationError("Invalid status")

        progress = await self._get(user_id, adventure_id)
        if progress is None:
            raise ProgressNotFoundError()

        progress.last_accessed = utc_now()
        if time_spent is not None:
            progress.time_spent = time_spent
        if score is not None:
            progress.score = score
        if status:
            progress.status = status

        await self.db.commit()
        await self.db.refresh(progress)
        return progress

    async def complete_adventure(
        self,
        user_id: str,
        adventure_id: str | None,
        score: int | None = None,
        time_spent: int | None = None,
    ) -> tuple[UserProgress, list[dict[str, Any]]]:
        """Mark an adventure completed and evaluate achievements.

        Returns:
            The progress row and the newly unlocked achievements.

        Raises:
            ProgressValidationError: Missing adventure id.
            ProgressNotFoundError: If the adventure was never started.
        """
        if not adventure_id:
            raise ProgressValidationError("Missing required field: adventureId")

        progress = await self._get(user_id, adventure_id)
        if progress is None:
            raise ProgressNotFoundError()

        now = utc_now()
        progress.status = ProgressStatus.COMPLETED.value
        progress.completed_at = now
        progress.last_accessed = now
        if score is not None:
            progress.score = score
        if time_spent is not None:
            progress.time_spent = time_spent

        await self.db.commit()
        await self.db.refresh(progress)

        logger.info("Adventure completed: user=%s, adventure=%s", user_id, adventure_id)

        awarded = await AchievementService(self.db).check_and_award(user_id, progress)
        return progress, [serialize_achievement(a) for a in awarded]

    async def get_user_progress(self, user_id: str) -> dict[str, Any]:
        """All progress rows (most recently accessed first) plus stats."""
        result = await self.db.execute(
            select(UserProgress)
            .where(UserProgress.user_id == user_id)
            .order_by(UserProgress.last_accessed.desc())
        )
        progress = list(result.scalars().all())

        return {
            "progress": [serialize_progress(p) for p in progress],
            "stats": calculate_user_stats(progress),
        }

    async def get_game_progress(self, user_id: str) -> list[dict[str, Any]]:
        """Progress rows for games only, most recently accessed first."""
        result = await self.db.execute(
            select(UserProgress)
            .where(UserProgress.user_id == user_id, UserProgress.adventure_type == "game")
            .order_by(UserProgress.last_accessed.desc())
        )
        return [serialize_progress(p) for p in result.scalars().all()]
