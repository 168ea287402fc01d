# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Achievement rules evaluated after an adventure is completed.

Rules (all except Perfect Score are awarded at most once per title):
- First Adventure: first completion overall
- {Category} Explorer: first completion in a category
- {Category} Master: fifth completion in a category
- Perfect Score: every completion scoring 100
- Rising Star / Learning Champion / Master Learner: 10 / 25 / 50 completions
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.infrastructure.database.models import (
    ProgressStatus,
    UserAchievement,
    UserProgress,
)

logger = logging.getLogger(__name__)

CATEGORY_MASTER_COUNT = 5
PERFECT_SCORE = 100


@dataclass(frozen=True)
class Milestone:
    count: int
    title: str
    description: str


MILESTONES: tuple[Milestone, ...] = (
    Milestone(10, "Rising Star", "Completed 10 adventures!"),
    Milestone(25, "Learning Champion", "Completed 25 adventures!"),
    Milestone(50, "Master Learner", "Completed 50 adventures!"),
)


@dataclass(frozen=True)
class AchievementGrant:
    """An achievement a completion qualifies for."""

    type: str
    title: str
    description: str
    category: str | None = None
    unique: bool = True


def evaluate_achievements(
    completed_count: int,
    category_count: int,
    category: str,
    score: int | None,
) -> list[AchievementGrant]:
    """Decide which achievements a completion qualifies for.

    Args:
        completed_count: Completed adventures overall, including this one.
        category_count: Completed adventures in this category, including this one.
        category: Category of the completed adventure.
        score: Score of this completion.

    Returns:
        Grants in evaluation order. Unique grants still need a de-duplication
        check against existing titles.
    """
    category_name = category[:1].upper() + category[1:]
    grants: list[AchievementGrant] = []

    if completed_count == 1:
        grants.append(
            AchievementGrant("completion", "First Adventure", "Completed your first adventure!")
        )

    if category_count == 1:
        grants.append(
            AchievementGrant(
                "completion",
                f"{category_name} Explorer",
                f"Completed your first {category_name} adventure!",
                category,
            )
        )

    if category_count == CATEGORY_MASTER_COUNT:
        grants.append(
            AchievementGrant(
                "completion",
                f"{category_name} Master",
                f"Completed 5 {category_name} adventures!",
                category,
            )
        )

    if score == PERFECT_SCORE:
        grants.append(
            AchievementGrant(
                "score",
                "Perfect Score",
                "Achieved a perfect 100% score!",
                category,
                unique=False,
            )
        )

    for milestone in MILESTONES:
        if completed_count == milestone.count:
            grants.append(AchievementGrant("completion", milestone.title, milestone.description))

    return grants


def serialize_achievement(achievement: UserAchievement) -> dict[str, Any]:
    return {
        "id": achievement.id,
        "type": achievement.type,
        "title": achievement.title,
        "description": achievement.description,
        "category": achievement.category,
        "earnedAt": achievement.earned_at.isoformat() if achievement.earned_at else None,
    }


class AchievementService:
    """Awards and lists user achievements."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _has_title(self, user_id: str, title: str) -> bool:
        result = await self.db.execute(
            select(func.count())
            .select_from(UserAchievement)
            .where(UserAchievement.user_id == user_id, UserAchievement.title == title)
        )
        return (result.scalar() or 0) > 0

    async def check_and_award(self, user_id: str, progress: UserProgress) -> list[UserAchievement]:
        """Award any achievements unlocked by a just-completed adventure.

        Returns:
            Newly created achievements.
        """
        completed = ProgressStatus.COMPLETED.value

        result = await self.db.execute(
            select(func.count())
            .select_from(UserProgress)
            .where(UserProgress.user_id == user_id, UserProgress.status == completed)
        )
        completed_count = result.scalar() or 0

        result = await self.db.execute(
            select(func.count())
            .select_from(UserProgress)
            .where(
                UserProgress.user_id == user_id,
                UserProgress.status == completed,
                UserProgress.category == progress.category,
            )
        )
        category_count = result.scalar() or 0

        awarded: list[UserAchievement] = []
        for grant in evaluate_achievements(
            completed_count, category_count, progress.category, progress.score
        ):
            if grant.unique and await self._has_title(user_id, grant.title):
                continue

            achievement = UserAchievement(
                user_id=user_id,
                type=grant.type,
                title=grant.title,
                description=grant.description,
                category=grant.category,
            )
            self.db.add(achievement)
            awarded.append(achievement)

        if awarded:
            await self.db.commit()
            for achievement in awarded:
                await self.db.refresh(achievement)
            logger.info(
                "Awarded %d achievements to user %s: %s",
                len(awarded),
                user_id,
                [a.title for a in awarded],
            )

        return awarded

    async def list_achievements(self, user_id: str) -> dict[str, Any]:
        """All achievements newest first, grouped by type and category."""
        result = await self.db.execute(
            select(UserAchievement)
            .where(UserAchievement.user_id == user_id)
            .order_by(UserAchievement.earned_at.desc())
        )
        achievements = [serialize_achievement(a) for a in result.scalars().all()]

        grouped: dict[str, list[dict[str, Any]]] = {
            "completion": [],
            "streak": [],
            "score": [],
            "time": [],
        }
        by_category: dict[str, list[dict[str, Any]]] = {}
        for achievement in achievements:
            if achievement["type"] in grouped:
                grouped[achievement["type"]].append(achievement)
            if achievement["category"]:
                by_category.setdefault(achievement["category"], []).append(achievement)

        return {
            "achievements": achievements,
            "grouped": grouped,
            "byCategory": by_category,
            "totalCount": len(achievements),
        }
