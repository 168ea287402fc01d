# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning goals with countable targets.

Goals default their deadline from the goal type: end of today (DAILY),
end of Sunday (WEEKLY) or end of the month (MONTHLY). CUSTOM goals have no
deadline unless one is given. Reaching the target completes the goal.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.domains.planning.exceptions import (
    PlanningForbiddenError,
    PlanningNotFoundError,
    PlanningValidationError,
)
from learning_adventures.infrastructure.database.models import GoalStatus, GoalType, LearningGoal
from learning_adventures.utils.datetime import (
    end_of_day,
    end_of_month,
    end_of_week,
    ensure_utc,
    utc_now,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "title",
    "description",
    "target_value",
    "current_value",
    "deadline",
    "status",
    "priority",
    "icon",
    "color",
}


def default_deadline(goal_type: str, now: datetime | None = None) -> datetime | None:
    now = now or utc_now()
    if goal_type == GoalType.DAILY.value:
        return end_of_day(now)
    if goal_type == GoalType.WEEKLY.value:
        return end_of_week(now)
    if goal_type == GoalType.MONTHLY.value:
        return end_of_month(now)
    return None


def serialize_goal(goal: LearningGoal, now: datetime | None = None) -> dict[str, Any]:
    """Goal fields plus derived progressPercent, isComplete and isExpired."""
    now = now or utc_now()
    deadline = ensure_utc(goal.deadline)
    return {
        "id": goal.id,
        "userId": goal.user_id,
        "title": goal.title,
        "description": goal.description,
        "type": goal.type,
        "category": goal.category,
        "targetType": goal.target_type,
        "targetValue": goal.target_value,
        "currentValue": goal.current_value,
        "unit": goal.unit,
        "deadline": deadline.isoformat() if deadline else None,
        "status": goal.status,
        "completedAt": goal.completed_at.isoformat() if goal.completed_at else None,
        "streakCount": goal.streak_count,
        "icon": goal.icon,
        "color": goal.color,
        "priority": goal.priority,
        "createdAt": goal.created_at.isoformat() if goal.created_at else None,
        "progressPercent": (
            round(goal.current_value / goal.target_value * 100) if goal.target_value > 0 else 0
        ),
        "isComplete": goal.current_value >= goal.target_value,
        "isExpired": bool(
            deadline and deadline < now and goal.status == GoalStatus.ACTIVE.value
        ),
    }


class GoalService:
    """CRUD and progress tracking for a user's learning goals."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_goals(
        self, user_id: str, status: str | None = None, goal_type: str | None = None
    ) -> list[LearningGoal]:
        query = select(LearningGoal).where(LearningGoal.user_id == user_id)
        if status:
            query = query.where(LearningGoal.status == status)
        if goal_type:
            query = query.where(LearningGoal.type == goal_type)

        result = await self.db.execute(
            query.order_by(
                LearningGoal.priority.desc(),
                LearningGoal.deadline.asc().nulls_last(),
                LearningGoal.created_at.desc(),
            )
        )
        return list(result.scalars().all())

    async def create_goal(
        self,
        user_id: str,
        title: str | None,
        goal_type: str | None,
        target_type: str | None,
        target_value: int | None,
        unit: str | None,
        description: str | None = None,
        category: str | None = None,
        deadline: datetime | None = None,
        icon: str | None = None,
        color: str | None = None,
        priority: int | None = None,
    ) -> LearningGoal:
        """Create an ACTIVE goal.

        Raises:
            PlanningValidationError: Missing fields, unknown type or non-positive target.
        """
        if not title or not goal_type or not target_type or target_value is None or not unit:
            raise PlanningValidationError("Missing required fields")
        if goal_type not in {t.value for t in GoalType}:
            raise PlanningValidationError("Invalid goal type")
        if target_value <= 0:
            raise PlanningValidationError("Target value must be greater than 0")

        goal = LearningGoal(
            user_id=user_id,
            title=title,
            description=description,
            type=goal_type,
            category=category,
            target_type=target_type,
            target_value=target_value,
            current_value=0,
            unit=unit,
            deadline=deadline or default_deadline(goal_type),
            icon=icon or None,
            color=color or None,
            priority=priority or 0,
            status=GoalStatus.ACTIVE.value,
            streak_count=0,
        )
        self.db.add(goal)
        await self.db.commit()
        await self.db.refresh(goal)

        logger.info("Goal created: user=%s, goal=%s, type=%s", user_id, goal.id, goal_type)
        return goal

    async def get_owned_goal(self, user_id: str, goal_id: str) -> LearningGoal:
        """Fetch a goal and check ownership.

        Raises:
            PlanningNotFoundError: Unknown goal.
            PlanningForbiddenError: Goal belongs to someone else.
        """
        goal = await self.db.get(LearningGoal, goal_id)
        if goal is None:
            raise PlanningNotFoundError("Goal not found")
        if goal.user_id != user_id:
            raise PlanningForbiddenError()
        return goal

    async def update_goal(self, user_id: str, goal_id: str, updates: dict[str, Any]) -> LearningGoal:
        goal = await self.get_owned_goal(user_id, goal_id)

        if updates.get("target_value") is not None and updates["target_value"] <= 0:
            raise PlanningValidationError("Target value must be greater than 0")
        if updates.get("status") and updates["status"] not in {s.value for s in GoalStatus}:
            raise PlanningValidationError("Invalid goal status")

        for field, value in updates.items():
            if field not in UPDATABLE_FIELDS:
                continue
            if field in {"title", "target_value", "deadline", "status"} and not value:
                continue
            setattr(goal, field, value)

        await self.db.commit()
        await self.db.refresh(goal)
        return goal

    async def delete_goal(self, user_id: str, goal_id: str) -> None:
        goal = await self.get_owned_goal(user_id, goal_id)
        await self.db.delete(goal)
        await self.db.commit()
        logger.info("Goal deleted: user=%s, goal=%s", user_id, goal_id)

    def _mark_completed(self, goal: LearningGoal) -> None:
        goal.status = GoalStatus.COMPLETED.value
        goal.completed_at = utc_now()
        goal.streak_count += 1

    async def record_progress(
        self,
        user_id: str,
        goal_id: str,
        increment: int | None = None,
        value: int | None = None,
    ) -> tuple[LearningGoal, bool]:
        """Add to (or set) a goal's current value.

        Returns:
            The goal and whether it is now complete.

        Raises:
            PlanningValidationError: Goal not ACTIVE or neither increment nor value given.
        """
        goal = await self.get_owned_goal(user_id, goal_id)

        if goal.status != GoalStatus.ACTIVE.value:
            raise PlanningValidationError("Cannot update progress on non-active goal")

        if increment is not None:
            new_value = goal.current_value + increment
        elif value is not None:
            new_value = value
        else:
            raise PlanningValidationError("Must provide either increment or value")

        goal.current_value = max(0, new_value)
        is_complete = goal.current_value >= goal.target_value
        if is_complete:
            self._mark_completed(goal)
            logger.info("Goal completed: user=%s, goal=%s", user_id, goal_id)

        await self.db.commit()
        await self.db.refresh(goal)
        return goal, is_complete

    async def complete_goal(self, user_id: str, goal_id: str) -> LearningGoal:
        goal = await self.get_owned_goal(user_id, goal_id)
        goal.current_value = goal.target_value
        self._mark_completed(goal)

        await self.db.commit()
        await self.db.refresh(goal)

        logger.info("Goal completed: user=%s, goal=%s", user_id, goal_id)
        return goal
