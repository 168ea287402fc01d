# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student leaderboards by XP, completed adventures or average score.

Periods:
- weekly: since Monday 00:00 UTC
- monthly: since the 1st of the month 00:00 UTC
- all-time: no lower bound (XP uses lifetime totals)
"""

import logging
from datetime import datetime
from typing import Any, Literal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.infrastructure.database.models import (
    DailyXP,
    ProgressStatus,
    User,
    UserLevel,
    UserProgress,
    UserRole,
)
from learning_adventures.utils.datetime import start_of_month, start_of_week, utc_now

logger = logging.getLogger(__name__)

Period = Literal["weekly", "monthly", "all-time"]
LeaderboardType = Literal["xp", "adventures", "score"]

DEFAULT_LIMIT = 50
MAX_LIMIT = 100
MIN_SCORED_COMPLETIONS = 3


def period_start(period: str, now: datetime | None = None) -> datetime | None:
    """Lower bound of a leaderboard period, or None for all-time."""
    now = now or utc_now()
    if period == "weekly":
        return start_of_week(now)
    if period == "monthly":
        return start_of_month(now)
    return None


def _user_fields(user: User | None, level: UserLevel | None) -> dict[str, Any]:
    return {
        "name": user.name if user else None,
        "image": user.image if user else None,
        "gradeLevel": user.grade_level if user else None,
        "currentLevel": level.current_level if level else 1,
        "currentStreak": level.current_streak if level else 0,
    }


class LeaderboardService:
    """Builds ranked leaderboards."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _load_users(self, user_ids: list[str]) -> dict[str, tuple[User, UserLevel | None]]:
        if not user_ids:
            return {}
        result = await self.db.execute(
            select(User, UserLevel)
            .outerjoin(UserLevel, UserLevel.user_id == User.id)
            .where(User.id.in_(user_ids))
        )
        return {user.id: (user, level) for user, level in result.all()}

    async def _xp_entries(self, start: datetime | None, limit: int) -> list[dict[str, Any]]:
        if start is None:
            query = (
                select(User, UserLevel, UserLevel.total_xp.label("xp"))
                .join(UserLevel, UserLevel.user_id == User.id)
                .where(User.role == UserRole.STUDENT.value, UserLevel.total_xp > 0)
                .order_by(UserLevel.total_xp.desc())
                .limit(limit)
            )
            result = await self.db.execute(query)
            rows = [(user, level, xp) for user, level, xp in result.all()]
        else:
            xp_sum = func.sum(DailyXP.total_xp).label("xp")
            query = (
                select(DailyXP.user_id, xp_sum)
                .join(User, User.id == DailyXP.user_id)
                .where(User.role == UserRole.STUDENT.value, DailyXP.date >= start.date())
                .group_by(DailyXP.user_id)
                .having(func.sum(DailyXP.total_xp) > 0)
                .order_by(xp_sum.desc())
                .limit(limit)
            )
            result = await self.db.execute(query)
            sums = result.all()
            users = await self._load_users([user_id for user_id, _ in sums])
            rows = []
            for user_id, xp in sums:
                user, level = users.get(user_id, (None, None))
                rows.append((user, level, xp))

        entries = []
        for user, level, xp in rows:
            entry = {"userId": user.id if user else None, "totalXP": int(xp or 0)}
            entry.update(_user_fields(user, level))
            entries.append(entry)
        return entries

    def _completed_filter(self, start: datetime | None, category: str | None) -> list:
        conditions = [UserProgress.status == ProgressStatus.COMPLETED.value]
        if start is not None:
            conditions.append(UserProgress.completed_at >= start)
        if category:
            conditions.append(UserProgress.category == category)
        return conditions

    async def _adventure_entries(
        self, start: datetime | None, category: str | None, limit: int
    ) -> list[dict[str, Any]]:
        count = func.count(UserProgress.id).label("completed")
        result = await self.db.execute(
            select(UserProgress.user_id, count)
            .where(*self._completed_filter(start, category))
            .group_by(UserProgress.user_id)
            .order_by(count.desc())
            .limit(limit)
        )
        counts = result.all()
        users = await self._load_users([user_id for user_id, _ in counts])

        entries = []
        for user_id, completed in counts:
            user, level = users.get(user_id, (None, None))
            entry = {"userId": user_id, "adventuresCompleted": int(completed)}
            entry.update(_user_fields(user, level))
            entries.append(entry)
        return entries

    async def _score_entries(
        self, start: datetime | None, category: str | None, limit: int
    ) -> list[dict[str, Any]]:
        avg = func.avg(UserProgress.score).label("average")
        count = func.count(UserProgress.id).label("completed")
        result = await self.db.execute(
            select(UserProgress.user_id, avg, count)
            .where(*self._completed_filter(start, category), UserProgress.score.is_not(None))
            .group_by(UserProgress.user_id)
            .having(func.count(UserProgress.id) >= MIN_SCORED_COMPLETIONS)
            .order_by(avg.desc())
            .limit(limit)
        )
        rows = result.all()
        users = await self._load_users([user_id for user_id, _, _ in rows])

        entries = []
        for user_id, average, completed in rows:
            user, level = users.get(user_id, (None, None))
            entry = {
                "userId": user_id,
                "averageScore": round(float(average or 0)),
                "adventuresCompleted": int(completed),
            }
            entry.update(_user_fields(user, level))
            entries.append(entry)
        return entries

    async def get_leaderboard(
        self,
        current_user_id: str,
        period: str = "all-time",
        leaderboard_type: str = "xp",
        category: str | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> dict[str, Any]:
        """Build a ranked leaderboard.

        Args:
            current_user_id: Requesting user, located in the ranking.
            period: weekly, monthly or all-time.
            leaderboard_type: xp, adventures or score.
            category: Optional subject filter (adventures and score only).
            limit: Maximum entries, capped at 100.

        Returns:
            Dict with leaderboard, currentUserRank, period, category, type and total.
        """
        limit = max(1, min(limit, MAX_LIMIT))
        start = period_start(period)

        if leaderboard_type == "adventures":
            entries = await self._adventure_entries(start, category, limit)
        elif leaderboard_type == "score":
            entries = await self._score_entries(start, category, limit)
        else:
            entries = await self._xp_entries(start, limit)

        for index, entry in enumerate(entries):
            entry["rank"] = index + 1

        current_rank = next(
            (entry["rank"] for entry in entries if entry["userId"] == current_user_id),
            None,
        )

        return {
            "leaderboard": entries,
            "currentUserRank": current_rank,
            "period": period,
            "category": category or "all",
            "type": leaderboard_type,
            "total": len(entries),
        }
