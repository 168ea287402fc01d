# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""XP awards, daily streaks and daily XP ledgers.

Streaks compare calendar days in UTC: activity on the same day keeps the
streak, activity on the next day extends it, and any longer gap restarts it
at 1.
"""

import logging
from datetime import date, timedelta
from typing import Any, Literal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.domains.gamification.xp import level_from_xp, level_info, streak_bonus
from learning_adventures.infrastructure.database.models import DailyXP, UserLevel
from learning_adventures.utils.datetime import utc_today

logger = logging.getLogger(__name__)

XPSource = Literal["lesson", "game"]


class GamificationServiceError(Exception):
    """Base exception for gamification operations."""

    pass


def _percent(part: int, total: int) -> int:
    return round(part / total * 100) if total > 0 else 0


def _daily_xp_dict(row: DailyXP) -> dict[str, Any]:
    return {
        "date": row.date.isoformat(),
        "xpFromLessons": row.xp_from_lessons,
        "xpFromGames": row.xp_from_games,
        "xpFromStreak": row.xp_from_streak,
        "totalXP": row.total_xp,
        "percentFromLessons": _percent(row.xp_from_lessons, row.total_xp),
        "percentFromGames": _percent(row.xp_from_games, row.total_xp),
        "percentFromStreak": _percent(row.xp_from_streak, row.total_xp),
    }


class XPService:
    """Service for XP, levels and streaks."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_user_level(self, user_id: str) -> UserLevel | None:
        result = await self.db.execute(select(UserLevel).where(UserLevel.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_or_create_user_level(self, user_id: str) -> UserLevel:
        """Fetch the user's level row, creating a fresh level 1 row if absent."""
        user_level = await self.get_user_level(user_id)
        if user_level is None:
            user_level = UserLevel(
                user_id=user_id,
                total_xp=0,
                current_level=1,
                current_streak=0,
                longest_streak=0,
            )
            self.db.add(user_level)
            await self.db.flush()
        return user_level

    async def award_xp(self, user_id: str, amount: int) -> dict[str, Any]:
        """Add XP and recompute the level.

        Args:
            user_id: Recipient.
            amount: XP to add (already streak-adjusted by callers).

        Returns:
            Dict with xpAwarded, totalXP, leveledUp, oldLevel and newLevel.
        """
        user_level = await self.get_or_create_user_level(user_id)

        old_level = user_level.current_level
        new_total = user_level.total_xp + amount
        new_level = level_from_xp(new_total)

        user_level.total_xp = new_total
        user_level.current_level = new_level
        await self.db.commit()

        leveled_up = new_level > old_level
        if leveled_up:
            logger.info("User %s leveled up: %d -> %d", user_id, old_level, new_level)

        return {
            "xpAwarded": amount,
            "totalXP": new_total,
            "leveledUp": leveled_up,
            "oldLevel": old_level,
            "newLevel": new_level,
        }

    async def update_streak(self, user_id: str, today: date | None = None) -> dict[str, Any]:
        """Register activity for today and update the streak.

        Args:
            user_id: Active user.
            today: Override for the current UTC date.

        Returns:
            Dict with currentStreak, longestStreak, streakContinued and streakBroken.
        """
        today = today or utc_today()
        user_level = await self.get_user_level(user_id)

        if user_level is None:
            user_level = UserLevel(
                user_id=user_id,
                total_xp=0,
                current_level=1,
                current_streak=1,
                longest_streak=1,
                last_activity_date=today,
            )
            self.db.add(user_level)
            await self.db.commit()
            return {
                "currentStreak": 1,
                "longestStreak": 1,
                "streakContinued": True,
                "streakBroken": False,
            }

        last = user_level.last_activity_date
        streak_broken = False

        if last == today:
            new_streak = user_level.current_streak
        elif last == today - timedelta(days=1):
            new_streak = user_level.current_streak + 1
        else:
            new_streak = 1
            streak_broken = last is not None

        user_level.current_streak = new_streak
        user_level.longest_streak = max(user_level.longest_streak, new_streak)
        user_level.last_activity_date = today
        await self.db.commit()

        return {
            "currentStreak": new_streak,
            "longestStreak": user_level.longest_streak,
            "streakContinued": not streak_broken,
            "streakBroken": streak_broken,
        }

    async def record_daily_xp(
        self,
        user_id: str,
        base_xp: int,
        source: XPSource,
    ) -> DailyXP:
        """Add an award to today's ledger row, creating it when needed.

        The streak bonus uses the user's current streak.
        """
        today = utc_today()
        user_level = await self.get_user_level(user_id)
        bonus = streak_bonus(base_xp, user_level.current_streak if user_level else 0)

        result = await self.db.execute(
            select(DailyXP).where(DailyXP.user_id == user_id, DailyXP.date == today)
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = DailyXP(
                user_id=user_id,
                date=today,
                xp_from_lessons=0,
                xp_from_games=0,
                xp_from_streak=0,
                total_xp=0,
            )
            self.db.add(row)

        if source == "lesson":
            row.xp_from_lessons += base_xp
        else:
            row.xp_from_games += base_xp
        row.xp_from_streak += bonus
        row.total_xp += base_xp + bonus

        await self.db.commit()
        return row

    async def get_daily_xp(self, user_id: str, day: date | None = None) -> dict[str, Any] | None:
        """Today's (or ``day``'s) XP with a percentage breakdown by source."""
        day = day or utc_today()
        result = await self.db.execute(
            select(DailyXP).where(DailyXP.user_id == user_id, DailyXP.date == day)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None

        return _daily_xp_dict(row)

    async def get_xp_history(
        self,
        user_id: str,
        start: date,
        end: date,
    ) -> list[dict[str, Any]]:
        """Daily XP rows between ``start`` and ``end`` inclusive, oldest first."""
        result = await self.db.execute(
            select(DailyXP)
            .where(DailyXP.user_id == user_id, DailyXP.date >= start, DailyXP.date <= end)
            .order_by(DailyXP.date.asc())
        )
        return [_daily_xp_dict(row) for row in result.scalars().all()]

    async def get_recent_xp(self, user_id: str, days: int = 7) -> int:
        """Sum of daily XP over the last ``days`` days including today."""
        since = utc_today() - timedelta(days=days)
        result = await self.db.execute(
            select(func.coalesce(func.sum(DailyXP.total_xp), 0)).where(
                DailyXP.user_id == user_id, DailyXP.date >= since
            )
        )
        return int(result.scalar() or 0)

    async def level_status(self, user_id: str) -> dict[str, Any]:
        """Level row, derived level info and today's XP for the dashboard."""
        user_level = await self.get_or_create_user_level(user_id)
        await self.db.commit()

        info = level_info(user_level.total_xp)
        today_xp = await self.get_daily_xp(user_id)

        return {
            "level": {
                "totalXP": user_level.total_xp,
                "currentLevel": user_level.current_level,
                "currentStreak": user_level.current_streak,
                "longestStreak": user_level.longest_streak,
                "lastActivityDate": (
                    user_level.last_activity_date.isoformat()
                    if user_level.last_activity_date
                    else None
                ),
            },
            "levelInfo": info.to_dict(),
            "todayXP": today_xp,
            "recentXP": await self.get_recent_xp(user_id),
        }
