# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pure XP, level and streak arithmetic.

Level thresholds grow as ``floor(100 * n ** 1.5)``, so level 2 costs 282 XP,
level 3 costs 519 XP on top of that, and so on.

Example:
    >>> calculate_xp_with_streak(100, 7)
    XPCalculation(base_xp=100, multiplier=1.5, total_xp=150, bonus_xp=50)
    >>> level_from_xp(300)
    2
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class StreakTier:
    days: int
    multiplier: float
    bonus_percent: int


STREAK_MULTIPLIERS: tuple[StreakTier, ...] = (
    StreakTier(days=1, multiplier=1.0, bonus_percent=0),
    StreakTier(days=3, multiplier=1.2, bonus_percent=20),
    StreakTier(days=7, multiplier=1.5, bonus_percent=50),
    StreakTier(days=30, multiplier=2.0, bonus_percent=100),
)


@dataclass(frozen=True)
class XPCalculation:
    base_xp: int
    multiplier: float
    total_xp: int
    bonus_xp: int


@dataclass(frozen=True)
class LevelInfo:
    current_level: int
    xp_for_current_level: int
    xp_for_next_level: int
    xp_into_level: int
    progress_percent: int

    def to_dict(self) -> dict:
        return {
            "currentLevel": self.current_level,
            "xpForCurrentLevel": self.xp_for_current_level,
            "xpForNextLevel": self.xp_for_next_level,
            "xpIntoLevel": self.xp_into_level,
            "progressPercent": self.progress_percent,
        }


def streak_tier(streak: int) -> StreakTier:
    """Largest tier whose threshold is at or below ``streak``."""
    tier = STREAK_MULTIPLIERS[0]
    for candidate in STREAK_MULTIPLIERS:
        if streak >= candidate.days:
            tier = candidate
    return tier


def streak_multiplier(streak: int) -> float:
    return streak_tier(streak).multiplier


def calculate_xp_with_streak(base_xp: int, streak: int) -> XPCalculation:
    """Apply the streak multiplier to a base award.

    Args:
        base_xp: XP before bonuses.
        streak: Current consecutive-day streak.

    Returns:
        Breakdown with the floored total and the bonus portion.
    """
    multiplier = streak_multiplier(streak)
    total = math.floor(base_xp * multiplier)
    return XPCalculation(
        base_xp=base_xp,
        multiplier=multiplier,
        total_xp=total,
        bonus_xp=total - base_xp,
    )


def streak_bonus(base_xp: int, streak: int) -> int:
    """XP attributed to the streak for a base award on the daily ledger.

    Floors ``base * (multiplier - 1)`` directly, so it can be one lower than
    ``calculate_xp_with_streak(...).bonus_xp`` for the same inputs.
    """
    return math.floor(base_xp * (streak_multiplier(streak) - 1))


def xp_for_level(level: int) -> int:
    """XP needed to advance from ``level - 1`` to ``level``."""
    if level <= 1:
        return 0
    return math.floor(100 * math.pow(level, 1.5))


def total_xp_for_level(level: int) -> int:
    """Cumulative XP required to reach ``level``."""
    return sum(xp_for_level(n) for n in range(2, level + 1))


def level_from_xp(total_xp: int) -> int:
    """Highest level whose cumulative requirement is at most ``total_xp``."""
    level = 1
    accumulated = 0
    while True:
        needed = xp_for_level(level + 1)
        if accumulated + needed > total_xp:
            return level
        accumulated += needed
        level += 1


def level_info(total_xp: int) -> LevelInfo:
    """Current level and progress toward the next one."""
    level = level_from_xp(total_xp)
    xp_current = total_xp_for_level(level)
    xp_next = xp_for_level(level + 1)
    xp_into = total_xp - xp_current

    progress = 100 if xp_next == 0 else min(100, round(xp_into / xp_next * 100))

    return LevelInfo(
        current_level=level,
        xp_for_current_level=xp_current,
        xp_for_next_level=xp_next,
        xp_into_level=xp_into,
        progress_percent=progress,
    )


def get_xp_color(xp: int) -> str:
    """Medal color for an XP amount."""
    if xp >= 150:
        return "#FFD700"
    if xp >= 100:
        return "#C0C0C0"
    if xp >= 50:
        return "#CD7F32"
    return "#8B8B8B"


def get_level_badge(level: int) -> str:
    """Emoji badge for a level."""
    if level >= 50:
        return "👑"
    if level >= 40:
        return "🏆"
    if level >= 30:
        return "💎"
    if level >= 20:
        return "⭐"
    if level >= 10:
        return "🌟"
    return "🎓"
