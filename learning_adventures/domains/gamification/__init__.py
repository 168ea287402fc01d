# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Gamification domain: XP, levels, streaks and leaderboards."""

from learning_adventures.domains.gamification.leaderboard import LeaderboardService, period_start
from learning_adventures.domains.gamification.service import XPService
from learning_adventures.domains.gamification.xp import (
    calculate_xp_with_streak,
    get_level_badge,
    get_xp_color,
    level_from_xp,
    level_info,
    streak_bonus,
    total_xp_for_level,
    xp_for_level,
)

__all__ = [
    "LeaderboardService",
    "XPService",
    "calculate_xp_with_streak",
    "get_level_badge",
    "get_xp_color",
    "level_from_xp",
    "level_info",
    "period_start",
    "streak_bonus",
    "total_xp_for_level",
    "xp_for_level",
]
