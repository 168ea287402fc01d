# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for XP, level and streak arithmetic."""

import pytest

from learning_adventures.domains.gamification.xp import (
    calculate_xp_with_streak,
    get_level_badge,
    get_xp_color,
    level_from_xp,
    level_info,
    streak_bonus,
    streak_multiplier,
    total_xp_for_level,
    xp_for_level,
)


class TestStreakMultiplier:
    """Tests for streak tiers."""

    @pytest.mark.parametrize(
        ("streak", "expected"),
        [(0, 1.0), (1, 1.0), (2, 1.0), (3, 1.2), (6, 1.2), (7, 1.5), (29, 1.5), (30, 2.0), (365, 2.0)],
    )
    def test_tiers(self, streak: int, expected: float) -> None:
        assert streak_multiplier(streak) == expected

    def test_calculate_with_week_streak(self) -> None:
        """Test a 7-day streak gives a 50% bonus."""
        result = calculate_xp_with_streak(100, 7)

        assert result.base_xp == 100
        assert result.multiplier == 1.5
        assert result.total_xp == 150
        assert result.bonus_xp == 50

    def test_calculate_floors_total(self) -> None:
        result = calculate_xp_with_streak(25, 7)

        assert result.total_xp == 37
        assert result.bonus_xp == 12

    def test_calculate_without_streak(self) -> None:
        result = calculate_xp_with_streak(40, 0)

        assert result.total_xp == 40
        assert result.bonus_xp == 0

    def test_streak_bonus(self) -> None:
        assert streak_bonus(100, 30) == 100
        assert streak_bonus(100, 3) == 19
        assert streak_bonus(100, 1) == 0


class TestLevels:
    """Tests for level thresholds."""

    def test_xp_for_level(self) -> None:
        assert xp_for_level(1) == 0
        assert xp_for_level(2) == 282
        assert xp_for_level(3) == 519
        assert xp_for_level(4) == 800

    def test_total_xp_for_level(self) -> None:
        assert total_xp_for_level(1) == 0
        assert total_xp_for_level(2) == 282
        assert total_xp_for_level(3) == 801

    @pytest.mark.parametrize(
        ("xp", "level"),
        [(0, 1), (281, 1), (282, 2), (800, 2), (801, 3), (1600, 3), (1601, 4)],
    )
    def test_level_from_xp(self, xp: int, level: int) -> None:
        assert level_from_xp(xp) == level

    def test_level_info(self) -> None:
        """Test progress into level 2 at 300 XP."""
        info = level_info(300)

        assert info.current_level == 2
        assert info.xp_for_current_level == 282
        assert info.xp_for_next_level == 519
        assert info.xp_into_level == 18
        assert info.progress_percent == 3

    def test_level_info_to_dict(self) -> None:
        data = level_info(0).to_dict()

        assert data == {
            "currentLevel": 1,
            "xpForCurrentLevel": 0,
            "xpForNextLevel": 282,
            "xpIntoLevel": 0,
            "progressPercent": 0,
        }


class TestDisplayHelpers:
    """Tests for XP colors and level badges."""

    @pytest.mark.parametrize(
        ("xp", "color"),
        [(0, "#8B8B8B"), (50, "#CD7F32"), (100, "#C0C0C0"), (150, "#FFD700")],
    )
    def test_xp_color(self, xp: int, color: str) -> None:
        assert get_xp_color(xp) == color

    @pytest.mark.parametrize(
        ("level", "badge"),
        [(1, "🎓"), (10, "🌟"), (20, "⭐"), (30, "💎"), (40, "🏆"), (50, "👑")],
    )
    def test_level_badge(self, level: int, badge: str) -> None:
        assert get_level_badge(level) == badge
