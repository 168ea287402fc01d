# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for learning goals and calendar events."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from learning_adventures.domains.planning.calendar import (
    CalendarService,
    goal_deadline_event,
    serialize_event,
)
from learning_adventures.domains.planning.exceptions import (
    PlanningForbiddenError,
    PlanningNotFoundError,
    PlanningValidationError,
)
from learning_adventures.domains.planning.goals import (
    GoalService,
    default_deadline,
    serialize_goal,
)

NOW = datetime(2025, 3, 13, 10, 0, tzinfo=timezone.utc)  # Thursday


def make_goal(user_id: str = "user-1", current: int = 0, target: int = 5, status: str = "ACTIVE") -> MagicMock:
    goal = MagicMock()
    goal.id = "g-1"
    goal.user_id = user_id
    goal.title = "Read 5 stories"
    goal.description = None
    goal.type = "WEEKLY"
    goal.current_value = current
    goal.target_value = target
    goal.status = status
    goal.deadline = datetime(2025, 3, 16, 23, 59, tzinfo=timezone.utc)
    goal.completed_at = None
    goal.created_at = None
    goal.streak_count = 0
    goal.icon = None
    goal.color = "#00AAFF"
    return goal


def make_event(user_id: str = "user-1") -> MagicMock:
    event = MagicMock()
    event.id = "ev-1"
    event.user_id = user_id
    event.start_time = datetime(2025, 3, 14, 15, 0)
    event.end_time = datetime(2025, 3, 14, 16, 0, tzinfo=timezone.utc)
    event.recurrence_end = None
    event.completed_at = None
    event.reminder_minutes = None
    event.status = "SCHEDULED"
    return event


class TestDefaultDeadline:
    """Tests for goal deadline defaults."""

    def test_daily(self) -> None:
        assert default_deadline("DAILY", NOW) == datetime(2025, 3, 13, 23, 59, 59, 999999, tzinfo=timezone.utc)

    def test_weekly_ends_sunday(self) -> None:
        deadline = default_deadline("WEEKLY", NOW)

        assert deadline.weekday() == 6
        assert deadline.date() == datetime(2025, 3, 16).date()

    def test_monthly(self) -> None:
        assert default_deadline("MONTHLY", NOW).date() == datetime(2025, 3, 31).date()
        assert default_deadline("MONTHLY", datetime(2025, 12, 5, tzinfo=timezone.utc)).day == 31

    def test_custom(self) -> None:
        assert default_deadline("CUSTOM", NOW) is None


class TestSerializeGoal:
    """Tests for derived goal fields."""

    def test_progress_and_expiry(self) -> None:
        data = serialize_goal(make_goal(current=2, target=5), now=datetime(2025, 3, 20, tzinfo=timezone.utc))

        assert data["progressPercent"] == 40
        assert data["isComplete"] is False
        assert data["isExpired"] is True

    def test_completed_goal_not_expired(self) -> None:
        data = serialize_goal(
            make_goal(current=5, target=5, status="COMPLETED"),
            now=datetime(2025, 3, 20, tzinfo=timezone.utc),
        )

        assert data["isComplete"] is True
        assert data["isExpired"] is False


class TestGoalService:
    """Tests for GoalService."""

    @pytest.mark.asyncio
    async def test_create_goal_defaults(self, mock_db) -> None:
        goal = await GoalService(mock_db).create_goal(
            "user-1", "Practice daily", "DAILY", "LESSONS", 3, "lessons"
        )

        assert goal.status == "ACTIVE"
        assert goal.current_value == 0
        assert goal.priority == 0
        assert goal.deadline is not None
        mock_db.add.assert_called_once_with(goal)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("goal_type", "target", "message"),
        [("DAILY", None, "Missing required fields"), ("YEARLY", 3, "Invalid goal type"), ("DAILY", 0, "greater than 0")],
    )
    async def test_create_validation(self, mock_db, goal_type, target, message) -> None:
        with pytest.raises(PlanningValidationError, match=message):
            await GoalService(mock_db).create_goal("user-1", "Goal", goal_type, "LESSONS", target, "lessons")

    @pytest.mark.asyncio
    async def test_missing_goal(self, mock_db) -> None:
        with pytest.raises(PlanningNotFoundError, match="Goal not found"):
            await GoalService(mock_db).get_owned_goal("user-1", "g-x")

    @pytest.mark.asyncio
    async def test_other_users_goal(self, mock_db) -> None:
        mock_db.get.return_value = make_goal(user_id="someone-else")

        with pytest.raises(PlanningForbiddenError):
            await GoalService(mock_db).get_owned_goal("user-1", "g-1")

    @pytest.mark.asyncio
    async def test_increment_completes(self, mock_db) -> None:
        """Test that reaching the target completes the goal and bumps the streak."""
        goal = make_goal(current=4, target=5)
        mock_db.get.return_value = goal

        _, is_complete = await GoalService(mock_db).record_progress("user-1", "g-1", increment=1)

        assert is_complete is True
        assert goal.status == "COMPLETED"
        assert goal.completed_at is not None
        assert goal.streak_count == 1

    @pytest.mark.asyncio
    async def test_value_clamped_at_zero(self, mock_db) -> None:
        goal = make_goal(current=2)
        mock_db.get.return_value = goal

        _, is_complete = await GoalService(mock_db).record_progress("user-1", "g-1", increment=-10)

        assert goal.current_value == 0
        assert is_complete is False

    @pytest.mark.asyncio
    async def test_progress_on_inactive_goal(self, mock_db) -> None:
        mock_db.get.return_value = make_goal(status="ARCHIVED")

        with pytest.raises(PlanningValidationError, match="non-active goal"):
            await GoalService(mock_db).record_progress("user-1", "g-1", value=3)

    @pytest.mark.asyncio
    async def test_progress_requires_amount(self, mock_db) -> None:
        mock_db.get.return_value = make_goal()

        with pytest.raises(PlanningValidationError, match="increment or value"):
            await GoalService(mock_db).record_progress("user-1", "g-1")

    @pytest.mark.asyncio
    async def test_update_skips_empty_required_fields(self, mock_db) -> None:
        goal = make_goal()
        mock_db.get.return_value = goal

        await GoalService(mock_db).update_goal(
            "user-1", "g-1", {"title": "", "description": "Now with notes", "user_id": "hijack"}
        )

        assert goal.title == "Read 5 stories"
        assert goal.description == "Now with notes"
        assert goal.user_id == "user-1"

    @pytest.mark.asyncio
    async def test_complete_goal(self, mock_db) -> None:
        goal = make_goal(current=1, target=5)
        mock_db.get.return_value = goal

        await GoalService(mock_db).complete_goal("user-1", "g-1")

        assert goal.current_value == 5
        assert goal.status == "COMPLETED"


class TestCalendar:
    """Tests for CalendarService and event serialization."""

    def test_serialize_event_normalizes_utc(self) -> None:
        data = serialize_event(make_event())

        assert data["startTime"] == "2025-03-14T15:00:00+00:00"
        assert data["reminderMinutes"] == []
        assert data["isGoal"] is False

    def test_goal_deadline_event(self) -> None:
        event = goal_deadline_event(make_goal())

        assert event["id"] == "goal-g-1"
        assert event["title"] == "Goal: Read 5 stories"
        assert event["eventType"] == "GOAL_DEADLINE"
        assert event["icon"] == "🎯"
        assert event["allDay"] is True

    @pytest.mark.asyncio
    async def test_create_event(self, mock_db) -> None:
        start = NOW
        event = await CalendarService(mock_db).create_event(
            "user-1", "Math time", "STUDY", start, start + timedelta(hours=1), color="#FF0000", bogus="x"
        )

        assert event.status == "SCHEDULED"
        assert event.color == "#FF0000"
        assert event.all_day is False
        assert event.reminder_minutes == []

    @pytest.mark.asyncio
    async def test_create_rejects_end_before_start(self, mock_db) -> None:
        with pytest.raises(PlanningValidationError, match="End time must be after start time"):
            await CalendarService(mock_db).create_event(
                "user-1", "Math time", "STUDY", NOW, NOW - timedelta(minutes=1)
            )

    @pytest.mark.asyncio
    async def test_list_with_goals(self, mock_db, result_factory) -> None:
        mock_db.execute.side_effect = [
            result_factory(items=[make_event()]),
            result_factory(items=[make_goal()]),
        ]

        events = await CalendarService(mock_db).list_events("user-1", include_goals=True)

        assert [e["isGoal"] for e in events] == [False, True]

    @pytest.mark.asyncio
    async def test_update_invalid_status(self, mock_db) -> None:
        mock_db.get.return_value = make_event()

        with pytest.raises(PlanningValidationError, match="Invalid event status"):
            await CalendarService(mock_db).update_event("user-1", "ev-1", {"status": "DONE"})

    @pytest.mark.asyncio
    async def test_complete_event(self, mock_db) -> None:
        event = make_event()
        mock_db.get.return_value = event

        await CalendarService(mock_db).complete_event("user-1", "ev-1")

        assert event.status == "COMPLETED"
        assert event.completed_at is not None

    @pytest.mark.asyncio
    async def test_delete_other_users_event(self, mock_db) -> None:
        mock_db.get.return_value = make_event(user_id="someone-else")

        with pytest.raises(PlanningForbiddenError):
            await CalendarService(mock_db).delete_event("user-1", "ev-1")
