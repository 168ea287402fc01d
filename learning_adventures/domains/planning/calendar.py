# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Calendar events, optionally merged with goal deadlines."""

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
from learning_adventures.infrastructure.database.models import (
    CalendarEvent,
    EventStatus,
    GoalStatus,
    LearningGoal,
)
from learning_adventures.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

GOAL_DEADLINE_TYPE = "GOAL_DEADLINE"
DEFAULT_GOAL_ICON = "🎯"

UPDATABLE_FIELDS = {
    "title",
    "description",
    "event_type",
    "category",
    "start_time",
    "end_time",
    "all_day",
    "adventure_id",
    "goal_id",
    "is_recurring",
    "recurrence_rule",
    "recurrence_end",
    "reminder_minutes",
    "status",
    "color",
    "icon",
    "priority",
    "location",
    "url",
}

# Falsy values for these leave the stored value untouched.
_REQUIRED_ON_UPDATE = {"title", "event_type", "start_time", "end_time", "recurrence_end", "status"}


def _iso(value: datetime | None) -> str | None:
    value = ensure_utc(value)
    return value.isoformat() if value else None


def serialize_event(event: CalendarEvent) -> dict[str, Any]:
    return {
        "id": event.id,
        "userId": event.user_id,
        "title": event.title,
        "description": event.description,
        "eventType": event.event_type,
        "category": event.category,
        "startTime": _iso(event.start_time),
        "endTime": _iso(event.end_time),
        "allDay": event.all_day,
        "adventureId": event.adventure_id,
        "goalId": event.goal_id,
        "isRecurring": event.is_recurring,
        "recurrenceRule": event.recurrence_rule,
        "recurrenceEnd": _iso(event.recurrence_end),
        "reminderMinutes": list(event.reminder_minutes or []),
        "color": event.color,
        "icon": event.icon,
        "priority": event.priority,
        "location": event.location,
        "url": event.url,
        "status": event.status,
        "completedAt": _iso(event.completed_at),
        "isGoal": False,
    }


def goal_deadline_event(goal: LearningGoal) -> dict[str, Any]:
    """All-day pseudo-event for an active goal's deadline."""
    return {
        "id": f"goal-{goal.id}",
        "title": f"Goal: {goal.title}",
        "description": goal.description,
        "eventType": GOAL_DEADLINE_TYPE,
        "startTime": _iso(goal.deadline),
        "endTime": _iso(goal.deadline),
        "allDay": True,
        "color": goal.color,
        "icon": goal.icon or DEFAULT_GOAL_ICON,
        "goalId": goal.id,
        "isGoal": True,
    }


class CalendarService:
    """CRUD for calendar events."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_events(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        event_type: str | None = None,
        include_goals: bool = False,
    ) -> list[dict[str, Any]]:
        """Events ordered by start time, followed by goal deadlines when requested.

        The date range applies only when both bounds are given.
        """
        query = select(CalendarEvent).where(CalendarEvent.user_id == user_id)
        if start and end:
            query = query.where(CalendarEvent.start_time >= start, CalendarEvent.start_time <= end)
        if event_type:
            query = query.where(CalendarEvent.event_type == event_type)

        result = await self.db.execute(query.order_by(CalendarEvent.start_time.asc()))
        events = [serialize_event(e) for e in result.scalars().all()]

        if include_goals:
            goal_query = select(LearningGoal).where(
                LearningGoal.user_id == user_id,
                LearningGoal.status == GoalStatus.ACTIVE.value,
                LearningGoal.deadline.is_not(None),
            )
            if start:
                goal_query = goal_query.where(LearningGoal.deadline >= start)
            if end:
                goal_query = goal_query.where(LearningGoal.deadline <= end)
            result = await self.db.execute(goal_query)
            events.extend(goal_deadline_event(g) for g in result.scalars().all())

        return events

    async def create_event(
        self,
        user_id: str,
        title: str | None,
        event_type: str | None,
        start_time: datetime | None,
        end_time: datetime | None,
        **fields: Any,
    ) -> CalendarEvent:
        """Create a SCHEDULED event.

        Raises:
            PlanningValidationError: Missing fields or end before start.
        """
        if not title or not event_type or not start_time or not end_time:
            raise PlanningValidationError(
                "Missing required fields: title, eventType, startTime, endTime"
            )
        if end_time < start_time:
            raise PlanningValidationError("End time must be after start time")

        extra = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
        extra.setdefault("all_day", False)
        extra.setdefault("is_recurring", False)
        extra.setdefault("reminder_minutes", [])
        extra.setdefault("priority", 0)
        extra["status"] = EventStatus.SCHEDULED.value

        event = CalendarEvent(
            user_id=user_id,
            title=title,
            event_type=event_type,
            start_time=start_time,
            end_time=end_time,
            **extra,
        )
        self.db.add(event)
        await self.db.commit()
        await self.db.refresh(event)

        logger.info("Calendar event created: user=%s, event=%s", user_id, event.id)
        return event

    async def get_owned_event(self, user_id: str, event_id: str) -> CalendarEvent:
        event = await self.db.get(CalendarEvent, event_id)
        if event is None:
            raise PlanningNotFoundError("Event not found")
        if event.user_id != user_id:
            raise PlanningForbiddenError()
        return event

    async def update_event(
        self, user_id: str, event_id: str, updates: dict[str, Any]
    ) -> CalendarEvent:
        event = await self.get_owned_event(user_id, event_id)

        start = updates.get("start_time")
        end = updates.get("end_time")
        if start and end and end < start:
            raise PlanningValidationError("End time must be after start time")
        if updates.get("status") and updates["status"] not in {s.value for s in EventStatus}:
            raise PlanningValidationError("Invalid event status")

        for field, value in updates.items():
            if field not in UPDATABLE_FIELDS:
                continue
            if field in _REQUIRED_ON_UPDATE and not value:
                continue
            setattr(event, field, value)

        await self.db.commit()
        await self.db.refresh(event)
        return event

    async def delete_event(self, user_id: str, event_id: str) -> None:
        event = await self.get_owned_event(user_id, event_id)
        await self.db.delete(event)
        await self.db.commit()
        logger.info("Calendar event deleted: user=%s, event=%s", user_id, event_id)

    async def complete_event(self, user_id: str, event_id: str) -> CalendarEvent:
        event = await self.get_owned_event(user_id, event_id)
        event.status = EventStatus.COMPLETED.value
        event.completed_at = utc_now()

        await self.db.commit()
        await self.db.refresh(event)
        return event
