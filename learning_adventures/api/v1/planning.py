# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning goal and calendar endpoints."""

import logging
from datetime import datetime
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.dependencies import get_db, require_auth
from learning_adventures.api.middleware.auth import CurrentUser
from learning_adventures.domains.planning import (
    CalendarService,
    GoalService,
    PlanningForbiddenError,
    PlanningNotFoundError,
    PlanningServiceError,
    PlanningValidationError,
    serialize_event,
    serialize_goal,
)
from learning_adventures.models.planning import (
    CreateEventRequest,
    CreateGoalRequest,
    GoalProgressRequest,
    UpdateEventRequest,
    UpdateGoalRequest,
)

logger = logging.getLogger(__name__)

goals_router = APIRouter()
calendar_router = APIRouter()


def _raise_http(e: PlanningServiceError) -> NoReturn:
    """Translate a planning error into its HTTP status."""
    if isinstance(e, PlanningNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, PlanningForbiddenError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(e, PlanningValidationError):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    raise HTTPException(status_code=code, detail=str(e))


# =============================================================================
# Goals
# =============================================================================


@goals_router.get("")
async def list_goals(
    status_filter: str | None = Query(default=None, alias="status"),
    goal_type: str | None = Query(default=None, alias="type"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    goals = await GoalService(db).list_goals(current_user.id, status_filter, goal_type)
    return {"goals": [serialize_goal(g) for g in goals]}


@goals_router.post("", status_code=status.HTTP_201_CREATED)
async def create_goal(
    data: CreateGoalRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Create a goal; the deadline defaults from the goal type."""
    try:
        goal = await GoalService(db).create_goal(
            current_user.id,
            title=data.title,
            goal_type=data.type,
            target_type=data.target_type,
            target_value=data.target_value,
            unit=data.unit,
            description=data.description,
            category=data.category,
            deadline=data.deadline,
            icon=data.icon,
            color=data.color,
            priority=data.priority,
        )
    except PlanningServiceError as e:
        _raise_http(e)
    return {"success": True, "goal": serialize_goal(goal)}


@goals_router.get("/{goal_id}")
async def get_goal(
    goal_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        goal = await GoalService(db).get_owned_goal(current_user.id, goal_id)
    except PlanningServiceError as e:
        _raise_http(e)
    return {"goal": serialize_goal(goal)}


@goals_router.patch("/{goal_id}")
async def update_goal(
    goal_id: str,
    data: UpdateGoalRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        goal = await GoalService(db).update_goal(current_user.id, goal_id, data.updates())
    except PlanningServiceError as e:
        _raise_http(e)
    return {"success": True, "goal": serialize_goal(goal)}


@goals_router.delete("/{goal_id}")
async def delete_goal(
    goal_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        await GoalService(db).delete_goal(current_user.id, goal_id)
    except PlanningServiceError as e:
        _raise_http(e)
    return {"success": True, "message": "Goal deleted"}


@goals_router.post("/{goal_id}/progress")
async def record_goal_progress(
    goal_id: str,
    data: GoalProgressRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Add to (increment) or set (value) a goal's progress."""
    try:
        goal, is_complete = await GoalService(db).record_progress(
            current_user.id, goal_id, increment=data.increment, value=data.value
        )
    except PlanningServiceError as e:
        _raise_http(e)

    return {
        "success": True,
        "goal": serialize_goal(goal),
        "isComplete": is_complete,
        "message": "Goal completed! 🎉" if is_complete else "Progress updated",
    }


@goals_router.post("/{goal_id}/complete")
async def complete_goal(
    goal_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        goal = await GoalService(db).complete_goal(current_user.id, goal_id)
    except PlanningServiceError as e:
        _raise_http(e)
    return {"success": True, "goal": serialize_goal(goal)}


# =============================================================================
# Calendar
# =============================================================================


@calendar_router.get("")
async def list_events(
    start: datetime | None = Query(default=None, alias="startDate"),
    end: datetime | None = Query(default=None, alias="endDate"),
    event_type: str | None = Query(default=None, alias="type"),
    include_goals: bool = Query(default=False, alias="includeGoals"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Events in a date range, optionally with goal deadlines merged in."""
    events = await CalendarService(db).list_events(
        current_user.id,
        start=start,
        end=end,
        event_type=event_type,
        include_goals=include_goals,
    )
    return {"events": events}


@calendar_router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    data: CreateEventRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    fields = data.model_dump(exclude={"title", "event_type", "start_time", "end_time"})
    try:
        event = await CalendarService(db).create_event(
            current_user.id,
            title=data.title,
            event_type=data.event_type,
            start_time=data.start_time,
            end_time=data.end_time,
            **fields,
        )
    except PlanningServiceError as e:
        _raise_http(e)
    return {"success": True, "event": serialize_event(event)}


@calendar_router.patch("/{event_id}")
async def update_event(
    event_id: str,
    data: UpdateEventRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        event = await CalendarService(db).update_event(current_user.id, event_id, data.updates())
    except PlanningServiceError as e:
        _raise_http(e)
    return {"success": True, "event": serialize_event(event)}


@calendar_router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        await CalendarService(db).delete_event(current_user.id, event_id)
    except PlanningServiceError as e:
        _raise_http(e)
    return {"success": True, "message": "Event deleted"}


@calendar_router.post("/{event_id}/complete")
async def complete_event(
    event_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        event = await CalendarService(db).complete_event(current_user.id, event_id)
    except PlanningServiceError as e:
        _raise_http(e)
    return {"success": True, "event": serialize_event(event)}
