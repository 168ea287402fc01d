# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Goal, calendar, friend and challenge request schemas."""

from datetime import datetime

from pydantic import Field

from learning_adventures.models.base import CamelModel


class CreateGoalRequest(CamelModel):
    title: str | None = None
    description: str | None = None
    type: str | None = Field(default=None, description="DAILY, WEEKLY, MONTHLY or CUSTOM")
    target_type: str | None = None
    target_value: int | None = None
    unit: str | None = None
    category: str | None = None
    deadline: datetime | None = None
    icon: str | None = None
    color: str | None = None
    priority: int | None = None


class UpdateGoalRequest(CamelModel):
    title: str | None = None
    description: str | None = None
    target_value: int | None = None
    current_value: int | None = None
    deadline: datetime | None = None
    status: str | None = None
    priority: int | None = None
    icon: str | None = None
    color: str | None = None
    category: str | None = None


class GoalProgressRequest(CamelModel):
    increment: int | None = None
    value: int | None = None


class CreateEventRequest(CamelModel):
    title: str | None = None
    description: str | None = None
    event_type: str | None = None
    category: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    all_day: bool | None = None
    adventure_id: str | None = None
    goal_id: str | None = None
    is_recurring: bool | None = None
    recurrence_rule: str | None = None
    recurrence_end: datetime | None = None
    reminder_minutes: list[int] | None = None
    color: str | None = None
    icon: str | None = None
    priority: int | None = None
    location: str | None = None
    url: str | None = None


class UpdateEventRequest(CreateEventRequest):
    status: str | None = None


class FriendRequest(CamelModel):
    friend_id: str | None = None


class CreateChallengeRequest(CamelModel):
    challenged_id: str | None = None
    type: str | None = None
    goal_value: int | None = None
    unit: str | None = None
    category: str | None = None
    adventure_id: str | None = None
    duration: int = Field(default=7, ge=1, description="Challenge length in days")
