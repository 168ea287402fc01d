# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Planning domain: learning goals and calendar events."""

from learning_adventures.domains.planning.calendar import (
    CalendarService,
    goal_deadline_event,
    serialize_event,
)
from learning_adventures.domains.planning.exceptions import (
    PlanningForbiddenError,
    PlanningNotFoundError,
    PlanningServiceError,
    PlanningValidationError,
)
from learning_adventures.domains.planning.goals import GoalService, default_deadline, serialize_goal

__all__ = [
    "CalendarService",
    "GoalService",
    "PlanningForbiddenError",
    "PlanningNotFoundError",
    "PlanningServiceError",
    "PlanningValidationError",
    "default_deadline",
    "goal_deadline_event",
    "serialize_event",
    "serialize_goal",
]
