# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Progress, course, lesson and quiz request schemas."""

from typing import Any

from pydantic import Field

from learning_adventures.models.base import CamelModel


class StartAdventureRequest(CamelModel):
    adventure_id: str | None = None
    adventure_type: str | None = Field(default=None, description="GAME or LESSON")
    category: str | None = None


class UpdateProgressRequest(CamelModel):
    adventure_id: str | None = None
    time_spent: int | None = Field(default=None, description="Seconds to add")
    score: int | None = None
    status: str | None = None


class CompleteAdventureRequest(CamelModel):
    adventure_id: str | None = None
    score: int | None = None
    time_spent: int | None = None


class CompleteLessonRequest(CamelModel):
    score: int | None = Field(default=None, description="Percentage 0-100")
    time_spent: int = Field(default=0, description="Seconds spent on this attempt")


class QuizSubmitRequest(CamelModel):
    answers: dict[str, Any] = Field(default_factory=dict, description="Question id to answer")
    attempt: int = 0


class RevealAnswerRequest(CamelModel):
    question_id: str | None = None
    xp_cost: int | None = Field(default=None, gt=0)


class SubscriptionUpdateRequest(CamelModel):
    tier: str = Field(description="FREE or PREMIUM")
