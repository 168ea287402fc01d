# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content studio and staging area request schemas."""

from typing import Any

from pydantic import Field

from learning_adventures.models.base import CamelModel


class GenerateContentRequest(CamelModel):
    prompt: str | None = None
    category: str | None = None
    game_type: str | None = Field(default=None, description="HTML_2D, HTML_3D, QUIZ, ...")
    grade_level: list[str] | None = None
    difficulty: str | None = None
    skills: list[str] | None = None
    context: str | None = None


class IterateContentRequest(CamelModel):
    content_id: str | None = None
    feedback: str | None = None
    existing_code: str | None = None


class PublishContentRequest(CamelModel):
    content_id: str | None = None
    destination: str | None = Field(default=None, description="test-games or catalog")
    metadata: dict[str, Any] | None = None


class CreateTestGameRequest(CamelModel):
    game_id: str | None = None
    title: str | None = None
    description: str | None = None
    category: str | None = None
    type: str | None = None
    grade_level: list[str] | None = None
    difficulty: str | None = None
    skills: list[str] | None = None
    estimated_time: str | None = None
    file_path: str | None = None
    is_html_game: bool | None = None
    is_react_component: bool | None = None


class GameApprovalRequest(CamelModel):
    decision: str | None = Field(default=None, description="APPROVE, REJECT or REQUEST_CHANGES")
    notes: str | None = None
    educational_quality: int | None = None
    technical_quality: int | None = None
    accessibility_compliant: bool | None = None
    age_appropriate: bool | None = None
    engagement_level: int | None = None


class GameFeedbackRequest(CamelModel):
    feedback_type: str | None = None
    message: str | None = None
    issue_severity: str | None = None


class GameStatusRequest(CamelModel):
    status: str | None = None
