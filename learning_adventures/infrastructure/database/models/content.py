# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content studio models: Gemini generations and the staging test-game area.

GeminiContent holds AI-generated HTML games and their iteration history.
GeminiUsage records every LLM call (successful or not) for cost reporting.
TestGame is the staging record an admin reviews before catalog promotion;
GameApproval and GameFeedback are the review trail attached to it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learning_adventures.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    utc_now,
)


class GeminiContentStatus(str, Enum):
    DRAFT = "DRAFT"
    ITERATING = "ITERATING"
    TESTING = "TESTING"
    APPROVED = "APPROVED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class TestGameStatus(str, Enum):
    NOT_TESTED = "NOT_TESTED"
    IN_TESTING = "IN_TESTING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    NEEDS_REVISION = "NEEDS_REVISION"


class GeminiContent(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Generated HTML game and its publishing state."""

    __tablename__ = "gemini_contents"

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    generated_code: Mapped[str] = mapped_column(Text, nullable=False)
    game_type: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    grade_level: Mapped[list[str]] = mapped_column(ARRAY(String(10)), nullable=False, default=list)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)
    skills: Mapped[list[str]] = mapped_column(ARRAY(String(255)), nullable=False, default=list)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=GeminiContentStatus.DRAFT.value
    )
    iterations: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    iteration_notes: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, default=list)
    content_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONB, nullable=False, default=dict
    )
    file_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    test_game_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    iteration_history: Mapped[list[GeminiIteration]] = relationship(
        "GeminiIteration",
        back_populates="content",
        cascade="all, delete-orphan",
        order_by="GeminiIteration.iteration_number",
    )


class GeminiIteration(Base, UUIDPrimaryKeyMixin):
    """One feedback-driven revision of a GeminiContent."""

    __tablename__ = "gemini_iterations"

    gemini_content_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("gemini_contents.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    iteration_number: Mapped[int] = mapped_column(Integer, nullable=False)
    user_feedback: Mapped[str] = mapped_column(Text, nullable=False)
    previous_code: Mapped[str] = mapped_column(Text, nullable=False)
    new_code: Mapped[str] = mapped_column(Text, nullable=False)
    changes_summary: Mapped[str] = mapped_column(Text, nullable=False)
    tokens_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    generation_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    content: Mapped[GeminiContent] = relationship("GeminiContent", back_populates="iteration_history")


class GeminiUsage(Base, UUIDPrimaryKeyMixin):
    """Token and cost ledger for LLM calls."""

    __tablename__ = "gemini_usage"

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    operation: Mapped[str] = mapped_column(String(20), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    tokens_input: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tokens_output: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    estimated_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    gemini_content_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), index=True, nullable=False, default=utc_now
    )


class TestGame(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Staged game awaiting review before catalog promotion."""

    __tablename__ = "test_games"
    # Keep pytest from collecting this model as a test class.
    __test__ = False

    game_id: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="game")
    grade_level: Mapped[list[str]] = mapped_column(ARRAY(String(10)), nullable=False, default=list)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    skills: Mapped[list[str]] = mapped_column(ARRAY(String(255)), nullable=False, default=list)
    estimated_time: Mapped[str] = mapped_column(String(50), nullable=False, default="15-20 mins")
    file_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_html_game: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_react_component: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TestGameStatus.NOT_TESTED.value
    )
    created_by: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)
    catalogued: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    catalogued_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    catalogued_by: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)

    approvals: Mapped[list[GameApproval]] = relationship(
        "GameApproval", back_populates="test_game", cascade="all, delete-orphan"
    )
    feedback: Mapped[list[GameFeedback]] = relationship(
        "GameFeedback", back_populates="test_game", cascade="all, delete-orphan"
    )


class GameApproval(Base, UUIDPrimaryKeyMixin):
    """Reviewer decision with quality scores."""

    __tablename__ = "game_approvals"

    test_game_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("test_games.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    decision: Mapped[str] = mapped_column(String(30), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    educational_quality: Mapped[int | None] = mapped_column(Integer, nullable=True)
    technical_quality: Mapped[int | None] = mapped_column(Integer, nullable=True)
    accessibility_compliant: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    age_appropriate: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    engagement_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    test_game: Mapped[TestGame] = relationship("TestGame", back_populates="approvals")


class GameFeedback(Base, UUIDPrimaryKeyMixin):
    """Free-form reviewer note."""

    __tablename__ = "game_feedback"

    test_game_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("test_games.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    feedback_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    issue_severity: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    test_game: Mapped[TestGame] = relationship("TestGame", back_populates="feedback")
