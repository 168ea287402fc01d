# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial schema.

Creates every table used by the platform:
- Accounts: users, subscriptions, child_profiles, child_sessions
- Progress: user_progress, user_achievements, user_levels, daily_xp
- Courses: courses, course_lessons, course_enrollments,
  course_lesson_progress, course_certificates
- Planning: learning_goals, calendar_events
- Social: friendships, challenges
- Content studio: gemini_contents, gemini_iterations, gemini_usage,
  test_games, game_approvals, game_feedback

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-11-02
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True)


def _user_fk(name: str = "user_id", unique: bool = False) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=False),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=unique,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create all tables."""

    # =========================================================================
    # Accounts
    # =========================================================================
    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="STUDENT"),
        sa.Column("grade_level", sa.String(10), nullable=True),
        sa.Column("image", sa.String(1024), nullable=True),
        sa.Column("is_verified_adult", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "subscriptions",
        _id(),
        _user_fk(unique=True),
        sa.Column("tier", sa.String(20), nullable=False, server_default="FREE"),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "child_profiles",
        _id(),
        _user_fk("parent_id"),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("pin_hash", sa.String(255), nullable=False),
        sa.Column("grade_level", sa.String(10), nullable=False),
        sa.Column("avatar_id", sa.String(50), nullable=False, server_default="tiger"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_child_profiles_parent_id", "child_profiles", ["parent_id"])
    op.create_index("ix_child_profiles_username", "child_profiles", ["username"], unique=True)

    op.create_table(
        "child_sessions",
        _id(),
        sa.Column("token", sa.String(1024), nullable=False),
        sa.Column(
            "child_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("child_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("expires", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_child_sessions_token", "child_sessions", ["token"], unique=True)
    op.create_index("ix_child_sessions_child_id", "child_sessions", ["child_id"])

    # =========================================================================
    # Progress and gamification
    # =========================================================================
    op.create_table(
        "user_progress",
        _id(),
        _user_fk(),
        sa.Column("adventure_id", sa.String(255), nullable=False),
        sa.Column("adventure_type", sa.String(20), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="NOT_STARTED"),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("time_spent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_accessed", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "adventure_id", name="uq_user_progress_user_id_adventure_id"),
    )
    op.create_index("ix_user_progress_user_id", "user_progress", ["user_id"])
    op.create_index("ix_user_progress_category", "user_progress", ["category"])

    op.create_table(
        "user_achievements",
        _id(),
        _user_fk(),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_user_achievements_user_id", "user_achievements", ["user_id"])

    op.create_table(
        "user_levels",
        _id(),
        _user_fk(unique=True),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.Date(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "daily_xp",
        _id(),
        _user_fk(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("xp_from_lessons", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_from_games", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_from_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("user_id", "date", name="uq_daily_xp_user_id_date"),
    )
    op.create_index("ix_daily_xp_user_id", "daily_xp", ["user_id"])

    # =========================================================================
    # Courses
    # =========================================================================
    op.create_table(
        "courses",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("subject", sa.String(50), nullable=False),
        sa.Column("grade_level", postgresql.ARRAY(sa.String(10)), nullable=False, server_default="{}"),
        sa.Column("difficulty", sa.String(20), nullable=False, server_default="BEGINNER"),
        sa.Column("is_premium", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("thumbnail_url", sa.String(1024), nullable=True),
        sa.Column("estimated_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "prerequisite_course_ids",
            postgresql.ARRAY(sa.String(64)),
            nullable=False,
            server_default="{}",
        ),
        *_timestamps(),
    )
    op.create_index("ix_courses_slug", "courses", ["slug"], unique=True)
    op.create_index("ix_courses_subject", "courses", ["subject"])

    op.create_table(
        "course_lessons",
        _id(),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("type", sa.String(20), nullable=False, server_default="INTERACTIVE"),
        sa.Column("content_path", sa.String(1024), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_reward", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("required_score", sa.Integer(), nullable=True),
        sa.Column("quiz_data", postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("course_id", "order", name="uq_course_lessons_course_id_order"),
    )
    op.create_index("ix_course_lessons_course_id", "course_lessons", ["course_id"])

    op.create_table(
        "course_enrollments",
        _id(),
        _user_fk(),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="IN_PROGRESS"),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_lesson_order", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("completed_lessons", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_lessons", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_xp_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_score", sa.Float(), nullable=True),
        sa.Column("certificate_earned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("user_id", "course_id", name="uq_course_enrollments_user_id_course_id"),
    )
    op.create_index("ix_course_enrollments_user_id", "course_enrollments", ["user_id"])
    op.create_index("ix_course_enrollments_course_id", "course_enrollments", ["course_id"])

    op.create_table(
        "course_lesson_progress",
        _id(),
        _user_fk(),
        sa.Column(
            "enrollment_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("course_enrollments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "lesson_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("course_lessons.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="LOCKED"),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("time_spent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "enrollment_id", "lesson_id", name="uq_course_lesson_progress_enrollment_id_lesson_id"
        ),
    )
    op.create_index("ix_course_lesson_progress_user_id", "course_lesson_progress", ["user_id"])
    op.create_index("ix_course_lesson_progress_enrollment_id", "course_lesson_progress", ["enrollment_id"])

    op.create_table(
        "course_certificates",
        _id(),
        sa.Column(
            "enrollment_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("course_enrollments.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("certificate_number", sa.String(32), nullable=False, unique=True),
        sa.Column("verification_code", sa.String(12), nullable=False, unique=True),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column("course_title", sa.String(255), nullable=False),
        sa.Column("completion_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_xp_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_score", sa.Float(), nullable=True),
        sa.Column("total_lessons", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("time_spent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # =========================================================================
    # Planning
    # =========================================================================
    op.create_table(
        "learning_goals",
        _id(),
        _user_fk(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("target_type", sa.String(50), nullable=False),
        sa.Column("target_value", sa.Integer(), nullable=False),
        sa.Column("current_value", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unit", sa.String(50), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("streak_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("icon", sa.String(50), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_learning_goals_user_id", "learning_goals", ["user_id"])

    op.create_table(
        "calendar_events",
        _id(),
        _user_fk(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_type", sa.String(30), nullable=False),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("all_day", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("adventure_id", sa.String(255), nullable=True),
        sa.Column("goal_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recurrence_rule", sa.String(255), nullable=True),
        sa.Column("recurrence_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reminder_minutes", postgresql.ARRAY(sa.Integer()), nullable=False, server_default="{}"),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("icon", sa.String(50), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("url", sa.String(1024), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="SCHEDULED"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_calendar_events_user_id", "calendar_events", ["user_id"])
    op.create_index("ix_calendar_events_start_time", "calendar_events", ["start_time"])

    # =========================================================================
    # Social
    # =========================================================================
    op.create_table(
        "friendships",
        _id(),
        _user_fk(),
        _user_fk("friend_id"),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "friend_id", name="uq_friendships_user_id_friend_id"),
    )
    op.create_index("ix_friendships_user_id", "friendships", ["user_id"])
    op.create_index("ix_friendships_friend_id", "friendships", ["friend_id"])

    op.create_table(
        "challenges",
        _id(),
        _user_fk("creator_id"),
        _user_fk("challenged_id"),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("adventure_id", sa.String(255), nullable=True),
        sa.Column("goal_value", sa.Integer(), nullable=False),
        sa.Column("unit", sa.String(50), nullable=False),
        sa.Column("creator_progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("challenged_progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("winner_id", postgresql.UUID(as_uuid=False), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_challenges_creator_id", "challenges", ["creator_id"])
    op.create_index("ix_challenges_challenged_id", "challenges", ["challenged_id"])

    # =========================================================================
    # Content studio
    # =========================================================================
    op.create_table(
        "gemini_contents",
        _id(),
        _user_fk(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("generated_code", sa.Text(), nullable=False),
        sa.Column("game_type", sa.String(20), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("grade_level", postgresql.ARRAY(sa.String(10)), nullable=False, server_default="{}"),
        sa.Column("difficulty", sa.String(20), nullable=False),
        sa.Column("skills", postgresql.ARRAY(sa.String(255)), nullable=False, server_default="{}"),
        sa.Column("status", sa.String(20), nullable=False, server_default="DRAFT"),
        sa.Column("iterations", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("iteration_notes", postgresql.ARRAY(sa.Text()), nullable=False, server_default="{}"),
        sa.Column("metadata", postgresql.JSONB(), nullable=False, server_default="{}"),
        sa.Column("file_path", sa.String(1024), nullable=True),
        sa.Column("test_game_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_gemini_contents_user_id", "gemini_contents", ["user_id"])
    op.create_index("ix_gemini_contents_category", "gemini_contents", ["category"])

    op.create_table(
        "gemini_iterations",
        _id(),
        sa.Column(
            "gemini_content_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("gemini_contents.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("iteration_number", sa.Integer(), nullable=False),
        sa.Column("user_feedback", sa.Text(), nullable=False),
        sa.Column("previous_code", sa.Text(), nullable=False),
        sa.Column("new_code", sa.Text(), nullable=False),
        sa.Column("changes_summary", sa.Text(), nullable=False),
        sa.Column("tokens_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("generation_time", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_gemini_iterations_gemini_content_id", "gemini_iterations", ["gemini_content_id"])

    op.create_table(
        "gemini_usage",
        _id(),
        _user_fk(),
        sa.Column("operation", sa.String(20), nullable=False),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("tokens_input", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tokens_output", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("estimated_cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("gemini_content_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_gemini_usage_user_id", "gemini_usage", ["user_id"])
    op.create_index("ix_gemini_usage_created_at", "gemini_usage", ["created_at"])

    op.create_table(
        "test_games",
        _id(),
        sa.Column("game_id", sa.String(255), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="game"),
        sa.Column("grade_level", postgresql.ARRAY(sa.String(10)), nullable=False, server_default="{}"),
        sa.Column("difficulty", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("skills", postgresql.ARRAY(sa.String(255)), nullable=False, server_default="{}"),
        sa.Column("estimated_time", sa.String(50), nullable=False, server_default="15-20 mins"),
        sa.Column("file_path", sa.String(1024), nullable=True),
        sa.Column("is_html_game", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_react_component", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(20), nullable=False, server_default="NOT_TESTED"),
        sa.Column("created_by", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("catalogued", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("catalogued_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("catalogued_by", postgresql.UUID(as_uuid=False), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_test_games_game_id", "test_games", ["game_id"], unique=True)

    op.create_table(
        "game_approvals",
        _id(),
        sa.Column(
            "test_game_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("test_games.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("decision", sa.String(30), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("educational_quality", sa.Integer(), nullable=True),
        sa.Column("technical_quality", sa.Integer(), nullable=True),
        sa.Column("accessibility_compliant", sa.Boolean(), nullable=True),
        sa.Column("age_appropriate", sa.Boolean(), nullable=True),
        sa.Column("engagement_level", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_game_approvals_test_game_id", "game_approvals", ["test_game_id"])

    op.create_table(
        "game_feedback",
        _id(),
        sa.Column(
            "test_game_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("test_games.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("feedback_type", sa.String(30), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("issue_severity", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_game_feedback_test_game_id", "game_feedback", ["test_game_id"])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    for table in (
        "game_feedback",
        "game_approvals",
        "test_games",
        "gemini_usage",
        "gemini_iterations",
        "gemini_contents",
        "challenges",
        "friendships",
        "calendar_events",
        "learning_goals",
        "course_certificates",
        "course_lesson_progress",
        "course_enrollments",
        "course_lessons",
        "courses",
        "daily_xp",
        "user_levels",
        "user_achievements",
        "user_progress",
        "child_sessions",
        "child_profiles",
        "subscriptions",
        "users",
    ):
        op.drop_table(table)
