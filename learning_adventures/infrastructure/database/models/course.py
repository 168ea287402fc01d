# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured courses: lessons, enrollments, lesson progress and certificates."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learning_adventures.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    utc_now,
)


class Difficulty(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class LessonType(str, Enum):
    GAME = "GAME"
    INTERACTIVE = "INTERACTIVE"
    VIDEO = "VIDEO"
    READING = "READING"
    QUIZ = "QUIZ"
    PROJECT = "PROJECT"


class CourseStatus(str, Enum):
    """Enrollment lifecycle."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    PAUSED = "PAUSED"


class LessonProgressStatus(str, Enum):
    LOCKED = "LOCKED"
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Course(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Ordered sequence of lessons with XP rewards."""

    __tablename__ = "courses"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    subject: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    grade_level: Mapped[list[str]] = mapped_column(ARRAY(String(10)), nullable=False, default=list)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False, default=Difficulty.BEGINNER.value)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    estimated_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prerequisite_course_ids: Mapped[list[str]] = mapped_column(
        ARRAY(String(64)), nullable=False, default=list
    )

    lessons: Mapped[list[CourseLesson]] = relationship(
        "CourseLesson",
        back_populates="course",
        order_by="CourseLesson.order",
        cascade="all, delete-orphan",
    )


class CourseLesson(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Single step within a course."""

    __tablename__ = "course_lessons"
    __table_args__ = (UniqueConstraint("course_id", "order"),)

    course_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=LessonType.INTERACTIVE.value)
    content_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    required_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quiz_data: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    course: Mapped[Course] = relationship("Course", back_populates="lessons")


class CourseEnrollment(Base, UUIDPrimaryKeyMixin):
    """A user's participation in a course."""

    __tablename__ = "course_enrollments"
    __table_args__ = (UniqueConstraint("user_id", "course_id"),)

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    course_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CourseStatus.IN_PROGRESS.value
    )
    enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    current_lesson_order: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    completed_lessons: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_lessons: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_xp_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    certificate_earned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    course: Mapped[Course] = relationship("Course", lazy="selectin")
    lesson_progress: Mapped[list[CourseLessonProgress]] = relationship(
        "CourseLessonProgress",
        back_populates="enrollment",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class CourseLessonProgress(Base, UUIDPrimaryKeyMixin):
    """Per-lesson status inside an enrollment."""

    __tablename__ = "course_lesson_progress"
    __table_args__ = (UniqueConstraint("enrollment_id", "lesson_id"),)

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    enrollment_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("course_enrollments.id", ondelete="CASCADE"),
        nullable=False,
    )
    lesson_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("course_lessons.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LessonProgressStatus.LOCKED.value
    )
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    time_spent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    enrollment: Mapped[CourseEnrollment] = relationship(
        "CourseEnrollment", back_populates="lesson_progress"
    )


class CourseCertificate(Base, UUIDPrimaryKeyMixin):
    """Completion certificate snapshot; values are frozen at issue time."""

    __tablename__ = "course_certificates"

    enrollment_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("course_enrollments.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    certificate_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    verification_code: Mapped[str] = mapped_column(String(12), unique=True, nullable=False)
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    course_title: Mapped[str] = mapped_column(String(255), nullable=False)
    completion_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_xp_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_lessons: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    time_spent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    enrollment: Mapped[CourseEnrollment] = relationship("CourseEnrollment")
