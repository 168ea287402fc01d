# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course enrollment lifecycle.

Enrollment eligibility is checked in a fixed order: course exists, user
exists, not already enrolled, prerequisites completed, premium access for
premium courses, and finally the free-course cap for free users.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.core.config import PlatformSettings, get_settings
from learning_adventures.domains.courses.catalog import (
    CourseCatalogService,
    serialize_course,
    serialize_lesson,
)
from learning_adventures.domains.courses.exceptions import (
    CourseNotFoundError,
    EnrollmentNotAllowedError,
    NotEnrolledError,
)
from learning_adventures.domains.courses.subscription import SubscriptionService
from learning_adventures.infrastructure.database.models import (
    Course,
    CourseEnrollment,
    CourseLessonProgress,
    CourseStatus,
    LessonProgressStatus,
    User,
)

logger = logging.getLogger(__name__)

DASHBOARD_RECENT_LIMIT = 5


@dataclass
class EnrollmentEligibility:
    """Outcome of an eligibility check."""

    can_enroll: bool
    reason: str | None = None
    prerequisites_met: bool = True
    requires_premium: bool = False
    has_premium_access: bool = False
    missing_prerequisites: list[dict[str, Any]] = field(default_factory=list)
    free_course_limit: int | None = None
    free_courses_enrolled: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "canEnroll": self.can_enroll,
            "reason": self.reason,
            "prerequisitesMet": self.prerequisites_met,
            "requiresPremium": self.requires_premium,
            "hasPremiumAccess": self.has_premium_access,
        }
        if self.missing_prerequisites:
            data["missingPrerequisites"] = self.missing_prerequisites
        if self.free_course_limit is not None:
            data["freeCourseLimit"] = self.free_course_limit
            data["freeCoursesEnrolled"] = self.free_courses_enrolled
        return data


def serialize_lesson_progress(progress: CourseLessonProgress) -> dict[str, Any]:
    return {
        "id": progress.id,
        "lessonId": progress.lesson_id,
        "status": progress.status,
        "score": progress.score,
        "timeSpent": progress.time_spent,
        "attempts": progress.attempts,
        "xpEarned": progress.xp_earned,
        "startedAt": progress.started_at.isoformat() if progress.started_at else None,
        "completedAt": progress.completed_at.isoformat() if progress.completed_at else None,
    }


def serialize_enrollment(enrollment: CourseEnrollment, include_course: bool = True) -> dict[str, Any]:
    data = {
        "id": enrollment.id,
        "userId": enrollment.user_id,
        "courseId": enrollment.course_id,
        "status": enrollment.status,
        "enrolledAt": enrollment.enrolled_at.isoformat() if enrollment.enrolled_at else None,
        "lastAccessedAt": (
            enrollment.last_accessed_at.isoformat() if enrollment.last_accessed_at else None
        ),
        "completedAt": enrollment.completed_at.isoformat() if enrollment.completed_at else None,
        "currentLessonOrder": enrollment.current_lesson_order,
        "completedLessons": enrollment.completed_lessons,
        "totalLessons": enrollment.total_lessons,
        "totalXPEarned": enrollment.total_xp_earned,
        "averageScore": enrollment.average_score,
        "certificateEarned": enrollment.certificate_earned,
    }
    if include_course and enrollment.course is not None:
        data["course"] = serialize_course(enrollment.course)
    return data


class EnrollmentService:
    """Enroll, unenroll and report on course enrollments."""

    def __init__(self, db: AsyncSession, platform: PlatformSettings | None = None) -> None:
        self.db = db
        self.platform = platform or get_settings().platform
        self.catalog = CourseCatalogService(db)

    async def get_enrollment(self, user_id: str, course_id: str) -> CourseEnrollment | None:
        result = await self.db.execute(
            select(CourseEnrollment).where(
                CourseEnrollment.user_id == user_id,
                CourseEnrollment.course_id == course_id,
            )
        )
        return result.scalar_one_or_none()

    async def _missing_prerequisites(
        self, user_id: str, prerequisite_ids: list[str]
    ) -> list[dict[str, Any]]:
        if not prerequisite_ids:
            return []

        result = await self.db.execute(
            select(CourseEnrollment.course_id).where(
                CourseEnrollment.user_id == user_id,
                CourseEnrollment.course_id.in_(prerequisite_ids),
                CourseEnrollment.status == CourseStatus.COMPLETED.value,
            )
        )
        completed = set(result.scalars().all())
        missing_ids = [course_id for course_id in prerequisite_ids if course_id not in completed]
        if not missing_ids:
            return []

        result = await self.db.execute(select(Course).where(Course.id.in_(missing_ids)))
        found = {course.id: course for course in result.scalars().all()}
        return [
            {"id": course_id, "title": found[course_id].title if course_id in found else None}
            for course_id in missing_ids
        ]

    async def check_eligibility(self, user_id: str, course_id: str) -> EnrollmentEligibility:
        """Decide whether a user may enroll in a course."""
        result = await self.db.execute(select(Course).where(Course.id == course_id))
        course = result.scalar_one_or_none()
        if course is None:
            return EnrollmentEligibility(False, "Course not found", prerequisites_met=False)

        user = await self.db.get(User, user_id)
        if user is None:
            return EnrollmentEligibility(
                False,
                "User not found",
                prerequisites_met=False,
                requires_premium=course.is_premium,
            )

        premium = await SubscriptionService(self.db).has_premium_access(user_id)

        if await self.get_enrollment(user_id, course_id) is not None:
            return EnrollmentEligibility(
                False,
                "Already enrolled in this course",
                requires_premium=course.is_premium,
                has_premium_access=premium,
            )

        missing = await self._missing_prerequisites(user_id, list(course.prerequisite_course_ids or []))
        if missing:
            return EnrollmentEligibility(
                False,
                "Prerequisites not met",
                prerequisites_met=False,
                requires_premium=course.is_premium,
                has_premium_access=premium,
                missing_prerequisites=missing,
            )

        if course.is_premium and not premium:
            return EnrollmentEligibility(
                False, "Premium subscription required", requires_premium=True
            )

        if not course.is_premium and not premium:
            result = await self.db.execute(
                select(func.count())
                .select_from(CourseEnrollment)
                .join(Course, Course.id == CourseEnrollment.course_id)
                .where(CourseEnrollment.user_id == user_id, Course.is_premium.is_(False))
            )
            free_count = result.scalar() or 0
            limit = self.platform.max_free_course_enrollments

            if free_count >= limit:
                return EnrollmentEligibility(
                    False,
                    f"Free users can only enroll in {limit} free courses. "
                    "Upgrade to premium for unlimited access.",
                    free_course_limit=limit,
                    free_courses_enrolled=free_count,
                )

        return EnrollmentEligibility(
            True, requires_premium=course.is_premium, has_premium_access=premium
        )

    async def enroll(self, user_id: str, course_id: str) -> CourseEnrollment:
        """Enroll a user, creating lesson progress rows.

        The first lesson starts NOT_STARTED and the rest LOCKED.

        Raises:
            EnrollmentNotAllowedError: If the eligibility check fails.
        """
        eligibility = await self.check_eligibility(user_id, course_id)
        if not eligibility.can_enroll:
            raise EnrollmentNotAllowedError(
                eligibility.reason or "Cannot enroll in this course", eligibility.to_dict()
            )

        lessons = await self.catalog.get_course_lessons(course_id)

        enrollment = CourseEnrollment(
            user_id=user_id,
            course_id=course_id,
            status=CourseStatus.IN_PROGRESS.value,
            total_lessons=len(lessons),
        )
        self.db.add(enrollment)
        await self.db.flush()

        for index, lesson in enumerate(lessons):
            self.db.add(
                CourseLessonProgress(
                    user_id=user_id,
                    enrollment_id=enrollment.id,
                    lesson_id=lesson.id,
                    status=(
                        LessonProgressStatus.NOT_STARTED.value
                        if index == 0
                        else LessonProgressStatus.LOCKED.value
                    ),
                )
            )

        await self.db.commit()
        await self.db.refresh(enrollment)

        logger.info(
            "Enrolled user %s in course %s (%d lessons)", user_id, course_id, len(lessons)
        )
        return enrollment

    async def unenroll(self, user_id: str, course_id: str) -> None:
        """Remove an enrollment and its lesson progress.

        Raises:
            NotEnrolledError: If the user is not enrolled.
        """
        enrollment = await self.get_enrollment(user_id, course_id)
        if enrollment is None:
            raise NotEnrolledError()

        await self.db.execute(
            delete(CourseLessonProgress).where(
                CourseLessonProgress.enrollment_id == enrollment.id
            )
        )
        await self.db.delete(enrollment)
        await self.db.commit()

        logger.info("Unenrolled user %s from course %s", user_id, course_id)

    async def list_enrollments(
        self, user_id: str, status: str | None = None
    ) -> list[CourseEnrollment]:
        query = select(CourseEnrollment).where(CourseEnrollment.user_id == user_id)
        if status:
            query = query.where(CourseEnrollment.status == status)
        result = await self.db.execute(query.order_by(CourseEnrollment.last_accessed_at.desc()))
        return list(result.scalars().all())

    async def enrollment_details(self, user_id: str, course_id: str) -> dict[str, Any]:
        """Enrollment with progress percent, next lesson and time remaining.

        Raises:
            NotEnrolledError: If the user is not enrolled.
        """
        enrollment = await self.get_enrollment(user_id, course_id)
        if enrollment is None:
            raise NotEnrolledError()

        lessons = await self.catalog.get_course_lessons(course_id)
        status_by_lesson = {p.lesson_id: p.status for p in enrollment.lesson_progress}
        remaining = [
            lesson
            for lesson in lessons
            if status_by_lesson.get(lesson.id) != LessonProgressStatus.COMPLETED.value
        ]

        total = len(lessons)
        data = serialize_enrollment(enrollment)
        data["lessonProgress"] = [serialize_lesson_progress(p) for p in enrollment.lesson_progress]
        data["progressPercentage"] = (
            round(enrollment.completed_lessons / total * 100) if total else 0
        )
        data["nextLesson"] = serialize_lesson(remaining[0]) if remaining else None
        data["estimatedTimeRemaining"] = sum(lesson.duration for lesson in remaining)
        return data

    async def dashboard(self, user_id: str) -> dict[str, Any]:
        """Recently accessed enrollments and summary counts."""
        result = await self.db.execute(
            select(CourseEnrollment)
            .where(
                CourseEnrollment.user_id == user_id,
                CourseEnrollment.status.in_(
                    [CourseStatus.IN_PROGRESS.value, CourseStatus.COMPLETED.value]
                ),
            )
            .order_by(CourseEnrollment.last_accessed_at.desc())
            .limit(DASHBOARD_RECENT_LIMIT)
        )
        recent = list(result.scalars().all())

        result = await self.db.execute(
            select(func.count())
            .select_from(CourseEnrollment)
            .where(
                CourseEnrollment.user_id == user_id,
                CourseEnrollment.status == CourseStatus.COMPLETED.value,
            )
        )
        completed_count = result.scalar() or 0

        return {
            "recentCourses": [serialize_enrollment(e) for e in recent],
            "inProgressCount": sum(
                1 for e in recent if e.status == CourseStatus.IN_PROGRESS.value
            ),
            "completedCount": completed_count,
            "totalCourseXP": sum(e.total_xp_earned for e in recent),
        }

    async def require_course(self, course_id: str) -> Course:
        result = await self.db.execute(select(Course).where(Course.id == course_id))
        course = result.scalar_one_or_none()
        if course is None:
            raise CourseNotFoundError("Course not found")
        return course
