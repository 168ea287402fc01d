# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lesson progress with linear progression.

A lesson is accessible when the user is enrolled and either it is the
first lesson or the previous lesson is COMPLETED with a score meeting that
lesson's required score. Passing a lesson unlocks the next one; passing the
last outstanding lesson completes the course.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.domains.courses.catalog import CourseCatalogService, serialize_lesson
from learning_adventures.domains.courses.enrollment import EnrollmentService
from learning_adventures.domains.courses.exceptions import (
    CourseValidationError,
    LessonAccessError,
    NotEnrolledError,
)
from learning_adventures.domains.gamification.service import XPService
from learning_adventures.domains.gamification.xp import calculate_xp_with_streak
from learning_adventures.infrastructure.database.models import (
    CourseEnrollment,
    CourseLesson,
    CourseLessonProgress,
    CourseStatus,
    LessonProgressStatus,
)
from learning_adventures.utils.datetime import utc_now

logger = logging.getLogger(__name__)

COMPLETED = LessonProgressStatus.COMPLETED.value


@dataclass
class LessonAccess:
    can_access: bool
    reason: str | None = None
    previous_lesson_completed: bool = False
    previous_lesson_passed: bool = False
    required_score: int | None = None
    user_score: int | None = None

    @property
    def is_locked(self) -> bool:
        return not self.can_access

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "canAccess": self.can_access,
            "isLocked": self.is_locked,
            "previousLessonCompleted": self.previous_lesson_completed,
            "previousLessonPassed": self.previous_lesson_passed,
        }
        if self.reason:
            data["reason"] = self.reason
        if self.required_score is not None:
            data["requiredScore"] = self.required_score
            data["userScore"] = self.user_score
        return data


def lesson_passed(lesson: CourseLesson, score: int | None) -> bool:
    """A lesson without a required score is passed by completing it."""
    if lesson.required_score is None:
        return True
    return score is not None and score >= lesson.required_score


def _progress_for(enrollment: CourseEnrollment, lesson_id: str) -> CourseLessonProgress | None:
    return next((p for p in enrollment.lesson_progress if p.lesson_id == lesson_id), None)


class LessonProgressService:
    """Start, complete and retry lessons inside an enrollment."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.catalog = CourseCatalogService(db)
        self.enrollments = EnrollmentService(db)
        self.xp = XPService(db)

    async def check_access(
        self, user_id: str, lesson: CourseLesson, enrollment: CourseEnrollment | None = None
    ) -> LessonAccess:
        enrollment = enrollment or await self.enrollments.get_enrollment(user_id, lesson.course_id)
        if enrollment is None:
            return LessonAccess(False, "Not enrolled in this course")

        if lesson.order == 1:
            return LessonAccess(True, previous_lesson_completed=True, previous_lesson_passed=True)

        previous = await self.catalog.get_lesson_by_order(lesson.course_id, lesson.order - 1)
        if previous is None:
            return LessonAccess(False, "Previous lesson not found")

        previous_progress = _progress_for(enrollment, previous.id)
        if previous_progress is None or previous_progress.status != COMPLETED:
            return LessonAccess(False, "Previous lesson not completed")

        if not lesson_passed(previous, previous_progress.score):
            return LessonAccess(
                False,
                f"Previous lesson requires {previous.required_score}% to unlock",
                previous_lesson_completed=True,
                required_score=previous.required_score,
                user_score=previous_progress.score or 0,
            )

        return LessonAccess(True, previous_lesson_completed=True, previous_lesson_passed=True)

    async def _require_enrollment(self, user_id: str, lesson: CourseLesson) -> CourseEnrollment:
        enrollment = await self.enrollments.get_enrollment(user_id, lesson.course_id)
        if enrollment is None:
            raise NotEnrolledError()
        return enrollment

    def _ensure_progress(
        self, enrollment: CourseEnrollment, lesson: CourseLesson
    ) -> CourseLessonProgress:
        """Progress row for ``lesson``, created when the lesson postdates the enrollment."""
        progress = _progress_for(enrollment, lesson.id)
        if progress is None:
            progress = CourseLessonProgress(
                user_id=enrollment.user_id,
                enrollment_id=enrollment.id,
                lesson_id=lesson.id,
                status=LessonProgressStatus.NOT_STARTED.value,
                time_spent=0,
                attempts=0,
                xp_earned=0,
            )
            enrollment.lesson_progress.append(progress)
            self.db.add(progress)
            logger.info("Lesson progress created: enrollment=%s, lesson=%s", enrollment.id, lesson.id)
        return progress

    async def lessons_with_progress(self, user_id: str, course_id: str) -> list[dict[str, Any]]:
        """Ordered lessons annotated with the user's progress and lock state."""
        lessons = await self.catalog.get_course_lessons(course_id)
        enrollment = await self.enrollments.get_enrollment(user_id, course_id)

        items = []
        for lesson in lessons:
            progress = _progress_for(enrollment, lesson.id) if enrollment else None
            access = await self.check_access(user_id, lesson, enrollment)
            item = serialize_lesson(lesson)
            item.update(
                {
                    "progress": (
                        {
                            "status": progress.status,
                            "score": progress.score,
                            "attempts": progress.attempts,
                            "xpEarned": progress.xp_earned,
                        }
                        if progress
                        else None
                    ),
                    "isLocked": access.is_locked,
                    "canAccess": access.can_access,
                    "isPassed": bool(
                        progress
                        and progress.status == COMPLETED
                        and lesson_passed(lesson, progress.score)
                    ),
                }
            )
            items.append(item)
        return items

    async def start_lesson(self, user_id: str, lesson_id: str) -> CourseLessonProgress:
        """Mark a lesson IN_PROGRESS.

        Raises:
            CourseNotFoundError: Unknown lesson.
            LessonAccessError: Lesson locked or user not enrolled.
        """
        lesson = await self.catalog.get_lesson(lesson_id)
        enrollment = await self.enrollments.get_enrollment(user_id, lesson.course_id)

        access = await self.check_access(user_id, lesson, enrollment)
        if not access.can_access:
            raise LessonAccessError(access.reason or "Cannot access this lesson", access.to_dict())

        progress = self._ensure_progress(enrollment, lesson)
        now = utc_now()
        progress.status = LessonProgressStatus.IN_PROGRESS.value
        progress.started_at = now
        enrollment.last_accessed_at = now

        await self.db.commit()
        await self.db.refresh(progress)

        logger.info("Lesson started: user=%s, lesson=%s", user_id, lesson_id)
        return progress

    async def retry_lesson(self, user_id: str, lesson_id: str) -> CourseLessonProgress:
        lesson = await self.catalog.get_lesson(lesson_id)
        enrollment = await self._require_enrollment(user_id, lesson)

        progress = self._ensure_progress(enrollment, lesson)
        progress.status = LessonProgressStatus.IN_PROGRESS.value
        progress.started_at = utc_now()

        await self.db.commit()
        await self.db.refresh(progress)
        return progress

    async def complete_lesson(
        self,
        user_id: str,
        lesson_id: str,
        score: int | None = None,
        time_spent: int = 0,
    ) -> dict[str, Any]:
        """Record a lesson attempt and apply its rewards when passed.

        Args:
            user_id: Learner.
            lesson_id: Lesson being completed.
            score: Percentage score 0-100, if the lesson is scored.
            time_spent: Seconds spent on this attempt.

        Returns:
            Dict with passed, xpAwarded, nextLessonUnlocked, nextLesson,
            leveledUp, newLevel and courseCompleted. Failed attempts carry a
            message instead of rewards.

        Raises:
            CourseValidationError: Score out of range or negative time.
            CourseNotFoundError: Unknown lesson.
            NotEnrolledError: User not enrolled in the lesson's course.
        """
        if score is not None and not 0 <= score <= 100:
            raise CourseValidationError("Score must be between 0 and 100")
        if time_spent < 0:
            raise CourseValidationError("Time spent cannot be negative")

        lesson = await self.catalog.get_lesson(lesson_id)
        enrollment = await self._require_enrollment(user_id, lesson)
        progress = self._ensure_progress(enrollment, lesson)
        now = utc_now()

        if not lesson_passed(lesson, score):
            progress.score = score
            progress.time_spent += time_spent
            progress.attempts += 1
            await self.db.commit()

            return {
                "passed": False,
                "score": score,
                "xpAwarded": 0,
                "nextLessonUnlocked": False,
                "leveledUp": False,
                "message": (
                    f"Requires {lesson.required_score}% to pass. "
                    f"You scored {score}%. Try again!"
                ),
            }

        user_level = await self.xp.get_user_level(user_id)
        calculation = calculate_xp_with_streak(
            lesson.xp_reward, user_level.current_streak if user_level else 0
        )

        already_completed = progress.status == COMPLETED
        progress.status = COMPLETED
        progress.completed_at = now
        progress.score = score
        progress.time_spent += time_spent
        progress.attempts += 1
        progress.xp_earned = calculation.total_xp

        next_lesson = await self.catalog.get_next_lesson(lesson.course_id, lesson.order)
        if next_lesson is not None:
            next_progress = _progress_for(enrollment, next_lesson.id)
            if next_progress is not None and next_progress.status == LessonProgressStatus.LOCKED.value:
                next_progress.status = LessonProgressStatus.NOT_STARTED.value

        completed = [p for p in enrollment.lesson_progress if p.status == COMPLETED]
        enrollment.completed_lessons = len(completed)
        if not already_completed:
            enrollment.total_xp_earned += calculation.total_xp
        enrollment.current_lesson_order = next_lesson.order if next_lesson else lesson.order
        enrollment.last_accessed_at = now

        course_completed = False
        if (
            enrollment.total_lessons
            and enrollment.completed_lessons >= enrollment.total_lessons
            and enrollment.status != CourseStatus.COMPLETED.value
        ):
            scores = [p.score for p in completed if p.score is not None]
            enrollment.status = CourseStatus.COMPLETED.value
            enrollment.completed_at = now
            enrollment.average_score = round(sum(scores) / len(scores), 2) if scores else None
            course_completed = True

        await self.db.commit()

        xp_result = await self.xp.award_xp(user_id, calculation.total_xp)
        await self.xp.record_daily_xp(user_id, lesson.xp_reward, "lesson")
        await self.xp.update_streak(user_id)

        logger.info(
            "Lesson completed: user=%s, lesson=%s, xp=%d, course_completed=%s",
            user_id,
            lesson_id,
            calculation.total_xp,
            course_completed,
        )

        return {
            "passed": True,
            "score": score,
            "xpAwarded": calculation.total_xp,
            "nextLessonUnlocked": next_lesson is not None,
            "nextLesson": serialize_lesson(next_lesson) if next_lesson else None,
            "leveledUp": xp_result["leveledUp"],
            "newLevel": xp_result["newLevel"],
            "courseCompleted": course_completed,
            "message": f"Lesson completed! +{calculation.total_xp} XP",
        }

    async def course_stats(self, user_id: str) -> dict[str, Any]:
        """Aggregate course statistics for a user."""
        result = await self.db.execute(
            select(CourseEnrollment).where(CourseEnrollment.user_id == user_id)
        )
        enrollments = list(result.scalars().all())

        all_progress = [p for e in enrollments for p in e.lesson_progress]
        scores = [p.score for p in all_progress if p.status == COMPLETED and p.score is not None]
        user_level = await self.xp.get_user_level(user_id)

        return {
            "totalCoursesEnrolled": len(enrollments),
            "coursesInProgress": sum(
                1 for e in enrollments if e.status == CourseStatus.IN_PROGRESS.value
            ),
            "coursesCompleted": sum(
                1 for e in enrollments if e.status == CourseStatus.COMPLETED.value
            ),
            "totalXPEarned": sum(e.total_xp_earned for e in enrollments),
            "certificatesEarned": sum(1 for e in enrollments if e.certificate_earned),
            "averageScore": round(sum(scores) / len(scores)) if scores else 0,
            "totalTimeSpent": round(sum(p.time_spent for p in all_progress) / 60),
            "currentStreak": user_level.current_streak if user_level else 0,
            "longestStreak": user_level.longest_streak if user_level else 0,
        }
