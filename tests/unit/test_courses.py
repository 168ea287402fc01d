# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for courses: quizzes, eligibility, lessons and certificates."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError

from learning_adventures.domains.courses.catalog import pagination_meta
from learning_adventures.domains.courses.certificates import (
    CertificateService,
    achievement_level,
    format_certificate_date,
    format_certificate_number,
    format_time_spent,
    random_verification_code,
)
from learning_adventures.domains.courses.enrollment import (
    EnrollmentEligibility,
    EnrollmentService,
)
from learning_adventures.domains.courses.exceptions import (
    CourseNotFoundError,
    CourseValidationError,
    EnrollmentNotAllowedError,
    InsufficientXPError,
    NotEnrolledError,
)
from learning_adventures.domains.courses.lessons import LessonProgressService, lesson_passed
from learning_adventures.domains.courses.quiz import (
    QuizService,
    can_retry,
    check_answer,
    grade_quiz,
    next_hint,
    reveal_cost,
    validate_quiz_structure,
)
from learning_adventures.domains.courses.subscription import (
    SubscriptionService,
    has_premium_access,
    subscription_features,
)
from learning_adventures.infrastructure.database.models import SubscriptionTier
from learning_adventures.models.learning import RevealAnswerRequest


# =============================================================================
# Helpers
# =============================================================================


QUIZ = {
    "questions": [
        {
            "id": "q1",
            "type": "multiple-choice",
            "question": "What is 1/2 + 1/4?",
            "options": ["1/4", "3/4", "2/6"],
            "correctAnswer": 1,
            "explanation": "Use a common denominator.",
            "hints": ["Think quarters", "1/2 is 2/4"],
            "points": 10,
        },
        {
            "id": "q2",
            "type": "true-false",
            "question": "A pizza has 8 slices",
            "correctAnswer": "true",
            "explanation": "Usually it does.",
            "hints": ["Count them"],
            "points": 10,
        },
        {
            "id": "q3",
            "type": "fill-blank",
            "question": "The top number is the ____",
            "correctAnswer": "Numerator",
            "explanation": "Numerator over denominator.",
            "hints": [],
            "points": 20,
        },
    ],
    "passingScore": 70,
    "allowRetry": True,
    "maxAttempts": 3,
}


def make_course(course_id: str = "c-1", is_premium: bool = False, prerequisites=None) -> MagicMock:
    course = MagicMock()
    course.id = course_id
    course.title = "Fractions"
    course.is_premium = is_premium
    course.prerequisite_course_ids = prerequisites or []
    return course


def make_lesson(lesson_id: str, order: int, required_score: int | None = 70, xp: int = 100) -> MagicMock:
    lesson = MagicMock()
    lesson.id = lesson_id
    lesson.course_id = "c-1"
    lesson.order = order
    lesson.required_score = required_score
    lesson.xp_reward = xp
    lesson.duration = 15
    return lesson


def make_lesson_progress(lesson_id: str, status: str, score: int | None = None) -> MagicMock:
    progress = MagicMock()
    progress.lesson_id = lesson_id
    progress.status = status
    progress.score = score
    progress.time_spent = 0
    progress.attempts = 0
    progress.xp_earned = 0
    return progress


def make_enrollment(progress: list[MagicMock], total_lessons: int) -> MagicMock:
    enrollment = MagicMock()
    enrollment.id = "e-1"
    enrollment.status = "IN_PROGRESS"
    enrollment.lesson_progress = progress
    enrollment.total_lessons = total_lessons
    enrollment.completed_lessons = 0
    enrollment.total_xp_earned = 0
    enrollment.completed_at = None
    enrollment.average_score = None
    return enrollment


@pytest.fixture
def platform() -> MagicMock:
    settings = MagicMock()
    settings.max_free_course_enrollments = 3
    return settings


# =============================================================================
# Quiz Tests
# =============================================================================


class TestCheckAnswer:
    """Tests for answer comparison per question type."""

    def test_multiple_choice_exact(self) -> None:
        question = QUIZ["questions"][0]

        assert check_answer(question, 1) is True
        assert check_answer(question, "1") is False

    def test_true_false_case_insensitive(self) -> None:
        assert check_answer(QUIZ["questions"][1], "TRUE") is True
        assert check_answer(QUIZ["questions"][1], True) is True

    def test_fill_blank_trims(self) -> None:
        assert check_answer(QUIZ["questions"][2], "  numerator ") is True

    def test_unknown_type(self) -> None:
        assert check_answer({"type": "essay", "correctAnswer": "x"}, "x") is False


class TestGradeQuiz:
    """Tests for grade_quiz."""

    def test_all_correct(self) -> None:
        result = grade_quiz(QUIZ, {"q1": 1, "q2": "true", "q3": "numerator"})

        assert result["score"] == 100
        assert result["passed"] is True
        assert result["earnedPoints"] == 40
        assert all(r["nextHint"] is None for r in result["results"])

    def test_partial_fails_with_hints(self) -> None:
        """Test that wrong answers carry the hint for the current attempt."""
        result = grade_quiz(QUIZ, {"q1": 0, "q2": "true", "q3": "numerator"}, attempt=1)

        assert result["score"] == 75
        assert result["passed"] is True
        assert result["results"][0]["nextHint"] == "1/2 is 2/4"

    def test_below_passing(self) -> None:
        result = grade_quiz(QUIZ, {"q3": "numerator"})

        assert result["score"] == 50
        assert result["passed"] is False
        assert result["results"][0]["userAnswer"] is None

    def test_empty_quiz_scores_zero(self) -> None:
        assert grade_quiz({"questions": [], "passingScore": 0}, {})["score"] == 0


class TestQuizHelpers:
    """Tests for hints, reveal cost, retry and validation."""

    def test_next_hint_repeats_last(self) -> None:
        question = QUIZ["questions"][0]

        assert next_hint(question, 0) == "Think quarters"
        assert next_hint(question, 5) == "1/2 is 2/4"
        assert next_hint(QUIZ["questions"][2], 0) is None

    @pytest.mark.parametrize(("points", "cost"), [(0, 10), (10, 10), (30, 15), (50, 25)])
    def test_reveal_cost(self, points: int, cost: int) -> None:
        assert reveal_cost(points) == cost

    def test_can_retry(self) -> None:
        assert can_retry(QUIZ, 2) is True
        assert can_retry(QUIZ, 3) is False
        assert can_retry({"allowRetry": False}, 0) is False
        assert can_retry({"allowRetry": True}, 99) is True

    def test_valid_quiz(self) -> None:
        assert validate_quiz_structure(QUIZ) == []

    def test_invalid_quiz(self) -> None:
        errors = validate_quiz_structure(
            {"questions": [{"id": "q1", "type": "essay", "question": "?", "points": 0}], "passingScore": 120}
        )

        assert "passingScore must be a number between 0 and 100" in errors
        assert any("unknown type" in e for e in errors)
        assert any("points must be a positive number" in e for e in errors)
        assert validate_quiz_structure([]) == ["Quiz data must be an object"]


class TestQuizService:
    """Tests for QuizService answer reveals."""

    @pytest.fixture
    def quiz_service(self, mock_db) -> QuizService:
        service = QuizService(mock_db)
        lesson = make_lesson("l-1", 1)
        lesson.quiz_data = QUIZ
        service.catalog = MagicMock()
        service.catalog.get_lesson = AsyncMock(return_value=lesson)
        return service

    @pytest.mark.asyncio
    async def test_reveal_deducts_xp(self, quiz_service, mock_db) -> None:
        user_level = MagicMock()
        user_level.total_xp = 100
        with patch("learning_adventures.domains.courses.quiz.XPService") as xp_cls:
            xp_cls.return_value.get_user_level = AsyncMock(return_value=user_level)
            result = await quiz_service.reveal_answer("user-1", "l-1", "q3")

        assert result["correctAnswer"] == "Numerator"
        assert result["xpCost"] == 10
        assert result["xpRemaining"] == 90
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reveal_insufficient_xp(self, quiz_service) -> None:
        user_level = MagicMock()
        user_level.total_xp = 5
        with patch("learning_adventures.domains.courses.quiz.XPService") as xp_cls:
            xp_cls.return_value.get_user_level = AsyncMock(return_value=user_level)
            with pytest.raises(InsufficientXPError) as exc_info:
                await quiz_service.reveal_answer("user-1", "l-1", "q1")

        assert exc_info.value.details == {"cost": 10, "available": 5}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("xp_cost", [-1000, 0])
    async def test_reveal_rejects_non_positive_cost(self, quiz_service, mock_db, xp_cost) -> None:
        """Test that a client cost of zero or less cannot add XP."""
        user_level = MagicMock()
        user_level.total_xp = 5
        with patch("learning_adventures.domains.courses.quiz.XPService") as xp_cls:
            xp_cls.return_value.get_user_level = AsyncMock(return_value=user_level)
            with pytest.raises(CourseValidationError, match="positive"):
                await quiz_service.reveal_answer("user-1", "l-1", "q1", xp_cost=xp_cost)

        assert user_level.total_xp == 5
        mock_db.commit.assert_not_awaited()

    def test_reveal_request_rejects_negative_cost(self) -> None:
        with pytest.raises(ValidationError):
            RevealAnswerRequest.model_validate({"questionId": "q1", "xpCost": -5})

        assert RevealAnswerRequest.model_validate({"questionId": "q1"}).xp_cost is None

    @pytest.mark.asyncio
    async def test_reveal_unknown_question(self, quiz_service) -> None:
        with pytest.raises(CourseNotFoundError, match="Question not found"):
            await quiz_service.reveal_answer("user-1", "l-1", "missing")

    @pytest.mark.asyncio
    async def test_submit_rejects_bad_answers(self, quiz_service) -> None:
        with pytest.raises(CourseValidationError, match="Invalid answers format"):
            await quiz_service.submit_quiz("user-1", "l-1", ["not", "a", "dict"])


# =============================================================================
# Subscription and Catalog Tests
# =============================================================================


class TestSubscription:
    """Tests for premium access and features."""

    def test_premium_requires_active(self) -> None:
        subscription = MagicMock()
        subscription.tier = "PREMIUM"
        subscription.status = "ACTIVE"
        assert has_premium_access(subscription) is True

        subscription.status = "CANCELLED"
        assert has_premium_access(subscription) is False
        assert has_premium_access(None) is False

    def test_features_by_tier(self) -> None:
        assert "Course certificates" in subscription_features("PREMIUM")
        assert "Access to free games" in subscription_features("FREE")

    @pytest.mark.asyncio
    async def test_status_defaults_to_free(self, mock_db, result_factory) -> None:
        mock_db.execute.return_value = result_factory(None)

        status = await SubscriptionService(mock_db).subscription_status("user-1")

        assert status["tier"] == "FREE"
        assert status["status"] == "ACTIVE"
        assert status["hasPremiumAccess"] is False

    @pytest.mark.asyncio
    async def test_set_tier_reactivates(self, mock_db, result_factory) -> None:
        subscription = MagicMock()
        subscription.tier = "FREE"
        subscription.status = "CANCELLED"
        mock_db.execute.return_value = result_factory(subscription)

        await SubscriptionService(mock_db).set_tier("user-1", SubscriptionTier.PREMIUM)

        assert subscription.tier == "PREMIUM"
        assert subscription.status == "ACTIVE"
        assert subscription.end_date is None

    def test_pagination_meta(self) -> None:
        meta = pagination_meta(page=2, page_size=10, total_items=25)

        assert meta["totalPages"] == 3
        assert meta["hasNextPage"] is True
        assert meta["hasPreviousPage"] is True


# =============================================================================
# Enrollment Tests
# =============================================================================


class TestEnrollmentEligibility:
    """Tests for EnrollmentService.check_eligibility."""

    @pytest.mark.asyncio
    async def test_course_not_found(self, mock_db, result_factory, platform) -> None:
        mock_db.execute.return_value = result_factory(None)

        eligibility = await EnrollmentService(mock_db, platform).check_eligibility("user-1", "c-1")

        assert eligibility.can_enroll is False
        assert eligibility.reason == "Course not found"

    @pytest.mark.asyncio
    async def test_missing_prerequisites(self, mock_db, result_factory, sample_user, platform) -> None:
        prerequisite = make_course("c-0")
        prerequisite.title = "Intro"
        mock_db.get.return_value = sample_user
        mock_db.execute.side_effect = [
            result_factory(make_course(prerequisites=["c-0"])),
            result_factory(None),  # subscription
            result_factory(None),  # existing enrollment
            result_factory(items=[]),  # completed prerequisites
            result_factory(items=[prerequisite]),
        ]

        eligibility = await EnrollmentService(mock_db, platform).check_eligibility("user-1", "c-1")

        assert eligibility.can_enroll is False
        assert eligibility.prerequisites_met is False
        assert eligibility.missing_prerequisites == [{"id": "c-0", "title": "Intro"}]

    @pytest.mark.asyncio
    async def test_premium_course_needs_subscription(
        self, mock_db, result_factory, sample_user, platform
    ) -> None:
        mock_db.get.return_value = sample_user
        mock_db.execute.side_effect = [
            result_factory(make_course(is_premium=True)),
            result_factory(None),
            result_factory(None),
        ]

        eligibility = await EnrollmentService(mock_db, platform).check_eligibility("user-1", "c-1")

        assert eligibility.reason == "Premium subscription required"
        assert eligibility.requires_premium is True

    @pytest.mark.asyncio
    async def test_free_course_cap(self, mock_db, result_factory, sample_user, platform) -> None:
        """Test that free users stop at the configured number of free courses."""
        mock_db.get.return_value = sample_user
        mock_db.execute.side_effect = [
            result_factory(make_course()),
            result_factory(None),
            result_factory(None),
            result_factory(3),
        ]

        eligibility = await EnrollmentService(mock_db, platform).check_eligibility("user-1", "c-1")

        assert eligibility.can_enroll is False
        data = eligibility.to_dict()
        assert data["freeCourseLimit"] == 3
        assert data["freeCoursesEnrolled"] == 3

    @pytest.mark.asyncio
    async def test_eligible(self, mock_db, result_factory, sample_user, platform) -> None:
        mock_db.get.return_value = sample_user
        mock_db.execute.side_effect = [
            result_factory(make_course()),
            result_factory(None),
            result_factory(None),
            result_factory(1),
        ]

        eligibility = await EnrollmentService(mock_db, platform).check_eligibility("user-1", "c-1")

        assert eligibility.can_enroll is True
        assert "freeCourseLimit" not in eligibility.to_dict()


class TestEnroll:
    """Tests for EnrollmentService.enroll and unenroll."""

    @pytest.mark.asyncio
    async def test_enroll_unlocks_only_first_lesson(self, mock_db, platform) -> None:
        service = EnrollmentService(mock_db, platform)
        service.check_eligibility = AsyncMock(return_value=EnrollmentEligibility(True))
        service.catalog.get_course_lessons = AsyncMock(
            return_value=[make_lesson("l-1", 1), make_lesson("l-2", 2), make_lesson("l-3", 3)]
        )

        enrollment = await service.enroll("user-1", "c-1")

        assert enrollment.total_lessons == 3
        added = [c.args[0] for c in mock_db.add.call_args_list]
        statuses = [row.status for row in added[1:]]
        assert statuses == ["NOT_STARTED", "LOCKED", "LOCKED"]
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_enroll_not_allowed(self, mock_db, platform) -> None:
        service = EnrollmentService(mock_db, platform)
        service.check_eligibility = AsyncMock(
            return_value=EnrollmentEligibility(False, "Already enrolled in this course")
        )

        with pytest.raises(EnrollmentNotAllowedError) as exc_info:
            await service.enroll("user-1", "c-1")

        assert exc_info.value.message == "Already enrolled in this course"
        assert exc_info.value.details["canEnroll"] is False

    @pytest.mark.asyncio
    async def test_unenroll_requires_enrollment(self, mock_db, result_factory, platform) -> None:
        mock_db.execute.return_value = result_factory(None)

        with pytest.raises(NotEnrolledError):
            await EnrollmentService(mock_db, platform).unenroll("user-1", "c-1")


# =============================================================================
# Lesson Progress Tests
# =============================================================================


@pytest.fixture
def lesson_service(mock_db) -> LessonProgressService:
    """Lesson service with catalog, enrollment and XP collaborators mocked."""
    service = LessonProgressService(mock_db)
    service.catalog = MagicMock()
    service.enrollments = MagicMock()
    service.xp = MagicMock()
    service.xp.award_xp = AsyncMock(return_value={"leveledUp": False, "newLevel": 1})
    service.xp.record_daily_xp = AsyncMock()
    service.xp.update_streak = AsyncMock()
    return service


class TestLessonAccess:
    """Tests for linear lesson progression."""

    def test_lesson_passed(self) -> None:
        assert lesson_passed(make_lesson("l", 1, required_score=None), None) is True
        assert lesson_passed(make_lesson("l", 1, required_score=70), 70) is True
        assert lesson_passed(make_lesson("l", 1, required_score=70), 69) is False

    @pytest.mark.asyncio
    async def test_previous_score_too_low(self, lesson_service) -> None:
        previous = make_lesson("l-1", 1, required_score=80)
        enrollment = make_enrollment([make_lesson_progress("l-1", "COMPLETED", 70)], 2)
        lesson_service.catalog.get_lesson_by_order = AsyncMock(return_value=previous)

        access = await lesson_service.check_access("user-1", make_lesson("l-2", 2), enrollment)

        assert access.can_access is False
        assert access.reason == "Previous lesson requires 80% to unlock"
        assert access.to_dict()["userScore"] == 70

    @pytest.mark.asyncio
    async def test_first_lesson_open(self, lesson_service) -> None:
        enrollment = make_enrollment([], 1)

        access = await lesson_service.check_access("user-1", make_lesson("l-1", 1), enrollment)

        assert access.can_access is True

    @pytest.mark.asyncio
    async def test_not_enrolled(self, lesson_service) -> None:
        lesson_service.enrollments.get_enrollment = AsyncMock(return_value=None)

        access = await lesson_service.check_access("user-1", make_lesson("l-2", 2))

        assert access.is_locked is True
        assert access.reason == "Not enrolled in this course"


class TestCompleteLesson:
    """Tests for LessonProgressService.complete_lesson."""

    @pytest.mark.asyncio
    async def test_score_out_of_range(self, lesson_service) -> None:
        with pytest.raises(CourseValidationError, match="between 0 and 100"):
            await lesson_service.complete_lesson("user-1", "l-1", score=101)

    @pytest.mark.asyncio
    async def test_failed_attempt(self, lesson_service, mock_db) -> None:
        """Test that a failing score records the attempt without rewards."""
        progress = make_lesson_progress("l-1", "IN_PROGRESS")
        lesson_service.catalog.get_lesson = AsyncMock(return_value=make_lesson("l-1", 1))
        lesson_service.enrollments.get_enrollment = AsyncMock(
            return_value=make_enrollment([progress], 1)
        )

        result = await lesson_service.complete_lesson("user-1", "l-1", score=50, time_spent=30)

        assert result["passed"] is False
        assert result["xpAwarded"] == 0
        assert result["message"] == "Requires 70% to pass. You scored 50%. Try again!"
        assert progress.attempts == 1
        assert progress.time_spent == 30
        lesson_service.xp.award_xp.assert_not_called()

    @pytest.mark.asyncio
    async def test_pass_unlocks_next_with_streak_xp(self, lesson_service) -> None:
        first = make_lesson_progress("l-1", "IN_PROGRESS")
        second = make_lesson_progress("l-2", "LOCKED")
        enrollment = make_enrollment([first, second], 2)
        user_level = MagicMock()
        user_level.current_streak = 3
        lesson_service.catalog.get_lesson = AsyncMock(return_value=make_lesson("l-1", 1))
        lesson_service.catalog.get_next_lesson = AsyncMock(return_value=make_lesson("l-2", 2))
        lesson_service.enrollments.get_enrollment = AsyncMock(return_value=enrollment)
        lesson_service.xp.get_user_level = AsyncMock(return_value=user_level)

        result = await lesson_service.complete_lesson("user-1", "l-1", score=85)

        assert result["passed"] is True
        assert result["xpAwarded"] == 120
        assert result["nextLessonUnlocked"] is True
        assert result["courseCompleted"] is False
        assert second.status == "NOT_STARTED"
        assert enrollment.completed_lessons == 1
        assert enrollment.total_xp_earned == 120
        assert enrollment.current_lesson_order == 2
        lesson_service.xp.award_xp.assert_awaited_once_with("user-1", 120)
        lesson_service.xp.record_daily_xp.assert_awaited_once_with("user-1", 100, "lesson")

    @pytest.mark.asyncio
    async def test_last_lesson_completes_course(self, lesson_service) -> None:
        progress = make_lesson_progress("l-1", "IN_PROGRESS")
        enrollment = make_enrollment([progress], 1)
        lesson_service.catalog.get_lesson = AsyncMock(return_value=make_lesson("l-1", 1))
        lesson_service.catalog.get_next_lesson = AsyncMock(return_value=None)
        lesson_service.enrollments.get_enrollment = AsyncMock(return_value=enrollment)
        lesson_service.xp.get_user_level = AsyncMock(return_value=None)

        result = await lesson_service.complete_lesson("user-1", "l-1", score=90)

        assert result["courseCompleted"] is True
        assert result["nextLesson"] is None
        assert enrollment.status == "COMPLETED"
        assert enrollment.average_score == 90

    @pytest.mark.asyncio
    async def test_lesson_added_after_enrollment(self, lesson_service, mock_db) -> None:
        """Test that a lesson without a progress row gets one on completion."""
        enrollment = make_enrollment([make_lesson_progress("l-1", "COMPLETED", 90)], 2)
        enrollment.user_id = "user-1"
        lesson_service.catalog.get_lesson = AsyncMock(return_value=make_lesson("l-2", 2))
        lesson_service.catalog.get_next_lesson = AsyncMock(return_value=None)
        lesson_service.enrollments.get_enrollment = AsyncMock(return_value=enrollment)
        lesson_service.xp.get_user_level = AsyncMock(return_value=None)

        result = await lesson_service.complete_lesson("user-1", "l-2", score=80, time_spent=60)

        created = enrollment.lesson_progress[-1]
        assert result["passed"] is True
        assert created.lesson_id == "l-2"
        assert created.enrollment_id == "e-1"
        assert created.status == "COMPLETED"
        assert created.attempts == 1
        assert created.time_spent == 60
        assert result["courseCompleted"] is True
        mock_db.add.assert_called_once_with(created)

    @pytest.mark.asyncio
    async def test_retry_creates_missing_progress(self, lesson_service, mock_db) -> None:
        enrollment = make_enrollment([], 1)
        enrollment.user_id = "user-1"
        lesson_service.catalog.get_lesson = AsyncMock(return_value=make_lesson("l-1", 1))
        lesson_service.enrollments.get_enrollment = AsyncMock(return_value=enrollment)

        progress = await lesson_service.retry_lesson("user-1", "l-1")

        assert progress.status == "IN_PROGRESS"
        assert enrollment.lesson_progress == [progress]
        mock_db.refresh.assert_awaited_once_with(progress)


# =============================================================================
# Certificate Tests
# =============================================================================


class TestCertificateHelpers:
    """Tests for certificate formatting."""

    @pytest.mark.parametrize(
        ("score", "level"),
        [
            (None, "Completion"),
            (60, "Completion"),
            (75, "Achievement"),
            (85, "High Achievement"),
            (95, "Outstanding Achievement"),
        ],
    )
    def test_achievement_level(self, score: float | None, level: str) -> None:
        assert achievement_level(score) == level

    @pytest.mark.parametrize(
        ("minutes", "text"),
        [(1, "1 minute"), (45, "45 minutes"), (60, "1 hour"), (125, "2 hours 5 minutes"), (61, "1 hour 1 minute")],
    )
    def test_format_time_spent(self, minutes: int, text: str) -> None:
        assert format_time_spent(minutes) == text

    def test_certificate_number(self) -> None:
        assert format_certificate_number(2025, 42) == "CERT-2025-000042"

    def test_certificate_date(self) -> None:
        assert format_certificate_date(datetime(2025, 3, 7, tzinfo=timezone.utc)) == "March 7, 2025"

    def test_verification_code_alphabet(self) -> None:
        code = random_verification_code()

        assert len(code) == 12
        assert code.isalnum()
        assert code == code.upper()


class TestCertificateService:
    """Tests for CertificateService."""

    @pytest.mark.asyncio
    async def test_next_number_counts_this_year(self, mock_db, result_factory) -> None:
        mock_db.execute.return_value = result_factory(41)

        number = await CertificateService(mock_db).next_certificate_number(
            datetime(2025, 6, 1, tzinfo=timezone.utc)
        )

        assert number == "CERT-2025-000042"

    @pytest.mark.asyncio
    async def test_issue_requires_completion(self, mock_db, result_factory) -> None:
        enrollment = make_enrollment([], 3)
        mock_db.execute.return_value = result_factory(enrollment)

        with pytest.raises(CourseValidationError, match="must complete the course"):
            await CertificateService(mock_db).issue_for_course("user-1", "c-1")

    @pytest.mark.asyncio
    async def test_issue_returns_existing(self, mock_db, result_factory) -> None:
        enrollment = make_enrollment([], 3)
        enrollment.status = "COMPLETED"
        existing = MagicMock()
        mock_db.execute.side_effect = [result_factory(enrollment), result_factory(existing)]

        certificate = await CertificateService(mock_db).issue_for_course("user-1", "c-1")

        assert certificate is existing
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_issue_not_enrolled(self, mock_db, result_factory) -> None:
        mock_db.execute.return_value = result_factory(None)

        with pytest.raises(NotEnrolledError):
            await CertificateService(mock_db).issue_for_course("user-1", "c-1")

    @pytest.mark.asyncio
    async def test_verify_unknown_code(self, mock_db, result_factory) -> None:
        mock_db.execute.return_value = result_factory(None)

        assert await CertificateService(mock_db).verify_certificate("abc") == {
            "valid": False,
            "certificate": None,
        }
