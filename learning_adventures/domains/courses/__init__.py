# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Courses domain: catalog, subscriptions, enrollment, lessons, quizzes and certificates."""

from learning_adventures.domains.courses.catalog import (
    CourseCatalogService,
    CourseFilters,
    serialize_course,
    serialize_lesson,
)
from learning_adventures.domains.courses.certificates import (
    CertificateService,
    achievement_level,
    format_time_spent,
    serialize_certificate,
)
from learning_adventures.domains.courses.enrollment import (
    EnrollmentEligibility,
    EnrollmentService,
    serialize_enrollment,
    serialize_lesson_progress,
)
from learning_adventures.domains.courses.exceptions import (
    CourseNotFoundError,
    CourseServiceError,
    CourseValidationError,
    EnrollmentNotAllowedError,
    InsufficientXPError,
    LessonAccessError,
    NotEnrolledError,
)
from learning_adventures.domains.courses.lessons import LessonProgressService
from learning_adventures.domains.courses.quiz import (
    QuizService,
    can_retry,
    grade_quiz,
    reveal_cost,
    validate_quiz_structure,
)
from learning_adventures.domains.courses.subscription import (
    SubscriptionService,
    has_premium_access,
    subscription_features,
)

__all__ = [
    "CertificateService",
    "CourseCatalogService",
    "CourseFilters",
    "CourseNotFoundError",
    "CourseServiceError",
    "CourseValidationError",
    "EnrollmentEligibility",
    "EnrollmentNotAllowedError",
    "EnrollmentService",
    "InsufficientXPError",
    "LessonAccessError",
    "LessonProgressService",
    "NotEnrolledError",
    "QuizService",
    "SubscriptionService",
    "achievement_level",
    "can_retry",
    "format_time_spent",
    "grade_quiz",
    "has_premium_access",
    "reveal_cost",
    "serialize_certificate",
    "serialize_course",
    "serialize_enrollment",
    "serialize_lesson",
    "serialize_lesson_progress",
    "subscription_features",
    "validate_quiz_structure",
]
