# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom exceptions for course operations.

This module defines the exception hierarchy for courses:
- CourseServiceError: Base exception for all course errors
- CourseNotFoundError: Course, lesson or quiz question not found
- NotEnrolledError: User has no enrollment for the course
- EnrollmentNotAllowedError: Eligibility check failed
- LessonAccessError: Lesson is locked for the user
- CourseValidationError: Invalid input
- InsufficientXPError: Not enough XP to reveal a quiz answer
"""


class CourseServiceError(Exception):
    """Base exception for all course errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class CourseNotFoundError(CourseServiceError):
    """Course, lesson or question does not exist."""

    pass


class NotEnrolledError(CourseServiceError):
    """User is not enrolled in the course."""

    def __init__(self, message: str = "Not enrolled in this course"):
        super().__init__(message)


class EnrollmentNotAllowedError(CourseServiceError):
    """Enrollment eligibility check failed.

    The details carry the full eligibility report so callers can
    explain prerequisites or premium requirements.
    """

    pass


class LessonAccessError(CourseServiceError):
    """Lesson is locked for the user."""

    pass


class CourseValidationError(CourseServiceError):
    """Invalid course input."""

    pass


class InsufficientXPError(CourseServiceError):
    """Not enough XP to pay for an answer reveal."""

    def __init__(self, cost: int, available: int):
        super().__init__(
            f"Insufficient XP. You need {cost} XP but only have {available} XP",
            {"cost": cost, "available": available},
        )
