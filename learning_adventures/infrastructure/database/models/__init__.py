# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

Importing this package registers every table on ``Base.metadata``.
"""

from learning_adventures.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from learning_adventures.infrastructure.database.models.content import (
    GameApproval,
    GameFeedback,
    GeminiContent,
    GeminiContentStatus,
    GeminiIteration,
    GeminiUsage,
    TestGame,
    TestGameStatus,
)
from learning_adventures.infrastructure.database.models.course import (
    Course,
    CourseCertificate,
    CourseEnrollment,
    CourseLesson,
    CourseLessonProgress,
    CourseStatus,
    Difficulty,
    LessonProgressStatus,
    LessonType,
)
from learning_adventures.infrastructure.database.models.planning import (
    CalendarEvent,
    EventStatus,
    GoalStatus,
    GoalType,
    LearningGoal,
)
from learning_adventures.infrastructure.database.models.progress import (
    DailyXP,
    ProgressStatus,
    UserAchievement,
    UserLevel,
    UserProgress,
)
from learning_adventures.infrastructure.database.models.social import (
    Challenge,
    ChallengeStatus,
    Friendship,
    FriendshipStatus,
)
from learning_adventures.infrastructure.database.models.user import (
    ChildProfile,
    ChildSession,
    Subscription,
    SubscriptionStatus,
    SubscriptionTier,
    User,
    UserRole,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Accounts
    "User",
    "UserRole",
    "Subscription",
    "SubscriptionTier",
    "SubscriptionStatus",
    "ChildProfile",
    "ChildSession",
    # Progress
    "UserProgress",
    "ProgressStatus",
    "UserAchievement",
    "UserLevel",
    "DailyXP",
    # Courses
    "Course",
    "CourseLesson",
    "CourseEnrollment",
    "CourseLessonProgress",
    "CourseCertificate",
    "CourseStatus",
    "Difficulty",
    "LessonType",
    "LessonProgressStatus",
    # Planning
    "LearningGoal",
    "GoalType",
    "GoalStatus",
    "CalendarEvent",
    "EventStatus",
    # Social
    "Friendship",
    "FriendshipStatus",
    "Challenge",
    "ChallengeStatus",
    # Content studio
    "GeminiContent",
    "GeminiContentStatus",
    "GeminiIteration",
    "GeminiUsage",
    "TestGame",
    "TestGameStatus",
    "GameApproval",
    "GameFeedback",
]
