# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Each module provides FastAPI routers for one domain.

Modules:
    auth: Adult signup, login, token refresh.
    child: Child PIN login and cookie sessions.
    parent: Child profiles and parent verification.
    progress: Adventure progress and achievements.
    gamification: XP, levels and leaderboards.
    courses: Catalog, enrollment, lessons, quizzes, subscription, certificates.
    planning: Learning goals and calendar events.
    social: Friends and challenges.
    gemini: AI content studio (admin).
    test_games: Staging review and catalog promotion (admin).
"""

from fastapi import APIRouter

from learning_adventures.api.v1 import (
    auth,
    child,
    courses,
    gamification,
    gemini,
    parent,
    planning,
    progress,
    social,
    test_games,
)

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Accounts
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(child.router, prefix="/child", tags=["Child Login"])
router.include_router(parent.router, prefix="/parent", tags=["Parent"])

# Adventures and gamification
router.include_router(progress.router, prefix="/progress", tags=["Progress"])
router.include_router(progress.achievements_router, prefix="/achievements", tags=["Achievements"])
router.include_router(gamification.router, prefix="/xp", tags=["XP"])
router.include_router(gamification.leaderboard_router, prefix="/leaderboard", tags=["Leaderboard"])

# Courses
router.include_router(courses.router, prefix="/courses", tags=["Courses"])
router.include_router(courses.lessons_router, prefix="/lessons", tags=["Lessons"])
router.include_router(courses.subscription_router, prefix="/subscription", tags=["Subscription"])
router.include_router(courses.certificates_router, prefix="/certificates", tags=["Certificates"])

# Planning and social
router.include_router(planning.goals_router, prefix="/goals", tags=["Goals"])
router.include_router(planning.calendar_router, prefix="/calendar", tags=["Calendar"])
router.include_router(social.friends_router, prefix="/friends", tags=["Friends"])
router.include_router(social.challenges_router, prefix="/challenges", tags=["Challenges"])

# Admin content tooling
router.include_router(gemini.router, prefix="/gemini", tags=["Content Studio"])
router.include_router(test_games.router, prefix="/test-games", tags=["Test Games"])

__all__ = ["router"]
