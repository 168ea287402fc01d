# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for Learning Adventures.

Each domain module provides services that own one area of business
logic and work directly against the async database session.

Domains:
    auth: Adult accounts, passwords and JWT tokens.
    child_auth: Child usernames, PINs and cookie sessions.
    parent: Child profile management and parent verification.
    progress: Adventure progress and achievements.
    gamification: XP awards, levels, streaks and leaderboards.
    courses: Catalog, enrollment, lessons, quizzes, subscriptions, certificates.
    planning: Learning goals and calendar events.
    social: Friendships and challenges.
    content_studio: LLM game generation, iteration and publishing.
    test_games: Staging uploads, review and catalog promotion.
"""
