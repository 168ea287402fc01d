# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Social domain: friends and challenges."""

from learning_adventures.domains.social.service import (
    ChallengeService,
    FriendService,
    SocialNotFoundError,
    SocialServiceError,
    SocialValidationError,
    public_profile,
    serialize_challenge,
    serialize_friendship,
)

__all__ = [
    "ChallengeService",
    "FriendService",
    "SocialNotFoundError",
    "SocialServiceError",
    "SocialValidationError",
    "public_profile",
    "serialize_challenge",
    "serialize_friendship",
]
