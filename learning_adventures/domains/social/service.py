# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Friendships and peer challenges.

A friendship row is directed from the initiator (``user_id``) to the
recipient (``friend_id``) but a pair is unique in either direction. Only
the recipient may accept a pending request; either side may remove it.
"""

import logging
from datetime import timedelta
from typing import Any

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.infrastructure.database.models import (
    Challenge,
    ChallengeStatus,
    Friendship,
    FriendshipStatus,
    User,
)
from learning_adventures.utils.datetime import utc_now

logger = logging.getLogger(__name__)

DEFAULT_CHALLENGE_DAYS = 7


class SocialServiceError(Exception):
    """Base exception for social operations."""

    pass


class SocialNotFoundError(SocialServiceError):
    """Friendship, challenge or user not found."""

    pass


class SocialValidationError(SocialServiceError):
    """Invalid social request."""

    pass


def public_profile(user: User | None, with_level: bool = True) -> dict[str, Any]:
    """Public view of another user, with level stats when requested."""
    if user is None:
        return {}
    profile = {
        "id": user.id,
        "name": user.name,
        "image": user.image,
        "gradeLevel": user.grade_level,
    }
    if with_level:
        level = user.level
        profile.update(
            {
                "currentLevel": level.current_level if level else 1,
                "currentStreak": level.current_streak if level else 0,
                "totalXP": level.total_xp if level else 0,
            }
        )
    return profile


def serialize_friendship(friendship: Friendship, viewer_id: str) -> dict[str, Any]:
    """Friendship from the viewer's perspective, showing the other user."""
    is_initiator = friendship.user_id == viewer_id
    other = friendship.friend if is_initiator else friendship.user
    profile = public_profile(other)
    return {
        "id": friendship.id,
        "friendId": profile.get("id"),
        "name": profile.get("name"),
        "email": other.email if other else None,
        "image": profile.get("image"),
        "gradeLevel": profile.get("gradeLevel"),
        "currentLevel": profile.get("currentLevel", 1),
        "currentStreak": profile.get("currentStreak", 0),
        "totalXP": profile.get("totalXP", 0),
        "status": friendship.status,
        "createdAt": friendship.created_at.isoformat() if friendship.created_at else None,
        "acceptedAt": friendship.accepted_at.isoformat() if friendship.accepted_at else None,
        "isInitiator": is_initiator,
    }


def serialize_challenge(challenge: Challenge) -> dict[str, Any]:
    return {
        "id": challenge.id,
        "creatorId": challenge.creator_id,
        "challengedId": challenge.challenged_id,
        "type": challenge.type,
        "category": challenge.category,
        "adventureId": challenge.adventure_id,
        "goalValue": challenge.goal_value,
        "unit": challenge.unit,
        "creatorProgress": challenge.creator_progress,
        "challengedProgress": challenge.challenged_progress,
        "status": challenge.status,
        "startDate": challenge.start_date.isoformat() if challenge.start_date else None,
        "endDate": challenge.end_date.isoformat() if challenge.end_date else None,
        "winnerId": challenge.winner_id,
        "createdAt": challenge.created_at.isoformat() if challenge.created_at else None,
        "creator": public_profile(challenge.creator),
        "challenged": public_profile(challenge.challenged),
    }


class FriendService:
    """Friend requests and friend lists."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_friends(
        self, user_id: str, status: str = FriendshipStatus.ACCEPTED.value
    ) -> list[Friendship]:
        result = await self.db.execute(
            select(Friendship)
            .where(
                or_(Friendship.user_id == user_id, Friendship.friend_id == user_id),
                Friendship.status == status,
            )
            .order_by(Friendship.created_at.desc())
        )
        return list(result.scalars().all())

    async def send_request(self, user_id: str, friend_id: str | None) -> tuple[Friendship, User]:
        """Create a PENDING friend request.

        Returns:
            The friendship and the recipient.

        Raises:
            SocialValidationError: Missing id, self request or existing pair.
            SocialNotFoundError: Unknown recipient.
        """
        if not friend_id:
            raise SocialValidationError("Friend ID is required")
        if friend_id == user_id:
            raise SocialValidationError("Cannot add yourself as a friend")

        friend = await self.db.get(User, friend_id)
        if friend is None:
            raise SocialNotFoundError("User not found")

        result = await self.db.execute(
            select(Friendship).where(
                or_(
                    and_(Friendship.user_id == user_id, Friendship.friend_id == friend_id),
                    and_(Friendship.user_id == friend_id, Friendship.friend_id == user_id),
                )
            )
        )
        if result.scalars().first() is not None:
            raise SocialValidationError("Friendship already exists")

        friendship = Friendship(
            user_id=user_id,
            friend_id=friend_id,
            status=FriendshipStatus.PENDING.value,
        )
        self.db.add(friendship)
        await self.db.commit()
        await self.db.refresh(friendship)

        logger.info("Friend request sent: %s -> %s", user_id, friend_id)
        return friendship, friend

    async def accept_request(self, user_id: str, friendship_id: str) -> Friendship:
        """Accept a pending request addressed to ``user_id``."""
        result = await self.db.execute(
            select(Friendship).where(
                Friendship.id == friendship_id,
                Friendship.friend_id == user_id,
                Friendship.status == FriendshipStatus.PENDING.value,
            )
        )
        friendship = result.scalar_one_or_none()
        if friendship is None:
            raise SocialNotFoundError("Friend request not found")

        friendship.status = FriendshipStatus.ACCEPTED.value
        friendship.accepted_at = utc_now()
        await self.db.commit()
        await self.db.refresh(friendship)

        logger.info("Friend request accepted: %s", friendship_id)
        return friendship

    async def remove(self, user_id: str, friendship_id: str | None) -> None:
        if not friendship_id:
            raise SocialValidationError("Friendship ID is required")

        result = await self.db.execute(
            select(Friendship).where(
                Friendship.id == friendship_id,
                or_(Friendship.user_id == user_id, Friendship.friend_id == user_id),
            )
        )
        friendship = result.scalar_one_or_none()
        if friendship is None:
            raise SocialNotFoundError("Friendship not found")

        await self.db.delete(friendship)
        await self.db.commit()
        logger.info("Friendship removed: %s by %s", friendship_id, user_id)


class ChallengeService:
    """Head-to-head challenges between users."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_challenges(
        self, user_id: str, status: str = ChallengeStatus.ACTIVE.value
    ) -> list[Challenge]:
        result = await self.db.execute(
            select(Challenge)
            .where(
                or_(Challenge.creator_id == user_id, Challenge.challenged_id == user_id),
                Challenge.status == status,
            )
            .order_by(Challenge.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_challenge(
        self,
        user_id: str,
        challenged_id: str | None,
        challenge_type: str | None,
        goal_value: int | None,
        unit: str | None,
        category: str | None = None,
        adventure_id: str | None = None,
        duration_days: int = DEFAULT_CHALLENGE_DAYS,
    ) -> Challenge:
        """Create a PENDING challenge ending ``duration_days`` from now.

        Raises:
            SocialValidationError: Missing fields or self challenge.
            SocialNotFoundError: Unknown challenged user.
        """
        if not challenged_id or not challenge_type or not goal_value or not unit:
            raise SocialValidationError("Missing required fields")
        if challenged_id == user_id:
            raise SocialValidationError("Cannot challenge yourself")
        if await self.db.get(User, challenged_id) is None:
            raise SocialNotFoundError("Challenged user not found")

        challenge = Challenge(
            creator_id=user_id,
            challenged_id=challenged_id,
            type=challenge_type,
            category=category,
            adventure_id=adventure_id,
            goal_value=goal_value,
            unit=unit,
            creator_progress=0,
            challenged_progress=0,
            end_date=utc_now() + timedelta(days=duration_days),
            status=ChallengeStatus.PENDING.value,
        )
        self.db.add(challenge)
        await self.db.commit()
        await self.db.refresh(challenge)

        logger.info("Challenge created: %s -> %s (%s)", user_id, challenged_id, challenge.id)
        return challenge

    async def accept_challenge(self, user_id: str, challenge_id: str) -> Challenge:
        result = await self.db.execute(
            select(Challenge).where(
                Challenge.id == challenge_id,
                Challenge.challenged_id == user_id,
                Challenge.status == ChallengeStatus.PENDING.value,
            )
        )
        challenge = result.scalar_one_or_none()
        if challenge is None:
            raise SocialNotFoundError("Challenge not found or already accepted")

        challenge.status = ChallengeStatus.ACTIVE.value
        challenge.start_date = utc_now()
        await self.db.commit()
        await self.db.refresh(challenge)

        logger.info("Challenge accepted: %s", challenge_id)
        return challenge

    async def remove_challenge(self, user_id: str, challenge_id: str | None) -> str:
        """Decline a pending incoming challenge, otherwise delete it.

        Returns:
            ``declined`` or ``deleted``.
        """
        if not challenge_id:
            raise SocialValidationError("Challenge ID is required")

        result = await self.db.execute(
            select(Challenge).where(
                Challenge.id == challenge_id,
                or_(Challenge.creator_id == user_id, Challenge.challenged_id == user_id),
            )
        )
        challenge = result.scalar_one_or_none()
        if challenge is None:
            raise SocialNotFoundError("Challenge not found")

        if (
            challenge.challenged_id == user_id
            and challenge.status == ChallengeStatus.PENDING.value
        ):
            challenge.status = ChallengeStatus.DECLINED.value
            outcome = "declined"
        else:
            await self.db.delete(challenge)
            outcome = "deleted"

        await self.db.commit()
        logger.info("Challenge %s %s by %s", challenge_id, outcome, user_id)
        return outcome
