# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Friend and challenge endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.dependencies import get_db, require_auth
from learning_adventures.api.middleware.auth import CurrentUser
from learning_adventures.domains.social import (
    ChallengeService,
    FriendService,
    SocialNotFoundError,
    SocialValidationError,
    public_profile,
    serialize_challenge,
    serialize_friendship,
)
from learning_adventures.infrastructure.database.models import (
    ChallengeStatus,
    FriendshipStatus,
)
from learning_adventures.models.planning import CreateChallengeRequest, FriendRequest

logger = logging.getLogger(__name__)

friends_router = APIRouter()
challenges_router = APIRouter()


# =============================================================================
# Friends
# =============================================================================


@friends_router.get("")
async def list_friends(
    status_filter: str = Query(default=FriendshipStatus.ACCEPTED.value, alias="status"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    friendships = await FriendService(db).list_friends(current_user.id, status_filter)
    return {"friends": [serialize_friendship(f, current_user.id) for f in friendships]}


@friends_router.post("", status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    data: FriendRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        friendship, friend = await FriendService(db).send_request(current_user.id, data.friend_id)
    except SocialValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SocialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return {
        "success": True,
        "friendship": {
            "id": friendship.id,
            "status": friendship.status,
            "friend": public_profile(friend, with_level=False),
        },
    }


@friends_router.post("/{friendship_id}/accept")
async def accept_friend_request(
    friendship_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        friendship = await FriendService(db).accept_request(current_user.id, friendship_id)
    except SocialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, "friendship": serialize_friendship(friendship, current_user.id)}


@friends_router.delete("/{friendship_id}")
async def remove_friend(
    friendship_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Remove a friendship or cancel/decline a pending request."""
    try:
        await FriendService(db).remove(current_user.id, friendship_id)
    except SocialValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SocialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True}


# =============================================================================
# Challenges
# =============================================================================


@challenges_router.get("")
async def list_challenges(
    status_filter: str = Query(default=ChallengeStatus.ACTIVE.value, alias="status"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    challenges = await ChallengeService(db).list_challenges(current_user.id, status_filter)
    return {"challenges": [serialize_challenge(c) for c in challenges]}


@challenges_router.post("", status_code=status.HTTP_201_CREATED)
async def create_challenge(
    data: CreateChallengeRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        challenge = await ChallengeService(db).create_challenge(
            current_user.id,
            challenged_id=data.challenged_id,
            challenge_type=data.type,
            goal_value=data.goal_value,
            unit=data.unit,
            category=data.category,
            adventure_id=data.adventure_id,
            duration_days=data.duration,
        )
    except SocialValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SocialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, "challenge": serialize_challenge(challenge)}


@challenges_router.post("/{challenge_id}/accept")
async def accept_challenge(
    challenge_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        challenge = await ChallengeService(db).accept_challenge(current_user.id, challenge_id)
    except SocialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, "challenge": serialize_challenge(challenge)}


@challenges_router.delete("/{challenge_id}")
async def remove_challenge(
    challenge_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        outcome = await ChallengeService(db).remove_challenge(current_user.id, challenge_id)
    except SocialValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SocialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, "result": outcome}
