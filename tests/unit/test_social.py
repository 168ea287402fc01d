# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for friendships and challenges."""

from unittest.mock import MagicMock

import pytest

from learning_adventures.domains.social.service import (
    ChallengeService,
    FriendService,
    SocialNotFoundError,
    SocialValidationError,
    public_profile,
    serialize_friendship,
)


def make_user(user_id: str, name: str, level=None) -> MagicMock:
    user = MagicMock()
    user.id = user_id
    user.name = name
    user.email = f"{name.lower()}@example.com"
    user.image = None
    user.grade_level = "4"
    user.level = level
    return user


def make_friendship(initiator: MagicMock, recipient: MagicMock, status: str = "PENDING") -> MagicMock:
    friendship = MagicMock()
    friendship.id = "f-1"
    friendship.user_id = initiator.id
    friendship.friend_id = recipient.id
    friendship.user = initiator
    friendship.friend = recipient
    friendship.status = status
    friendship.created_at = None
    friendship.accepted_at = None
    return friendship


class TestProfiles:
    """Tests for public profiles and friendship views."""

    def test_profile_defaults_without_level(self) -> None:
        profile = public_profile(make_user("u-1", "Ada"))

        assert profile["currentLevel"] == 1
        assert profile["currentStreak"] == 0
        assert profile["totalXP"] == 0

    def test_profile_with_level(self) -> None:
        level = MagicMock()
        level.current_level = 4
        level.current_streak = 6
        level.total_xp = 1700

        profile = public_profile(make_user("u-1", "Ada", level))

        assert profile["currentLevel"] == 4
        assert profile["totalXP"] == 1700

    def test_profile_without_level_fields(self) -> None:
        assert "currentLevel" not in public_profile(make_user("u-1", "Ada"), with_level=False)
        assert public_profile(None) == {}

    def test_friendship_shows_other_user(self) -> None:
        """Test that each side of a friendship sees the other person."""
        ada, ben = make_user("u-1", "Ada"), make_user("u-2", "Ben")
        friendship = make_friendship(ada, ben)

        as_ada = serialize_friendship(friendship, "u-1")
        as_ben = serialize_friendship(friendship, "u-2")

        assert as_ada["name"] == "Ben"
        assert as_ada["isInitiator"] is True
        assert as_ben["name"] == "Ada"
        assert as_ben["email"] == "ada@example.com"
        assert as_ben["isInitiator"] is False


class TestFriendService:
    """Tests for FriendService."""

    @pytest.mark.asyncio
    async def test_send_request(self, mock_db, result_factory) -> None:
        ben = make_user("u-2", "Ben")
        mock_db.get.return_value = ben
        mock_db.execute.return_value = result_factory(None)

        friendship, friend = await FriendService(mock_db).send_request("u-1", "u-2")

        assert friend is ben
        assert friendship.status == "PENDING"
        assert friendship.user_id == "u-1"
        mock_db.add.assert_called_once_with(friendship)

    @pytest.mark.asyncio
    async def test_cannot_befriend_self(self, mock_db) -> None:
        with pytest.raises(SocialValidationError, match="yourself"):
            await FriendService(mock_db).send_request("u-1", "u-1")

    @pytest.mark.asyncio
    async def test_unknown_user(self, mock_db) -> None:
        with pytest.raises(SocialNotFoundError, match="User not found"):
            await FriendService(mock_db).send_request("u-1", "ghost")

    @pytest.mark.asyncio
    async def test_existing_pair_either_direction(self, mock_db, result_factory) -> None:
        ada, ben = make_user("u-1", "Ada"), make_user("u-2", "Ben")
        mock_db.get.return_value = ada
        mock_db.execute.return_value = result_factory(make_friendship(ada, ben))

        with pytest.raises(SocialValidationError, match="already exists"):
            await FriendService(mock_db).send_request("u-2", "u-1")

    @pytest.mark.asyncio
    async def test_accept(self, mock_db, result_factory) -> None:
        friendship = make_friendship(make_user("u-1", "Ada"), make_user("u-2", "Ben"))
        mock_db.execute.return_value = result_factory(friendship)

        await FriendService(mock_db).accept_request("u-2", "f-1")

        assert friendship.status == "ACCEPTED"
        assert friendship.accepted_at is not None

    @pytest.mark.asyncio
    async def test_accept_missing(self, mock_db, result_factory) -> None:
        mock_db.execute.return_value = result_factory(None)

        with pytest.raises(SocialNotFoundError, match="Friend request not found"):
            await FriendService(mock_db).accept_request("u-1", "f-1")

    @pytest.mark.asyncio
    async def test_remove(self, mock_db, result_factory) -> None:
        friendship = MagicMock()
        mock_db.execute.return_value = result_factory(friendship)

        await FriendService(mock_db).remove("u-1", "f-1")

        mock_db.delete.assert_awaited_once_with(friendship)


class TestChallengeService:
    """Tests for ChallengeService."""

    @pytest.mark.asyncio
    async def test_create(self, mock_db) -> None:
        mock_db.get.return_value = make_user("u-2", "Ben")

        challenge = await ChallengeService(mock_db).create_challenge(
            "u-1", "u-2", "XP", 500, "xp", duration_days=3
        )

        assert challenge.status == "PENDING"
        assert challenge.creator_id == "u-1"
        assert challenge.creator_progress == 0
        assert challenge.challenged_progress == 0
        assert challenge.end_date is not None

    @pytest.mark.asyncio
    async def test_create_validation(self, mock_db) -> None:
        service = ChallengeService(mock_db)

        with pytest.raises(SocialValidationError, match="Missing required fields"):
            await service.create_challenge("u-1", "u-2", "XP", None, "xp")
        with pytest.raises(SocialValidationError, match="Cannot challenge yourself"):
            await service.create_challenge("u-1", "u-1", "XP", 10, "xp")
        with pytest.raises(SocialNotFoundError):
            await service.create_challenge("u-1", "ghost", "XP", 10, "xp")

    @pytest.mark.asyncio
    async def test_accept_sets_active(self, mock_db, result_factory) -> None:
        challenge = MagicMock()
        mock_db.execute.return_value = result_factory(challenge)

        await ChallengeService(mock_db).accept_challenge("u-2", "c-1")

        assert challenge.status == "ACTIVE"
        assert challenge.start_date is not None

    @pytest.mark.asyncio
    async def test_challenged_declines_pending(self, mock_db, result_factory) -> None:
        """Test that removing an incoming pending challenge declines it."""
        challenge = MagicMock()
        challenge.challenged_id = "u-2"
        challenge.status = "PENDING"
        mock_db.execute.return_value = result_factory(challenge)

        outcome = await ChallengeService(mock_db).remove_challenge("u-2", "c-1")

        assert outcome == "declined"
        assert challenge.status == "DECLINED"
        mock_db.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_creator_deletes(self, mock_db, result_factory) -> None:
        challenge = MagicMock()
        challenge.challenged_id = "u-2"
        challenge.status = "PENDING"
        mock_db.execute.return_value = result_factory(challenge)

        outcome = await ChallengeService(mock_db).remove_challenge("u-1", "c-1")

        assert outcome == "deleted"
        mock_db.delete.assert_awaited_once_with(challenge)
