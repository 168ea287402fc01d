# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Staging area review workflow.

Games enter staging as NOT_TESTED, collect approvals and feedback from
admins, and once APPROVED can be promoted into the adventure catalog
exactly once.
"""

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from learning_adventures.core.config import StorageSettings, get_settings
from learning_adventures.domains.test_games.catalog_file import (
    build_catalog_entry,
    catalog_array_name,
    insert_catalog_entry,
)
from learning_adventures.domains.test_games.exceptions import (
    TestGameNotFoundError,
    TestGameValidationError,
)
from learning_adventures.infrastructure.database.models import (
    GameApproval,
    GameFeedback,
    TestGame,
    TestGameStatus,
    User,
)
from learning_adventures.utils.datetime import utc_now

logger = logging.getLogger(__name__)

DECISION_STATUS = {
    "APPROVE": TestGameStatus.APPROVED,
    "REJECT": TestGameStatus.REJECTED,
    "REQUEST_CHANGES": TestGameStatus.NEEDS_REVISION,
}

VALID_STATUSES = frozenset(status.value for status in TestGameStatus)


def status_for_decision(decision: str | None) -> TestGameStatus:
    """Game status implied by a reviewer decision; unknown means IN_TESTING."""
    return DECISION_STATUS.get((decision or "").upper(), TestGameStatus.IN_TESTING)


def reviewer_name(user: User | None) -> str:
    if user is None:
        return "Unknown"
    return user.name or user.email or "Unknown"


def serialize_test_game(game: TestGame, with_counts: bool = False) -> dict[str, Any]:
    data = {
        "id": game.id,
        "gameId": game.game_id,
        "title": game.title,
        "description": game.description,
        "category": game.category,
        "type": game.type,
        "gradeLevel": list(game.grade_level or []),
        "difficulty": game.difficulty,
        "skills": list(game.skills or []),
        "estimatedTime": game.estimated_time,
        "filePath": game.file_path,
        "isHtmlGame": game.is_html_game,
        "isReactComponent": game.is_react_component,
        "status": game.status,
        "createdBy": game.created_by,
        "catalogued": game.catalogued,
        "cataloguedAt": game.catalogued_at.isoformat() if game.catalogued_at else None,
        "cataloguedBy": game.catalogued_by,
        "createdAt": game.created_at.isoformat() if game.created_at else None,
        "updatedAt": game.updated_at.isoformat() if game.updated_at else None,
    }
    if with_counts:
        data["_count"] = {
            "approvals": len(game.approvals or []),
            "feedback": len(game.feedback or []),
        }
    return data


def serialize_approval(approval: GameApproval) -> dict[str, Any]:
    return {
        "id": approval.id,
        "testGameId": approval.test_game_id,
        "userId": approval.user_id,
        "userName": approval.user_name,
        "decision": approval.decision,
        "notes": approval.notes,
        "educationalQuality": approval.educational_quality,
        "technicalQuality": approval.technical_quality,
        "accessibilityCompliant": approval.accessibility_compliant,
        "ageAppropriate": approval.age_appropriate,
        "engagementLevel": approval.engagement_level,
        "createdAt": approval.created_at.isoformat() if approval.created_at else None,
    }


def serialize_feedback(feedback: GameFeedback) -> dict[str, Any]:
    return {
        "id": feedback.id,
        "testGameId": feedback.test_game_id,
        "userId": feedback.user_id,
        "userName": feedback.user_name,
        "feedbackType": feedback.feedback_type,
        "message": feedback.message,
        "issueSeverity": feedback.issue_severity,
        "createdAt": feedback.created_at.isoformat() if feedback.created_at else None,
    }


class TestGameService:
    """Admin operations on staged games."""

    __test__ = False

    def __init__(self, db: AsyncSession, storage: StorageSettings | None = None):
        self.db = db
        self.storage = storage or get_settings().storage

    async def list_games(self) -> list[TestGame]:
        """All staged games, newest first, with review trails loaded."""
        result = await self.db.execute(
            select(TestGame)
            .options(selectinload(TestGame.approvals), selectinload(TestGame.feedback))
            .order_by(TestGame.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_game(self, test_game_id: str) -> TestGame:
        """Raises TestGameNotFoundError when missing."""
        game = await self.db.get(
            TestGame,
            test_game_id,
            options=[selectinload(TestGame.approvals), selectinload(TestGame.feedback)],
        )
        if game is None:
            raise TestGameNotFoundError()
        return game

    async def create_game(self, admin_id: str, data: dict[str, Any]) -> TestGame:
        """Stage a game by hand.

        Args:
            admin_id: Admin creating the record.
            data: Camel-cased game fields; ``gameId``, ``title`` and
                ``category`` are required.

        Raises:
            TestGameValidationError: Missing fields or duplicate ``gameId``.
        """
        game_id = data.get("gameId")
        if not game_id or not data.get("title") or not data.get("category"):
            raise TestGameValidationError("Missing required fields")

        result = await self.db.execute(select(TestGame).where(TestGame.game_id == game_id))
        if result.scalar_one_or_none():
            raise TestGameValidationError("Game with this ID already exists")

        is_html_game = data.get("isHtmlGame")
        is_react = data.get("isReactComponent")
        game = TestGame(
            game_id=game_id,
            title=data["title"],
            description=data.get("description") or "",
            category=data["category"],
            type=data.get("type") or "game",
            grade_level=list(data.get("gradeLevel") or []),
            difficulty=data.get("difficulty") or "medium",
            skills=list(data.get("skills") or []),
            estimated_time=data.get("estimatedTime") or "15-20 mins",
            file_path=data.get("filePath"),
            is_html_game=True if is_html_game is None else bool(is_html_game),
            is_react_component=False if is_react is None else bool(is_react),
            created_by=admin_id,
            status=TestGameStatus.NOT_TESTED.value,
        )
        self.db.add(game)
        await self.db.commit()
        await self.db.refresh(game)

        logger.info("Staged test game %s by %s", game_id, admin_id)
        return game

    async def submit_approval(
        self,
        test_game_id: str,
        reviewer: User,
        decision: str,
        notes: str | None = None,
        educational_quality: int | None = None,
        technical_quality: int | None = None,
        accessibility_compliant: bool | None = None,
        age_appropriate: bool | None = None,
        engagement_level: int | None = None,
    ) -> GameApproval:
        """Record a review decision and move the game to the implied status."""
        if not decision:
            raise TestGameValidationError("Decision is required")

        game = await self.get_game(test_game_id)

        approval = GameApproval(
            test_game_id=game.id,
            user_id=reviewer.id,
            user_name=reviewer_name(reviewer),
            decision=decision,
            notes=notes,
            educational_quality=educational_quality,
            technical_quality=technical_quality,
            accessibility_compliant=accessibility_compliant,
            age_appropriate=age_appropriate,
            engagement_level=engagement_level,
        )
        self.db.add(approval)
        game.status = status_for_decision(decision).value
        await self.db.commit()
        await self.db.refresh(approval)

        logger.info("Review %s on test game %s -> %s", decision, game.game_id, game.status)
        return approval

    async def add_feedback(
        self,
        test_game_id: str,
        reviewer: User,
        message: str | None,
        feedback_type: str | None = None,
        issue_severity: str | None = None,
    ) -> GameFeedback:
        if not message or not message.strip():
            raise TestGameValidationError("Feedback message is required")

        game = await self.get_game(test_game_id)

        feedback = GameFeedback(
            test_game_id=game.id,
            user_id=reviewer.id,
            user_name=reviewer_name(reviewer),
            feedback_type=feedback_type,
            message=message.strip(),
            issue_severity=issue_severity,
        )
        self.db.add(feedback)
        await self.db.commit()
        await self.db.refresh(feedback)
        return feedback

    async def update_status(self, test_game_id: str, status: str | None) -> TestGame:
        """Set the review status directly.

        Raises:
            TestGameValidationError: ``status`` is not a known status.
            TestGameNotFoundError: Game is missing.
        """
        if status not in VALID_STATUSES:
            raise TestGameValidationError("Invalid status")

        game = await self.get_game(test_game_id)
        game.status = status
        await self.db.commit()
        await self.db.refresh(game)

        logger.info("Test game %s status set to %s", game.game_id, status)
        return game

    async def promote(self, test_game_id: str, admin_id: str) -> dict[str, Any]:
        """Add an approved game to the catalog.

        Returns:
            ``success``, ``message`` and the ``catalogEntry`` written.

        Raises:
            TestGameNotFoundError: Game is missing.
            TestGameValidationError: Not approved, or already catalogued.
            CatalogError: Catalog file unusable or target array absent.
        """
        game = await self.get_game(test_game_id)

        if game.status != TestGameStatus.APPROVED.value:
            raise TestGameValidationError("Game must be approved before promoting to catalog")
        if game.catalogued:
            raise TestGameValidationError("Game is already in the catalog")

        entry = build_catalog_entry(game)
        array_name = catalog_array_name(game.category, game.type)
        insert_catalog_entry(Path(self.storage.catalog_path), array_name, entry)

        game.catalogued = True
        game.catalogued_at = utc_now()
        game.catalogued_by = admin_id
        await self.db.commit()

        logger.info("Promoted test game %s to %s", game.game_id, array_name)

        return {
            "success": True,
            "message": f"Game added to {array_name} in the catalog",
            "catalogEntry": entry,
        }
