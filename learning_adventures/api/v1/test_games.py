# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Staging area endpoints (admin only): review, upload and catalog promotion."""

import logging
import zipfile

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.dependencies import get_current_db_user, get_db, require_admin
from learning_adventures.api.middleware.auth import CurrentUser
from learning_adventures.api.middleware.rate_limit import RATE_LIMIT_UPLOAD, limiter
from learning_adventures.domains.test_games import (
    CatalogError,
    GamePackageError,
    TestGameNotFoundError,
    TestGameService,
    TestGameValidationError,
    serialize_approval,
    serialize_feedback,
    serialize_test_game,
    upload_game_package,
)
from learning_adventures.infrastructure.database.models import User
from learning_adventures.infrastructure.storage import open_archive
from learning_adventures.models.content import (
    CreateTestGameRequest,
    GameApprovalRequest,
    GameFeedbackRequest,
    GameStatusRequest,
)
from learning_adventures.utils.security import InvalidIdentifierError

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> TestGameService:
    return TestGameService(db)


@router.get("")
async def list_test_games(
    admin: CurrentUser = Depends(require_admin),
    service: TestGameService = Depends(_get_service),
) -> dict:
    games = await service.list_games()
    return {"testGames": [serialize_test_game(g, with_counts=True) for g in games]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_test_game(
    data: CreateTestGameRequest,
    admin: CurrentUser = Depends(require_admin),
    service: TestGameService = Depends(_get_service),
) -> dict:
    try:
        game = await service.create_game(
            admin.id, data.model_dump(by_alias=True, exclude_none=True)
        )
    except TestGameValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return {"testGame": serialize_test_game(game)}


@router.post("/upload", status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMIT_UPLOAD)
async def upload_test_game(
    request: Request,
    file: UploadFile = File(...),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Stage a zipped game package (metadata.json plus the HTML game file)."""
    if not (file.filename or "").lower().endswith(".zip"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File must be a ZIP archive",
        )

    data = await file.read()
    try:
        with open_archive(data) as archive:
            return await upload_game_package(db, archive, admin.id)
    except zipfile.BadZipFile:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid ZIP archive",
        )
    except GamePackageError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": e.message, "details": e.errors},
        )
    except (TestGameValidationError, InvalidIdentifierError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{test_game_id}")
async def get_test_game(
    test_game_id: str,
    admin: CurrentUser = Depends(require_admin),
    service: TestGameService = Depends(_get_service),
) -> dict:
    try:
        game = await service.get_game(test_game_id)
    except TestGameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    data = serialize_test_game(game, with_counts=True)
    data["approvals"] = [serialize_approval(a) for a in game.approvals]
    data["feedback"] = [serialize_feedback(f) for f in game.feedback]
    return {"testGame": data}


@router.post("/{test_game_id}/approve")
async def approve_test_game(
    test_game_id: str,
    data: GameApprovalRequest,
    admin: CurrentUser = Depends(require_admin),
    reviewer: User = Depends(get_current_db_user),
    service: TestGameService = Depends(_get_service),
) -> dict:
    """Record a review decision; the game status follows the decision."""
    try:
        approval = await service.submit_approval(
            test_game_id,
            reviewer,
            decision=data.decision or "",
            notes=data.notes,
            educational_quality=data.educational_quality,
            technical_quality=data.technical_quality,
            accessibility_compliant=data.accessibility_compliant,
            age_appropriate=data.age_appropriate,
            engagement_level=data.engagement_level,
        )
    except TestGameValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except TestGameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return {"success": True, "approval": serialize_approval(approval)}


@router.post("/{test_game_id}/feedback", status_code=status.HTTP_201_CREATED)
async def add_test_game_feedback(
    test_game_id: str,
    data: GameFeedbackRequest,
    admin: CurrentUser = Depends(require_admin),
    reviewer: User = Depends(get_current_db_user),
    service: TestGameService = Depends(_get_service),
) -> dict:
    try:
        feedback = await service.add_feedback(
            test_game_id,
            reviewer,
            message=data.message,
            feedback_type=data.feedback_type,
            issue_severity=data.issue_severity,
        )
    except TestGameValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except TestGameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return {"success": True, "feedback": serialize_feedback(feedback)}


@router.patch("/{test_game_id}/status")
async def update_test_game_status(
    test_game_id: str,
    data: GameStatusRequest,
    admin: CurrentUser = Depends(require_admin),
    service: TestGameService = Depends(_get_service),
) -> dict:
    try:
        game = await service.update_status(test_game_id, data.status)
    except TestGameValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except TestGameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return {"success": True, "testGame": serialize_test_game(game)}


@router.post("/{test_game_id}/promote")
async def promote_test_game(
    test_game_id: str,
    admin: CurrentUser = Depends(require_admin),
    service: TestGameService = Depends(_get_service),
) -> dict:
    """Insert an approved game at the front of its catalog array."""
    try:
        return await service.promote(test_game_id, admin.id)
    except TestGameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except TestGameValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except CatalogError as e:
        logger.error("Catalog promotion failed for %s: %s", test_game_id, e.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        )
