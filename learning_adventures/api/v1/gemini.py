# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Gemini content studio endpoints (admin only).

- POST /generate - Generate a game from a prompt
- POST /iterate - Revise generated content with feedback
- GET /preview/{content_id} - Sandboxed HTML preview
- POST /publish - Write the game and send it to staging or the catalog
- GET /stats - Usage and cost dashboard
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.dependencies import get_db, require_admin
from learning_adventures.api.middleware.auth import CurrentUser
from learning_adventures.api.middleware.rate_limit import RATE_LIMIT_GEMINI, limiter
from learning_adventures.core.llm import LLMNotConfiguredError
from learning_adventures.domains.content_studio import (
    ContentGenerationError,
    ContentNotFoundError,
    ContentStudioService,
    ContentValidationError,
    GameRequest,
)
from learning_adventures.models.content import (
    GenerateContentRequest,
    IterateContentRequest,
    PublishContentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> ContentStudioService:
    return ContentStudioService(db)


def _missing_key_response(e: LLMNotConfiguredError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": e.message,
            "message": "Please add your Gemini API key to the server configuration",
            "code": e.error_code,
        },
    )


@router.post("/generate")
@limiter.limit(RATE_LIMIT_GEMINI)
async def generate_content(
    request: Request,
    data: GenerateContentRequest,
    admin: CurrentUser = Depends(require_admin),
    service: ContentStudioService = Depends(_get_service),
):
    """Generate an educational game with Gemini."""
    game_request = GameRequest(
        prompt=data.prompt or "",
        category=data.category or "",
        game_type=data.game_type or "",
        grade_level=data.grade_level or [],
        difficulty=data.difficulty or "",
        skills=data.skills,
        context=data.context,
    )
    try:
        return await service.generate(admin.id, game_request)
    except ContentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except LLMNotConfiguredError as e:
        return _missing_key_response(e)
    except ContentGenerationError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": e.message, **e.details},
        )


@router.post("/iterate")
@limiter.limit(RATE_LIMIT_GEMINI)
async def iterate_content(
    request: Request,
    data: IterateContentRequest,
    admin: CurrentUser = Depends(require_admin),
    service: ContentStudioService = Depends(_get_service),
):
    try:
        return await service.iterate(
            admin.id, data.content_id or "", data.feedback or "", data.existing_code
        )
    except ContentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except ContentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except LLMNotConfiguredError as e:
        return _missing_key_response(e)
    except ContentGenerationError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": e.message, **e.details},
        )


@router.get("/preview/{content_id}", response_class=HTMLResponse)
async def preview_content(
    content_id: str,
    admin: CurrentUser = Depends(require_admin),
    service: ContentStudioService = Depends(_get_service),
) -> HTMLResponse:
    """Serve generated HTML with no-cache and sandboxing headers."""
    try:
        html, headers = await service.preview(content_id)
    except ContentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return HTMLResponse(content=html, headers=headers)


@router.post("/publish")
async def publish_content(
    data: PublishContentRequest,
    admin: CurrentUser = Depends(require_admin),
    service: ContentStudioService = Depends(_get_service),
) -> dict:
    try:
        return await service.publish(
            admin.id, data.content_id or "", data.destination or "", data.metadata or {}
        )
    except ContentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except ContentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.get("/stats")
async def content_stats(
    admin: CurrentUser = Depends(require_admin),
    service: ContentStudioService = Depends(_get_service),
) -> dict:
    return await service.stats()
