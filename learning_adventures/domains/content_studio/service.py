# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Gemini content studio.

Admins generate single-file HTML games from a prompt, refine them with
feedback, preview them in a sandbox and publish them either to the
staging area or as a ready-to-add catalog entry. Every LLM call is
recorded in ``gemini_usage`` with its estimated cost, including failures.
"""

import logging
import secrets
import time
from pathlib import Path
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.core.config import LLMSettings, StorageSettings, get_settings
from learning_adventures.core.llm import LLMClient, LLMError, LLMNotConfiguredError, estimate_cost
from learning_adventures.domains.content_studio.prompts import (
    CATEGORIES,
    DEFAULT_CHANGES_SUMMARY,
    GameRequest,
    build_game_prompt,
    build_iteration_prompt,
    content_type_for,
    extract_changes_summary,
    extract_title,
    title_from_prompt,
)
from learning_adventures.infrastructure.database.models import (
    GeminiContent,
    GeminiContentStatus,
    GeminiIteration,
    GeminiUsage,
    TestGame,
    TestGameStatus,
)
from learning_adventures.infrastructure.storage import PathTraversalError, write_public_file
from learning_adventures.utils.datetime import start_of_month, utc_now
from learning_adventures.utils.security import slugify

logger = logging.getLogger(__name__)

MIN_PROMPT_LENGTH = 20
MIN_FEEDBACK_LENGTH = 10
DEFAULT_PUBLISH_TIME = "10-15 mins"
PUBLISH_DESTINATIONS = ("test-games", "catalog")

PREVIEW_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "X-Frame-Options": "SAMEORIGIN",
    "Content-Security-Policy": "; ".join(
        [
            "default-src 'self' 'unsafe-inline' 'unsafe-eval'",
            "script-src 'self' 'unsafe-inline' 'unsafe-eval' https://cdnjs.cloudflare.com https://cdn.jsdelivr.net",
            "style-src 'self' 'unsafe-inline' https://cdnjs.cloudflare.com https://cdn.jsdelivr.net",
            "img-src 'self' data: blob: https:",
            "font-src 'self' data: https://cdnjs.cloudflare.com https://cdn.jsdelivr.net",
            "connect-src 'self'",
            "frame-ancestors 'self'",
        ]
    ),
}


class ContentStudioError(Exception):
    """Base exception for content studio operations."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ContentNotFoundError(ContentStudioError):
    def __init__(self) -> None:
        super().__init__("Content not found")


class ContentValidationError(ContentStudioError):
    pass


class ContentGenerationError(ContentStudioError):
    """The LLM call failed; a failed usage row has been recorded."""

    pass


def preview_url(content_id: str) -> str:
    return f"/api/v1/gemini/preview/{content_id}"


def publish_filename(title: str, category: str) -> str:
    """``gemini-{category}-{slug}-{8 hex chars}``."""
    return f"gemini-{category}-{slugify(title)}-{secrets.token_hex(4)}"


def serialize_content(content: GeminiContent) -> dict[str, Any]:
    return {
        "id": content.id,
        "title": content.title,
        "prompt": content.prompt,
        "gameType": content.game_type,
        "category": content.category,
        "gradeLevel": list(content.grade_level or []),
        "difficulty": content.difficulty,
        "skills": list(content.skills or []),
        "status": content.status,
        "iterations": content.iterations,
        "filePath": content.file_path,
        "testGameId": content.test_game_id,
        "publishedAt": content.published_at.isoformat() if content.published_at else None,
        "createdAt": content.created_at.isoformat() if content.created_at else None,
    }


class ContentStudioService:
    """Generation, iteration, preview, publishing and usage stats."""

    def __init__(
        self,
        db: AsyncSession,
        llm: LLMClient | None = None,
        llm_settings: LLMSettings | None = None,
        storage: StorageSettings | None = None,
    ):
        settings = get_settings()
        self.db = db
        self.llm_settings = llm_settings or settings.llm
        self.llm = llm or LLMClient(llm_settings=self.llm_settings)
        self.storage = storage or settings.storage

    @property
    def model_name(self) -> str:
        return self.llm_settings.gemini_model

    def _record_usage(
        self,
        user_id: str,
        operation: str,
        tokens_input: int = 0,
        tokens_output: int = 0,
        content_id: str | None = None,
        error_message: str | None = None,
    ) -> float:
        cost = estimate_cost(tokens_input, tokens_output, self.llm_settings) if error_message is None else 0.0
        self.db.add(
            GeminiUsage(
                user_id=user_id,
                operation=operation,
                model=self.model_name,
                tokens_input=tokens_input,
                tokens_output=tokens_output,
                estimated_cost=cost,
                gemini_content_id=content_id,
                success=error_message is None,
                error_message=error_message,
            )
        )
        return cost

    async def _record_failure(self, user_id: str, operation: str, error: Exception) -> None:
        """Persist a failed usage row; a logging failure must not mask ``error``."""
        try:
            await self.db.rollback()
            self._record_usage(user_id, operation, error_message=str(error))
            await self.db.commit()
        except SQLAlchemyError:
            logger.exception("Failed to record %s failure for user %s", operation, user_id)

    async def _write_and_commit(self, filename: str, html: str) -> Path:
        """Write the game file, then commit; the file is removed if the commit fails."""
        try:
            written = write_public_file(f"games/{filename}.html", html.encode("utf-8"), self.storage)
        except PathTraversalError as e:
            raise ContentValidationError(str(e)) from e

        try:
            await self.db.commit()
        except SQLAlchemyError:
            written.unlink(missing_ok=True)
            raise
        return written

    async def get_content(self, content_id: str) -> GeminiContent:
        content = await self.db.get(GeminiContent, content_id)
        if content is None:
            raise ContentNotFoundError()
        return content

    async def generate(self, user_id: str, request: GameRequest) -> dict[str, Any]:
        """Generate a new game from an admin prompt.

        Args:
            user_id: Requesting admin.
            request: Prompt and educational parameters.

        Returns:
            Content id, generated code, title, token counts, cost,
            generation time in milliseconds and the preview URL.

        Raises:
            ContentValidationError: Prompt too short or fields missing.
            LLMNotConfiguredError: No usable API key.
            ContentGenerationError: The LLM call failed.
        """
        if not request.prompt or len(request.prompt) < MIN_PROMPT_LENGTH:
            raise ContentValidationError("Prompt must be at least 20 characters")
        if (
            not request.category
            or not request.game_type
            or not request.grade_level
            or not request.difficulty
            or request.skills is None
        ):
            raise ContentValidationError(
                "Missing required fields: category, gameType, gradeLevel, difficulty, skills"
            )
        if request.category not in CATEGORIES:
            raise ContentValidationError(
                f"Category must be one of: {', '.join(CATEGORIES)}"
            )
        if not self.llm.is_configured:
            raise LLMNotConfiguredError()

        started = time.perf_counter()
        try:
            response = await self.llm.complete(build_game_prompt(request))
        except LLMError as e:
            logger.error("Game generation failed for user %s: %s", user_id, e.message)
            await self._record_failure(user_id, "generate", e)
            raise ContentGenerationError("Generation failed", {"details": e.message}) from e
        generation_time = int((time.perf_counter() - started) * 1000)

        code = response.content
        title = extract_title(code) or title_from_prompt(request.prompt)

        content = GeminiContent(
            user_id=user_id,
            title=title,
            prompt=request.prompt,
            generated_code=code,
            game_type=request.game_type,
            category=request.category,
            grade_level=list(request.grade_level),
            difficulty=request.difficulty,
            skills=list(request.skills),
            status=GeminiContentStatus.DRAFT.value,
            iterations=0,
            iteration_notes=[],
            content_metadata={
                "model": self.model_name,
                "generationTime": generation_time,
                "tokensUsed": response.total_tokens,
            },
        )
        self.db.add(content)
        await self.db.flush()

        cost = self._record_usage(
            user_id, "generate", response.tokens_input, response.tokens_output, content.id
        )
        await self.db.commit()

        logger.info(
            "Generated content %s for user %s (%d tokens, $%.4f)",
            content.id,
            user_id,
            response.total_tokens,
            cost,
        )

        return {
            "success": True,
            "contentId": content.id,
            "gameCode": code,
            "title": title,
            "tokens": {
                "input": response.tokens_input,
                "output": response.tokens_output,
                "total": response.total_tokens,
            },
            "estimatedCost": cost,
            "generationTime": generation_time,
            "previewUrl": preview_url(content.id),
        }

    async def iterate(
        self,
        user_id: str,
        content_id: str,
        feedback: str,
        existing_code: str | None = None,
    ) -> dict[str, Any]:
        """Revise generated content with reviewer feedback.

        Raises:
            ContentValidationError: Missing id or feedback shorter than 10 characters.
            ContentNotFoundError: Unknown content id.
            LLMNotConfiguredError: No usable API key.
            ContentGenerationError: The LLM call failed.
        """
        if not content_id or not feedback:
            raise ContentValidationError("Missing required fields: contentId, feedback")
        if len(feedback) < MIN_FEEDBACK_LENGTH:
            raise ContentValidationError("Feedback must be at least 10 characters")

        content = await self.get_content(content_id)

        if not self.llm.is_configured:
            raise LLMNotConfiguredError()

        previous_code = existing_code or content.generated_code
        iteration_number = content.iterations + 1

        started = time.perf_counter()
        try:
            response = await self.llm.complete(build_iteration_prompt(previous_code, feedback))
        except LLMError as e:
            logger.error("Iteration failed for content %s: %s", content_id, e.message)
            await self._record_failure(user_id, "iterate", e)
            raise ContentGenerationError("Iteration failed", {"details": e.message}) from e
        generation_time = int((time.perf_counter() - started) * 1000)

        updated_code = response.content
        changes_summary = extract_changes_summary(updated_code) or DEFAULT_CHANGES_SUMMARY

        self.db.add(
            GeminiIteration(
                gemini_content_id=content.id,
                iteration_number=iteration_number,
                user_feedback=feedback,
                previous_code=previous_code,
                new_code=updated_code,
                changes_summary=changes_summary,
                tokens_used=response.total_tokens,
                generation_time=generation_time,
            )
        )

        content.generated_code = updated_code
        content.iterations = iteration_number
        content.iteration_notes = [*(content.iteration_notes or []), feedback]
        content.status = GeminiContentStatus.ITERATING.value

        cost = self._record_usage(
            user_id, "iterate", response.tokens_input, response.tokens_output, content.id
        )
        await self.db.commit()

        logger.info("Content %s iteration %d saved", content.id, iteration_number)

        return {
            "success": True,
            "contentId": content.id,
            "iterationNumber": iteration_number,
            "updatedCode": updated_code,
            "changesSummary": changes_summary,
            "tokens": {
                "input": response.tokens_input,
                "output": response.tokens_output,
                "total": response.total_tokens,
            },
            "estimatedCost": cost,
            "generationTime": generation_time,
            "previewUrl": preview_url(content.id),
        }

    async def preview(self, content_id: str) -> tuple[str, dict[str, str]]:
        """HTML body and sandboxing headers for the preview frame."""
        content = await self.get_content(content_id)
        return content.generated_code, dict(PREVIEW_HEADERS)

    async def publish(
        self,
        user_id: str,
        content_id: str,
        destination: str,
        metadata: dict[str, Any],
    ) -> dict[str, Any]:
        """Write the game under ``/games`` and hand it to staging or the catalog.

        Args:
            user_id: Publishing admin.
            content_id: Generated content to publish.
            destination: ``test-games`` or ``catalog``.
            metadata: ``title`` and ``description`` are required;
                ``featured`` and ``estimatedTime`` are optional.

        Raises:
            ContentValidationError: Missing fields, unknown destination or
                unsupported category.
            ContentNotFoundError: Unknown content id.
        """
        metadata = metadata or {}
        if not content_id or not destination or not metadata.get("title") or not metadata.get("description"):
            raise ContentValidationError(
                "Missing required fields: contentId, destination, metadata.title, metadata.description"
            )
        if destination not in PUBLISH_DESTINATIONS:
            raise ContentValidationError("Destination must be 'test-games' or 'catalog'")

        content = await self.get_content(content_id)
        if content.category not in CATEGORIES:
            raise ContentValidationError(f"Cannot publish content with category '{content.category}'")

        filename = publish_filename(metadata["title"], content.category)
        file_path = f"/games/{filename}.html"

        content_type = content_type_for(content.game_type)
        estimated_time = metadata.get("estimatedTime") or DEFAULT_PUBLISH_TIME

        content.file_path = file_path
        content.published_at = utc_now()

        if destination == "test-games":
            game = TestGame(
                game_id=filename,
                title=metadata["title"],
                description=metadata["description"],
                category=content.category,
                type=content_type,
                grade_level=list(content.grade_level or []),
                difficulty=content.difficulty,
                skills=list(content.skills or []),
                estimated_time=estimated_time,
                file_path=file_path,
                is_html_game=True,
                status=TestGameStatus.NOT_TESTED.value,
                created_by=user_id,
            )
            self.db.add(game)
            await self.db.flush()

            content.status = GeminiContentStatus.TESTING.value
            content.test_game_id = game.id
            await self._write_and_commit(filename, content.generated_code)

            logger.info("Published content %s to staging as %s", content.id, filename)
            return {
                "success": True,
                "destination": "test-games",
                "testGameId": game.id,
                "filePath": file_path,
                "previewUrl": file_path,
                "message": "Game published to Test Games successfully",
            }

        content.status = GeminiContentStatus.APPROVED.value
        await self._write_and_commit(filename, content.generated_code)

        catalog_entry = {
            "id": filename,
            "title": metadata["title"],
            "description": metadata["description"],
            "type": content_type,
            "category": content.category,
            "gradeLevel": list(content.grade_level or []),
            "difficulty": content.difficulty,
            "skills": list(content.skills or []),
            "estimatedTime": estimated_time,
            "htmlPath": file_path,
            "featured": bool(metadata.get("featured", False)),
        }

        logger.info("Content %s approved for catalog as %s", content.id, filename)
        return {
            "success": True,
            "destination": "catalog",
            "filePath": file_path,
            "previewUrl": file_path,
            "message": "Content ready for catalog. Add the following entry to the catalog:",
            "catalogEntry": catalog_entry,
            "instructions": (
                "Add this entry to the matching catalog array:\n"
                f"- For {content.category} games: {content.category}Games array\n"
                f"- For {content.category} lessons: {content.category}Lessons array"
            ),
        }

    async def stats(self) -> dict[str, Any]:
        """Generation counts, this month's spend and recent activity."""
        month_start = start_of_month(utc_now())

        total = (await self.db.execute(select(func.count(GeminiContent.id)))).scalar() or 0
        this_month = (
            await self.db.execute(
                select(func.count(GeminiContent.id)).where(GeminiContent.created_at >= month_start)
            )
        ).scalar() or 0
        published = (
            await self.db.execute(
                select(func.count(GeminiContent.id)).where(
                    GeminiContent.status == GeminiContentStatus.PUBLISHED.value
                )
            )
        ).scalar() or 0
        testing = (
            await self.db.execute(
                select(func.count(GeminiContent.id)).where(
                    GeminiContent.status == GeminiContentStatus.TESTING.value
                )
            )
        ).scalar() or 0

        monthly = (
            await self.db.execute(
                select(
                    func.sum(GeminiUsage.estimated_cost),
                    func.sum(GeminiUsage.tokens_input),
                    func.sum(GeminiUsage.tokens_output),
                ).where(GeminiUsage.created_at >= month_start, GeminiUsage.success.is_(True))
            )
        ).one()
        monthly_cost = float(monthly[0] or 0)
        tokens_input = int(monthly[1] or 0)
        tokens_output = int(monthly[2] or 0)

        by_category = (
            await self.db.execute(
                select(GeminiContent.category, func.count(GeminiContent.id)).group_by(
                    GeminiContent.category
                )
            )
        ).all()
        by_status = (
            await self.db.execute(
                select(GeminiContent.status, func.count(GeminiContent.id)).group_by(GeminiContent.status)
            )
        ).all()

        recent = (
            await self.db.execute(
                select(GeminiContent).order_by(GeminiContent.created_at.desc()).limit(5)
            )
        ).scalars().all()

        avg_cost = (
            await self.db.execute(
                select(func.avg(GeminiUsage.estimated_cost)).where(
                    GeminiUsage.operation == "generate", GeminiUsage.success.is_(True)
                )
            )
        ).scalar()

        return {
            "total": total,
            "thisMonth": this_month,
            "published": published,
            "testing": testing,
            "monthlyCost": round(monthly_cost, 2),
            "monthlyTokens": {
                "input": tokens_input,
                "output": tokens_output,
                "total": tokens_input + tokens_output,
            },
            "avgCostPerGeneration": round(float(avg_cost or 0), 4),
            "byCategory": [{"category": category, "count": count} for category, count in by_category],
            "byStatus": [{"status": status, "count": count} for status, count in by_status],
            "recentGenerations": [
                {
                    "id": item.id,
                    "title": item.title,
                    "category": item.category,
                    "gameType": item.game_type,
                    "status": item.status,
                    "createdAt": item.created_at.isoformat() if item.created_at else None,
                }
                for item in recent
            ],
        }
