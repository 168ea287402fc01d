# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Gemini content studio: generate, iterate, preview and publish games."""

from learning_adventures.domains.content_studio.prompts import (
    CATEGORIES,
    DIFFICULTIES,
    GAME_TYPES,
    GameRequest,
    build_game_prompt,
    build_iteration_prompt,
    content_type_for,
    extract_changes_summary,
    extract_title,
    title_from_prompt,
)
from learning_adventures.domains.content_studio.service import (
    PREVIEW_HEADERS,
    ContentGenerationError,
    ContentNotFoundError,
    ContentStudioError,
    ContentStudioService,
    ContentValidationError,
    preview_url,
    publish_filename,
    serialize_content,
)

__all__ = [
    "CATEGORIES",
    "DIFFICULTIES",
    "GAME_TYPES",
    "PREVIEW_HEADERS",
    "ContentGenerationError",
    "ContentNotFoundError",
    "ContentStudioError",
    "ContentStudioService",
    "ContentValidationError",
    "GameRequest",
    "build_game_prompt",
    "build_iteration_prompt",
    "content_type_for",
    "extract_changes_summary",
    "extract_title",
    "preview_url",
    "publish_filename",
    "serialize_content",
    "title_from_prompt",
]
