# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Adventure catalog stored as a JSON document.

The document is an object of named arrays, one per category and kind:
``mathGames``, ``mathLessons``, ``scienceGames`` and so on. Promotion
prepends to the matching array so new content shows first.
"""

import json
import logging
from pathlib import Path
from typing import Any

from learning_adventures.domains.test_games.exceptions import CatalogError
from learning_adventures.infrastructure.database.models import TestGame

logger = logging.getLogger(__name__)


def catalog_array_name(category: str, content_type: str) -> str:
    """Array key for a category and content type.

    Example:
        >>> catalog_array_name("math", "game")
        'mathGames'
    """
    return f"{category}{'Games' if content_type == 'game' else 'Lessons'}"


def build_catalog_entry(game: TestGame) -> dict[str, Any]:
    """Catalog entry for a staged game."""
    entry: dict[str, Any] = {
        "id": game.game_id,
        "title": game.title,
        "description": game.description,
        "type": game.type,
        "category": game.category,
        "gradeLevel": list(game.grade_level or []),
        "difficulty": game.difficulty,
        "skills": list(game.skills or []),
        "estimatedTime": game.estimated_time,
        "featured": False,
    }
    if game.is_html_game and game.file_path:
        entry["htmlPath"] = game.file_path
    if game.is_react_component:
        entry["componentGame"] = True
    return entry


def load_catalog(path: str | Path) -> dict[str, Any]:
    """Read the catalog document.

    Raises:
        CatalogError: Missing file, unreadable JSON or a non-object root.
    """
    catalog_path = Path(path)
    try:
        data = json.loads(catalog_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog file not found: {catalog_path}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog file is not valid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise CatalogError("Catalog file must contain a JSON object")
    return data


def insert_catalog_entry(path: str | Path, array_name: str, entry: dict[str, Any]) -> None:
    """Prepend ``entry`` to ``array_name`` and rewrite the catalog.

    Raises:
        CatalogError: If the array does not exist in the catalog.
    """
    catalog = load_catalog(path)
    items = catalog.get(array_name)
    if not isinstance(items, list):
        raise CatalogError(
            f"Could not find {array_name} array in catalog",
            {"arrayName": array_name},
        )

    items.insert(0, entry)
    Path(path).write_text(json.dumps(catalog, indent=2) + "\n", encoding="utf-8")
    logger.info("Inserted catalog entry %s into %s", entry.get("id"), array_name)
