# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Game package (.zip) inspection and staging.

A game package carries a ``metadata.json`` manifest naming a single HTML
``gameFile``. The HTML is copied to ``staging/games/{id}.html`` under the
public directory and a NOT_TESTED TestGame is created for review.

Metadata precedence is manifest, then ``<meta name=...>`` tags in the
HTML, then defaults.
"""

import json
import logging
import zipfile
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.core.config import StorageSettings
from learning_adventures.domains.test_games.exceptions import (
    GamePackageError,
    TestGameValidationError,
)
from learning_adventures.infrastructure.database.models import TestGame, TestGameStatus
from learning_adventures.infrastructure.storage import write_public_file
from learning_adventures.utils.security import sanitize_identifier, slugify, validate_identifier

logger = logging.getLogger(__name__)

MANIFEST_NAME = "metadata.json"
STAGING_DIR = "staging/games"

DEFAULT_METADATA: dict[str, Any] = {
    "title": "Untitled Game",
    "description": "",
    "category": "interdisciplinary",
    "type": "game",
    "gradeLevel": ["3"],
    "difficulty": "medium",
    "skills": [],
    "estimatedTime": "15-20 mins",
}


@dataclass
class PackageValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": self.errors}


def _read_manifest(archive: zipfile.ZipFile) -> dict[str, Any] | None:
    """Parsed manifest, or None when absent.

    Raises:
        ValueError: If the manifest is not a JSON object.
    """
    try:
        raw = archive.read(MANIFEST_NAME)
    except KeyError:
        return None
    data = json.loads(raw.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError("metadata.json must contain a JSON object")
    return data


def _has_entry(archive: zipfile.ZipFile, name: str) -> bool:
    try:
        archive.getinfo(name)
    except KeyError:
        return False
    return True


def is_game_package(archive: zipfile.ZipFile) -> bool:
    """True for single-game packages; course packages list ``lessons`` instead."""
    try:
        manifest = _read_manifest(archive)
    except ValueError:
        return False
    if manifest is None:
        return False
    return bool(manifest.get("gameFile")) and not manifest.get("lessons")


def validate_game_package(archive: zipfile.ZipFile) -> PackageValidation:
    """Collect structural problems without touching the database or disk."""
    try:
        manifest = _read_manifest(archive)
    except ValueError:
        return PackageValidation(valid=False, errors=["Invalid JSON in metadata.json"])

    if manifest is None:
        return PackageValidation(valid=False, errors=["Missing metadata.json file"])

    errors: list[str] = []
    if not manifest.get("title"):
        errors.append("Missing required field: title")
    game_file = manifest.get("gameFile")
    if not game_file:
        errors.append("Missing required field: gameFile")
    elif not _has_entry(archive, game_file):
        errors.append(f"Game file not found in ZIP: {game_file}")

    return PackageValidation(valid=not errors, errors=errors)


def _split_list(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def extract_html_metadata(html: str) -> dict[str, Any]:
    """Read adventure metadata from ``<meta name=...>`` tags.

    Only keys present in the document are returned; ``title`` falls back
    to the ``<title>`` element.
    """
    soup = BeautifulSoup(html, "html.parser")

    def meta(name: str) -> str | None:
        tag = soup.find("meta", attrs={"name": name})
        content = tag.get("content") if tag else None
        return content.strip() if isinstance(content, str) and content.strip() else None

    title = meta("title")
    if title is None and soup.title and soup.title.string:
        title = soup.title.string.strip() or None

    found: dict[str, Any] = {
        "title": title,
        "description": meta("description"),
        "type": meta("content-type"),
        "category": meta("subject"),
        "gradeLevel": _split_list(meta("grade-level")),
        "difficulty": meta("difficulty"),
        "skills": _split_list(meta("skills")),
        "estimatedTime": meta("estimated-time"),
    }
    return {key: value for key, value in found.items() if value is not None}


def merge_metadata(manifest: dict[str, Any], html_metadata: dict[str, Any]) -> dict[str, Any]:
    """Manifest values win over HTML meta values, which win over defaults."""
    merged: dict[str, Any] = {}
    for key, default in DEFAULT_METADATA.items():
        value = manifest.get(key) or html_metadata.get(key)
        merged[key] = value if value else default
    return merged


def derive_game_id(manifest: dict[str, Any]) -> str:
    """Game id from the manifest or the title, restricted to ``[A-Za-z0-9_-]``.

    Raises:
        InvalidIdentifierError: If nothing usable remains after sanitising.
    """
    raw = manifest.get("id") or slugify(str(manifest.get("title", "")))
    game_id = sanitize_identifier(str(raw)).strip()
    return validate_identifier(game_id, "Game ID")


async def upload_game_package(
    db: AsyncSession,
    archive: zipfile.ZipFile,
    uploader_id: str,
    settings: StorageSettings | None = None,
) -> dict[str, Any]:
    """Stage a game package for review.

    Args:
        db: Database session.
        archive: Opened zip archive.
        uploader_id: Admin performing the upload.
        settings: Storage settings override.

    Returns:
        ``success``, ``testGameId``, ``gameId`` and ``stagingPath``.

    Raises:
        GamePackageError: Manifest missing or incomplete, or game file absent.
        TestGameValidationError: A staged game with this id already exists.
        InvalidIdentifierError: The derived id is unusable.
    """
    validation = validate_game_package(archive)
    if not validation.valid:
        raise GamePackageError("Invalid game package", validation.errors)

    manifest = _read_manifest(archive) or {}
    game_id = derive_game_id(manifest)

    result = await db.execute(select(TestGame).where(TestGame.game_id == game_id))
    if result.scalar_one_or_none():
        raise TestGameValidationError(f'Game with ID "{game_id}" already exists in staging')

    game_data = archive.read(manifest["gameFile"])
    staging_path = f"{STAGING_DIR}/{game_id}.html"
    write_public_file(staging_path, game_data, settings)

    html_metadata: dict[str, Any] = {}
    try:
        html_metadata = extract_html_metadata(game_data.decode("utf-8"))
    except UnicodeDecodeError:
        logger.warning("Game file for %s is not UTF-8; using manifest metadata only", game_id)

    metadata = merge_metadata(manifest, html_metadata)

    game = TestGame(
        game_id=game_id,
        title=metadata["title"],
        description=metadata["description"],
        category=metadata["category"],
        type=metadata["type"],
        grade_level=list(metadata["gradeLevel"]),
        difficulty=metadata["difficulty"],
        skills=list(metadata["skills"]),
        estimated_time=metadata["estimatedTime"],
        file_path=f"/{staging_path}",
        is_html_game=True,
        is_react_component=False,
        created_by=uploader_id,
        status=TestGameStatus.NOT_TESTED.value,
    )
    db.add(game)
    await db.commit()
    await db.refresh(game)

    logger.info("Staged game package %s by %s", game_id, uploader_id)

    return {
        "success": True,
        "testGameId": game.id,
        "gameId": game.game_id,
        "stagingPath": f"/{staging_path}",
    }
