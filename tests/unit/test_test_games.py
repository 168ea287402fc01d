# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for game packages, the staging workflow and the catalog file."""

import io
import json
import zipfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from learning_adventures.domains.test_games.catalog_file import (
    build_catalog_entry,
    catalog_array_name,
    insert_catalog_entry,
    load_catalog,
)
from learning_adventures.domains.test_games.exceptions import (
    CatalogError,
    GamePackageError,
    TestGameNotFoundError,
    TestGameValidationError,
)
from learning_adventures.domains.test_games.packages import (
    derive_game_id,
    extract_html_metadata,
    is_game_package,
    merge_metadata,
    upload_game_package,
    validate_game_package,
)
from learning_adventures.domains.test_games.service import (
    TestGameService,
    reviewer_name,
    status_for_decision,
)
from learning_adventures.utils.security import InvalidIdentifierError

GAME_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Fraction Pizza</title>
  <meta name="description" content="Slice pizzas into fractions">
  <meta name="subject" content="math">
  <meta name="grade-level" content="3, 4">
  <meta name="skills" content="fractions,  equivalence">
</head>
<body></body>
</html>
"""


def build_archive(entries: dict[str, str]) -> zipfile.ZipFile:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    buffer.seek(0)
    return zipfile.ZipFile(buffer)


def make_game(status: str = "APPROVED", catalogued: bool = False) -> MagicMock:
    game = MagicMock()
    game.id = "tg-1"
    game.game_id = "fraction-pizza"
    game.title = "Fraction Pizza"
    game.description = "Slice pizzas"
    game.type = "game"
    game.category = "math"
    game.grade_level = ["3", "4"]
    game.difficulty = "easy"
    game.skills = ["fractions"]
    game.estimated_time = "10 mins"
    game.is_html_game = True
    game.is_react_component = False
    game.file_path = "/staging/games/fraction-pizza.html"
    game.status = status
    game.catalogued = catalogued
    return game


@pytest.fixture
def storage_settings(tmp_path: Path) -> MagicMock:
    settings = MagicMock()
    settings.public_dir = str(tmp_path / "public")
    settings.catalog_path = str(tmp_path / "catalog.json")
    return settings


# =============================================================================
# Package Tests
# =============================================================================


class TestPackageValidation:
    """Tests for validate_game_package and is_game_package."""

    def test_valid_package(self) -> None:
        archive = build_archive(
            {"metadata.json": json.dumps({"title": "Pizza", "gameFile": "game.html"}), "game.html": GAME_HTML}
        )

        assert validate_game_package(archive).to_dict() == {"valid": True, "errors": []}
        assert is_game_package(archive) is True

    def test_missing_manifest(self) -> None:
        archive = build_archive({"game.html": GAME_HTML})

        assert validate_game_package(archive).errors == ["Missing metadata.json file"]
        assert is_game_package(archive) is False

    def test_missing_fields_and_file(self) -> None:
        archive = build_archive({"metadata.json": json.dumps({"gameFile": "nope.html"})})

        errors = validate_game_package(archive).errors

        assert "Missing required field: title" in errors
        assert "Game file not found in ZIP: nope.html" in errors

    def test_invalid_manifest_json(self) -> None:
        archive = build_archive({"metadata.json": "[1, 2]"})

        assert validate_game_package(archive).errors == ["Invalid JSON in metadata.json"]

    def test_course_package_is_not_game(self) -> None:
        archive = build_archive(
            {"metadata.json": json.dumps({"title": "Course", "gameFile": "a.html", "lessons": [1]})}
        )

        assert is_game_package(archive) is False


class TestMetadata:
    """Tests for HTML metadata extraction and merging."""

    def test_extract_html_metadata(self) -> None:
        metadata = extract_html_metadata(GAME_HTML)

        assert metadata == {
            "title": "Fraction Pizza",
            "description": "Slice pizzas into fractions",
            "category": "math",
            "gradeLevel": ["3", "4"],
            "skills": ["fractions", "equivalence"],
        }

    def test_meta_title_wins_over_title_tag(self) -> None:
        html = '<html><head><title>Tag</title><meta name="title" content="Meta"></head></html>'

        assert extract_html_metadata(html)["title"] == "Meta"

    def test_merge_precedence(self) -> None:
        """Test that manifest beats HTML meta, which beats defaults."""
        merged = merge_metadata(
            {"title": "From Manifest", "category": ""},
            {"title": "From HTML", "category": "science", "difficulty": "hard"},
        )

        assert merged["title"] == "From Manifest"
        assert merged["category"] == "science"
        assert merged["difficulty"] == "hard"
        assert merged["estimatedTime"] == "15-20 mins"
        assert merged["gradeLevel"] == ["3"]

    def test_derive_game_id(self) -> None:
        assert derive_game_id({"id": "pizza_v2"}) == "pizza_v2"
        assert derive_game_id({"title": "Fraction Pizza!"}) == "fraction-pizza"
        assert derive_game_id({"id": "../evil"}) == "evil"

    def test_derive_game_id_empty(self) -> None:
        with pytest.raises(InvalidIdentifierError):
            derive_game_id({"title": "!!!"})


class TestUploadGamePackage:
    """Tests for upload_game_package."""

    @pytest.mark.asyncio
    async def test_stages_game(self, mock_db, result_factory, storage_settings) -> None:
        archive = build_archive(
            {
                "metadata.json": json.dumps(
                    {"title": "Fraction Pizza", "gameFile": "game.html", "difficulty": "easy"}
                ),
                "game.html": GAME_HTML,
            }
        )
        mock_db.execute.return_value = result_factory(None)

        result = await upload_game_package(mock_db, archive, "admin-1", storage_settings)

        assert result["success"] is True
        assert result["gameId"] == "fraction-pizza"
        assert result["stagingPath"] == "/staging/games/fraction-pizza.html"
        staged = Path(storage_settings.public_dir) / "staging/games/fraction-pizza.html"
        assert staged.read_text() == GAME_HTML

        game = mock_db.add.call_args.args[0]
        assert game.status == "NOT_TESTED"
        assert game.category == "math"
        assert game.difficulty == "easy"
        assert game.grade_level == ["3", "4"]
        assert game.created_by == "admin-1"

    @pytest.mark.asyncio
    async def test_invalid_package(self, mock_db, storage_settings) -> None:
        archive = build_archive({"metadata.json": json.dumps({"title": "x"})})

        with pytest.raises(GamePackageError) as exc_info:
            await upload_game_package(mock_db, archive, "admin-1", storage_settings)

        assert exc_info.value.errors == ["Missing required field: gameFile"]

    @pytest.mark.asyncio
    async def test_duplicate_id(self, mock_db, result_factory, storage_settings) -> None:
        archive = build_archive(
            {"metadata.json": json.dumps({"title": "Pizza", "gameFile": "g.html"}), "g.html": GAME_HTML}
        )
        mock_db.execute.return_value = result_factory(make_game())

        with pytest.raises(TestGameValidationError, match="already exists in staging"):
            await upload_game_package(mock_db, archive, "admin-1", storage_settings)


# =============================================================================
# Review Workflow Tests
# =============================================================================


class TestReviewHelpers:
    """Tests for decision mapping and reviewer names."""

    @pytest.mark.parametrize(
        ("decision", "status"),
        [
            ("APPROVE", "APPROVED"),
            ("reject", "REJECTED"),
            ("REQUEST_CHANGES", "NEEDS_REVISION"),
            ("MAYBE", "IN_TESTING"),
            (None, "IN_TESTING"),
        ],
    )
    def test_status_for_decision(self, decision: str | None, status: str) -> None:
        assert status_for_decision(decision).value == status

    def test_reviewer_name(self, sample_user) -> None:
        assert reviewer_name(sample_user) == "Test Student"
        sample_user.name = None
        assert reviewer_name(sample_user) == "student@example.com"
        assert reviewer_name(None) == "Unknown"


class TestStagingService:
    """Tests for the staging review service."""

    @pytest.mark.asyncio
    async def test_create_duplicate(self, mock_db, result_factory, storage_settings) -> None:
        mock_db.execute.return_value = result_factory(make_game())

        with pytest.raises(TestGameValidationError, match="already exists"):
            await TestGameService(mock_db, storage_settings).create_game(
                "admin-1", {"gameId": "fraction-pizza", "title": "Pizza", "category": "math"}
            )

    @pytest.mark.asyncio
    async def test_create_defaults(self, mock_db, result_factory, storage_settings) -> None:
        mock_db.execute.return_value = result_factory(None)

        game = await TestGameService(mock_db, storage_settings).create_game(
            "admin-1", {"gameId": "new-game", "title": "New", "category": "science"}
        )

        assert game.status == "NOT_TESTED"
        assert game.is_html_game is True
        assert game.is_react_component is False
        assert game.difficulty == "medium"

    @pytest.mark.asyncio
    async def test_approval_moves_status(self, mock_db, sample_user, storage_settings) -> None:
        game = make_game(status="IN_TESTING")
        mock_db.get.return_value = game

        approval = await TestGameService(mock_db, storage_settings).submit_approval(
            "tg-1", sample_user, "APPROVE", educational_quality=5
        )

        assert game.status == "APPROVED"
        assert approval.user_name == "Test Student"
        assert approval.educational_quality == 5

    @pytest.mark.asyncio
    async def test_blank_feedback(self, mock_db, sample_user, storage_settings) -> None:
        with pytest.raises(TestGameValidationError, match="Feedback message is required"):
            await TestGameService(mock_db, storage_settings).add_feedback("tg-1", sample_user, "   ")

    @pytest.mark.asyncio
    async def test_invalid_status(self, mock_db, storage_settings) -> None:
        with pytest.raises(TestGameValidationError, match="Invalid status"):
            await TestGameService(mock_db, storage_settings).update_status("tg-1", "PUBLISHED")

    @pytest.mark.asyncio
    async def test_missing_game(self, mock_db, storage_settings) -> None:
        with pytest.raises(TestGameNotFoundError):
            await TestGameService(mock_db, storage_settings).update_status("tg-1", "APPROVED")


class TestPromote:
    """Tests for catalog promotion."""

    @pytest.mark.asyncio
    async def test_promote_prepends_entry(self, mock_db, storage_settings) -> None:
        catalog_path = Path(storage_settings.catalog_path)
        catalog_path.write_text(json.dumps({"mathGames": [{"id": "old"}], "mathLessons": []}))
        game = make_game()
        mock_db.get.return_value = game

        result = await TestGameService(mock_db, storage_settings).promote("tg-1", "admin-1")

        assert result["message"] == "Game added to mathGames in the catalog"
        catalog = json.loads(catalog_path.read_text())
        assert [e["id"] for e in catalog["mathGames"]] == ["fraction-pizza", "old"]
        assert catalog["mathGames"][0]["htmlPath"] == "/staging/games/fraction-pizza.html"
        assert game.catalogued is True
        assert game.catalogued_by == "admin-1"

    @pytest.mark.asyncio
    async def test_not_approved(self, mock_db, storage_settings) -> None:
        mock_db.get.return_value = make_game(status="IN_TESTING")

        with pytest.raises(TestGameValidationError, match="must be approved"):
            await TestGameService(mock_db, storage_settings).promote("tg-1", "admin-1")

    @pytest.mark.asyncio
    async def test_already_catalogued(self, mock_db, storage_settings) -> None:
        mock_db.get.return_value = make_game(catalogued=True)

        with pytest.raises(TestGameValidationError, match="already in the catalog"):
            await TestGameService(mock_db, storage_settings).promote("tg-1", "admin-1")

    @pytest.mark.asyncio
    async def test_missing_array(self, mock_db, storage_settings) -> None:
        Path(storage_settings.catalog_path).write_text(json.dumps({"scienceGames": []}))
        game = make_game()
        mock_db.get.return_value = game

        with pytest.raises(CatalogError, match="Could not find mathGames"):
            await TestGameService(mock_db, storage_settings).promote("tg-1", "admin-1")

        assert game.catalogued is False
        mock_db.commit.assert_not_awaited()


class TestCatalogFile:
    """Tests for catalog file helpers."""

    def test_array_name(self) -> None:
        assert catalog_array_name("math", "game") == "mathGames"
        assert catalog_array_name("science", "lesson") == "scienceLessons"

    def test_component_entry(self) -> None:
        game = make_game()
        game.is_html_game = False
        game.is_react_component = True

        entry = build_catalog_entry(game)

        assert "htmlPath" not in entry
        assert entry["componentGame"] is True
        assert entry["featured"] is False

    def test_load_errors(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "missing.json")

        bad = tmp_path / "bad.json"
        bad.write_text("{oops")
        with pytest.raises(CatalogError, match="not valid JSON"):
            load_catalog(bad)

        array_root = tmp_path / "array.json"
        array_root.write_text("[]")
        with pytest.raises(CatalogError, match="JSON object"):
            load_catalog(array_root)

    def test_insert_rewrites_file(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"artGames": []}))

        insert_catalog_entry(path, "artGames", {"id": "paint"})

        assert json.loads(path.read_text()) == {"artGames": [{"id": "paint"}]}
