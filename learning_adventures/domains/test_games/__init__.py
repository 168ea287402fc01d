# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Staging area: review, game package upload and catalog promotion."""

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
    TestGameServiceError,
    TestGameValidationError,
)
from learning_adventures.domains.test_games.packages import (
    PackageValidation,
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
    serialize_approval,
    serialize_feedback,
    serialize_test_game,
    status_for_decision,
)

__all__ = [
    "CatalogError",
    "GamePackageError",
    "PackageValidation",
    "TestGameNotFoundError",
    "TestGameService",
    "TestGameServiceError",
    "TestGameValidationError",
    "build_catalog_entry",
    "catalog_array_name",
    "derive_game_id",
    "extract_html_metadata",
    "insert_catalog_entry",
    "is_game_package",
    "load_catalog",
    "merge_metadata",
    "reviewer_name",
    "serialize_approval",
    "serialize_feedback",
    "serialize_test_game",
    "status_for_decision",
    "upload_game_package",
    "validate_game_package",
]
