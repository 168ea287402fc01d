# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions for the staging area and catalog promotion."""

from typing import Any


class TestGameServiceError(Exception):
    """Base exception for test-game operations.

    Attributes:
        message: Human-readable error message.
        details: Additional context for the API response.
    """

    __test__ = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class TestGameNotFoundError(TestGameServiceError):
    """Staged game does not exist."""

    __test__ = False

    def __init__(self, message: str = "Game not found"):
        super().__init__(message)


class TestGameValidationError(TestGameServiceError):
    """Invalid request: duplicate id, bad status, blank feedback, not promotable."""

    __test__ = False


class CatalogError(TestGameServiceError):
    """The catalog file cannot be read, written, or lacks the target array."""

    pass


class GamePackageError(TestGameValidationError):
    """Uploaded zip is not a usable game package."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message, {"errors": errors} if errors else None)
        self.errors = errors or []
