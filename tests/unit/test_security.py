# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for identifier hardening helpers."""

import pytest

from learning_adventures.utils.security import (
    InvalidIdentifierError,
    sanitize_identifier,
    slugify,
    validate_identifier,
)


class TestValidateIdentifier:
    """Tests for validate_identifier."""

    @pytest.mark.parametrize("value", ["game-1", "Fraction_Pizza", "abc123", "-_-"])
    def test_accepts_safe_identifiers(self, value: str) -> None:
        assert validate_identifier(value) == value

    @pytest.mark.parametrize("value", ["../etc", "a/b", "with space", "semi;colon", "dot.html"])
    def test_rejects_unsafe_identifiers(self, value: str) -> None:
        with pytest.raises(InvalidIdentifierError, match="invalid characters"):
            validate_identifier(value, "Game ID")

    @pytest.mark.parametrize("value", ["", None])
    def test_rejects_empty(self, value: str | None) -> None:
        with pytest.raises(InvalidIdentifierError, match="Game ID cannot be empty"):
            validate_identifier(value, "Game ID")

    def test_error_is_value_error(self) -> None:
        """Test that callers catching ValueError also catch identifier errors."""
        with pytest.raises(ValueError):
            validate_identifier("bad/id")


class TestSanitizeAndSlugify:
    """Tests for sanitize_identifier and slugify."""

    def test_sanitize_strips_unsafe_characters(self) -> None:
        assert sanitize_identifier("../my game!.html") == "mygamehtml"

    def test_sanitize_keeps_dashes_and_underscores(self) -> None:
        assert sanitize_identifier("a-b_c") == "a-b_c"

    def test_slugify(self) -> None:
        assert slugify("  Fraction Pizza Party! ") == "fraction-pizza-party"

    def test_slugify_collapses_runs(self) -> None:
        assert slugify("Math -- & -- Science") == "math-science"
