# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Input hardening helpers for identifiers that end up in file paths."""

import re

_IDENTIFIER_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


class InvalidIdentifierError(ValueError):
    """Raised when an identifier contains characters unsafe for file paths."""

    pass


def validate_identifier(value: str | None, context: str = "Identifier") -> str:
    """Validate an identifier before it is used to build a file path.

    Args:
        value: Candidate identifier.
        context: Human-readable name used in the error message.

    Returns:
        The identifier, unchanged.

    Raises:
        InvalidIdentifierError: If empty or not ``[A-Za-z0-9_-]+``.
    """
    if not value:
        raise InvalidIdentifierError(f"{context} cannot be empty")

    if not _IDENTIFIER_PATTERN.fullmatch(value):
        raise InvalidIdentifierError(
            f'{context} "{value}" contains invalid characters. '
            "Only alphanumeric characters, hyphens, and underscores are allowed."
        )

    return value


def sanitize_identifier(value: str) -> str:
    """Strip every character outside ``[A-Za-z0-9_-]``."""
    return _UNSAFE_CHARS.sub("", value)


def slugify(value: str) -> str:
    """Lowercase a title and collapse non-alphanumeric runs into dashes.

    Example:
        >>> slugify("  Fraction Pizza Party! ")
        'fraction-pizza-party'
    """
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
