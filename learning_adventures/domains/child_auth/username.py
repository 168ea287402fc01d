# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Anonymous child usernames in the form AdjectiveAnimal##.

Example: ``BraveEagle42``. 24 adjectives x 24 animals x 100 numbers gives
57,600 combinations.
"""

import logging
import re
import secrets
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

ADJECTIVES = (
    "Brave", "Happy", "Clever", "Swift", "Mighty", "Gentle",
    "Bright", "Bold", "Calm", "Eager", "Fierce", "Kind",
    "Lively", "Noble", "Quick", "Smart", "Wise", "Daring",
    "Joyful", "Proud", "Shiny", "Strong", "Wild", "Zesty",
)

ANIMALS = (
    "Eagle", "Dolphin", "Fox", "Tiger", "Lion", "Bear",
    "Wolf", "Hawk", "Panda", "Owl", "Dragon", "Phoenix",
    "Turtle", "Penguin", "Koala", "Cheetah", "Raccoon", "Otter",
    "Falcon", "Jaguar", "Lynx", "Moose", "Raven", "Shark",
)

USERNAME_PATTERN = re.compile(r"^[A-Z][a-z]+[A-Z][a-z]+\d{2}$")
DEFAULT_MAX_ATTEMPTS = 10


class UsernameGenerationError(Exception):
    """Raised when no free username was found within the attempt budget."""

    pass


def random_username() -> str:
    """Build one candidate username."""
    adjective = secrets.choice(ADJECTIVES)
    animal = secrets.choice(ANIMALS)
    return f"{adjective}{animal}{secrets.randbelow(100):02d}"


def is_valid_username(username: str | None) -> bool:
    """Validate the AdjectiveAnimal## format."""
    return isinstance(username, str) and bool(USERNAME_PATTERN.match(username))


def word_lists() -> dict:
    return {
        "adjectives": list(ADJECTIVES),
        "animals": list(ANIMALS),
        "totalCombinations": len(ADJECTIVES) * len(ANIMALS) * 100,
    }


async def generate_unique_username(
    is_taken: Callable[[str], Awaitable[bool]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> str:
    """Generate a username not yet in use.

    Args:
        is_taken: Async predicate returning True when a username exists.
        max_attempts: Number of candidates to try.

    Returns:
        A free username.

    Raises:
        UsernameGenerationError: If every candidate was taken.
    """
    for _ in range(max_attempts):
        candidate = random_username()
        if not await is_taken(candidate):
            return candidate

    logger.warning("Username generation exhausted %d attempts", max_attempts)
    raise UsernameGenerationError("Failed to generate unique username after multiple attempts")
