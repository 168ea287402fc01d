# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""4-digit PIN validation and hashing for child profiles."""

import re

from learning_adventures.core.config import get_settings
from learning_adventures.domains.auth.password import PasswordHasher

PIN_PATTERN = re.compile(r"[0-9]{4}")


class InvalidPinError(ValueError):
    """Raised when a PIN is not exactly 4 digits."""

    def __init__(self) -> None:
        super().__init__("PIN must be exactly 4 digits")


def is_valid_pin(pin: str | None) -> bool:
    """Return True when ``pin`` is exactly four ASCII digits."""
    return isinstance(pin, str) and bool(PIN_PATTERN.fullmatch(pin))


def _pin_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().child_session.pin_rounds)


def hash_pin(pin: str) -> str:
    """Hash a PIN for storage.

    Raises:
        InvalidPinError: If the PIN is not 4 digits.
    """
    if not is_valid_pin(pin):
        raise InvalidPinError()
    return _pin_hasher().hash(pin)


def verify_pin(pin: str | None, pin_hash: str | None) -> bool:
    """Check a PIN against its hash. Bad input yields False."""
    if not pin or not pin_hash:
        return False
    return _pin_hasher().verify(pin, pin_hash)
