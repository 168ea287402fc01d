# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for password hashing utilities."""

import pytest

from learning_adventures.domains.auth.password import (
    PasswordHasher,
    hash_password,
    verify_password,
)


@pytest.fixture
def hasher() -> PasswordHasher:
    """Create a fast hasher for tests."""
    return PasswordHasher(rounds=4)


class TestPasswordHasher:
    """Tests for PasswordHasher class."""

    def test_hash_produces_bcrypt_string(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("secret-password")

        assert hashed.startswith("$2")
        assert hashed != "secret-password"

    def test_hash_is_salted(self, hasher: PasswordHasher) -> None:
        """Test that hashing the same password twice gives different hashes."""
        assert hasher.hash("same") != hasher.hash("same")

    def test_verify_correct_password(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("correct horse")

        assert hasher.verify("correct horse", hashed) is True

    def test_verify_wrong_password(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("correct horse")

        assert hasher.verify("battery staple", hashed) is False

    def test_empty_password_raises(self, hasher: PasswordHasher) -> None:
        with pytest.raises(ValueError, match="cannot be empty"):
            hasher.hash("")

    def test_verify_empty_inputs(self, hasher: PasswordHasher) -> None:
        assert hasher.verify("", "$2b$04$abc") is False
        assert hasher.verify("pw", "") is False

    def test_verify_malformed_hash(self, hasher: PasswordHasher) -> None:
        """Test that a malformed hash fails verification instead of raising."""
        assert hasher.verify("pw", "not-a-bcrypt-hash") is False

    def test_rounds_property(self) -> None:
        assert PasswordHasher(rounds=10).rounds == 10


class TestModuleHelpers:
    """Tests for module-level convenience functions."""

    def test_hash_and_verify_roundtrip(self) -> None:
        hashed = hash_password("module-level")

        assert verify_password("module-level", hashed) is True
        assert verify_password("other", hashed) is False
