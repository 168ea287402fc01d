# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for JWT token utilities.

Tests the JWTManager class and token operations.
"""

import time
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from jose import jwt
from pydantic import SecretStr

from learning_adventures.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPair,
    TokenPayload,
)


@pytest.fixture
def jwt_manager(jwt_settings: MagicMock) -> JWTManager:
    """Create JWT manager with test settings."""
    return JWTManager(jwt_settings)


class TestJWTManager:
    """Tests for JWTManager class."""

    def test_create_token_pair_returns_valid_tokens(self, jwt_manager: JWTManager) -> None:
        """Test that create_token_pair returns a valid token pair."""
        result = jwt_manager.create_token_pair(
            user_id=str(uuid4()), role="PARENT", email="parent@example.com"
        )

        assert isinstance(result, TokenPair)
        assert result.access_token
        assert result.refresh_token
        assert result.token_type == "Bearer"
        assert result.expires_in == 30 * 60
        assert result.refresh_expires_in == 7 * 24 * 60 * 60

    def test_access_token_carries_role_and_email(self, jwt_manager: JWTManager) -> None:
        """Test that access token claims include role and email."""
        user_id = str(uuid4())
        pair = jwt_manager.create_token_pair(user_id, role="TEACHER", email="t@example.com")

        payload = jwt_manager.decode_token(pair.access_token, expected_type="access")

        assert isinstance(payload, TokenPayload)
        assert payload.sub == user_id
        assert payload.type == "access"
        assert payload.role == "TEACHER"
        assert payload.email == "t@example.com"

    def test_refresh_token_has_no_role(self, jwt_manager: JWTManager) -> None:
        pair = jwt_manager.create_token_pair(str(uuid4()), role="ADMIN", email="a@example.com")

        payload = jwt_manager.decode_token(pair.refresh_token, expected_type="refresh")

        assert payload.type == "refresh"
        assert payload.role is None
        assert payload.email is None

    def test_wrong_token_type_raises(self, jwt_manager: JWTManager) -> None:
        """Test that a refresh token is rejected where an access token is expected."""
        pair = jwt_manager.create_token_pair(str(uuid4()))

        with pytest.raises(InvalidTokenError, match="Expected access token"):
            jwt_manager.decode_token(pair.refresh_token, expected_type="access")

    def test_expired_token_raises(self, jwt_settings: MagicMock) -> None:
        """Test that an expired token raises TokenExpiredError."""
        now = int(time.time())
        token = jwt.encode(
            {"sub": "u", "type": "access", "exp": now - 10, "iat": now - 100, "jti": "x"},
            jwt_settings.secret_key.get_secret_value(),
            algorithm="HS256",
        )

        with pytest.raises(TokenExpiredError):
            JWTManager(jwt_settings).decode_token(token)

    def test_wrong_secret_raises(self, jwt_manager: JWTManager) -> None:
        """Test that a token signed with another secret is invalid."""
        other_settings = MagicMock()
        other_settings.secret_key = SecretStr("another-secret")
        other_settings.algorithm = "HS256"
        other_settings.access_token_expire_minutes = 30
        other_settings.refresh_token_expire_days = 7
        pair = JWTManager(other_settings).create_token_pair(str(uuid4()))

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(pair.access_token)

    def test_garbage_token_raises(self, jwt_manager: JWTManager) -> None:
        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token("not-a-jwt")

    def test_verify_token(self, jwt_manager: JWTManager) -> None:
        pair = jwt_manager.create_token_pair(str(uuid4()))

        assert jwt_manager.verify_token(pair.access_token, "access") is True
        assert jwt_manager.verify_token(pair.access_token, "refresh") is False
        assert jwt_manager.verify_token("garbage") is False

    def test_hash_token_is_stable(self) -> None:
        """Test that token hashes are deterministic SHA-256 hex digests."""
        digest = JWTManager.hash_token("abc")

        assert digest == JWTManager.hash_token("abc")
        assert len(digest) == 64
        assert digest != JWTManager.hash_token("abd")
