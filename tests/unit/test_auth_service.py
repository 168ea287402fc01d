# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the adult account AuthService."""

import pytest

from learning_adventures.domains.auth.jwt import JWTManager
from learning_adventures.domains.auth.password import PasswordHasher
from learning_adventures.domains.auth.service import (
    AuthService,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    RestrictedDomainError,
    SignupValidationError,
    TokenRefreshError,
    is_admin_user,
    user_summary,
)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def jwt_manager(jwt_settings) -> JWTManager:
    return JWTManager(jwt_settings)


@pytest.fixture
def auth_service(mock_db, jwt_manager, hasher) -> AuthService:
    """Create auth service with mock database and fast hasher."""
    return AuthService(mock_db, jwt_manager, hasher)


class TestIsAdminUser:
    """Tests for admin detection."""

    def test_admin_role(self) -> None:
        assert is_admin_user("ADMIN", "someone@example.com") is True

    def test_admin_domain(self) -> None:
        assert is_admin_user("TEACHER", "Boss@LearningAdventures.org") is True

    def test_regular_user(self) -> None:
        assert is_admin_user("STUDENT", "kid@example.com") is False
        assert is_admin_user(None, None) is False


class TestSignup:
    """Tests for AuthService.signup."""

    @pytest.mark.asyncio
    async def test_signup_creates_student(self, auth_service, mock_db, result_factory, hasher) -> None:
        mock_db.execute.return_value = result_factory(None)

        user = await auth_service.signup("Ada", "ada@example.com", "password123", grade_level="4")

        assert user.role == "STUDENT"
        assert user.grade_level == "4"
        assert hasher.verify("password123", user.password_hash)
        mock_db.add.assert_called_once_with(user)

    @pytest.mark.asyncio
    async def test_unknown_role_becomes_student(self, auth_service, mock_db, result_factory) -> None:
        """Test that ADMIN cannot be requested through signup."""
        mock_db.execute.return_value = result_factory(None)

        user = await auth_service.signup("Eve", "eve@example.com", "password123", role="ADMIN")

        assert user.role == "STUDENT"

    @pytest.mark.asyncio
    async def test_parent_has_no_grade(self, auth_service, mock_db, result_factory) -> None:
        mock_db.execute.return_value = result_factory(None)

        user = await auth_service.signup(
            "Pat", "pat@example.com", "password123", role="PARENT", grade_level="4"
        )

        assert user.role == "PARENT"
        assert user.grade_level is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("name", "email", "password", "message"),
        [
            ("", "a@example.com", "password123", "are required"),
            ("Ada", "not-an-email", "password123", "Invalid email format"),
            ("Ada", "a@example.com", "short", "at least 8 characters"),
        ],
    )
    async def test_validation(self, auth_service, name, email, password, message) -> None:
        with pytest.raises(SignupValidationError, match=message):
            await auth_service.signup(name, email, password)

    @pytest.mark.asyncio
    async def test_admin_domain_restricted(self, auth_service) -> None:
        with pytest.raises(RestrictedDomainError):
            await auth_service.signup("Mal", "mal@learningadventures.org", "password123")

    @pytest.mark.asyncio
    async def test_duplicate_email(self, auth_service, mock_db, result_factory, sample_user) -> None:
        mock_db.execute.return_value = result_factory(sample_user)

        with pytest.raises(EmailAlreadyExistsError):
            await auth_service.signup("Ada", "student@example.com", "password123")


class TestLogin:
    """Tests for AuthService.login and refresh_tokens."""

    @pytest.mark.asyncio
    async def test_login_success(
        self, auth_service, mock_db, result_factory, sample_user, hasher, jwt_manager
    ) -> None:
        sample_user.password_hash = hasher.hash("password123")
        mock_db.execute.return_value = result_factory(sample_user)

        user, tokens = await auth_service.login("student@example.com", "password123")

        assert user is sample_user
        payload = jwt_manager.decode_token(tokens.access_token, expected_type="access")
        assert payload.sub == sample_user.id
        assert payload.role == "STUDENT"
        assert tokens.expires_in == 30 * 60

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service, mock_db, result_factory, sample_user, hasher) -> None:
        sample_user.password_hash = hasher.hash("password123")
        mock_db.execute.return_value = result_factory(sample_user)

        with pytest.raises(InvalidCredentialsError, match="Invalid email or password"):
            await auth_service.login("student@example.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_account_without_password(self, auth_service, mock_db, result_factory, sample_user) -> None:
        mock_db.execute.return_value = result_factory(sample_user)

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("student@example.com", "password123")

    @pytest.mark.asyncio
    async def test_refresh(self, auth_service, mock_db, result_factory, sample_user, jwt_manager) -> None:
        pair = jwt_manager.create_token_pair(sample_user.id)
        mock_db.execute.return_value = result_factory(sample_user)

        tokens = await auth_service.refresh_tokens(pair.refresh_token)

        assert jwt_manager.decode_token(tokens.access_token).sub == sample_user.id

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, auth_service, sample_user, jwt_manager) -> None:
        pair = jwt_manager.create_token_pair(sample_user.id)

        with pytest.raises(TokenRefreshError):
            await auth_service.refresh_tokens(pair.access_token)

    @pytest.mark.asyncio
    async def test_refresh_unknown_user(self, auth_service, mock_db, result_factory, jwt_manager) -> None:
        pair = jwt_manager.create_token_pair("gone-user")
        mock_db.execute.return_value = result_factory(None)

        with pytest.raises(TokenRefreshError, match="User not found"):
            await auth_service.refresh_tokens(pair.refresh_token)


def test_user_summary(sample_user) -> None:
    summary = user_summary(sample_user)

    assert summary["email"] == "student@example.com"
    assert summary["createdAt"] == "2025-01-01T00:00:00+00:00"
