# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service for adult accounts.

Handles:
- Self-service signup (admin accounts cannot self-register)
- Email/password login issuing JWT token pairs
- Refresh token exchange

Example:
    >>> auth_service = AuthService(db, jwt_manager)
    >>> user = await auth_service.signup(name="Ada", email="ada@example.com", password="...")
    >>> tokens = await auth_service.login("ada@example.com", "...")
"""

import logging
import re

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.core.config import get_settings
from learning_adventures.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPair,
)
from learning_adventures.domains.auth.password import PasswordHasher
from learning_adventures.infrastructure.database.models import User, UserRole

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8
SELF_SERVICE_ROLES = {UserRole.STUDENT.value, UserRole.PARENT.value, UserRole.TEACHER.value}


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when email or password is wrong."""

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class SignupValidationError(AuthenticationError):
    """Raised when signup input is incomplete or malformed."""

    pass


class RestrictedDomainError(AuthenticationError):
    """Raised when someone tries to self-register with the admin domain."""

    pass


class EmailAlreadyExistsError(AuthenticationError):
    """Raised when the signup email is already registered."""

    pass


class TokenRefreshError(AuthenticationError):
    """Raised when a refresh token cannot be exchanged."""

    pass


def is_admin_user(role: str | None, email: str | None) -> bool:
    """Check admin status by role or by the admin email domain.

    Args:
        role: Stored role.
        email: Account email.

    Returns:
        True for ADMIN role or an email ending with the admin domain.
    """
    if role == UserRole.ADMIN.value:
        return True
    domain = get_settings().platform.admin_email_domain
    return bool(email) and email.lower().endswith(domain)


def user_summary(user: User) -> dict:
    """Public representation of a user account."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "gradeLevel": user.grade_level,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


class AuthService:
    """Authentication service for adult accounts.

    Attributes:
        _db: Database session for queries.
        _jwt_manager: JWT token manager.
        _hasher: Password hasher.
    """

    def __init__(
        self,
        db: AsyncSession,
        jwt_manager: JWTManager,
        hasher: PasswordHasher | None = None,
    ) -> None:
        self._db = db
        self._jwt_manager = jwt_manager
        self._hasher = hasher or PasswordHasher(rounds=12)

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self._db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user(self, user_id: str) -> User | None:
        result = await self._db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def signup(
        self,
        name: str | None,
        email: str | None,
        password: str | None,
        role: str | None = None,
        grade_level: str | None = None,
    ) -> User:
        """Register a new adult account.

        Args:
            name: Display name.
            email: Unique email address.
            password: Plain text password (at least 8 characters).
            role: Requested role; anything outside STUDENT/PARENT/TEACHER
                becomes STUDENT.
            grade_level: Stored only for students.

        Returns:
            The created User.

        Raises:
            SignupValidationError: Missing fields, bad email or short password.
            RestrictedDomainError: Email uses the admin domain.
            EmailAlreadyExistsError: Email is already registered.
        """
        if not name or not email or not password:
            raise SignupValidationError("Name, email, and password are required")

        if not EMAIL_PATTERN.match(email):
            raise SignupValidationError("Invalid email format")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise SignupValidationError("Password must be at least 8 characters long")

        if email.lower().endswith(get_settings().platform.admin_email_domain):
            raise RestrictedDomainError(
                "Registration with this domain is restricted. Please contact your administrator."
            )

        if await self.get_user_by_email(email) is not None:
            raise EmailAlreadyExistsError("User with this email already exists")

        safe_role = role if role in SELF_SERVICE_ROLES else UserRole.STUDENT.value

        user = User(
            name=name,
            email=email,
            password_hash=self._hasher.hash(password),
            role=safe_role,
            grade_level=grade_level if safe_role == UserRole.STUDENT.value else None,
        )
        self._db.add(user)
        await self._db.commit()
        await self._db.refresh(user)

        logger.info("User registered: id=%s, role=%s", user.id, user.role)
        return user

    async def login(self, email: str, password: str) -> tuple[User, TokenPair]:
        """Authenticate with email and password.

        Returns:
            The user and a fresh token pair.

        Raises:
            InvalidCredentialsError: Unknown email, no password set, or wrong password.
        """
        user = await self.get_user_by_email(email) if email else None
        if user is None or not user.password_hash:
            raise InvalidCredentialsError()

        if not self._hasher.verify(password, user.password_hash):
            logger.info("Failed login attempt for user %s", user.id)
            raise InvalidCredentialsError()

        tokens = self._jwt_manager.create_token_pair(
            user_id=user.id, role=user.role, email=user.email
        )
        logger.info("User logged in: id=%s", user.id)
        return user, tokens

    async def refresh_tokens(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        Raises:
            TokenRefreshError: If the token is invalid, expired, or the user is gone.
        """
        try:
            payload = self._jwt_manager.decode_token(refresh_token, expected_type="refresh")
        except (TokenExpiredError, InvalidTokenError) as e:
            raise TokenRefreshError(str(e)) from e

        user = await self.get_user(payload.sub)
        if user is None:
            raise TokenRefreshError("User not found")

        return self._jwt_manager.create_token_pair(
            user_id=user.id, role=user.role, email=user.email
        )
