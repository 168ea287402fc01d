# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Child login and cookie-backed sessions.

A child session is an HS256 JWT signed with the dedicated child secret and
mirrored by a ``child_sessions`` row, so a session can be revoked before the
token expires.

Example:
    >>> service = ChildAuthService(db)
    >>> child, token = await service.login("BraveEagle42", "1234")
    >>> payload = await service.verify_session(token)
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from jose import JWTError, jwt
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.core.config import get_settings
from learning_adventures.core.config.settings import ChildSessionSettings
from learning_adventures.domains.child_auth.pin import is_valid_pin, verify_pin
from learning_adventures.infrastructure.database.models import ChildProfile, ChildSession
from learning_adventures.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class ChildAuthError(Exception):
    """Base exception for child authentication."""

    pass


class ChildLoginValidationError(ChildAuthError):
    """Raised for missing or malformed login input."""

    pass


class ChildInvalidCredentialsError(ChildAuthError):
    """Raised for an unknown username or wrong PIN."""

    def __init__(self) -> None:
        super().__init__("Invalid username or PIN")


class ParentNotVerifiedError(ChildAuthError):
    """Raised when the owning parent has not completed age verification."""

    def __init__(self) -> None:
        super().__init__("Parent account verification required")


@dataclass
class ChildSessionPayload:
    """Claims carried by a child session token."""

    child_id: str
    parent_id: str
    username: str
    grade_level: str


def child_summary(child: ChildProfile) -> dict:
    return {
        "id": child.id,
        "displayName": child.display_name,
        "username": child.username,
        "gradeLevel": child.grade_level,
        "avatarId": child.avatar_id,
    }


class ChildAuthService:
    """PIN login plus session issue, verification and revocation."""

    def __init__(
        self,
        db: AsyncSession,
        settings: ChildSessionSettings | None = None,
    ) -> None:
        self.db = db
        self._settings = settings or get_settings().child_session

    @property
    def session_max_age(self) -> int:
        """Session lifetime in seconds, used for the cookie max-age."""
        return self._settings.expire_hours * 60 * 60

    async def create_session(self, child: ChildProfile) -> str:
        """Issue a session token for a child and persist it.

        Args:
            child: Authenticated child profile.

        Returns:
            Signed session token.
        """
        now = utc_now()
        expires = now + timedelta(hours=self._settings.expire_hours)

        token = jwt.encode(
            {
                "childId": child.id,
                "parentId": child.parent_id,
                "username": child.username,
                "gradeLevel": child.grade_level,
                "iat": int(now.timestamp()),
                "exp": int(expires.timestamp()),
            },
            self._settings.secret.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

        self.db.add(ChildSession(token=token, child_id=child.id, expires=expires))
        await self.db.commit()
        return token

    async def verify_session(self, token: str | None) -> ChildSessionPayload | None:
        """Decode a session token and check the backing row.

        Returns:
            The session payload, or None for bad signature, expired token,
            missing row or expired row.
        """
        if not token:
            return None

        try:
            claims = jwt.decode(
                token,
                self._settings.secret.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except JWTError as e:
            logger.debug("Child session token rejected: %s", str(e))
            return None

        result = await self.db.execute(select(ChildSession).where(ChildSession.token == token))
        session = result.scalar_one_or_none()
        if session is None or ensure_utc(session.expires) < utc_now():
            return None

        try:
            return ChildSessionPayload(
                child_id=claims["childId"],
                parent_id=claims["parentId"],
                username=claims["username"],
                grade_level=claims["gradeLevel"],
            )
        except KeyError:
            return None

    async def delete_session(self, token: str) -> None:
        """Revoke a session. A missing row is not an error."""
        await self.db.execute(delete(ChildSession).where(ChildSession.token == token))
        await self.db.commit()

    async def cleanup_expired_sessions(self) -> int:
        """Delete expired session rows.

        Returns:
            Number of rows removed.
        """
        result = await self.db.execute(delete(ChildSession).where(ChildSession.expires < utc_now()))
        await self.db.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info("Removed %d expired child sessions", removed)
        return removed

    async def login(self, username: str | None, pin: str | None) -> tuple[ChildProfile, str]:
        """Authenticate a child by username and PIN.

        Returns:
            The child profile and a new session token.

        Raises:
            ChildLoginValidationError: Missing username/PIN or malformed PIN.
            ChildInvalidCredentialsError: Unknown username or wrong PIN.
            ParentNotVerifiedError: Parent has not verified their age.
        """
        if not username or not pin:
            raise ChildLoginValidationError("Username and PIN are required")

        if not is_valid_pin(pin):
            raise ChildLoginValidationError("PIN must be exactly 4 digits")

        result = await self.db.execute(select(ChildProfile).where(ChildProfile.username == username))
        child = result.scalar_one_or_none()

        # Same message for unknown user and wrong PIN to prevent enumeration
        if child is None:
            raise ChildInvalidCredentialsError()

        if not child.parent.is_verified_adult:
            raise ParentNotVerifiedError()

        if not verify_pin(pin, child.pin_hash):
            raise ChildInvalidCredentialsError()

        token = await self.create_session(child)

        child.last_login_at = utc_now()
        await self.db.commit()

        logger.info("Child logged in: id=%s", child.id)
        return child, token

    async def get_session_child(self, token: str | None) -> ChildProfile | None:
        """Resolve a session token to its child profile, or None."""
        payload = await self.verify_session(token)
        if payload is None:
            return None

        result = await self.db.execute(select(ChildProfile).where(ChildProfile.id == payload.child_id))
        return result.scalar_one_or_none()
