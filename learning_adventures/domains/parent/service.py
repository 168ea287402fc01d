# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent dashboard: child profile management and age verification.

Every child lookup is scoped to the requesting parent, so a child owned by
someone else is indistinguishable from a missing one.
"""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.domains.child_auth.pin import hash_pin, is_valid_pin
from learning_adventures.domains.child_auth.username import generate_unique_username
from learning_adventures.infrastructure.database.models import ChildProfile, User, UserRole

logger = logging.getLogger(__name__)

VALID_GRADES = ("K", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11", "12")

AVATAR_IDS = (
    "tiger", "dragon", "eagle", "dolphin", "lion", "panda", "fox", "owl",
    "penguin", "koala", "rocket", "star", "rainbow", "wizard", "robot", "unicorn",
)
DEFAULT_AVATAR = "tiger"


class ParentServiceError(Exception):
    """Base exception for parent dashboard operations."""

    pass


class NotAParentError(ParentServiceError):
    """Raised when a non-parent account calls a parent operation."""

    pass


class ParentNotVerifiedError(ParentServiceError):
    """Raised when an unverified parent tries to add a child."""

    pass


class ChildNotFoundError(ParentServiceError):
    """Raised when the child does not exist or belongs to another parent."""

    def __init__(self) -> None:
        super().__init__("Child not found")


class ChildValidationError(ParentServiceError):
    """Raised for invalid child profile input."""

    pass


def serialize_child(child: ChildProfile) -> dict[str, Any]:
    return {
        "id": child.id,
        "displayName": child.display_name,
        "username": child.username,
        "gradeLevel": child.grade_level,
        "avatarId": child.avatar_id,
        "createdAt": child.created_at.isoformat() if child.created_at else None,
        "lastLoginAt": child.last_login_at.isoformat() if child.last_login_at else None,
    }


class ParentService:
    """Service for parent-owned child profiles."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _require_parent(self, parent: User, action: str) -> None:
        if parent.role != UserRole.PARENT.value:
            raise NotAParentError(f"Only parent accounts can {action}")

    async def _username_taken(self, username: str) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(ChildProfile).where(ChildProfile.username == username)
        )
        return (result.scalar() or 0) > 0

    async def list_children(self, parent: User) -> dict[str, Any]:
        """List a parent's children, newest first.

        Raises:
            NotAParentError: If the user is not a parent.
        """
        self._require_parent(parent, "manage children")

        result = await self.db.execute(
            select(ChildProfile)
            .where(ChildProfile.parent_id == parent.id)
            .order_by(ChildProfile.created_at.desc())
        )
        children = result.scalars().all()

        return {
            "children": [serialize_child(c) for c in children],
            "count": len(children),
            "isVerifiedAdult": bool(parent.is_verified_adult),
        }

    async def create_child(
        self,
        parent: User,
        display_name: str | None,
        grade_level: str | None,
        pin: str | None,
        avatar_id: str | None = None,
    ) -> ChildProfile:
        """Create a child profile with a generated username.

        Raises:
            NotAParentError: If the user is not a parent.
            ParentNotVerifiedError: If the parent is not age-verified.
            ChildValidationError: For missing or invalid fields.
        """
        self._require_parent(parent, "create children")

        if not parent.is_verified_adult:
            raise ParentNotVerifiedError("Parent verification required before adding children")

        if not display_name or not grade_level or not pin:
            raise ChildValidationError("Display name, grade level, and PIN are required")

        if not is_valid_pin(pin):
            raise ChildValidationError("PIN must be exactly 4 digits")

        if grade_level not in VALID_GRADES:
            raise ChildValidationError("Invalid grade level")

        if avatar_id and avatar_id not in AVATAR_IDS:
            raise ChildValidationError("Invalid avatar")

        username = await generate_unique_username(self._username_taken)

        child = ChildProfile(
            parent_id=parent.id,
            display_name=display_name,
            username=username,
            pin_hash=hash_pin(pin),
            grade_level=grade_level,
            avatar_id=avatar_id or DEFAULT_AVATAR,
        )
        self.db.add(child)
        await self.db.commit()
        await self.db.refresh(child)

        logger.info("Child profile created: id=%s, parent=%s", child.id, parent.id)
        return child

    async def get_child(self, parent: User, child_id: str) -> ChildProfile:
        """Fetch a child owned by ``parent``.

        Raises:
            ChildNotFoundError: If missing or owned by someone else.
        """
        result = await self.db.execute(
            select(ChildProfile).where(
                ChildProfile.id == child_id,
                ChildProfile.parent_id == parent.id,
            )
        )
        child = result.scalar_one_or_none()
        if child is None:
            raise ChildNotFoundError()
        return child

    async def update_child(
        self,
        parent: User,
        child_id: str,
        display_name: str | None = None,
        grade_level: str | None = None,
        avatar_id: str | None = None,
        pin: str | None = None,
    ) -> ChildProfile:
        """Update child fields; a new PIN is re-hashed.

        Raises:
            ChildNotFoundError: If missing or owned by someone else.
            ChildValidationError: For invalid values or an empty update.
        """
        child = await self.get_child(parent, child_id)

        updates: dict[str, Any] = {}
        if display_name:
            updates["display_name"] = display_name

        if grade_level:
            if grade_level not in VALID_GRADES:
                raise ChildValidationError("Invalid grade level")
            updates["grade_level"] = grade_level

        if avatar_id:
            if avatar_id not in AVATAR_IDS:
                raise ChildValidationError("Invalid avatar")
            updates["avatar_id"] = avatar_id

        if pin:
            if not is_valid_pin(pin):
                raise ChildValidationError("PIN must be exactly 4 digits")
            updates["pin_hash"] = hash_pin(pin)

        if not updates:
            raise ChildValidationError("No valid fields to update")

        for field, value in updates.items():
            setattr(child, field, value)

        await self.db.commit()
        await self.db.refresh(child)

        logger.info("Child profile updated: id=%s, fields=%s", child.id, sorted(updates))
        return child

    async def delete_child(self, parent: User, child_id: str) -> None:
        """Delete a child profile and its sessions.

        Raises:
            ChildNotFoundError: If missing or owned by someone else.
        """
        child = await self.get_child(parent, child_id)
        await self.db.delete(child)
        await self.db.commit()
        logger.info("Child profile deleted: id=%s, parent=%s", child_id, parent.id)

    async def verify_parent(self, parent: User) -> User:
        """Mark the parent as a verified adult.

        Raises:
            NotAParentError: If the user is not a parent.
        """
        if parent.role != UserRole.PARENT.value:
            raise NotAParentError("Only parent accounts can be verified")

        parent.is_verified_adult = True
        await self.db.commit()
        await self.db.refresh(parent)

        logger.info("Parent verified: id=%s", parent.id)
        return parent
