# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account models: adult users, subscriptions and child profiles."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learning_adventures.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    utc_now,
)

if TYPE_CHECKING:
    from learning_adventures.infrastructure.database.models.progress import UserLevel


class UserRole(str, Enum):
    """Platform roles."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    PARENT = "PARENT"
    STUDENT = "STUDENT"


class SubscriptionTier(str, Enum):
    FREE = "FREE"
    PREMIUM = "PREMIUM"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    PAST_DUE = "PAST_DUE"


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Adult account (admin, teacher, parent or student)."""

    __tablename__ = "users"

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.STUDENT.value
    )
    grade_level: Mapped[str | None] = mapped_column(String(10), nullable=True)
    image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_verified_adult: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    subscription: Mapped[Subscription | None] = relationship(
        "Subscription", back_populates="user", uselist=False, lazy="selectin"
    )
    children: Mapped[list[ChildProfile]] = relationship(
        "ChildProfile", back_populates="parent", cascade="all, delete-orphan"
    )
    level: Mapped[UserLevel | None] = relationship(
        "UserLevel", uselist=False, lazy="selectin", viewonly=True
    )


class Subscription(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Billing state for a user. Absence means FREE/ACTIVE."""

    __tablename__ = "subscriptions"

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    tier: Mapped[str] = mapped_column(String(20), nullable=False, default=SubscriptionTier.FREE.value)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SubscriptionStatus.ACTIVE.value
    )
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    user: Mapped[User] = relationship("User", back_populates="subscription")


class ChildProfile(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Sub-account owned by a parent and authenticated by username + PIN."""

    __tablename__ = "child_profiles"

    parent_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    pin_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    grade_level: Mapped[str] = mapped_column(String(10), nullable=False)
    avatar_id: Mapped[str] = mapped_column(String(50), nullable=False, default="tiger")
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    parent: Mapped[User] = relationship("User", back_populates="children", lazy="selectin")
    sessions: Mapped[list[ChildSession]] = relationship(
        "ChildSession", back_populates="child", cascade="all, delete-orphan"
    )


class ChildSession(Base, UUIDPrimaryKeyMixin):
    """Server-side record backing a child session cookie."""

    __tablename__ = "child_sessions"

    token: Mapped[str] = mapped_column(String(1024), unique=True, index=True, nullable=False)
    child_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("child_profiles.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    child: Mapped[ChildProfile] = relationship("ChildProfile", back_populates="sessions")
