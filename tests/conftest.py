# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across unit and integration tests:
- A mocked async database session
- Result builders matching the SQLAlchemy result API
- JWT settings and sample users
"""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from pydantic import SecretStr


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    db.get = AsyncMock(return_value=None)
    return db


def make_result(value: Any = None, items: list[Any] | None = None) -> MagicMock:
    """Create a mock result supporting the scalar accessors services use.

    Args:
        value: Returned by scalar(), scalar_one_or_none() and scalars().first().
        items: Returned by scalars().all(); defaults to ``[value]`` when
            value is set, else empty.
    """
    if items is None:
        items = [value] if value is not None else []
    result = MagicMock()
    result.scalar.return_value = value
    result.scalar_one_or_none.return_value = value
    result.scalars.return_value.first.return_value = value
    result.scalars.return_value.all.return_value = items
    result.all.return_value = items
    return result


@pytest.fixture
def result_factory() -> Callable[..., MagicMock]:
    """Provide make_result to tests as a fixture."""
    return make_result


# =============================================================================
# Auth Fixtures
# =============================================================================


@pytest.fixture
def jwt_settings() -> MagicMock:
    """Create mock JWT settings."""
    settings = MagicMock()
    settings.secret_key = SecretStr("test-secret-key-for-jwt-testing")
    settings.algorithm = "HS256"
    settings.access_token_expire_minutes = 30
    settings.refresh_token_expire_days = 7
    return settings


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_user_id() -> str:
    """Provide a sample user ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def sample_user(sample_user_id: str) -> MagicMock:
    """Create a sample student user row."""
    user = MagicMock()
    user.id = sample_user_id
    user.name = "Test Student"
    user.email = "student@example.com"
    user.role = "STUDENT"
    user.grade_level = "3"
    user.image = None
    user.is_verified_adult = False
    user.password_hash = None
    user.created_at = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return user


@pytest.fixture
def sample_parent() -> MagicMock:
    """Create a sample verified parent user row."""
    user = MagicMock()
    user.id = str(uuid4())
    user.name = "Pat Parent"
    user.email = "parent@example.com"
    user.role = "PARENT"
    user.grade_level = None
    user.image = None
    user.is_verified_adult = True
    user.created_at = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return user
