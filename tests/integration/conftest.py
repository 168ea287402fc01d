# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API tests against the full application.

The database session is replaced with the shared ``mock_db`` fixture and
rate limiting is switched off; authentication runs through the real
middleware with tokens signed by the configured JWT settings.
"""

from collections.abc import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from learning_adventures.api.app import create_app
from learning_adventures.api.dependencies import get_db, get_password_hasher
from learning_adventures.api.middleware.rate_limit import limiter
from learning_adventures.core.config import get_settings
from learning_adventures.domains.auth.jwt import JWTManager
from learning_adventures.domains.auth.password import PasswordHasher


@pytest.fixture
def app(mock_db) -> Iterator[FastAPI]:
    """Application with the database and password hasher overridden."""
    application = create_app()

    async def override_db():
        yield mock_db

    application.dependency_overrides[get_db] = override_db
    application.dependency_overrides[get_password_hasher] = lambda: PasswordHasher(rounds=4)

    limiter.enabled = False
    yield application
    limiter.enabled = True
    application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client; the lifespan (database pool) is not started."""
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build an Authorization header for a user id, role and email."""
    manager = JWTManager(get_settings().jwt)

    def build(user_id: str, role: str = "STUDENT", email: str = "student@example.com") -> dict[str, str]:
        tokens = manager.create_token_pair(user_id, role=role, email=email)
        return {"Authorization": f"Bearer {tokens.access_token}"}

    return build
