# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

Exports:
    PasswordHasher: Secure password hashing using bcrypt.
    JWTManager: JWT token creation and validation.
    AuthService: Signup, login and token refresh.
"""

from learning_adventures.domains.auth.jwt import JWTManager
from learning_adventures.domains.auth.password import PasswordHasher
from learning_adventures.domains.auth.service import AuthService, is_admin_user

__all__ = [
    "PasswordHasher",
    "JWTManager",
    "AuthService",
    "is_admin_user",
]
