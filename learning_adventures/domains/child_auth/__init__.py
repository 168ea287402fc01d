# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Child profile authentication: PINs, usernames and sessions."""

from learning_adventures.domains.child_auth.pin import hash_pin, is_valid_pin, verify_pin
from learning_adventures.domains.child_auth.service import (
    ChildAuthService,
    ChildSessionPayload,
    child_summary,
)
from learning_adventures.domains.child_auth.username import (
    generate_unique_username,
    is_valid_username,
)

__all__ = [
    "ChildAuthService",
    "ChildSessionPayload",
    "child_summary",
    "hash_pin",
    "is_valid_pin",
    "verify_pin",
    "generate_unique_username",
    "is_valid_username",
]
