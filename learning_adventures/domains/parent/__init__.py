# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent dashboard domain."""

from learning_adventures.domains.parent.service import (
    AVATAR_IDS,
    VALID_GRADES,
    ChildNotFoundError,
    ChildValidationError,
    NotAParentError,
    ParentNotVerifiedError,
    ParentService,
    ParentServiceError,
    serialize_child,
)

__all__ = [
    "AVATAR_IDS",
    "VALID_GRADES",
    "ChildNotFoundError",
    "ChildValidationError",
    "NotAParentError",
    "ParentNotVerifiedError",
    "ParentService",
    "ParentServiceError",
    "serialize_child",
]
