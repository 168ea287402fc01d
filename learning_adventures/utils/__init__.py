# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for Learning Adventures.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations
- security: Identifier validation for file-system paths
"""

from learning_adventures.utils.datetime import (
    end_of_day,
    end_of_month,
    end_of_week,
    ensure_utc,
    start_of_day,
    start_of_month,
    start_of_week,
    utc_now,
    utc_today,
)
from learning_adventures.utils.logging import (
    bind_context,
    clear_context,
    get_logger,
    setup_logging,
)
from learning_adventures.utils.security import (
    InvalidIdentifierError,
    sanitize_identifier,
    slugify,
    validate_identifier,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    # Datetime
    "utc_now",
    "utc_today",
    "ensure_utc",
    "start_of_day",
    "end_of_day",
    "start_of_week",
    "end_of_week",
    "start_of_month",
    "end_of_month",
    # Security
    "InvalidIdentifierError",
    "validate_identifier",
    "sanitize_identifier",
    "slugify",
]
