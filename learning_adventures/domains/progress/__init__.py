# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Adventure progress and achievements."""

from learning_adventures.domains.progress.achievements import (
    AchievementService,
    evaluate_achievements,
)
from learning_adventures.domains.progress.service import (
    ProgressNotFoundError,
    ProgressService,
    ProgressServiceError,
    ProgressValidationError,
    calculate_user_stats,
)

__all__ = [
    "AchievementService",
    "evaluate_achievements",
    "ProgressNotFoundError",
    "ProgressService",
    "ProgressServiceError",
    "ProgressValidationError",
    "calculate_user_stats",
]
