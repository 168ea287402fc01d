# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions for goals and calendar events."""


class PlanningServiceError(Exception):
    """Base exception for planning operations."""

    pass


class PlanningNotFoundError(PlanningServiceError):
    """Goal or event does not exist."""

    pass


class PlanningForbiddenError(PlanningServiceError):
    """Goal or event belongs to another user."""

    def __init__(self) -> None:
        super().__init__("Forbidden")


class PlanningValidationError(PlanningServiceError):
    """Invalid goal or event input."""

    pass
