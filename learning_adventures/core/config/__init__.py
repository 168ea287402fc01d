# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for Learning Adventures.

Example:
    >>> from learning_adventures.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from learning_adventures.core.config.settings import (
    APISettings,
    ChildSessionSettings,
    CORSSettings,
    DatabaseSettings,
    JWTSettings,
    LLMSettings,
    PlatformSettings,
    RateLimitSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "APISettings",
    "ChildSessionSettings",
    "CORSSettings",
    "DatabaseSettings",
    "JWTSettings",
    "LLMSettings",
    "PlatformSettings",
    "RateLimitSettings",
    "StorageSettings",
]
