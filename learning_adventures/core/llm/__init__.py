# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LLM access through LiteLLM (Gemini)."""

from learning_adventures.core.llm.client import (
    LLMClient,
    LLMError,
    LLMNotConfiguredError,
    LLMResponse,
    estimate_cost,
)

__all__ = [
    "LLMClient",
    "LLMError",
    "LLMNotConfiguredError",
    "LLMResponse",
    "estimate_cost",
]
