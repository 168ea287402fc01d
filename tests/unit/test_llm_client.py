# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the LiteLLM client wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import SecretStr

from learning_adventures.core.llm import (
    LLMClient,
    LLMError,
    LLMNotConfiguredError,
    estimate_cost,
)


@pytest.fixture
def llm_settings() -> MagicMock:
    settings = MagicMock()
    settings.litellm_model = "gemini/gemini-test"
    settings.request_timeout = 30.0
    settings.max_retries = 1
    settings.max_output_tokens = 4096
    settings.google_api_key = SecretStr("test-key")
    settings.is_configured = True
    settings.input_cost_per_million = 1.25
    settings.output_cost_per_million = 5.0
    return settings


def fake_completion(content: str = "<html></html>") -> MagicMock:
    response = MagicMock()
    response.choices[0].message.content = content
    response.choices[0].finish_reason = "stop"
    response.usage.prompt_tokens = 12
    response.usage.completion_tokens = 34
    return response


def test_estimate_cost(llm_settings) -> None:
    assert estimate_cost(1_000_000, 1_000_000, llm_settings) == 6.25
    assert estimate_cost(0, 0, llm_settings) == 0.0


class TestLLMClient:
    """Tests for LLMClient.complete."""

    @pytest.mark.asyncio
    async def test_complete(self, llm_settings) -> None:
        client = LLMClient(llm_settings=llm_settings)

        with patch(
            "learning_adventures.core.llm.client.acompletion",
            new=AsyncMock(return_value=fake_completion()),
        ) as mock_completion:
            response = await client.complete("Build a fractions game", system_prompt="Be kind")

        assert response.content == "<html></html>"
        assert response.total_tokens == 46
        kwargs = mock_completion.await_args.kwargs
        assert kwargs["model"] == "gemini/gemini-test"
        assert kwargs["api_key"] == "test-key"
        assert kwargs["max_tokens"] == 4096
        assert kwargs["messages"][0] == {"role": "system", "content": "Be kind"}

    @pytest.mark.asyncio
    async def test_empty_prompt(self, llm_settings) -> None:
        with pytest.raises(ValueError):
            await LLMClient(llm_settings=llm_settings).complete("   ")

    @pytest.mark.asyncio
    async def test_not_configured(self, llm_settings) -> None:
        llm_settings.is_configured = False

        with pytest.raises(LLMNotConfiguredError) as exc_info:
            await LLMClient(llm_settings=llm_settings).complete("Build a game")

        assert exc_info.value.error_code == "MISSING_API_KEY"

    @pytest.mark.asyncio
    async def test_provider_error_wrapped(self, llm_settings) -> None:
        client = LLMClient(llm_settings=llm_settings)

        with patch(
            "learning_adventures.core.llm.client.acompletion",
            new=AsyncMock(side_effect=RuntimeError("quota exceeded")),
        ):
            with pytest.raises(LLMError, match="quota exceeded") as exc_info:
                await client.complete("Build a game")

        assert isinstance(exc_info.value.original_error, RuntimeError)
