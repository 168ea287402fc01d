# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Gemini client using LiteLLM.

The API key is passed directly to LiteLLM's acompletion() call rather than
through environment variables, so several keys can coexist in one process
(tests, per-request overrides).

Example:
    >>> from learning_adventures.core.llm import LLMClient
    >>> client = LLMClient()
    >>> response = await client.complete("Build a fractions game")
    >>> print(response.content)
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import litellm
from litellm import acompletion

from learning_adventures.core.config.settings import LLMSettings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from an LLM completion.

    Attributes:
        content: The generated text content.
        model: The model that generated the response.
        tokens_input: Number of input tokens used.
        tokens_output: Number of output tokens generated.
        finish_reason: Why generation stopped (stop, length, etc.).
        raw_response: Original response object from LiteLLM.
    """

    content: str
    model: str
    tokens_input: int = 0
    tokens_output: int = 0
    finish_reason: str = "stop"
    raw_response: Optional[object] = field(default=None, repr=False)

    @property
    def total_tokens(self) -> int:
        """Get total tokens used (input + output)."""
        return self.tokens_input + self.tokens_output


class LLMError(Exception):
    """Exception raised when an LLM operation fails.

    Attributes:
        message: Error description.
        model: Model that caused the error.
        error_code: Error code if available.
        original_error: Original exception if any.
    """

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        error_code: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.model = model
        self.error_code = error_code
        self.original_error = original_error
        super().__init__(self.message)


class LLMNotConfiguredError(LLMError):
    """Raised when no usable Gemini API key is configured."""

    def __init__(self) -> None:
        super().__init__(
            message="Gemini API key not configured",
            error_code="MISSING_API_KEY",
        )


def estimate_cost(
    tokens_input: int,
    tokens_output: int,
    settings: Optional[LLMSettings] = None,
) -> float:
    """Estimate the USD cost of a call, rounded to 4 decimals.

    Args:
        tokens_input: Prompt tokens.
        tokens_output: Completion tokens.
        settings: Pricing source. Uses get_settings() if None.

    Returns:
        Estimated cost in USD.
    """
    llm = settings or get_settings().llm
    cost = (tokens_input / 1_000_000) * llm.input_cost_per_million + (
        tokens_output / 1_000_000
    ) * llm.output_cost_per_million
    return round(cost, 4)


class LLMClient:
    """Client for Gemini completions via LiteLLM.

    Attributes:
        model: Model to use, in LiteLLM format (``gemini/<name>``).
        timeout: Request timeout in seconds.
        max_retries: Maximum retry attempts.

    Example:
        >>> client = LLMClient()
        >>> response = await client.complete(prompt="...", max_tokens=8192)
    """

    def __init__(
        self,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        llm_settings: Optional[LLMSettings] = None,
    ):
        """Initialize the LLM client.

        Args:
            model: Override model in LiteLLM format.
            timeout: Request timeout in seconds. Falls back to settings.
            max_retries: Maximum retry attempts. Falls back to settings.
            llm_settings: LLM configuration. Uses get_settings() if None.
        """
        self._settings = llm_settings or get_settings().llm
        self._model = model or self._settings.litellm_model
        self._timeout = timeout or self._settings.request_timeout
        self._max_retries = max_retries if max_retries is not None else self._settings.max_retries

        litellm.set_verbose = False
        litellm.drop_params = True

        logger.debug(
            "LLMClient initialized with model=%s, timeout=%.1fs, max_retries=%d",
            self._model,
            self._timeout,
            self._max_retries,
        )

    @property
    def model(self) -> str:
        """Model identifier in LiteLLM format."""
        return self._model

    @property
    def is_configured(self) -> bool:
        """Whether the configured API key is usable."""
        return self._settings.is_configured

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs,
    ) -> LLMResponse:
        """Generate a completion for the given prompt.

        Args:
            prompt: User prompt text.
            system_prompt: Optional system prompt to set context.
            temperature: Sampling temperature (0-2).
            max_tokens: Maximum tokens to generate. Defaults to settings.
            **kwargs: Additional LiteLLM parameters.

        Returns:
            LLMResponse with generated content and metadata.

        Raises:
            LLMNotConfiguredError: If no API key is configured.
            LLMError: If generation fails after retries.
            ValueError: If prompt is empty.
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        if not self.is_configured:
            raise LLMNotConfiguredError()

        chat_messages: list[dict[str, str]] = []
        if system_prompt:
            chat_messages.append({"role": "system", "content": system_prompt})
        chat_messages.append({"role": "user", "content": prompt})

        try:
            response = await acompletion(
                model=self._model,
                messages=chat_messages,
                temperature=temperature,
                max_tokens=max_tokens or self._settings.max_output_tokens,
                timeout=self._timeout,
                num_retries=self._max_retries,
                api_key=self._settings.google_api_key.get_secret_value(),
                **kwargs,
            )

            content = response.choices[0].message.content or ""
            finish_reason = response.choices[0].finish_reason or "stop"

            tokens_input = getattr(response.usage, "prompt_tokens", 0) or 0
            tokens_output = getattr(response.usage, "completion_tokens", 0) or 0

            logger.debug(
                "Completion generated: model=%s, tokens_in=%d, tokens_out=%d",
                self._model,
                tokens_input,
                tokens_output,
            )

            return LLMResponse(
                content=content,
                model=self._model,
                tokens_input=tokens_input,
                tokens_output=tokens_output,
                finish_reason=finish_reason,
                raw_response=response,
            )

        except Exception as e:
            logger.error(
                "Completion failed: model=%s, prompt_length=%d, error=%s",
                self._model,
                len(prompt),
                str(e),
            )
            raise LLMError(
                message=f"Completion failed: {str(e)}",
                model=self._model,
                original_error=e,
            ) from e
