"""Async Claude API client for single-shot text generation."""

from __future__ import annotations

import logging
from typing import Any

import anthropic

from src.config import settings

logger = logging.getLogger(__name__)

_client: anthropic.AsyncAnthropic | None = None


def _get_client() -> anthropic.AsyncAnthropic:
    """Lazily initialize the Anthropic client."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


async def complete_text(
    messages: list[dict[str, Any]],
    *,
    system: str | None = None,
    model: str | None = None,
    max_tokens: int | None = None,
) -> str:
    """Single-shot Claude call — no tools, no streaming.

    Used for reflection and digest summarization, where one prompt
    produces one block of text.
    """
    client = _get_client()
    kwargs: dict[str, Any] = {
        "model": model or settings.chat_model,
        "max_tokens": max_tokens or settings.max_tokens,
        "messages": messages,
    }
    if system is not None:
        kwargs["system"] = system
    response = await client.messages.create(**kwargs)
    return response.content[0].text


class AnthropicGenerator:
    """TextGenerator that sends a prompt to one Claude model."""

    def __init__(self, model: str, max_tokens: int | None = None) -> None:
        self._model = model
        self._max_tokens = max_tokens

    @property
    def name(self) -> str:
        return self._model

    async def generate(self, prompt: str) -> str:
        return await complete_text(
            [{"role": "user", "content": prompt}],
            model=self._model,
            max_tokens=self._max_tokens,
        )
