"""ModelRouter — sends a prompt to the first generator that answers."""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from src.config import Settings

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Every configured text generator failed."""


@runtime_checkable
class TextGenerator(Protocol):
    """A single model or provider that turns a prompt into text."""

    @property
    def name(self) -> str: ...

    async def generate(self, prompt: str) -> str: ...


@runtime_checkable
class RequestRouter(Protocol):
    """What the reflection pipeline needs from an LLM layer."""

    async def route_request(self, prompt: str) -> str: ...


class ModelRouter:
    """Tries each generator in order until one returns non-empty text.

    Args:
        generators: Generators in preference order.
    """

    def __init__(self, generators: Iterable[TextGenerator]) -> None:
        self._generators = list(generators)
        if not self._generators:
            msg = "ModelRouter needs at least one generator"
            raise ValueError(msg)
        self._usage: Counter[str] = Counter()

    @classmethod
    def from_settings(cls, s: Settings) -> ModelRouter:
        from src.llm.client import AnthropicGenerator

        return cls(AnthropicGenerator(model, max_tokens=s.max_tokens) for model in s.get_models())

    @property
    def usage(self) -> dict[str, int]:
        """Successful requests per generator name."""
        return dict(self._usage)

    async def route_request(self, prompt: str) -> str:
        """Return the first successful response.

        Raises:
            ProviderError: every generator raised or returned empty text.
        """
        failures: list[str] = []
        for generator in self._generators:
            try:
                text = await generator.generate(prompt)
            except Exception as exc:
                logger.warning("Generator %s failed: %s", generator.name, exc)
                failures.append(f"{generator.name}: {exc}")
                continue

            if not text or not text.strip():
                logger.warning("Generator %s returned an empty response", generator.name)
                failures.append(f"{generator.name}: empty response")
                continue

            self._usage[generator.name] += 1
            logger.debug("Routed request to %s (%d chars)", generator.name, len(text))
            return text

        msg = "All generators failed: " + "; ".join(failures)
        raise ProviderError(msg)
