"""Tests for ModelRouter fallback across generators."""

import pytest

from src.config import Settings
from src.llm.client import AnthropicGenerator
from src.llm.router import ModelRouter, ProviderError, RequestRouter


class FakeGenerator:
    def __init__(self, name: str, response: str = "", error: Exception | None = None):
        self._name = name
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


async def test_first_generator_wins() -> None:
    first = FakeGenerator("a", "from a")
    second = FakeGenerator("b", "from b")
    router = ModelRouter([first, second])

    assert await router.route_request("hi") == "from a"
    assert second.prompts == []
    assert router.usage == {"a": 1}


async def test_falls_back_on_error() -> None:
    first = FakeGenerator("a", error=RuntimeError("overloaded"))
    second = FakeGenerator("b", "from b")
    router = ModelRouter([first, second])

    assert await router.route_request("hi") == "from b"
    assert first.prompts == ["hi"]
    assert router.usage == {"b": 1}


async def test_falls_back_on_empty_response() -> None:
    router = ModelRouter([FakeGenerator("a", "   "), FakeGenerator("b", "ok")])
    assert await router.route_request("hi") == "ok"


async def test_all_fail_raises_provider_error() -> None:
    router = ModelRouter(
        [FakeGenerator("a", error=RuntimeError("down")), FakeGenerator("b", "")]
    )
    with pytest.raises(ProviderError, match="a: down; b: empty response"):
        await router.route_request("hi")


def test_requires_a_generator() -> None:
    with pytest.raises(ValueError, match="at least one generator"):
        ModelRouter([])


def test_from_settings_builds_generator_per_model() -> None:
    router = ModelRouter.from_settings(Settings(chat_model="big", fallback_model="small"))
    names = [g.name for g in router._generators]
    assert names == ["big", "small"]
    assert all(isinstance(g, AnthropicGenerator) for g in router._generators)


def test_satisfies_protocol() -> None:
    assert isinstance(ModelRouter([FakeGenerator("a", "x")]), RequestRouter)
