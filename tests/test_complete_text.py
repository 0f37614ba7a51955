"""Tests for complete_text() bare LLM call."""

from unittest.mock import AsyncMock, MagicMock, patch

from src.llm.client import AnthropicGenerator, complete_text


def _mock_client(text: str = "response") -> MagicMock:
    mock_response = MagicMock()
    mock_response.content = [MagicMock(text=text)]

    mock_client = MagicMock()
    mock_client.messages.create = AsyncMock(return_value=mock_response)
    return mock_client


async def test_complete_text_basic() -> None:
    mock_client = _mock_client("hello world")

    with (
        patch("src.llm.client._get_client", return_value=mock_client),
        patch("src.llm.client.settings.chat_model", "claude-test-model"),
        patch("src.llm.client.settings.max_tokens", 1234),
    ):
        result = await complete_text([{"role": "user", "content": "hi"}])

    assert result == "hello world"
    mock_client.messages.create.assert_awaited_once()
    call_kwargs = mock_client.messages.create.call_args.kwargs
    assert call_kwargs["messages"] == [{"role": "user", "content": "hi"}]
    assert call_kwargs["model"] == "claude-test-model"
    assert call_kwargs["max_tokens"] == 1234


async def test_complete_text_with_system() -> None:
    mock_client = _mock_client()

    with patch("src.llm.client._get_client", return_value=mock_client):
        result = await complete_text(
            [{"role": "user", "content": "hi"}],
            system="You are reflective.",
        )

    assert result == "response"
    call_kwargs = mock_client.messages.create.call_args.kwargs
    assert call_kwargs["system"] == "You are reflective."


async def test_complete_text_with_custom_model() -> None:
    mock_client = _mock_client()

    with patch("src.llm.client._get_client", return_value=mock_client):
        await complete_text(
            [{"role": "user", "content": "hi"}],
            model="claude-haiku-4-5-20251001",
            max_tokens=50,
        )

    call_kwargs = mock_client.messages.create.call_args.kwargs
    assert call_kwargs["model"] == "claude-haiku-4-5-20251001"
    assert call_kwargs["max_tokens"] == 50


async def test_complete_text_omits_system_when_none() -> None:
    mock_client = _mock_client()

    with patch("src.llm.client._get_client", return_value=mock_client):
        await complete_text([{"role": "user", "content": "hi"}])

    call_kwargs = mock_client.messages.create.call_args.kwargs
    assert "system" not in call_kwargs


async def test_anthropic_generator() -> None:
    mock_client = _mock_client("reflection")
    generator = AnthropicGenerator("claude-test-model", max_tokens=300)

    with patch("src.llm.client._get_client", return_value=mock_client):
        result = await generator.generate("Reflect on today")

    assert generator.name == "claude-test-model"
    assert result == "reflection"
    call_kwargs = mock_client.messages.create.call_args.kwargs
    assert call_kwargs["messages"] == [{"role": "user", "content": "Reflect on today"}]
    assert call_kwargs["model"] == "claude-test-model"
    assert call_kwargs["max_tokens"] == 300
