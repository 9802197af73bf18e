"""Tests for GroqLLMClient."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from visabud.llm import CompletionClient, GroqLLMClient


def mock_groq(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content

    groq = MagicMock()
    groq.chat.completions.create = AsyncMock(return_value=response)
    return groq


class TestGroqLLMClient:
    """Tests for GroqLLMClient wrapper."""

    def test_implements_completion_protocol(self) -> None:
        assert isinstance(GroqLLMClient(MagicMock()), CompletionClient)

    def test_default_model(self) -> None:
        """Should use default model if not specified."""
        assert GroqLLMClient(MagicMock()).model == "llama-3.1-70b-versatile"

    @pytest.mark.asyncio
    async def test_complete_with_system_prompt(self) -> None:
        """Should send system and user messages."""
        groq = mock_groq("Roadmap JSON")
        client = GroqLLMClient(groq, model="test-model")

        result = await client.complete("You are a visa assistant.", "Roadmap to Canada")

        assert result == "Roadmap JSON"
        groq.chat.completions.create.assert_called_once_with(
            model="test-model",
            messages=[
                {"role": "system", "content": "You are a visa assistant."},
                {"role": "user", "content": "Roadmap to Canada"},
            ],
            temperature=0.2,
        )

    @pytest.mark.asyncio
    async def test_empty_system_prompt_skipped(self) -> None:
        groq = mock_groq("ok")
        await GroqLLMClient(groq).complete("", "Hello")

        messages = groq.chat.completions.create.call_args.kwargs["messages"]
        assert messages == [{"role": "user", "content": "Hello"}]

    @pytest.mark.asyncio
    async def test_complete_returns_empty_on_none_content(self) -> None:
        """Should return empty string if content is None."""
        assert await GroqLLMClient(mock_groq(None)).complete("system", "Hello") == ""

    @pytest.mark.asyncio
    async def test_errors_propagate(self) -> None:
        groq = MagicMock()
        groq.chat.completions.create = AsyncMock(side_effect=RuntimeError("rate limited"))

        with pytest.raises(RuntimeError, match="rate limited"):
            await GroqLLMClient(groq).complete("system", "Hello")
