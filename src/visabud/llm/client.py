"""Completion client interface and the Groq implementation."""

from typing import Any, Protocol, runtime_checkable

from groq import AsyncGroq

DEFAULT_MODEL = "llama-3.1-70b-versatile"


@runtime_checkable
class CompletionClient(Protocol):
    """Anything that can turn a system and user prompt into text."""

    async def complete(self, system: str, prompt: str) -> str:
        ...


class GroqLLMClient:
    """CompletionClient implementation that wraps AsyncGroq.

    Example:
        from groq import AsyncGroq
        from visabud.llm import GroqLLMClient

        llm = GroqLLMClient(AsyncGroq(api_key="..."), model="llama-3.1-70b-versatile")
        text = await llm.complete("You are a visa assistant.", "Roadmap to Canada")
    """

    def __init__(
        self,
        client: AsyncGroq,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.2,
    ) -> None:
        """Initialize the Groq client wrapper.

        Args:
            client: The AsyncGroq client instance to wrap.
            model: The model to use for completions.
            temperature: Sampling temperature; low keeps JSON output stable.
        """
        self._client = client
        self._model = model
        self._temperature = temperature

    async def complete(self, system: str, prompt: str) -> str:
        """Complete a prompt and return the text response.

        Args:
            system: System prompt; skipped when empty.
            prompt: The user prompt.

        Returns:
            The model's text response, empty string if it returned nothing.
        """
        messages: list[dict[str, Any]] = []

        if system:
            messages.append({"role": "system", "content": system})

        messages.append({"role": "user", "content": prompt})

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=self._temperature,
        )

        return response.choices[0].message.content or ""

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model
