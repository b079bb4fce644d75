"""OpenRouter API client for the bot suggestion service."""

import os
from typing import Optional

from openai import AsyncOpenAI
from pydantic import BaseModel

DEFAULT_MODEL = "google/gemini-2.5-flash"


class Message(BaseModel):
    """A chat message."""
    role: str
    content: str


class OpenRouterClient:
    """Client for OpenRouter API (OpenAI-compatible)."""

    OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
    ):
        """Initialize the OpenRouter client.

        Args:
            api_key: OpenRouter API key. If not provided, reads from OPENROUTER_API_KEY env var.
            base_url: Override for any other OpenAI-compatible gateway.
            timeout: Request timeout in seconds. Bots fall back quickly, so retries are off.
        """
        self.api_key = api_key or os.getenv("OPENROUTER_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenRouter API key required. Set OPENROUTER_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.client = AsyncOpenAI(
            base_url=base_url or os.getenv("OPENROUTER_BASE_URL") or self.OPENROUTER_BASE_URL,
            api_key=self.api_key,
            timeout=timeout,
            max_retries=0,
        )

    async def chat(
        self,
        messages: list[Message],
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 100,
    ) -> str:
        """Send a chat completion request.

        Returns:
            The assistant's response text, stripped.
        """
        response = await self.client.chat.completions.create(
            model=model,
            messages=[{"role": m.role, "content": m.content} for m in messages],
            temperature=temperature,
            max_tokens=max_tokens,
        )

        return (response.choices[0].message.content or "").strip()

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 100,
    ) -> str:
        """Generate a response with system and user prompts."""
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_prompt),
        ]
        return await self.chat(messages, model, temperature, max_tokens)
