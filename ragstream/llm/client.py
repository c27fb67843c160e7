"""
OpenAI chat LLM client.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, List

from openai import AsyncOpenAI

from ragstream.config import settings

DEFAULT_LLM_MODEL = settings.llm_model_name
DEFAULT_TEMPERATURE = settings.llm_temperature


class LLMClient:
    def __init__(
        self,
        model: str = DEFAULT_LLM_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        if client is None:
            api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
            client = AsyncOpenAI(api_key=api_key)
        self.client = client

    async def stream_chat(self, messages: List[Dict[str, Any]]) -> AsyncIterator[Any]:
        """
        Yield raw ChatCompletionChunk objects as they arrive.
        Closing the generator closes the underlying HTTP stream.
        """
        stream = await self.client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            messages=messages,
            stream=True,
        )
        try:
            async for chunk in stream:
                yield chunk
        finally:
            await stream.close()


def chunk_text(chunk: Any) -> str:
    """Text delta carried by a ChatCompletionChunk ("" for role/finish chunks)."""
    if not chunk.choices:
        return ""
    return chunk.choices[0].delta.content or ""


__all__ = ["LLMClient", "DEFAULT_LLM_MODEL", "DEFAULT_TEMPERATURE", "chunk_text"]
