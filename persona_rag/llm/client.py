"""
OpenAI chat LLM client.
"""

from __future__ import annotations

from typing import Any, Dict

import openai
from openai import AsyncOpenAI

from persona_rag.config import Settings, settings
from persona_rag.errors import EmptyCompletion
from persona_rag.openai_support import build_openai_client, translate_openai_error

DEFAULT_LLM_MODEL = settings.llm_model_name
DEFAULT_TEMPERATURE = 0.3
BACKEND_NAME = "openai-chat"


class LLMClient:
    def __init__(
        self,
        model: str = DEFAULT_LLM_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.client = client or build_openai_client()

    @classmethod
    def from_settings(cls, config: Settings, client: AsyncOpenAI | None = None) -> "LLMClient":
        return cls(
            model=config.llm_model_name,
            temperature=config.llm_temperature,
            client=client or build_openai_client(config),
        )

    async def complete(self, prompt: str) -> str:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            raise translate_openai_error(exc, BACKEND_NAME) from exc

        if not response.choices:
            raise EmptyCompletion("Model returned no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise EmptyCompletion("Model returned an empty completion")
        return content


__all__ = ["LLMClient", "DEFAULT_LLM_MODEL", "DEFAULT_TEMPERATURE"]
