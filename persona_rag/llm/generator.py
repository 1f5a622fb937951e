"""
Answer synthesis: render the persona prompt and ask the language model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, Tuple

from persona_rag.rag.prompt import PromptBuilder, PromptContext
from persona_rag.retry import RetryPolicy
from persona_rag.vector_store.base import Match

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    async def complete(self, prompt: str) -> str:
        ...


@dataclass(frozen=True)
class Answer:
    text: str
    can_answer: bool = True
    sources: Tuple[Match, ...] = field(default_factory=tuple)


class AnswerGenerator:
    def __init__(
        self,
        llm_client: CompletionClient,
        prompt_builder: PromptBuilder | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.llm_client = llm_client
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.retry_policy = retry_policy or RetryPolicy()

    async def answer(self, prompt_context: PromptContext) -> Answer:
        """
        Returns the model's completion unmodified.
        EmptyCompletion propagates; the caller decides whether to retry.
        """
        prompt = self.prompt_builder.build_from(prompt_context)
        text = await self.retry_policy.retrying("llm.complete")(self.llm_client.complete, prompt)

        logger.info("Generated answer", extra={"prompt_chars": len(prompt), "answer_chars": len(text)})
        return Answer(text=text)


__all__ = ["Answer", "AnswerGenerator", "CompletionClient"]
