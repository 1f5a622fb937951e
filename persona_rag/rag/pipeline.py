"""
RAG pipeline: normalize question, retrieve context, build prompt context, LLM answer.
"""

from __future__ import annotations

import logging

from persona_rag.config import Settings, settings
from persona_rag.errors import EmptyCompletion, EmptyInput
from persona_rag.llm.generator import Answer, AnswerGenerator
from persona_rag.rag.prompt import PromptContext, join_context
from persona_rag.rag.retriever import ProgressCallback, Retriever
from persona_rag.vector_store.base import RetrievalResult

logger = logging.getLogger(__name__)

DEFAULT_REFUSAL = "I don't have enough information in my background to answer that."
DEGRADED_ANSWER = "I'm unable to generate a response right now."
EMPTY_COMPLETION_RETRIES = 1


class RAGService:
    """Explicit stages: ingest, retrieve, build_context, generate."""

    def __init__(
        self,
        retriever: Retriever,
        answer_generator: AnswerGenerator,
        top_k: int | None = None,
        relevance_threshold: float | None = None,
        logger_: logging.Logger | None = None,
        request_id: str | None = None,
    ) -> None:
        self.retriever = retriever
        self.answer_generator = answer_generator
        self.top_k = top_k or settings.top_k
        self.relevance_threshold = relevance_threshold
        self.logger = logger_ or logging.getLogger(__name__)
        self.request_id = request_id

    @classmethod
    def from_settings(cls, retriever: Retriever, answer_generator: AnswerGenerator, config: Settings) -> "RAGService":
        return cls(
            retriever=retriever,
            answer_generator=answer_generator,
            top_k=config.top_k,
            relevance_threshold=config.relevance_threshold,
        )

    # --- Public API ---
    async def answer_question(self, question: str, top_k: int | None = None) -> Answer:
        """Main entry point for answering a question."""
        normalized_question = self.normalize_question(question)
        if not normalized_question:
            raise EmptyInput("Question must not be empty")

        matches = await self.retrieve(normalized_question, top_k=top_k or self.top_k)
        relevant = self._filter_relevant(matches)
        if not relevant:
            self.logger.info(
                "Refusing before LLM",
                extra={"reason": "no_relevant_context", "request_id": self.request_id},
            )
            return self._refusal_answer()

        prompt_context = self.build_context(relevant, normalized_question)
        answer = await self.generate(prompt_context)
        if not answer.can_answer:
            return answer
        return Answer(text=answer.text, can_answer=True, sources=tuple(relevant))

    # --- Steps ---
    @staticmethod
    def normalize_question(text: str | None) -> str:
        """Trim and collapse whitespace."""
        return " ".join((text or "").strip().split())

    async def ingest(self, document: str, progress: ProgressCallback | None = None) -> int:
        return await self.retriever.ingest(document, progress=progress)

    async def retrieve(self, question: str, top_k: int) -> RetrievalResult:
        return await self.retriever.retrieve(question, top_k)

    @staticmethod
    def build_context(matches: RetrievalResult, question: str) -> PromptContext:
        return PromptContext(context=join_context(matches), question=question)

    async def generate(self, prompt_context: PromptContext) -> Answer:
        attempts = 1 + EMPTY_COMPLETION_RETRIES
        for attempt in range(1, attempts + 1):
            try:
                return await self.answer_generator.answer(prompt_context)
            except EmptyCompletion:
                self.logger.warning(
                    "Empty completion",
                    extra={"attempt": attempt, "max_attempts": attempts, "request_id": self.request_id},
                )
        return Answer(text=DEGRADED_ANSWER, can_answer=False)

    def _filter_relevant(self, matches: RetrievalResult) -> RetrievalResult:
        if self.relevance_threshold is None:
            return list(matches)
        return [m for m in matches if m.score >= self.relevance_threshold]

    @staticmethod
    def _refusal_answer() -> Answer:
        return Answer(text=DEFAULT_REFUSAL, can_answer=False)


__all__ = ["RAGService", "DEFAULT_REFUSAL", "DEGRADED_ANSWER"]
