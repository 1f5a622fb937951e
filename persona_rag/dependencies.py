"""
Wiring: build explicit client objects from a Settings instance.
"""

from __future__ import annotations

from openai import AsyncOpenAI

from persona_rag.config import Settings, settings
from persona_rag.embeddings.client import EmbeddingsClient
from persona_rag.llm.client import LLMClient
from persona_rag.llm.generator import AnswerGenerator
from persona_rag.openai_support import build_openai_client
from persona_rag.rag.pipeline import RAGService
from persona_rag.rag.prompt import PromptBuilder
from persona_rag.rag.retriever import Retriever
from persona_rag.retry import RetryPolicy
from persona_rag.vector_store import VectorStore, get_vector_store


def build_retriever(
    config: Settings | None = None,
    vector_store: VectorStore | None = None,
    openai_client: AsyncOpenAI | None = None,
) -> Retriever:
    config = config or settings
    return Retriever(
        embeddings_client=EmbeddingsClient.from_settings(config, client=openai_client),
        vector_store=vector_store or get_vector_store(config),
        chunk_size=config.chunk_size_chars,
        chunk_overlap=config.chunk_overlap_chars,
        retry_policy=RetryPolicy.from_settings(config),
    )


def build_rag_service(
    config: Settings | None = None,
    vector_store: VectorStore | None = None,
    openai_client: AsyncOpenAI | None = None,
) -> RAGService:
    config = config or settings
    openai_client = openai_client or build_openai_client(config)
    generator = AnswerGenerator(
        llm_client=LLMClient.from_settings(config, client=openai_client),
        prompt_builder=PromptBuilder(config.persona_name, config.persona_description),
        retry_policy=RetryPolicy.from_settings(config),
    )
    return RAGService.from_settings(
        retriever=build_retriever(config, vector_store=vector_store, openai_client=openai_client),
        answer_generator=generator,
        config=config,
    )


__all__ = ["build_retriever", "build_rag_service"]
