"""
OpenAI embeddings client.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence

import openai
from openai import AsyncOpenAI

from persona_rag.config import Settings, settings
from persona_rag.errors import BackendUnavailable, EmptyInput
from persona_rag.openai_support import build_openai_client, translate_openai_error

DEFAULT_EMBEDDING_MODEL = settings.embedding_model_name
DEFAULT_EMBED_BATCH_SIZE = 64
DEFAULT_EMBED_CONCURRENCY = 4
BACKEND_NAME = "openai-embeddings"

logger = logging.getLogger(__name__)


class EmbeddingsClient:
    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        batch_size: int = DEFAULT_EMBED_BATCH_SIZE,
        concurrency: int = DEFAULT_EMBED_CONCURRENCY,
        dimensions: int | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.batch_size = batch_size
        self.concurrency = concurrency
        self.dimensions = dimensions
        self.client = client or build_openai_client()

    @classmethod
    def from_settings(cls, config: Settings, client: AsyncOpenAI | None = None) -> "EmbeddingsClient":
        return cls(
            model=config.embedding_model_name,
            batch_size=config.embed_batch_size,
            concurrency=config.embed_concurrency,
            dimensions=config.embedding_dimensions,
            client=client or build_openai_client(config),
        )

    async def _embed_batch(self, batch: List[str], semaphore: asyncio.Semaphore) -> List[List[float]]:
        kwargs = {"model": self.model, "input": batch}
        if self.dimensions:
            kwargs["dimensions"] = self.dimensions

        async with semaphore:
            try:
                response = await self.client.embeddings.create(**kwargs)
            except openai.OpenAIError as exc:
                raise translate_openai_error(exc, BACKEND_NAME) from exc

        items = sorted(response.data, key=lambda item: item.index)
        if len(items) != len(batch):
            raise BackendUnavailable(
                BACKEND_NAME, f"expected {len(batch)} embeddings, received {len(items)}"
            )
        return [list(item.embedding) for item in items]

    async def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed texts in batches, fanning batches out concurrently.
        Output is aligned with `texts` regardless of completion order.
        """
        if not texts:
            raise EmptyInput("No texts to embed")

        semaphore = asyncio.Semaphore(self.concurrency)
        batches = [list(texts[i : i + self.batch_size]) for i in range(0, len(texts), self.batch_size)]
        tasks = [asyncio.ensure_future(self._embed_batch(batch, semaphore)) for batch in batches]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # no batch outlives the call
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        embeddings: List[List[float]] = []
        for vectors in results:
            embeddings.extend(vectors)

        logger.info(
            "Generated embeddings",
            extra={"count": len(embeddings), "batches": len(batches), "model": self.model},
        )
        return embeddings

    async def embed_text(self, text: str) -> List[float]:
        vectors = await self.embed_texts([text])
        return vectors[0]


__all__ = ["EmbeddingsClient", "DEFAULT_EMBEDDING_MODEL"]
