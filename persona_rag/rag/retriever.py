"""
Retriever: the ingest path (chunk, embed, upsert) and the query path (embed, search).
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from persona_rag.embeddings.client import EmbeddingsClient
from persona_rag.errors import EmptyInput
from persona_rag.indexing.chunker import Chunk, split_document
from persona_rag.retry import RetryPolicy
from persona_rag.vector_store.base import EmbeddedChunk, RetrievalResult, VectorStore

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 200
DEFAULT_INGEST_BATCH = 256

T = TypeVar("T")
ProgressCallback = Callable[[int], object]

logger = logging.getLogger(__name__)


class Retriever:
    def __init__(
        self,
        embeddings_client: EmbeddingsClient,
        vector_store: VectorStore,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        retry_policy: RetryPolicy | None = None,
        ingest_batch: int = DEFAULT_INGEST_BATCH,
    ) -> None:
        self.embeddings_client = embeddings_client
        self.vector_store = vector_store
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.retry_policy = retry_policy or RetryPolicy()
        self.ingest_batch = ingest_batch

    async def _with_retry(self, operation: str, fn: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        return await self.retry_policy.retrying(operation)(fn, *args, **kwargs)

    # --- Ingest path ---
    def split(self, document: str) -> List[Chunk]:
        return split_document(document, self.chunk_size, self.chunk_overlap)

    @staticmethod
    def _to_embedded(chunks: Sequence[Chunk], vectors: Sequence[List[float]]) -> List[EmbeddedChunk]:
        return [
            EmbeddedChunk(
                id=chunk.id,
                vector=vector,
                metadata={"content": chunk.content, "sequence_index": chunk.sequence_index},
            )
            for chunk, vector in zip(chunks, vectors)
        ]

    async def ingest_chunks(self, chunks: Sequence[Chunk], progress: Optional[ProgressCallback] = None) -> int:
        """
        Embed and upsert chunks batch by batch. Ids are derived from the
        chunk position, so re-running after a partial failure overwrites
        rather than duplicates.
        """
        if not chunks:
            raise EmptyInput("No chunks to ingest")

        for offset in range(0, len(chunks), self.ingest_batch):
            batch = list(chunks[offset : offset + self.ingest_batch])
            texts = [chunk.content for chunk in batch]
            vectors = await self._with_retry("embeddings.embed_texts", self.embeddings_client.embed_texts, texts)
            items = self._to_embedded(batch, vectors)
            await self._with_retry("vector_store.upsert", self.vector_store.upsert_documents, items)
            logger.info("Upserted batch", extra={"count": len(batch), "offset": offset})
            if progress is not None:
                progress(len(batch))

        return len(chunks)

    async def ingest(self, document: str, progress: Optional[ProgressCallback] = None) -> int:
        chunks = self.split(document)
        logger.info(
            "Split document",
            extra={"chunks": len(chunks), "chunk_size": self.chunk_size, "overlap": self.chunk_overlap},
        )
        return await self.ingest_chunks(chunks, progress=progress)

    # --- Query path ---
    async def retrieve(self, query: str, top_k: int) -> RetrievalResult:
        if not query or not query.strip():
            raise EmptyInput("Query is empty")

        vector = await self._with_retry("embeddings.embed_text", self.embeddings_client.embed_text, query)
        matches = await self._with_retry(
            "vector_store.search",
            self.vector_store.search,
            vector,
            top_k=top_k,
            include_metadata=True,
        )
        logger.info(
            "Retrieved chunks",
            extra={
                "requested": top_k,
                "returned": len(matches),
                "top_score": round(matches[0].score, 3) if matches else None,
                "results": [{"chunk_id": m.id, "score": round(m.score, 3)} for m in matches[:5]],
            },
        )
        return matches


__all__ = ["Retriever", "ProgressCallback"]
