"""
Chroma-based VectorStore implementation.

The collection is created with cosine space, so a match score is
`1 - distance`. Chroma's client is synchronous; every call runs in a worker
thread bounded by the request timeout.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Sequence, TypeVar

import chromadb
import httpx
from chromadb.errors import ChromaError

from persona_rag.config import Settings, settings
from persona_rag.errors import BackendUnavailable, DimensionMismatch
from persona_rag.vector_store.base import EmbeddedChunk, Match, RetrievalResult, Vector, VectorStore

CHROMA_COLLECTION = settings.collection_name
CHROMA_PERSIST_DIR = settings.vector_store_path
COLLECTION_METADATA = {"hnsw:space": "cosine"}
BACKEND_NAME = "chroma"

T = TypeVar("T")

logger = logging.getLogger(__name__)


@contextmanager
def _unavailable_on_error() -> Iterator[None]:
    try:
        yield
    except (ChromaError, httpx.HTTPError, ConnectionError, ValueError) as exc:
        raise BackendUnavailable(BACKEND_NAME, f"{type(exc).__name__}: {exc}") from exc


class ChromaVectorStore(VectorStore):
    def __init__(
        self,
        persist_directory: str | None = None,
        collection_name: str = CHROMA_COLLECTION,
        client: Any | None = None,
        dimensions: int | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.persist_directory = persist_directory or CHROMA_PERSIST_DIR
        self.collection_name = collection_name
        self.timeout = timeout
        self._configured_dimensions = dimensions
        self._dimensions: int | None = None
        with _unavailable_on_error():
            self.client = client or chromadb.PersistentClient(path=self.persist_directory)
            self.collection = self.client.get_or_create_collection(self.collection_name, metadata=COLLECTION_METADATA)
        logger.info(
            "ChromaVectorStore initialised",
            extra={"persist_directory": self.persist_directory, "collection": self.collection_name},
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "ChromaVectorStore":
        client = None
        if config.chroma_host:
            # HttpClient probes the server on construction
            with _unavailable_on_error():
                client = chromadb.HttpClient(host=config.chroma_host, port=config.chroma_port)
        return cls(
            persist_directory=config.vector_store_path,
            collection_name=config.collection_name,
            client=client,
            dimensions=config.embedding_dimensions,
            timeout=config.request_timeout_sec,
        )

    async def _call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args, **kwargs), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise BackendUnavailable(BACKEND_NAME, f"request timed out after {self.timeout}s") from exc
        except (ChromaError, httpx.HTTPError, ConnectionError) as exc:
            raise BackendUnavailable(BACKEND_NAME, f"{type(exc).__name__}: {exc}") from exc

    async def _established_dimensions(self) -> int | None:
        if self._dimensions is not None:
            return self._dimensions

        result = await self._call(self.collection.get, limit=1, include=["embeddings"])
        embeddings = result.get("embeddings")
        if embeddings is not None and len(embeddings) > 0:
            self._dimensions = len(embeddings[0])
        elif self._configured_dimensions:
            self._dimensions = self._configured_dimensions
        return self._dimensions

    async def _check_dimensions(self, vectors: Sequence[Vector]) -> None:
        expected = await self._established_dimensions()
        if expected is None:
            expected = len(vectors[0])
        for vector in vectors:
            if len(vector) != expected:
                raise DimensionMismatch(expected, len(vector))

    async def clear(self) -> None:
        await self._call(self.client.delete_collection, self.collection_name)
        self.collection = await self._call(
            self.client.get_or_create_collection, self.collection_name, metadata=COLLECTION_METADATA
        )
        self._dimensions = None
        logger.info("Chroma collection cleared and recreated", extra={"collection": self.collection_name})

    async def count(self) -> int:
        return await self._call(self.collection.count)

    async def list_ids(self) -> List[str]:
        result = await self._call(self.collection.get, include=[])
        return sorted(result.get("ids") or [])

    async def upsert_documents(self, documents: Sequence[EmbeddedChunk]) -> None:
        if not documents:
            return

        await self._check_dimensions([doc.vector for doc in documents])

        ids = [doc.id for doc in documents]
        embeddings = [list(doc.vector) for doc in documents]
        metadatas = [doc.metadata for doc in documents]
        texts = [doc.content for doc in documents]

        await self._call(self.collection.upsert, ids=ids, embeddings=embeddings, metadatas=metadatas, documents=texts)
        if self._dimensions is None:
            self._dimensions = len(embeddings[0])
        logger.info("Upserted documents into Chroma", extra={"count": len(documents), "collection": self.collection_name})

    async def search(self, query_embedding: Vector, top_k: int, include_metadata: bool = True) -> RetrievalResult:
        if top_k <= 0:
            return []

        total = await self.count()
        if total == 0:
            return []
        await self._check_dimensions([query_embedding])

        include = ["distances", "metadatas"] if include_metadata else ["distances"]
        result = await self._call(
            self.collection.query,
            query_embeddings=[list(query_embedding)],
            n_results=min(top_k, total),
            include=include,
        )

        ids = (result.get("ids") or [[]])[0] or []
        distances = (result.get("distances") or [[]])[0] or []
        metadatas = (result.get("metadatas") or [[]])[0] if include_metadata else None

        matches: RetrievalResult = []
        for position, (doc_id, distance) in enumerate(zip(ids, distances)):
            metadata = dict(metadatas[position] or {}) if metadatas else None
            matches.append(Match(id=doc_id, score=self._distance_to_score(distance), metadata=metadata))

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]

    @staticmethod
    def _distance_to_score(distance: float) -> float:
        return 1.0 - float(distance)


__all__ = ["ChromaVectorStore", "CHROMA_COLLECTION", "CHROMA_PERSIST_DIR", "COLLECTION_METADATA"]
