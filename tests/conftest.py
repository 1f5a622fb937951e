"""
Shared fakes and fixtures: deterministic embedder, in-memory index, scripted LLM.
"""

import hashlib
import math
import uuid
from typing import Dict, List, Sequence

import chromadb
import pytest

from persona_rag.errors import DimensionMismatch, EmptyInput
from persona_rag.retry import RetryPolicy
from persona_rag.vector_store.base import EmbeddedChunk, Match
from persona_rag.vector_store.chroma_store import ChromaVectorStore

HASH_DIMENSIONS = 8


def hash_vector(text: str, dimensions: int = HASH_DIMENSIONS) -> List[float]:
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return [digest[i] / 255.0 + 0.01 for i in range(dimensions)]


def cosine(a: Sequence[float], b: Sequence[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


# ── Fakes ──


class HashEmbedder:
    """Embeds text as a hash-derived vector; records every call."""

    def __init__(self):
        self.batches: List[List[str]] = []
        self.queries: List[str] = []

    async def embed_texts(self, texts):
        if not texts:
            raise EmptyInput("No texts to embed")
        self.batches.append(list(texts))
        return [hash_vector(t) for t in texts]

    async def embed_text(self, text):
        self.queries.append(text)
        return hash_vector(text)


class InMemoryStore:
    """
    Id-keyed store with cosine search. `scores` pins the score per id,
    standing in for an index whose ranking is known in advance.
    """

    def __init__(self, scores: Dict[str, float] | None = None):
        self.items: Dict[str, EmbeddedChunk] = {}
        self.scores = scores
        self.upserts = 0
        self.searches = 0

    async def clear(self):
        self.items.clear()

    async def count(self):
        return len(self.items)

    async def list_ids(self):
        return sorted(self.items)

    async def upsert_documents(self, documents):
        if documents and self.items:
            expected = len(next(iter(self.items.values())).vector)
            for doc in documents:
                if len(doc.vector) != expected:
                    raise DimensionMismatch(expected, len(doc.vector))
        self.upserts += 1
        for doc in documents:
            self.items[doc.id] = doc

    async def search(self, query_embedding, top_k, include_metadata=True):
        self.searches += 1
        matches = []
        for item in self.items.values():
            score = self.scores[item.id] if self.scores is not None else cosine(query_embedding, item.vector)
            matches.append(Match(id=item.id, score=score, metadata=dict(item.metadata) if include_metadata else None))
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]


class ScriptedLLM:
    """Replays a list of responses; exceptions in the list are raised."""

    def __init__(self, *responses):
        self.responses = list(responses) or ["ok"]
        self.prompts: List[str] = []

    async def complete(self, prompt):
        self.prompts.append(prompt)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


# ── Fixtures ──


@pytest.fixture
def embedder():
    return HashEmbedder()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def immediate_retry():
    return RetryPolicy.immediate(max_attempts=3)


@pytest.fixture
def chroma_store():
    """Fresh collection per test; EphemeralClient state is shared within a process."""
    return ChromaVectorStore(
        client=chromadb.EphemeralClient(),
        collection_name=f"test-{uuid.uuid4().hex}",
        timeout=10.0,
    )
