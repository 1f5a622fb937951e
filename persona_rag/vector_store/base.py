"""
Vector store interface and shared types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence

Vector = Sequence[float]


@dataclass(frozen=True)
class EmbeddedChunk:
    id: str
    vector: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def content(self) -> str:
        return self.metadata.get("content", "")


@dataclass(frozen=True)
class Match:
    """
    One search hit. `score` is cosine similarity (1 - cosine distance);
    higher is more relevant.
    """

    id: str
    score: float
    metadata: Dict[str, Any] | None = None

    @property
    def content(self) -> str:
        return (self.metadata or {}).get("content", "")


RetrievalResult = List[Match]


class VectorStore(Protocol):
    async def clear(self) -> None:
        ...

    async def count(self) -> int:
        ...

    async def list_ids(self) -> List[str]:
        ...

    async def upsert_documents(self, documents: Sequence[EmbeddedChunk]) -> None:
        ...

    async def search(self, query_embedding: Vector, top_k: int, include_metadata: bool = True) -> RetrievalResult:
        ...


__all__ = ["EmbeddedChunk", "Match", "RetrievalResult", "Vector", "VectorStore"]
