"""
Vector store abstractions and factories.
"""

from persona_rag.config import Settings, settings
from persona_rag.vector_store.base import EmbeddedChunk, Match, RetrievalResult, VectorStore
from persona_rag.vector_store.chroma_store import ChromaVectorStore


def get_vector_store(config: Settings | None = None) -> VectorStore:
    """
    Factory to obtain configured VectorStore instance.
    Chroma is the only backend: embedded on disk, or remote when CHROMA_HOST is set.
    """
    return ChromaVectorStore.from_settings(config or settings)


__all__ = [
    "get_vector_store",
    "ChromaVectorStore",
    "EmbeddedChunk",
    "Match",
    "RetrievalResult",
    "VectorStore",
]
