from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


# Ingest
class IngestRequest(BaseModel):
    """Request to (re)ingest the configured or an inline document."""

    document: str | None = Field(default=None, description="Inline document text; defaults to DOCUMENT_PATH")
    reset: bool = Field(default=False, description="Clear the collection before ingesting")


class IngestResponse(BaseModel):
    """Result of an ingest run."""

    status: str = Field(default="completed")
    indexed_chunks: int = Field(..., ge=0, description="How many chunks were upserted")
    total_ids: int = Field(..., ge=0, description="How many ids the collection holds afterwards")
    elapsed_sec: float | None = Field(None, ge=0, description="How long the run took")


# RAG
class AskRequest(BaseModel):
    """Question about the biography."""

    question: str = Field(..., min_length=1, description="User question")
    top_k: int | None = Field(
        default=None,
        gt=0,
        description="Override the number of context chunks",
    )


class SourceChunk(BaseModel):
    chunk_id: str
    score: float
    text: str


class AskResponse(BaseModel):
    answer: str
    can_answer: bool
    sources: List[SourceChunk]


__all__ = [
    "IngestRequest",
    "IngestResponse",
    "AskRequest",
    "SourceChunk",
    "AskResponse",
]
