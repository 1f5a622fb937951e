"""
Indexing pipeline: load the document, chunk, embed, and upsert into the vector store.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from tqdm import tqdm

from persona_rag.indexing.loader import load_document
from persona_rag.rag.retriever import Retriever

logger = logging.getLogger(__name__)


@dataclass
class IngestSummary:
    indexed_chunks: int
    total_ids: int
    elapsed_sec: float


class IngestService:
    """
    Deliberate, idempotent ingestion of one document.
    Chunk ids are positional, so running twice overwrites instead of duplicating.
    """

    def __init__(
        self,
        retriever: Retriever,
        reset: bool = False,
        show_progress: bool = True,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.retriever = retriever
        self.reset = reset
        self.show_progress = show_progress
        self.logger = logger_ or logging.getLogger(__name__)

    async def run(self, document: str) -> IngestSummary:
        started = time.time()
        # validate before touching the index
        chunks = self.retriever.split(document)
        self.logger.info("Parsed document", extra={"chars": len(document), "chunks": len(chunks)})

        if self.reset:
            await self.retriever.vector_store.clear()

        with tqdm(total=len(chunks), desc="Indexing", unit="chunks", disable=not self.show_progress) as bar:
            indexed = await self.retriever.ingest_chunks(chunks, progress=bar.update)

        total_ids = await self.retriever.vector_store.count()
        elapsed = time.time() - started
        self.logger.info(
            "Ingest completed",
            extra={"chunks_indexed": indexed, "total_ids": total_ids, "elapsed_sec": round(elapsed, 2)},
        )
        return IngestSummary(indexed_chunks=indexed, total_ids=total_ids, elapsed_sec=elapsed)

    async def run_path(self, path: str | Path) -> IngestSummary:
        return await self.run(load_document(path))


__all__ = ["IngestService", "IngestSummary"]
