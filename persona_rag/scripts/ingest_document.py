"""
Ingest the biography document into the vector store.

Example:
    python -m persona_rag.scripts.ingest_document --document data/biography.txt
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from persona_rag.config import setup_logging, validate_settings
from persona_rag.dependencies import build_retriever
from persona_rag.errors import PersonaRagError
from persona_rag.indexing.pipeline import IngestService, IngestSummary


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chunk, embed and upsert the biography document.")
    parser.add_argument("--document", default=None, help="Document path; defaults to DOCUMENT_PATH.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop and recreate the collection first.",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, logger: logging.Logger) -> IngestSummary:
    config = validate_settings()
    service = IngestService(build_retriever(config), reset=args.reset, logger_=logger)
    return await service.run_path(args.document or config.document_path)


def main(argv: list[str] | None = None) -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args(argv)

    try:
        summary = asyncio.run(run(args, logger))
    except PersonaRagError:
        logger.exception("Ingest failed")
        sys.exit(1)

    print(
        f"Indexed chunks: {summary.indexed_chunks}, ids in collection: {summary.total_ids} "
        f"(elapsed {summary.elapsed_sec:.2f}s)"
    )


if __name__ == "__main__":
    main()
