"""
Ask the persona a question and print the answer.

Example:
    python -m persona_rag.scripts.ask --question "How old were you when you got into programming?"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from persona_rag.config import setup_logging, validate_settings
from persona_rag.dependencies import build_rag_service
from persona_rag.errors import PersonaRagError
from persona_rag.indexing.loader import load_document
from persona_rag.llm.generator import Answer


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Answer a question about the biography.")
    parser.add_argument("--question", "-q", required=True, help="Question to ask")
    parser.add_argument("--top-k", type=int, default=None, help="Override the number of context chunks")
    parser.add_argument(
        "--ingest",
        action="store_true",
        help="Ingest the document before answering (idempotent).",
    )
    parser.add_argument("--document", default=None, help="Document path used with --ingest")
    parser.add_argument("--show-sources", action="store_true", help="Print the retrieved chunks and scores")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> Answer:
    config = validate_settings()
    service = build_rag_service(config)
    if args.ingest:
        await service.ingest(load_document(args.document or config.document_path))
    return await service.answer_question(args.question, top_k=args.top_k)


def main(argv: list[str] | None = None) -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args(argv)

    try:
        answer = asyncio.run(run(args))
    except PersonaRagError:
        logger.exception("Ask failed")
        sys.exit(1)

    print(answer.text)
    if args.show_sources:
        print("\nSources:")
        if answer.sources:
            for match in answer.sources:
                print(f"  {match.id}: {match.score:.3f}")
        else:
            print("  <none>")


if __name__ == "__main__":
    main()
