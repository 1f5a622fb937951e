"""
Search indexed chunks by a text query, without calling the language model.

Example:
    python -m persona_rag.scripts.search_query --query "Swift Math" --top-k 5
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from persona_rag.config import setup_logging, validate_settings
from persona_rag.dependencies import build_retriever
from persona_rag.errors import PersonaRagError
from persona_rag.vector_store.base import RetrievalResult


async def search(query: str, top_k: int) -> RetrievalResult:
    retriever = build_retriever(validate_settings())
    return await retriever.retrieve(query, top_k)


def main() -> None:
    parser = argparse.ArgumentParser(description="Search indexed chunks by text query.")
    parser.add_argument("--query", "-q", required=True, help="Query text")
    parser.add_argument("--top-k", type=int, default=5, help="How many results to return")
    parser.add_argument("--snippet", type=int, default=300, help="Snippet length")
    args = parser.parse_args()

    setup_logging()
    logger = logging.getLogger(__name__)
    try:
        results = asyncio.run(search(args.query, args.top_k))
    except PersonaRagError:
        logger.exception("Search failed")
        sys.exit(1)

    if not results:
        print("No results")
        return

    for idx, match in enumerate(results, start=1):
        text = match.content
        snippet = text[: args.snippet].replace("\n", " ")
        print(f"\n#{idx} score={match.score:.4f} id={match.id}")
        print("text:", snippet + ("..." if len(text) > args.snippet else ""))


if __name__ == "__main__":
    main()
