"""
Utility script to inspect indexed chunks without embeddings.

Usage:
    python -m persona_rag.scripts.inspect_index --limit 5 --offset 0
"""

from __future__ import annotations

import argparse
import json

from persona_rag.config import settings
from persona_rag.vector_store.chroma_store import ChromaVectorStore


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect stored chunks in Chroma.")
    parser.add_argument("--limit", type=int, default=5, help="Number of documents to show")
    parser.add_argument("--offset", type=int, default=0, help="Offset for pagination")
    args = parser.parse_args()

    store = ChromaVectorStore.from_settings(settings)
    collection = store.collection
    total = collection.count()

    result = collection.get(
        include=["documents", "metadatas"],
        limit=args.limit,
        offset=args.offset,
    )

    ids = result.get("ids", [])
    docs = result.get("documents", []) or []
    metas = result.get("metadatas", []) or []

    print(f"Total chunks in collection '{store.collection_name}': {total}")
    print(f"Showing {len(ids)} chunks (offset={args.offset}, limit={args.limit})")
    for idx, (doc_id, doc, meta) in enumerate(zip(ids, docs, metas), start=1):
        print(f"\n#{idx}: {doc_id}")
        print("Metadata:", json.dumps({k: v for k, v in (meta or {}).items() if k != "content"}, ensure_ascii=False))
        text = doc or ""
        snippet = text[:400].replace("\n", " ")
        print("Text:", snippet + ("..." if len(text) > 400 else ""))


if __name__ == "__main__":
    main()
