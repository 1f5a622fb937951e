"""
Text chunking utilities.

Sizes are measured in characters. A chunk ends at the last paragraph, line or
word boundary that fits the window; the separator stays at the head of the
following chunk so that nothing is dropped. The next chunk starts at the
earliest boundary no more than `overlap` characters before the previous end,
or exactly `overlap` characters before it when no boundary is available.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from persona_rag.config import validate_chunking
from persona_rag.errors import EmptyInput

SEPARATORS: Tuple[str, ...] = ("\n\n", "\n", " ")
CHUNK_ID_PREFIX = "doc-"


@dataclass(frozen=True)
class Chunk:
    id: str
    content: str
    sequence_index: int
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.content)


def chunk_id(sequence_index: int) -> str:
    return f"{CHUNK_ID_PREFIX}{sequence_index}"


def _find_cut(text: str, start: int, limit: int) -> Tuple[int, str | None]:
    """
    Pick where the chunk beginning at `start` ends, never past `limit`.
    Returns the cut position and the separator it was found on.
    """
    for sep in SEPARATORS:
        pos = text.rfind(sep, start + 1, limit + 1)
        if pos > start:
            return pos, sep
    return limit, None


def _find_next_start(text: str, prev_start: int, end: int, overlap: int, sep: str | None) -> int:
    if overlap == 0:
        return end
    lower = max(end - overlap, prev_start + 1)
    if sep is not None:
        pos = text.find(sep, lower, end + 1)
        if pos != -1 and pos <= end:
            return pos
    return lower


def split_document(document: str, chunk_size: int, overlap: int) -> List[Chunk]:
    validate_chunking(chunk_size, overlap)
    if not document or not document.strip():
        raise EmptyInput("Document is empty")

    chunks: List[Chunk] = []
    length = len(document)
    start = 0

    while True:
        limit = start + chunk_size
        if limit >= length:
            end, sep = length, None
        else:
            end, sep = _find_cut(document, start, limit)

        index = len(chunks)
        chunks.append(Chunk(id=chunk_id(index), content=document[start:end], sequence_index=index, start=start))
        if end >= length:
            break
        start = _find_next_start(document, start, end, overlap, sep)

    return chunks


def reconstruct(chunks: Sequence[Chunk]) -> str:
    """Stitch chunks back into the source text by dropping each overlap."""
    text = ""
    for chunk in sorted(chunks, key=lambda c: c.sequence_index):
        text = text[: chunk.start] + chunk.content
    return text


__all__ = ["Chunk", "SEPARATORS", "chunk_id", "split_document", "reconstruct"]
