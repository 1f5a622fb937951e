"""
Source document loading.
"""

from __future__ import annotations

import logging
from pathlib import Path

from persona_rag.config import settings
from persona_rag.errors import EmptyInput, InvalidConfiguration

DOCUMENT_PATH = settings.document_path

logger = logging.getLogger(__name__)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def load_document(path: str | Path = DOCUMENT_PATH) -> str:
    source = Path(path)
    if not source.is_file():
        raise InvalidConfiguration(f"Document not found: {source}")

    text = normalize_newlines(source.read_text(encoding="utf-8"))
    if not text.strip():
        raise EmptyInput(f"Document is empty: {source}")

    logger.info("Loaded document", extra={"path": str(source), "chars": len(text)})
    return text


__all__ = ["DOCUMENT_PATH", "load_document", "normalize_newlines"]
