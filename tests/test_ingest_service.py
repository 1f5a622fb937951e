"""Unit tests for the ingest service: reset handling and summaries."""

import pytest

from conftest import InMemoryStore
from persona_rag.errors import EmptyInput
from persona_rag.indexing.pipeline import IngestService
from persona_rag.rag.retriever import Retriever

DOCUMENT = "Alice loves Go. Bob loves Rust."


@pytest.fixture
def retriever(embedder, immediate_retry):
    return Retriever(embedder, InMemoryStore(), chunk_size=20, chunk_overlap=5, retry_policy=immediate_retry)


@pytest.mark.asyncio
async def test_run_reports_summary(retriever):
    summary = await IngestService(retriever, show_progress=False).run(DOCUMENT)

    assert summary.indexed_chunks == 2
    assert summary.total_ids == 2
    assert summary.elapsed_sec >= 0


@pytest.mark.asyncio
async def test_reset_drops_stale_ids(retriever):
    await IngestService(retriever, show_progress=False).run(DOCUMENT * 3)
    assert await retriever.vector_store.count() > 2

    summary = await IngestService(retriever, reset=True, show_progress=False).run(DOCUMENT)

    assert summary.total_ids == 2
    assert await retriever.vector_store.list_ids() == ["doc-0", "doc-1"]


@pytest.mark.asyncio
@pytest.mark.parametrize("document", ["", "   \n"])
async def test_failed_reset_ingest_keeps_existing_index(retriever, document):
    await IngestService(retriever, show_progress=False).run(DOCUMENT)

    with pytest.raises(EmptyInput):
        await IngestService(retriever, reset=True, show_progress=False).run(document)

    assert await retriever.vector_store.list_ids() == ["doc-0", "doc-1"]


@pytest.mark.asyncio
async def test_run_path_loads_document(retriever, tmp_path):
    path = tmp_path / "bio.txt"
    path.write_text(DOCUMENT, encoding="utf-8")

    summary = await IngestService(retriever, show_progress=False).run_path(path)

    assert summary.indexed_chunks == 2
