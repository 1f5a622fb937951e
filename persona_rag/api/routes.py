from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends

from persona_rag.config import settings
from persona_rag.dependencies import build_rag_service
from persona_rag.indexing.loader import load_document
from persona_rag.indexing.pipeline import IngestService
from persona_rag.models.schemas import AskRequest, AskResponse, IngestRequest, IngestResponse, SourceChunk
from persona_rag.rag.pipeline import RAGService

router = APIRouter()
logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_rag_service() -> RAGService:
    return build_rag_service(settings)


@router.post("/api/v1/ingest", response_model=IngestResponse, summary="Ingest the biography document")
async def ingest(
    ingest_request: IngestRequest,
    service: RAGService = Depends(get_rag_service),
) -> IngestResponse:
    document = ingest_request.document
    if document is None:
        document = load_document(settings.document_path)
    logger.info("Ingest requested", extra={"reset": ingest_request.reset, "chars": len(document)})

    summary = await IngestService(service.retriever, reset=ingest_request.reset, show_progress=False).run(document)
    response = IngestResponse(
        status="completed",
        indexed_chunks=summary.indexed_chunks,
        total_ids=summary.total_ids,
        elapsed_sec=round(summary.elapsed_sec, 2),
    )
    logger.info(
        "Ingest completed",
        extra={"indexed_chunks": response.indexed_chunks, "elapsed_sec": response.elapsed_sec},
    )
    return response


@router.post("/api/v1/ask", response_model=AskResponse, summary="Ask a question about the biography")
async def ask(request: AskRequest, service: RAGService = Depends(get_rag_service)) -> AskResponse:
    logger.info("Ask request", extra={"len": len(request.question)})
    answer = await service.answer_question(request.question, top_k=request.top_k)
    return AskResponse(
        answer=answer.text,
        can_answer=answer.can_answer,
        sources=[SourceChunk(chunk_id=m.id, score=m.score, text=m.content) for m in answer.sources],
    )


__all__ = ["router", "get_rag_service"]
