from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from ragstream.config import settings
from ragstream.embeddings.client import EmbeddingsClient
from ragstream.indexing.pipeline import IndexService, make_document
from ragstream.llm.client import LLMClient, chunk_text
from ragstream.models.schemas import AskRequest, IndexRequest, IndexResponse
from ragstream.rag.pipeline import RAGStreamService
from ragstream.streaming import ndjson_response
from ragstream.vector_store import get_vector_store

router = APIRouter()
logger = logging.getLogger(__name__)


def get_rag_service() -> RAGStreamService:
    return RAGStreamService(
        vector_store=get_vector_store(),
        embeddings_client=EmbeddingsClient(),
        llm_client=LLMClient(),
    )


def get_index_service() -> IndexService:
    return IndexService(get_vector_store(), EmbeddingsClient())


def _check_admin_token(x_admin_token: str | None) -> None:
    if not settings.admin_token:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin token is not configured",
        )
    if x_admin_token != settings.admin_token.get_secret_value():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.post("/admin/documents", response_model=IndexResponse, summary="Index documents")
def admin_index_documents(
    index_request: IndexRequest,
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
    service: IndexService = Depends(get_index_service),
) -> IndexResponse:
    _check_admin_token(x_admin_token)

    documents = [make_document(doc.text, doc.metadata, doc.id) for doc in index_request.documents]
    logger.info("Admin indexing requested", extra={"documents": len(documents)})

    summary = service.run(documents)
    return IndexResponse(status="completed", ids=summary.ids, elapsed_sec=round(summary.elapsed_sec, 2))


@router.post("/api/v1/ask/stream", summary="Stream an answer as ND-JSON")
async def ask_stream(
    request: AskRequest,
    service: RAGStreamService = Depends(get_rag_service),
) -> StreamingResponse:
    question = service.normalize_question(request.question or "")
    if not question:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Question must not be empty")

    top_k = request.top_k or settings.default_top_k
    logger.info("Ask stream request", extra={"len": len(question), "top_k": top_k})

    results = await run_in_threadpool(service.retrieve, question, top_k)
    return ndjson_response(
        service.stream_answer(question, results),
        data=[service.sources_payload(results)],
        map_chunk=chunk_text,
        order=settings.ndjson_data_order,
    )


__all__ = ["router", "get_rag_service", "get_index_service"]
