"""
RAG pipeline: normalize question, retrieve context, stream the LLM answer.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Sequence

from ragstream.embeddings.client import EmbeddingsClient
from ragstream.llm.client import LLMClient
from ragstream.models.schemas import SourceDocument
from ragstream.vector_store.base import VectorQuery, VectorQueryResult, VectorStore

logger = logging.getLogger(__name__)

DEFAULT_REFUSAL = "The indexed documents do not contain enough information to answer."

SYSTEM_PROMPT = (
    "You answer questions using only the numbered context passages supplied by the user. "
    f'If they are insufficient, reply exactly: "{DEFAULT_REFUSAL}" '
    "Do not invent facts. Cite passages as [1], [2], ... Use concise Markdown."
)


class RAGStreamService:
    def __init__(
        self,
        vector_store: VectorStore,
        embeddings_client: EmbeddingsClient,
        llm_client: LLMClient,
        logger_: logging.Logger | None = None,
        request_id: str | None = None,
    ) -> None:
        self.vector_store = vector_store
        self.embeddings_client = embeddings_client
        self.llm_client = llm_client
        self.logger = logger_ or logging.getLogger(__name__)
        self.request_id = request_id

    @staticmethod
    def normalize_question(text: str) -> str:
        """Trim and collapse whitespace."""
        return " ".join(text.strip().split())

    def retrieve(self, question: str, top_k: int) -> List[VectorQueryResult]:
        embedding = self.embeddings_client.embed_text(question)
        results = self.vector_store.query(VectorQuery(embedding=embedding, top_k=top_k))
        self.logger.info(
            "Retrieved documents",
            extra={
                "requested": top_k,
                "returned": len(results),
                "request_id": self.request_id,
                "results": [
                    {"id": r.id, "similarity": round(r.similarity, 3) if r.similarity is not None else None}
                    for r in results[:5]
                ],
            },
        )
        return results

    @staticmethod
    def build_messages(question: str, results: Sequence[VectorQueryResult]) -> List[Dict[str, Any]]:
        fragments = [f"[{idx}] {r.document.text}" for idx, r in enumerate(results, start=1)]
        context = "\n\n".join(fragments) if fragments else "(no passages found)"
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": f"Context:\n{context}\n\nQuestion: {question}"},
        ]

    def stream_answer(self, question: str, results: Sequence[VectorQueryResult]) -> AsyncIterator[Any]:
        """Raw completion chunks for the answer; narrow them with `chunk_text`."""
        return self.llm_client.stream_chat(self.build_messages(question, results))

    @staticmethod
    def sources_payload(results: Sequence[VectorQueryResult]) -> Dict[str, List[SourceDocument]]:
        return {
            "sources": [
                SourceDocument(
                    id=r.id,
                    text=r.document.text,
                    metadata=r.document.metadata,
                    similarity=r.similarity,
                )
                for r in results
            ]
        }


__all__ = ["RAGStreamService", "DEFAULT_REFUSAL", "SYSTEM_PROMPT"]
