"""
Pinecone-based VectorStore implementation.

Document text is stored alongside the metadata under `_text` and split back
out on query.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pinecone import Pinecone

from ragstream.config import settings
from ragstream.vector_store.base import (
    TEXT_METADATA_KEY,
    Document,
    VectorizedDocument,
    VectorQuery,
    VectorQueryResult,
    VectorStore,
)

DEFAULT_UPSERT_CHUNK_SIZE = 100

logger = logging.getLogger(__name__)


class PineconeVectorStore(VectorStore):
    def __init__(
        self,
        index: str | None = None,
        namespace: str | None = None,
        client: Any | None = None,
        api_key: str | None = None,
    ) -> None:
        self.index_name = index or settings.pinecone_index
        self.namespace = settings.pinecone_namespace if namespace is None else namespace

        if client is None:
            if api_key is None and settings.pinecone_api_key:
                api_key = settings.pinecone_api_key.get_secret_value()
            if not api_key:
                raise ValueError("api_key is required when the client option is not provided")

            client = Pinecone(api_key=api_key)

        self.client = client
        logger.info(
            "PineconeVectorStore initialised",
            extra={"index": self.index_name, "namespace": self.namespace},
        )

    def _index(self) -> Any:
        return self.client.Index(self.index_name)

    def add(self, documents: List[VectorizedDocument], chunk_size: Optional[int] = None) -> List[str]:
        if not documents:
            return []

        vectors = [
            {
                "id": doc.id,
                "values": doc.embedding,
                "metadata": {**doc.metadata, TEXT_METADATA_KEY: doc.text},
            }
            for doc in documents
        ]

        index = self._index()
        size = chunk_size or DEFAULT_UPSERT_CHUNK_SIZE
        for i in range(0, len(vectors), size):
            index.upsert(vectors=vectors[i : i + size], namespace=self.namespace)

        logger.info("Upserted documents into Pinecone", extra={"count": len(vectors), "index": self.index_name})
        return [doc.id for doc in documents]

    def query(self, query: VectorQuery) -> List[VectorQueryResult]:
        response = self._index().query(
            vector=query.embedding,
            top_k=query.top_k,
            namespace=self.namespace,
            include_metadata=True,
        )

        results: List[VectorQueryResult] = []
        for match in _get(response, "matches") or []:
            metadata: Dict[str, Any] = dict(_get(match, "metadata") or {})
            text = metadata.pop(TEXT_METADATA_KEY, "")
            match_id = _get(match, "id")
            results.append(
                VectorQueryResult(
                    id=match_id,
                    document=Document(id=match_id, text=text, metadata=metadata),
                    similarity=_get(match, "score"),
                )
            )
        return results


def _get(obj: Any, name: str) -> Any:
    # Pinecone responses are objects, but also support dict-style access
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


__all__ = ["PineconeVectorStore", "DEFAULT_UPSERT_CHUNK_SIZE"]
