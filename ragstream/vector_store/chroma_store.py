"""
Chroma-based VectorStore implementation.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import chromadb

from ragstream.config import settings
from ragstream.vector_store.base import Document, VectorizedDocument, VectorQuery, VectorQueryResult, VectorStore

CHROMA_COLLECTION = settings.chroma_collection
CHROMA_PERSIST_DIR = settings.vector_store_path
DEFAULT_CHUNK_SIZE = 100

logger = logging.getLogger(__name__)


class ChromaVectorStore(VectorStore):
    def __init__(
        self,
        persist_directory: str | None = None,
        collection_name: str = CHROMA_COLLECTION,
        client: Any | None = None,
    ) -> None:
        self.persist_directory = persist_directory or CHROMA_PERSIST_DIR
        self.collection_name = collection_name
        self.client = client or chromadb.PersistentClient(path=self.persist_directory)
        self.collection = self.client.get_or_create_collection(
            self.collection_name, metadata={"hnsw:space": "cosine"}
        )
        logger.info(
            "ChromaVectorStore initialised",
            extra={"persist_directory": self.persist_directory, "collection": self.collection_name},
        )

    def add(self, documents: List[VectorizedDocument], chunk_size: Optional[int] = None) -> List[str]:
        if not documents:
            return []

        size = chunk_size or DEFAULT_CHUNK_SIZE
        for i in range(0, len(documents), size):
            batch = documents[i : i + size]
            self.collection.upsert(
                ids=[doc.id for doc in batch],
                embeddings=[doc.embedding for doc in batch],
                # Chroma rejects empty metadata dicts
                metadatas=[doc.metadata or None for doc in batch],
                documents=[doc.text for doc in batch],
            )
        logger.info("Upserted documents into Chroma", extra={"count": len(documents), "collection": self.collection_name})
        return [doc.id for doc in documents]

    def query(self, query: VectorQuery) -> List[VectorQueryResult]:
        if query.top_k <= 0:
            return []

        result = self.collection.query(
            query_embeddings=[query.embedding],
            n_results=query.top_k,
            include=["documents", "metadatas", "distances"],
        )

        ids = result.get("ids", [[]])[0] or []
        texts = (result.get("documents") or [[]])[0] or []
        metadatas = (result.get("metadatas") or [[]])[0] or []
        distances = (result.get("distances") or [[]])[0] or []

        matches: List[VectorQueryResult] = []
        for doc_id, text, metadata, distance in zip(ids, texts, metadatas, distances):
            document = Document(id=doc_id, text=text or "", metadata=dict(metadata or {}))
            # cosine distance -> similarity
            similarity = 1.0 - float(distance) if distance is not None else None
            matches.append(VectorQueryResult(id=doc_id, document=document, similarity=similarity))

        return matches


__all__ = ["ChromaVectorStore", "CHROMA_COLLECTION", "CHROMA_PERSIST_DIR"]
