"""
OpenAI embeddings client.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from openai import OpenAI

from ragstream.config import settings
from ragstream.vector_store.base import Document, VectorizedDocument

DEFAULT_EMBEDDING_MODEL = settings.embedding_model_name
DEFAULT_EMBED_BATCH_SIZE = settings.index_batch_size

logger = logging.getLogger(__name__)


class EmbeddingsClient:
    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        batch_size: int = DEFAULT_EMBED_BATCH_SIZE,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        self.batch_size = batch_size
        if client is None:
            api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
            client = OpenAI(api_key=api_key)
        self.client = client

    def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        embeddings: List[List[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = list(texts[start : start + self.batch_size])
            response = self.client.embeddings.create(model=self.model, input=batch)
            embeddings.extend(item.embedding for item in response.data)
        logger.debug("Embedded texts", extra={"count": len(texts), "model": self.model})
        return embeddings

    def embed_text(self, text: str) -> List[float]:
        vectors = self.embed_texts([text])
        return vectors[0] if vectors else []

    def embed_documents(self, documents: Sequence[Document]) -> List[VectorizedDocument]:
        vectors = self.embed_texts([doc.text for doc in documents])
        return [
            VectorizedDocument(id=doc.id, text=doc.text, metadata=dict(doc.metadata), embedding=vector)
            for doc, vector in zip(documents, vectors)
        ]


__all__ = ["EmbeddingsClient", "DEFAULT_EMBEDDING_MODEL"]
