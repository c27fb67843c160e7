"""
Indexing pipeline: embed documents and add them to the vector store in batches.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from tqdm import tqdm

from ragstream.config import settings
from ragstream.embeddings.client import EmbeddingsClient
from ragstream.vector_store.base import Document, VectorStore

logger = logging.getLogger(__name__)


def make_document(text: str, metadata: Dict[str, Any] | None = None, doc_id: str | None = None) -> Document:
    return Document(id=doc_id or uuid.uuid4().hex, text=text, metadata=dict(metadata or {}))


def index_documents(
    vector_store: VectorStore,
    embeddings_client: EmbeddingsClient,
    documents: Sequence[Document],
    batch_size: int = settings.index_batch_size,
    show_progress: bool = False,
) -> List[str]:
    ids: List[str] = []
    total = len(documents)

    for offset in tqdm(
        range(0, total, batch_size),
        desc="Indexing",
        unit="batch",
        disable=not show_progress,
    ):
        batch = list(documents[offset : offset + batch_size])
        vectorized = embeddings_client.embed_documents(batch)
        ids.extend(vector_store.add(vectorized, chunk_size=batch_size))
        logger.info("Indexed batch", extra={"count": len(batch), "offset": offset})

    return ids


@dataclass
class IndexSummary:
    ids: List[str]
    elapsed_sec: float


class IndexService:
    """Embeds and stores documents, timing the whole run."""

    def __init__(
        self,
        vector_store: VectorStore,
        embeddings_client: EmbeddingsClient,
        batch_size: int = settings.index_batch_size,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.vector_store = vector_store
        self.embeddings_client = embeddings_client
        self.batch_size = batch_size
        self.logger = logger_ or logging.getLogger(__name__)

    def run(self, documents: Sequence[Document], show_progress: bool = False) -> IndexSummary:
        started = time.time()
        ids = index_documents(
            self.vector_store,
            self.embeddings_client,
            documents,
            batch_size=self.batch_size,
            show_progress=show_progress,
        )
        elapsed = time.time() - started
        self.logger.info(
            "IndexService completed",
            extra={"indexed_documents": len(ids), "elapsed_sec": round(elapsed, 2)},
        )
        return IndexSummary(ids=ids, elapsed_sec=elapsed)


__all__ = ["make_document", "index_documents", "IndexService", "IndexSummary"]
