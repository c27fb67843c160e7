"""
CLI to embed and index documents from a JSON-lines file.

Each line is an object with `text` and optional `id` and `metadata`.

Example:
    python -m scripts.index_documents --file data/documents.jsonl --batch 64
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List

from ragstream.config import settings, setup_logging
from ragstream.embeddings.client import EmbeddingsClient
from ragstream.indexing.pipeline import IndexService, make_document
from ragstream.vector_store import get_vector_store
from ragstream.vector_store.base import Document


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Index documents from a JSON-lines file.")
    parser.add_argument("--file", "-f", required=True, help="Path to the .jsonl file")
    parser.add_argument(
        "--batch",
        type=int,
        default=settings.index_batch_size,
        help="Documents per embeddings request / upsert.",
    )
    return parser.parse_args()


def load_documents(path: str) -> List[Document]:
    documents: List[Document] = []
    with open(path, encoding="utf-8") as fh:
        for line_number, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            record = json.loads(line)
            if not record.get("text"):
                raise ValueError(f"Line {line_number}: missing 'text'")
            documents.append(make_document(record["text"], record.get("metadata"), record.get("id")))
    return documents


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()

    service = IndexService(
        get_vector_store(),
        EmbeddingsClient(),
        batch_size=args.batch,
        logger_=logger,
    )

    try:
        documents = load_documents(args.file)
        summary = service.run(documents, show_progress=True)
    except Exception:
        logger.exception("Indexing failed")
        sys.exit(1)

    print(f"Indexed documents: {len(summary.ids)} (elapsed {summary.elapsed_sec:.2f}s)")


if __name__ == "__main__":
    main()
