"""
CLI to search the vector index by a text query.

Example:
    python -m scripts.search_query --query "How are refunds handled?" --top-k 5
"""

from __future__ import annotations

import argparse

from ragstream.embeddings.client import EmbeddingsClient
from ragstream.vector_store import get_vector_store
from ragstream.vector_store.base import VectorQuery


def main() -> None:
    parser = argparse.ArgumentParser(description="Search indexed documents by text query.")
    parser.add_argument("--query", "-q", required=True, help="Query text")
    parser.add_argument("--top-k", type=int, default=5, help="How many results to return")
    parser.add_argument("--snippet", type=int, default=300, help="Snippet length")
    args = parser.parse_args()

    store = get_vector_store()
    embeddings = EmbeddingsClient()

    results = store.query(VectorQuery(embedding=embeddings.embed_text(args.query), top_k=args.top_k))

    if not results:
        print("No results")
        return

    for idx, result in enumerate(results, start=1):
        text = result.document.text
        snippet = text[: args.snippet].replace("\n", " ")
        similarity = f"{result.similarity:.4f}" if result.similarity is not None else "n/a"
        print(f"\n#{idx} similarity={similarity} id={result.id}")
        print("metadata:", result.document.metadata)
        print("text:", snippet + ("..." if len(text) > args.snippet else ""))


if __name__ == "__main__":
    main()
