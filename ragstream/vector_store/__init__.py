"""
Vector store abstractions and factories.
"""

from ragstream.config import settings
from ragstream.vector_store.chroma_store import ChromaVectorStore
from ragstream.vector_store.pinecone_store import PineconeVectorStore

DEFAULT_VECTOR_STORE_BACKEND = settings.vector_store_backend


def get_vector_store(backend: str | None = None):
    """
    Factory to obtain configured VectorStore instance.
    Supports the Chroma and Pinecone backends.
    """
    backend = (backend or DEFAULT_VECTOR_STORE_BACKEND).lower()
    if backend == "chroma":
        return ChromaVectorStore()
    if backend == "pinecone":
        return PineconeVectorStore()
    raise ValueError(f"Unsupported vector store backend: {backend}")


__all__ = ["DEFAULT_VECTOR_STORE_BACKEND", "get_vector_store", "ChromaVectorStore", "PineconeVectorStore"]
