"""
Vector store interface and shared types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

TEXT_METADATA_KEY = "_text"


@dataclass
class Document:
    id: str
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VectorizedDocument(Document):
    embedding: List[float] = field(default_factory=list)


@dataclass
class VectorQuery:
    embedding: List[float]
    top_k: int


@dataclass
class VectorQueryResult:
    id: str
    document: Document
    similarity: Optional[float]


class VectorStore(Protocol):
    def add(self, documents: List[VectorizedDocument], chunk_size: Optional[int] = None) -> List[str]:
        ...

    def query(self, query: VectorQuery) -> List[VectorQueryResult]:
        ...


__all__ = ["TEXT_METADATA_KEY", "Document", "VectorizedDocument", "VectorQuery", "VectorQueryResult", "VectorStore"]
