from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


# Admin
class DocumentIn(BaseModel):
    """A document to be embedded and indexed."""

    id: str | None = Field(default=None, description="Stable id; generated when omitted")
    text: str = Field(..., min_length=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class IndexRequest(BaseModel):
    documents: List[DocumentIn] = Field(..., min_length=1)


class IndexResponse(BaseModel):
    status: Literal["completed"] = Field(default="completed")
    ids: List[str]
    elapsed_sec: float | None = Field(None, ge=0, description="Seconds spent embedding and indexing")


# RAG
class AskRequest(BaseModel):
    question: str = Field(..., min_length=1, description="User question")
    top_k: int | None = Field(default=None, gt=0, description="Override the number of retrieved documents")


class SourceDocument(BaseModel):
    """Retrieved document sent to the client in the `data` record."""

    id: str
    text: str
    metadata: Dict[str, Any]
    similarity: float | None = None


__all__ = [
    "DocumentIn",
    "IndexRequest",
    "IndexResponse",
    "AskRequest",
    "SourceDocument",
]
