"""HTTP tests for the FastAPI app with faked services."""

import json

import pytest
from fastapi.testclient import TestClient

from ragstream.api.routes import get_index_service, get_rag_service
from ragstream.config import settings
from ragstream.indexing.pipeline import IndexService
from ragstream.main import app
from ragstream.rag.pipeline import RAGStreamService
from ragstream.vector_store.base import VectorizedDocument


@pytest.fixture
def client(vector_store, embeddings_client, llm_client):
    vector_store.add(
        [
            VectorizedDocument(id="fr", text="Paris is the capital of France.", metadata={"topic": "geo"}, embedding=[1.0]),
            VectorizedDocument(id="de", text="Berlin is the capital of Germany.", embedding=[0.5]),
        ]
    )
    app.dependency_overrides[get_rag_service] = lambda: RAGStreamService(vector_store, embeddings_client, llm_client)
    app.dependency_overrides[get_index_service] = lambda: IndexService(vector_store, embeddings_client)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def admin_headers():
    return {"X-Admin-Token": settings.admin_token.get_secret_value()}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ask_stream_returns_ndjson_records(client):
    response = client.post("/api/v1/ask/stream", json={"question": "What is the capital of France?", "top_k": 1})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/x-ndjson; charset=utf-8"

    records = [json.loads(line) for line in response.text.splitlines()]
    assert {record["type"] for record in records} == {"chunk", "data"}
    answer = "".join(record["value"] for record in records if record["type"] == "chunk")
    assert answer == "Paris is the capital."

    data = [record["value"] for record in records if record["type"] == "data"]
    assert data == [
        {
            "sources": [
                {
                    "id": "fr",
                    "text": "Paris is the capital of France.",
                    "metadata": {"topic": "geo"},
                    "similarity": 0.9,
                }
            ]
        }
    ]
    # data-last is the configured default
    assert records[-1]["type"] == "data"


def test_ask_stream_passes_normalized_question_and_context(client, completions):
    client.post("/api/v1/ask/stream", json={"question": "  capital   of\nFrance?  "})

    (call,) = completions.calls
    user_message = call["messages"][-1]["content"]
    assert user_message.endswith("Question: capital of France?")
    assert "[1] Paris is the capital of France." in user_message
    assert call["stream"] is True
    assert completions.streams[0].closed is True


def test_ask_stream_rejects_blank_question(client, completions):
    response = client.post("/api/v1/ask/stream", json={"question": "   \n\t "})

    assert response.status_code == 400
    assert completions.calls == []


def test_ask_stream_validates_payload(client):
    response = client.post("/api/v1/ask/stream", json={"question": "hi", "top_k": 0})

    assert response.status_code == 422


def test_admin_index_requires_token(client, vector_store):
    response = client.post("/admin/documents", json={"documents": [{"text": "new doc"}]})

    assert response.status_code == 403
    assert len(vector_store.documents) == 2


def test_admin_index_embeds_and_stores_documents(client, vector_store, embeddings_api):
    response = client.post(
        "/admin/documents",
        json={"documents": [{"id": "it", "text": "Rome", "metadata": {"topic": "geo"}}, {"text": "Madrid"}]},
        headers=admin_headers(),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["ids"][0] == "it"
    assert len(body["ids"]) == 2
    assert vector_store.documents["it"].metadata == {"topic": "geo"}
    assert embeddings_api.calls == [["Rome", "Madrid"]]
