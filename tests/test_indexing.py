"""Tests for the indexing pipeline and embeddings client."""

from ragstream.indexing.pipeline import IndexService, index_documents, make_document
from ragstream.vector_store.base import VectorizedDocument


def test_make_document_generates_ids():
    doc = make_document("hello", {"lang": "en"})

    assert len(doc.id) == 32
    assert doc.metadata == {"lang": "en"}
    assert make_document("hello", doc_id="fixed").id == "fixed"


def test_embed_documents_batches_requests(embeddings_client, embeddings_api):
    docs = [make_document(text, doc_id=str(i)) for i, text in enumerate(["a", "bb", "ccc"])]

    vectorized = embeddings_client.embed_documents(docs)

    assert embeddings_api.calls == [["a", "bb"], ["ccc"]]
    assert all(isinstance(doc, VectorizedDocument) for doc in vectorized)
    assert [doc.embedding for doc in vectorized] == [[1.0, 1.0], [2.0, 1.0], [3.0, 1.0]]


def test_index_documents_adds_every_batch(embeddings_client, vector_store):
    docs = [make_document(f"doc {i}", doc_id=f"id-{i}") for i in range(5)]

    ids = index_documents(vector_store, embeddings_client, docs, batch_size=2)

    assert ids == [f"id-{i}" for i in range(5)]
    assert vector_store.add_calls == [["id-0", "id-1"], ["id-2", "id-3"], ["id-4"]]
    assert vector_store.documents["id-3"].embedding == [5.0, 1.0]


def test_index_service_reports_summary(embeddings_client, vector_store):
    service = IndexService(vector_store, embeddings_client, batch_size=10)

    summary = service.run([make_document("only", doc_id="x")])

    assert summary.ids == ["x"]
    assert summary.elapsed_sec >= 0
