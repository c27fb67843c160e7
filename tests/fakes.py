"""Test doubles for the OpenAI clients, the vector store and iterables."""

from types import SimpleNamespace

from ragstream.vector_store.base import Document, VectorQueryResult


class CountingIterable:
    """Sync iterator that records how far it has been advanced and whether it was closed."""

    def __init__(self, items):
        self._items = list(items)
        self.pulled = 0
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        if self.closed or self.pulled >= len(self._items):
            raise StopIteration
        item = self._items[self.pulled]
        self.pulled += 1
        return item

    def close(self):
        self.closed = True


class FakeEmbeddingsAPI:
    def __init__(self):
        self.calls = []

    def create(self, model, input):
        self.calls.append(list(input))
        return SimpleNamespace(data=[SimpleNamespace(embedding=[float(len(text)), 1.0]) for text in input])


def _completion_chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class FakeCompletionStream:
    def __init__(self, texts):
        self._texts = texts
        self.closed = False

    def __aiter__(self):
        return self._chunks()

    async def _chunks(self):
        yield _completion_chunk(None)
        for text in self._texts:
            yield _completion_chunk(text)
        yield SimpleNamespace(choices=[])

    async def close(self):
        self.closed = True


class FakeCompletions:
    def __init__(self, texts):
        self.texts = texts
        self.calls = []
        self.streams = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        stream = FakeCompletionStream(self.texts)
        self.streams.append(stream)
        return stream


class InMemoryVectorStore:
    def __init__(self):
        self.documents = {}
        self.add_calls = []

    def add(self, documents, chunk_size=None):
        self.add_calls.append([doc.id for doc in documents])
        for doc in documents:
            self.documents[doc.id] = doc
        return [doc.id for doc in documents]

    def query(self, query):
        return [
            VectorQueryResult(
                id=doc.id,
                document=Document(id=doc.id, text=doc.text, metadata=dict(doc.metadata)),
                similarity=0.9,
            )
            for doc in list(self.documents.values())[: query.top_k]
        ]
