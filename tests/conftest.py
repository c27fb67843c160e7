"""Shared fixtures for ragstream tests."""

import os
from types import SimpleNamespace

import pytest

# Settings are read at import time; keep them independent of the developer's env.
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")

from ragstream.embeddings.client import EmbeddingsClient  # noqa: E402
from ragstream.llm.client import LLMClient  # noqa: E402
from tests.fakes import FakeCompletions, FakeEmbeddingsAPI, InMemoryVectorStore  # noqa: E402


@pytest.fixture
def embeddings_api():
    return FakeEmbeddingsAPI()


@pytest.fixture
def embeddings_client(embeddings_api):
    return EmbeddingsClient(model="test-embedding", batch_size=2, client=SimpleNamespace(embeddings=embeddings_api))


@pytest.fixture
def completions():
    return FakeCompletions(["Paris", " is the capital", "."])


@pytest.fixture
def llm_client(completions):
    return LLMClient(model="test-llm", temperature=0.0, client=SimpleNamespace(chat=SimpleNamespace(completions=completions)))


@pytest.fixture
def vector_store():
    return InMemoryVectorStore()
