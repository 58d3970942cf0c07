"""Shared pytest configuration, fakes and fixtures."""

from __future__ import annotations

from typing import Any

import pytest
from langchain_core.embeddings import Embeddings
from langchain_core.messages import AIMessage

from docqa.retrieval.base import VectorStoreBase
from docqa.retrieval.models import SearchHit, VectorRecord


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes for deterministic testing ─────────────────────────────────────


class FakeVectorStore(VectorStoreBase):
    """In-memory fake that records upserts and returns canned hits."""

    def __init__(self, hits: list[SearchHit] | None = None, collection_name: str = "test-collection") -> None:
        super().__init__(collection_name)
        self._hits: list[SearchHit] = hits or []
        self.records: dict[str, VectorRecord] = {}
        self.upsert_calls = 0
        self.last_k: int | None = None
        self.last_embedding: list[float] | None = None

    async def upsert(self, records: list[VectorRecord]) -> None:
        self.upsert_calls += 1
        for r in records:
            self.records[r.id] = r

    async def similarity_search(self, query_embedding: list[float], *, k: int = 4) -> list[SearchHit]:
        self.last_k = k
        self.last_embedding = query_embedding
        return self._hits[:k]

    async def collection_exists(self) -> bool:
        return bool(self.records)


class StubEmbeddings(Embeddings):
    """Tiny deterministic embedding: ``[len(text), vowels, 1.0]``."""

    def __init__(self) -> None:
        self.queries: list[str] = []
        self.documents: list[str] = []

    @staticmethod
    def _vector(text: str) -> list[float]:
        return [float(len(text)), float(sum(text.count(v) for v in "aeiou")), 1.0]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.documents.extend(texts)
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        self.queries.append(text)
        return self._vector(text)

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]:
        return self.embed_documents(texts)

    async def aembed_query(self, text: str) -> list[float]:
        return self.embed_query(text)


class StubLLM:
    """Records prompts and replies with a fixed message."""

    def __init__(self, reply: str = "stub answer", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[Any] = []

    async def ainvoke(self, prompt: Any, **kwargs: Any) -> AIMessage:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


SAMPLE_HITS: list[SearchHit] = [
    SearchHit(
        id="doc-001",
        content="The WebIFCLoaderPlugin loads IFC models into the viewer.",
        score=0.92,
        metadata={"source": "plugins/ifc.md", "chunk_index": 3},
    ),
    SearchHit(
        id="doc-002",
        content="Annotations are pinned to positions in the scene.",
        score=0.87,
        metadata={"source": "annotations.md", "chunk_index": 1},
    ),
    SearchHit(
        id="doc-003",
        content="The SDK is released under the AGPL license.",
        score=0.45,
        metadata={"source": "LICENSE.txt"},
    ),
]


@pytest.fixture()
def fake_store() -> FakeVectorStore:
    return FakeVectorStore(hits=list(SAMPLE_HITS))


@pytest.fixture()
def embeddings() -> StubEmbeddings:
    return StubEmbeddings()


@pytest.fixture()
def make_store() -> type[FakeVectorStore]:
    """Factory for stores with custom hits."""
    return FakeVectorStore


@pytest.fixture()
def make_llm() -> type[StubLLM]:
    """Factory for stub LLMs with a custom reply or error."""
    return StubLLM
