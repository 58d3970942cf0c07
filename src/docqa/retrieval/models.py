"""Domain models for vector-store records and search hits."""

from __future__ import annotations

import hashlib
from typing import Any

from langchain_core.documents import Document
from pydantic import BaseModel, Field

_SCALAR_TYPES = (str, int, float, bool)


def flatten_metadata(metadata: dict[str, Any]) -> dict[str, str | int | float | bool]:
    """Keep only scalar, non-``None`` metadata values (vector-store payload limits)."""
    return {k: v for k, v in metadata.items() if isinstance(v, _SCALAR_TYPES)}


def record_id(source: str, chunk_index: int | None, content: str) -> str:
    """Deterministic id so re-ingesting the same chunk overwrites it."""
    key = f"{source}\x00{chunk_index}\x00{content}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]


class VectorRecord(BaseModel):
    """One chunk as stored in the vector database.

    Attributes
    ----------
    id:
        Deterministic chunk identifier (see :func:`record_id`).
    content:
        The chunk text.
    metadata:
        Flat chunk metadata, including ``source`` and ``chunk_index``.
    embedding:
        Dense vector for ``content``.
    """

    id: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: list[float]

    @classmethod
    def from_chunk(cls, chunk: Document, embedding: list[float]) -> VectorRecord:
        meta = flatten_metadata(chunk.metadata)
        return cls(
            id=record_id(str(meta.get("source", "")), meta.get("chunk_index"), chunk.page_content),
            content=chunk.page_content,
            metadata=meta,
            embedding=list(embedding),
        )


def to_records(chunks: list[Document], embeddings: list[list[float]]) -> list[VectorRecord]:
    """Pair each chunk with its embedding."""
    if len(chunks) != len(embeddings):
        raise ValueError(f"Got {len(embeddings)} embeddings for {len(chunks)} chunks")
    return [VectorRecord.from_chunk(c, e) for c, e in zip(chunks, embeddings)]


class SearchHit(BaseModel):
    """A retrieved chunk with its similarity score (higher = more similar)."""

    id: str
    content: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def source(self) -> str:
        return str(self.metadata.get("source", "unknown"))

    def short_ref(self) -> str:
        """Return a compact ``[source§chunk]`` reference string."""
        chunk = self.metadata.get("chunk_index", "?")
        return f"[{self.source}§{chunk}]"

    def __str__(self) -> str:  # noqa: D105
        return f"{self.short_ref()} {self.content[:120]}…"
