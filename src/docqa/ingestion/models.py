"""Data models for the ingestion write path."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from langchain_core.documents import Document
from pydantic import BaseModel, ConfigDict, field_validator

from docqa.errors import ConfigurationError


class SourceKind(str, Enum):
    """Supported source types."""

    DIRECTORY = "directory"
    URL = "url"
    GITHUB = "github"


class SourceSpec(BaseModel):
    """Where to ingest documents from.

    ``kind`` stays a plain string so an unknown value reaches the loader
    dispatch and fails there with :class:`ConfigurationError`.
    """

    kind: str
    location: str
    branch: str | None = None

    def resolved_kind(self) -> SourceKind:
        try:
            return SourceKind(self.kind)
        except ValueError:
            choices = ", ".join(k.value for k in SourceKind)
            raise ConfigurationError(
                f"Invalid source kind {self.kind!r}. Choose from: {choices}."
            ) from None


class DocumentMetadata(BaseModel):
    """Recognized metadata keys of a loaded document.

    ``source`` is required; ``title`` and ``description`` come from structured
    markup.  Any other key is kept as-is in the open extension area.
    """

    model_config = ConfigDict(extra="allow")

    source: str
    title: str | None = None
    description: str | None = None

    @field_validator("source")
    @classmethod
    def _source_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("source must not be empty")
        return value


def make_document(content: str, source: str, **extra: Any) -> Document:
    """Build a :class:`Document`, enforcing non-empty content and a ``source``.

    ``None`` values in *extra* are dropped so metadata stays flat.
    """
    if not content or not content.strip():
        raise ValueError(f"Document {source!r} has no content")
    meta = DocumentMetadata(source=source, **{k: v for k, v in extra.items() if v is not None})
    return Document(page_content=content, metadata=meta.model_dump(exclude_none=True))


@dataclass(frozen=True)
class IngestionBatch:
    """A contiguous group of chunks written in one operation."""

    index: int
    start: int
    chunks: list[Document]

    def __len__(self) -> int:
        return len(self.chunks)


class IngestionReport(BaseModel):
    """Summary of one ingestion run."""

    source: str
    collection: str
    documents: int
    chunks: int
    batches: int
