"""
Retrieval — vector-store gateway and semantic search.

This module wraps the vector store behind a clean interface so that
ingestion and question answering never need to know which DB is backing
retrieval.

Public surface
--------------
- :class:`VectorStoreBase` — abstract async backend.
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`SemanticRetriever` — embed a question and search the store.
- :class:`VectorRecord`, :class:`SearchHit` — data models.
"""

from docqa.retrieval.base import VectorStoreBase
from docqa.retrieval.models import SearchHit, VectorRecord, to_records
from docqa.retrieval.retriever import SemanticRetriever

__all__ = [
    "ChromaVectorStore",
    "SearchHit",
    "SemanticRetriever",
    "VectorRecord",
    "VectorStoreBase",
    "to_records",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from docqa.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
