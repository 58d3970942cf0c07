"""Abstract base class for vector-store backends.

Adding a new backend (Qdrant, Pinecone, Weaviate …) only requires
subclassing :class:`VectorStoreBase` and implementing the abstract
coroutines.  Ingestion and question answering are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docqa.retrieval.models import SearchHit, VectorRecord


class VectorStoreBase(ABC):
    """Backend-agnostic, collection-scoped vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    async def upsert(self, records: list[VectorRecord]) -> None:
        """Insert or overwrite *records* by id.

        Implementations raise :class:`~docqa.errors.TransientWriteError`
        when the backend rejects or times out the write.
        """
        ...

    @abstractmethod
    async def similarity_search(self, query_embedding: list[float], *, k: int = 4) -> list[SearchHit]:
        """Return the top-*k* hits for *query_embedding*, most similar first."""
        ...

    @abstractmethod
    async def collection_exists(self) -> bool:
        """Return ``True`` when the collection has been created."""
        ...

    # -- optional overrides ---------------------------------------------------

    async def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        return True

    async def close(self) -> None:
        """Release client resources.  No-op by default."""
