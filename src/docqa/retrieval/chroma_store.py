"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import urlparse

import chromadb

from docqa.config import settings
from docqa.errors import ConfigurationError, TransientWriteError
from docqa.retrieval.base import VectorStoreBase
from docqa.retrieval.models import SearchHit, VectorRecord

logger = logging.getLogger(__name__)


def parse_server_url(url: str) -> tuple[str, int, bool]:
    """Split ``http(s)://host[:port]`` into ``(host, port, ssl)``."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ConfigurationError(f"Invalid vector store URL: {url!r}")
    ssl = parsed.scheme == "https"
    port = parsed.port or (443 if ssl else 8000)
    return parsed.hostname, port, ssl


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store, talking to a Chroma server over HTTP.

    The client connects lazily on first use.  Every request is bounded by
    *timeout* seconds.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    url:
        Base URL of the Chroma server.
    timeout:
        Per-request timeout in seconds.
    distance_metric:
        Distance function used when the collection is created
        (``cosine`` | ``l2`` | ``ip``).
    """

    def __init__(
        self,
        collection_name: str | None = None,
        *,
        url: str | None = None,
        timeout: float | None = None,
        distance_metric: str = "cosine",
    ) -> None:
        super().__init__(collection_name or settings.collection_name)
        self.url = url or settings.vector_store_url
        self._host, self._port, self._ssl = parse_server_url(self.url)
        self.timeout = timeout if timeout is not None else settings.vector_store_timeout
        self.distance_metric = distance_metric
        self._client: Any = None
        self._collection: Any = None
        self._lock = asyncio.Lock()

    async def _bounded(self, awaitable: Any) -> Any:
        return await asyncio.wait_for(awaitable, timeout=self.timeout)

    async def _get_client(self) -> Any:
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    logger.info("Connecting to Chroma at %s", self.url)
                    self._client = await self._bounded(
                        chromadb.AsyncHttpClient(host=self._host, port=self._port, ssl=self._ssl)
                    )
        return self._client

    async def _get_collection(self) -> Any:
        if self._collection is None:
            client = await self._get_client()
            async with self._lock:
                if self._collection is None:
                    self._collection = await self._bounded(
                        client.get_or_create_collection(
                            name=self.collection_name,
                            metadata={"hnsw:space": self.distance_metric},
                        )
                    )
        return self._collection

    # -- VectorStoreBase overrides --------------------------------------------

    async def upsert(self, records: list[VectorRecord]) -> None:
        if not records:
            return
        try:
            collection = await self._get_collection()
            await self._bounded(
                collection.upsert(
                    ids=[r.id for r in records],
                    embeddings=[r.embedding for r in records],
                    documents=[r.content for r in records],
                    metadatas=[r.metadata for r in records],
                )
            )
        except Exception as exc:
            raise TransientWriteError(
                f"Upsert of {len(records)} record(s) into {self.collection_name!r} failed: "
                f"{exc or type(exc).__name__}"
            ) from exc

    async def similarity_search(self, query_embedding: list[float], *, k: int = 4) -> list[SearchHit]:
        collection = await self._get_collection()
        results = await self._bounded(
            collection.query(
                query_embeddings=[query_embedding],
                n_results=k,
                include=["documents", "metadatas", "distances"],
            )
        )

        ids = (results.get("ids") or [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        hits: list[SearchHit] = []
        for doc_id, content, meta, dist in zip(ids, docs, metas, distances):
            # Chroma returns distances; convert to a 0-1 similarity score.
            hits.append(
                SearchHit(
                    id=doc_id,
                    content=content or "",
                    score=1.0 / (1.0 + dist),
                    metadata=dict(meta or {}),
                )
            )
        hits.sort(key=lambda h: h.score, reverse=True)
        return hits

    async def collection_exists(self) -> bool:
        client = await self._get_client()
        collections = await self._bounded(client.list_collections())
        # Older clients return Collection objects, newer ones plain names.
        names = {getattr(c, "name", c) for c in collections}
        return self.collection_name in names

    async def health_check(self) -> bool:
        try:
            client = await self._get_client()
            await self._bounded(client.heartbeat())
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    async def close(self) -> None:
        """Drop the client and collection handles; the next call reconnects."""
        async with self._lock:
            if self._client is not None:
                logger.info("Closing Chroma connection to %s", self.url)
            self._client = None
            self._collection = None
