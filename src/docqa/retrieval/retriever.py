"""Semantic retriever — embed a query and search the vector store.

Usage::

    from docqa.retrieval.retriever import SemanticRetriever

    retriever = SemanticRetriever(store, embeddings)
    hits = await retriever.search("How do I load an IFC model?", k=4)
    for h in hits:
        print(h.short_ref(), h.content[:80])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docqa.retrieval.base import VectorStoreBase
from docqa.retrieval.models import SearchHit

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


class SemanticRetriever:
    """Pair an embedding model with any :class:`VectorStoreBase`.

    Parameters
    ----------
    store:
        A concrete vector-store backend.
    embeddings:
        LangChain embeddings used for the query text.
    default_k:
        Default number of results returned by :meth:`search`.
    score_threshold:
        Minimum similarity score; results below this are discarded.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embeddings: Embeddings,
        *,
        default_k: int = 4,
        score_threshold: float = 0.0,
    ) -> None:
        self.store = store
        self.embeddings = embeddings
        self.default_k = default_k
        self.score_threshold = score_threshold

    async def embed(self, query: str) -> list[float]:
        return await self.embeddings.aembed_query(query)

    async def search_by_embedding(self, embedding: list[float], *, k: int | None = None) -> list[SearchHit]:
        """Search with a pre-computed embedding."""
        hits = await self.store.similarity_search(embedding, k=k or self.default_k)
        return [h for h in hits if h.score >= self.score_threshold]

    async def search(self, query: str, *, k: int | None = None) -> list[SearchHit]:
        """Embed *query* and return the top hits, most similar first."""
        embedding = await self.embed(query)
        hits = await self.search_by_embedding(embedding, k=k)
        logger.debug("Retrieved %d hit(s) for %r", len(hits), query)
        return hits
