"""Question answering over the vector store.

Each question moves Idle → Retrieving → Answering → Idle.  Nothing is
retried here: a failure in any stage surfaces as a
:class:`~docqa.errors.QueryError` naming that stage.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from langchain_core.prompts import PromptTemplate

from docqa.errors import QueryError
from docqa.qa.graph import build_graph
from docqa.qa.prompts import QA_PROMPT, build_qa_prompt, format_context
from docqa.qa.state import QAState, create_initial_state
from docqa.retrieval.retriever import SemanticRetriever

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings
    from langchain_core.language_models import BaseLanguageModel

    from docqa.retrieval.base import VectorStoreBase
    from docqa.retrieval.models import SearchHit

logger = logging.getLogger(__name__)


class QAOrchestrator:
    """Retrieve context for a question and have the LLM answer it.

    Parameters
    ----------
    store:
        Vector store holding the ingested chunks.
    embeddings:
        Embedding model used for the question (must match ingestion).
    llm:
        Chat or completion model; anything with an async ``ainvoke``.
    k:
        Default number of chunks to retrieve.
    template:
        Prompt template with ``{context}`` and ``{question}`` variables.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embeddings: Embeddings,
        llm: BaseLanguageModel,
        *,
        k: int = 4,
        template: PromptTemplate = QA_PROMPT,
    ) -> None:
        self.retriever = SemanticRetriever(store, embeddings, default_k=k)
        self.llm = llm
        self.k = k
        self.template = template
        self.graph = build_graph(self._retrieve, self._answer)

    @classmethod
    def from_settings(cls, store: VectorStoreBase | None = None) -> QAOrchestrator:
        """Wire the Chroma store, embeddings and LLM from the global settings."""
        from docqa.config import settings
        from docqa.ingestion.embedder import get_embedding_function
        from docqa.qa.llm import get_llm

        if store is None:
            from docqa.retrieval.chroma_store import ChromaVectorStore

            store = ChromaVectorStore()
        return cls(store, get_embedding_function(), get_llm(), k=settings.retrieval_k)

    # -- nodes ----------------------------------------------------------------

    async def _retrieve(self, state: QAState) -> dict[str, Any]:
        question = state["question"]
        try:
            embedding = await self.retriever.embed(question)
        except Exception as exc:
            raise QueryError("embed", str(exc)) from exc
        try:
            hits = await self.retriever.search_by_embedding(embedding, k=state.get("k") or self.k)
        except Exception as exc:
            raise QueryError("search", str(exc)) from exc

        logger.info("Retrieved %d chunk(s): %s", len(hits), " ".join(h.short_ref() for h in hits))
        return {"hits": hits, "context": format_context(hits), "status": "answering"}

    async def _answer(self, state: QAState) -> dict[str, Any]:
        prompt = build_qa_prompt(state["question"], state.get("context", ""), self.template)
        try:
            response = await self.llm.ainvoke(prompt)
        except Exception as exc:
            raise QueryError("generate", str(exc)) from exc

        answer = getattr(response, "content", response)
        return {"prompt": prompt, "answer": str(answer), "status": "idle"}

    # -- public API -----------------------------------------------------------

    async def run(self, question: str, *, k: int | None = None) -> QAState:
        """Run the full graph and return its final state."""
        state = create_initial_state(question, k=k or self.k)
        state["status"] = "retrieving"
        start = time.perf_counter()
        result = await self.graph.ainvoke(state)
        logger.info("Answered in %.2fs", time.perf_counter() - start)
        return result

    async def ask(self, question: str, *, k: int | None = None) -> str:
        """Answer *question*; return the LLM's text."""
        result = await self.run(question, k=k)
        return result["answer"]

    async def ask_with_sources(self, question: str, *, k: int | None = None) -> tuple[str, list[SearchHit]]:
        """Answer *question*; return the text and the chunks it was based on."""
        result = await self.run(question, k=k)
        return result["answer"], result.get("hits", [])
