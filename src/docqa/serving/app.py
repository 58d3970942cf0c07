"""FastAPI application exposing ingestion and question answering as a REST API."""

from __future__ import annotations

from functools import lru_cache

import requests
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from docqa.errors import BatchFailure, ConfigurationError, QueryError, UnsupportedFileError
from docqa.ingestion.models import IngestionReport, SourceSpec
from docqa.qa.orchestrator import QAOrchestrator

app = FastAPI(
    title="docqa API",
    version="0.1.0",
    description="REST interface to document ingestion and retrieval-augmented QA.",
)


# ── Request / Response schemas ────────────────────────────────────────
class QueryRequest(BaseModel):
    """Incoming question from the user."""

    query: str
    k: int | None = None


class QueryResponse(BaseModel):
    """Answer returned by the orchestrator."""

    answer: str
    sources: list[str] = []


# ── Dependencies ──────────────────────────────────────────────────────
@lru_cache(maxsize=1)
def get_orchestrator() -> QAOrchestrator:
    """Build the orchestrator once per process."""
    return QAOrchestrator.from_settings()


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/query", response_model=QueryResponse)
async def query(
    request: QueryRequest,
    orchestrator: QAOrchestrator = Depends(get_orchestrator),
) -> QueryResponse:
    """Retrieve context for the question and return the LLM's answer."""
    try:
        answer, hits = await orchestrator.ask_with_sources(request.query, k=request.k)
    except QueryError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return QueryResponse(answer=answer, sources=[h.source for h in hits])


@app.post("/ingest", response_model=IngestionReport)
async def ingest(
    source: SourceSpec,
    orchestrator: QAOrchestrator = Depends(get_orchestrator),
) -> IngestionReport:
    """Load, chunk and store a source in the orchestrator's collection."""
    from docqa.ingestion.embedder import ingest_source

    try:
        return await ingest_source(
            source,
            orchestrator.retriever.store,
            orchestrator.retriever.embeddings,
        )
    except (ConfigurationError, UnsupportedFileError, FileNotFoundError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except (BatchFailure, requests.RequestException) as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
