"""Embedding and vector-store persistence — the end-to-end write path."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from docqa.config import settings
from docqa.errors import TransientWriteError
from docqa.ingestion.batcher import IngestionBatcher, ProgressFn, WriteFn
from docqa.ingestion.chunker import chunk_documents
from docqa.ingestion.loader import load_documents
from docqa.ingestion.models import IngestionReport, SourceSpec
from docqa.ingestion.retry import RetryPolicy
from docqa.retrieval.models import to_records

if TYPE_CHECKING:
    from langchain_core.documents import Document
    from langchain_core.embeddings import Embeddings

    from docqa.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


def get_embedding_function() -> Embeddings:
    """Return the configured embedding model.

    ``openai`` targets any OpenAI-compatible ``/v1/embeddings`` endpoint
    (Ollama by default); ``huggingface`` runs a local sentence-transformer.
    """
    if settings.embedding_provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=settings.embedding_model_name)

    from langchain_openai import OpenAIEmbeddings

    return OpenAIEmbeddings(
        model=settings.embedding_model_name,
        base_url=settings.embedding_base_url or None,
        api_key=settings.openai_api_key or "EMPTY",
        # Non-OpenAI servers do not understand tiktoken token arrays.
        check_embedding_ctx_length=False,
    )


def make_writer(store: VectorStoreBase, embeddings: Embeddings) -> WriteFn:
    """Build the batch write operation: embed the chunk texts, then upsert."""

    async def write(chunks: list[Document]) -> None:
        try:
            vectors = await embeddings.aembed_documents([c.page_content for c in chunks])
        except Exception as exc:
            raise TransientWriteError(f"Embedding {len(chunks)} chunk(s) failed: {exc}") from exc
        await store.upsert(to_records(chunks, vectors))

    return write


def default_batcher(write: WriteFn, on_progress: ProgressFn | None = None) -> IngestionBatcher:
    """An :class:`IngestionBatcher` configured from the global settings."""
    return IngestionBatcher(
        write,
        batch_size=settings.batch_size,
        concurrency_limit=settings.concurrency_limit,
        retry=RetryPolicy(settings.max_retries, settings.retry_initial_delay),
        on_progress=on_progress,
    )


async def embed_and_store(
    chunks: list[Document],
    store: VectorStoreBase,
    embeddings: Embeddings,
    *,
    on_progress: ProgressFn | None = None,
) -> int:
    """Embed *chunks* and upsert them into *store*; return the batch count."""
    batcher = default_batcher(make_writer(store, embeddings), on_progress)
    return await batcher.run(chunks)


async def ingest_source(
    source: SourceSpec,
    store: VectorStoreBase,
    embeddings: Embeddings | None = None,
    *,
    chunk_size: int | None = None,
    chunk_overlap: int | None = None,
    on_progress: ProgressFn | None = None,
) -> IngestionReport:
    """Load, chunk, embed and store one source.

    Loading runs in a worker thread so the event loop keeps serving other
    tasks; it finishes before any write starts, so an invalid source kind
    fails before the store is touched.
    """
    documents = await asyncio.to_thread(load_documents, source)
    logger.info("Loaded %d raw document(s) from %s", len(documents), source.location)

    chunks = chunk_documents(
        documents,
        chunk_size=chunk_size or settings.chunk_size,
        chunk_overlap=chunk_overlap if chunk_overlap is not None else settings.chunk_overlap,
    )
    logger.info("Split into %d chunk(s)", len(chunks))

    if embeddings is None:
        embeddings = get_embedding_function()
    batches = await embed_and_store(chunks, store, embeddings, on_progress=on_progress)

    logger.info("Vector store %r updated with %d chunk(s)", store.collection_name, len(chunks))
    return IngestionReport(
        source=source.location,
        collection=store.collection_name,
        documents=len(documents),
        chunks=len(chunks),
        batches=batches,
    )
