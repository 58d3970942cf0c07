"""
Ingestion — document loading, chunking, and embedding into the vector store.

This module is responsible for the ETL-like write path that converts raw
sources (a directory tree, a web page, a GitHub repository) into embedded
chunks stored in a vector database, in bounded-concurrency retried batches.
"""

from docqa.ingestion.batcher import IngestionBatcher, make_batches
from docqa.ingestion.chunker import chunk_documents
from docqa.ingestion.loader import load_directory, load_documents
from docqa.ingestion.models import IngestionReport, SourceKind, SourceSpec, make_document
from docqa.ingestion.retry import RetryPolicy

__all__ = [
    "IngestionBatcher",
    "IngestionReport",
    "RetryPolicy",
    "SourceKind",
    "SourceSpec",
    "chunk_documents",
    "load_directory",
    "load_documents",
    "make_batches",
    "make_document",
]
