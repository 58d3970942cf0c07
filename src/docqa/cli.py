"""
Command-line entry point.

Usage:
    docqa ingest directory ./docs                     # Build the collection once
    docqa ingest url https://example.com/page.html
    docqa ingest github https://github.com/org/repo --branch main
    docqa ask "What is the main feature?"             # Ask a question
    docqa run directory ./docs "What is the main feature?"   # Both, in order
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time

from docqa.config import settings
from docqa.errors import DocqaError
from docqa.ingestion.models import SourceKind, SourceSpec

logger = logging.getLogger(__name__)


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("kind", help=f"Source kind: {', '.join(k.value for k in SourceKind)}")
    parser.add_argument("location", help="Directory path, page URL or repository URL")
    parser.add_argument(
        "--branch", "-b", default=None,
        help=f"Repository branch for github sources (default: {settings.github_branch})",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docqa",
        description="Ingest documents into a vector store and answer questions about them.",
    )
    parser.add_argument("--collection", "-c", default=None, help="Vector store collection name")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Load, chunk, embed and store a source")
    _add_source_args(ingest)

    ask = sub.add_parser("ask", help="Answer a question from the stored collection")
    ask.add_argument("question")
    ask.add_argument("--top-k", "-k", type=int, default=None, help="Chunks to retrieve")

    run = sub.add_parser("run", help="Ingest a source, then answer a question")
    _add_source_args(run)
    run.add_argument("question")
    run.add_argument("--top-k", "-k", type=int, default=None, help="Chunks to retrieve")
    return parser


async def _ingest(args: argparse.Namespace, orchestrator) -> None:
    from docqa.ingestion.embedder import ingest_source

    source = SourceSpec(kind=args.kind, location=args.location, branch=args.branch)
    report = await ingest_source(
        source, orchestrator.retriever.store, orchestrator.retriever.embeddings
    )
    print(
        f"Ingested {report.documents} document(s) as {report.chunks} chunk(s) "
        f"into '{report.collection}' ({report.batches} batch(es))"
    )


async def _ask(args: argparse.Namespace, orchestrator) -> None:
    start = time.perf_counter()
    answer = await orchestrator.ask(args.question, k=args.top_k)
    logger.info("Question answered in %.2fs", time.perf_counter() - start)
    print(f"Q: {args.question}")
    print(f"A: {answer}")


async def _main(args: argparse.Namespace) -> None:
    from docqa.qa.orchestrator import QAOrchestrator
    from docqa.retrieval.chroma_store import ChromaVectorStore

    store = ChromaVectorStore(args.collection)
    orchestrator = QAOrchestrator.from_settings(store)
    try:
        if args.command in ("ingest", "run"):
            await _ingest(args, orchestrator)
        if args.command in ("ask", "run"):
            await _ask(args, orchestrator)
    finally:
        await store.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(_main(args))
    except DocqaError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
