"""Bounded-concurrency, retrying writer for large chunk sequences.

Chunks are partitioned into fixed-size batches, and each batch is one write
operation.  All batches are scheduled at once, but a semaphore admits at
most ``concurrency_limit`` of them at a time.  Each write is retried by a
:class:`~docqa.ingestion.retry.RetryPolicy`.  A batch that exhausts its
retries does not cancel its siblings; once every batch has settled, a
:class:`~docqa.errors.BatchFailure` lists the failures.

Progress is reported in batch order as ``(processed, total)``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from langchain_core.documents import Document

from docqa.errors import BatchFailure
from docqa.ingestion.models import IngestionBatch
from docqa.ingestion.retry import RetryPolicy

logger = logging.getLogger(__name__)

WriteFn = Callable[[list[Document]], Awaitable[None]]
ProgressFn = Callable[[int, int], None]


def make_batches(chunks: Sequence[Document], batch_size: int) -> list[IngestionBatch]:
    """Partition *chunks* into consecutive groups of at most *batch_size*."""
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    return [
        IngestionBatch(index=i, start=start, chunks=list(chunks[start : start + batch_size]))
        for i, start in enumerate(range(0, len(chunks), batch_size))
    ]


class IngestionBatcher:
    """Push chunks through *write* in batches.

    Parameters
    ----------
    write:
        Coroutine function writing one batch (embed + upsert).
    batch_size:
        Chunks per write operation.
    concurrency_limit:
        Maximum number of writes in flight.
    retry:
        Retry policy applied to every write.
    on_progress:
        Optional callback receiving ``(processed, total)`` after each batch.
    """

    def __init__(
        self,
        write: WriteFn,
        *,
        batch_size: int = 50,
        concurrency_limit: int = 5,
        retry: RetryPolicy | None = None,
        on_progress: ProgressFn | None = None,
    ) -> None:
        if concurrency_limit < 1:
            raise ValueError("concurrency_limit must be >= 1")
        self._write = write
        self.batch_size = batch_size
        self.concurrency_limit = concurrency_limit
        self.retry = retry or RetryPolicy()
        self._on_progress = on_progress

    async def _run_batch(self, batch: IngestionBatch, gate: asyncio.Semaphore) -> None:
        async with gate:
            logger.debug("Writing batch %d (%d chunks)", batch.index, len(batch))
            await self.retry.call(self._write, batch.chunks)

    async def run(self, chunks: Sequence[Document]) -> int:
        """Write every chunk; return the number of batches issued.

        Raises
        ------
        BatchFailure
            If at least one batch failed after exhausting its retries.
        """
        batches = make_batches(chunks, self.batch_size)
        total = len(chunks)
        if not batches:
            logger.info("Nothing to ingest")
            return 0

        gate = asyncio.Semaphore(self.concurrency_limit)
        tasks = [asyncio.create_task(self._run_batch(b, gate)) for b in batches]

        failures: list[tuple[int, BaseException]] = []
        processed = 0
        try:
            for batch, task in zip(batches, tasks):
                try:
                    await task
                except Exception as exc:
                    logger.error("Batch %d failed after %d attempt(s): %s",
                                 batch.index, self.retry.max_attempts, exc)
                    failures.append((batch.index, exc))
                processed += len(batch)
                logger.info("Processed %d / %d chunks", processed, total)
                if self._on_progress is not None:
                    self._on_progress(processed, total)
        finally:
            # Tasks are still pending only if run() was cancelled or a callback raised.
            for t in tasks:
                if not t.done():
                    t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        if failures:
            raise BatchFailure(failures, len(batches)) from failures[0][1]
        return len(batches)
