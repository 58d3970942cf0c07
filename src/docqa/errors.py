"""Exception hierarchy shared by ingestion, retrieval and question answering."""

from __future__ import annotations


class DocqaError(Exception):
    """Base class for every error raised by docqa."""


class ConfigurationError(DocqaError, ValueError):
    """Invalid source kind or settings. Fatal, raised before any work starts."""


class DocumentLoadError(DocqaError):
    """A single file or page could not be loaded.

    Loaders recover from this locally: the item is logged and left out of
    the results.
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class UnsupportedFileError(DocumentLoadError):
    """Raised for unknown file types when the unsupported-file policy is ``error``."""


class TransientWriteError(DocqaError):
    """A write to the vector store (or the embedding call feeding it) failed."""


class BatchFailure(DocqaError):
    """One or more ingestion batches failed after exhausting their retries.

    Attributes
    ----------
    failures:
        ``(batch_index, exception)`` pairs in batch order.
    """

    def __init__(self, failures: list[tuple[int, BaseException]], total_batches: int) -> None:
        indices = ", ".join(str(i) for i, _ in failures)
        super().__init__(f"{len(failures)}/{total_batches} batch(es) failed: [{indices}]")
        self.failures = failures
        self.total_batches = total_batches


class QueryError(DocqaError):
    """Embedding, search or generation failed while answering a question."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage} failed: {message}")
        self.stage = stage
