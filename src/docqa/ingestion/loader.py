"""Document loaders — normalise heterogeneous sources into LangChain Documents.

Every loader returns a flat list of :class:`Document` objects whose metadata
carries at least a ``source`` key.  Per-item failures (one unreadable file,
one unfetchable blob) are logged and skipped; failures of the whole source
propagate to the caller.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from bs4 import BeautifulSoup

from docqa.config import settings
from docqa.errors import DocumentLoadError, UnsupportedFileError
from docqa.ingestion.models import SourceKind, SourceSpec, make_document

if TYPE_CHECKING:
    from langchain_core.documents import Document

logger = logging.getLogger(__name__)

UnsupportedPolicy = Literal["warn", "ignore", "error"]

TEXT_EXTENSIONS = frozenset({".txt", ".md"})
HTML_EXTENSIONS = frozenset({".html", ".htm"})

_BOILERPLATE_TAGS = ["script", "style", "noscript", "template"]


# ── helpers ───────────────────────────────────────────────────────────


def normalise_text(text: str) -> str:
    """Unicode NFC, collapse whitespace, strip control chars."""
    text = unicodedata.normalize("NFC", text)
    text = re.sub(r"[^\S\n]+", " ", text)  # collapse spaces (keep \n)
    text = re.sub(r" ?\n ?", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)  # max two consecutive newlines
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text)  # ctrl chars
    return text.strip()


def parse_html(html: str, selector: str) -> tuple[str, str | None, str | None]:
    """Extract ``(content, title, description)`` from an HTML page.

    The content is the text of every element matching *selector*; when
    nothing matches, the whole ``<body>`` is used instead.  Title and
    description are prepended to the content so they are embedded too.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_BOILERPLATE_TAGS):
        tag.decompose()

    title = soup.title.get_text(strip=True) if soup.title else None
    meta = soup.find("meta", attrs={"name": "description"})
    description = meta.get("content", "").strip() if meta else None

    regions = soup.select(selector) if selector else []
    if not regions:
        regions = [soup.body or soup]
    body = "\n\n".join(r.get_text(separator="\n", strip=True) for r in regions)

    parts = [p for p in (title, description, body) if p]
    return normalise_text("\n\n".join(parts)), title or None, description or None


def handle_unsupported(source: str, policy: UnsupportedPolicy) -> None:
    """Apply the unsupported-file *policy* to *source*."""
    if policy == "error":
        raise UnsupportedFileError(source, "unsupported file type")
    if policy == "warn":
        logger.warning("Unsupported file type: %s", source)


# ── directory ─────────────────────────────────────────────────────────


def _load_file(path: Path, source: str, selector: str) -> Document:
    raw = path.read_text(encoding="utf-8", errors="replace")
    if path.suffix.lower() in HTML_EXTENSIONS:
        logger.debug("Parsing %s", path)
        content, title, description = parse_html(raw, selector)
        if not content:
            raise DocumentLoadError(source, "no text content")
        return make_document(content, source, title=title, description=description)

    if not raw.strip():
        raise DocumentLoadError(source, "empty file")
    return make_document(raw, source)


def load_directory(
    path: str | Path,
    *,
    content_selector: str | None = None,
    unsupported: UnsupportedPolicy | None = None,
) -> list[Document]:
    """Recursively load every supported file below *path*.

    Parameters
    ----------
    path:
        Root directory containing source documents.
    content_selector:
        CSS selector for the main content region of HTML files
        (defaults to ``settings.html_content_selector``).
    unsupported:
        What to do with unrecognised extensions — ``"warn"`` (default),
        ``"ignore"`` or ``"error"``.

    Returns
    -------
    list[Document]
        One Document per successfully loaded file, ``source`` set to the
        path relative to *path*.
    """
    root = Path(path)
    if not root.is_dir():
        raise FileNotFoundError(f"Directory not found: {path}")
    selector = content_selector if content_selector is not None else settings.html_content_selector
    policy = unsupported or settings.unsupported_file_policy

    documents: list[Document] = []
    for fpath in sorted(root.rglob("*")):
        if not fpath.is_file():
            continue
        source = fpath.relative_to(root).as_posix()
        suffix = fpath.suffix.lower()
        if suffix not in TEXT_EXTENSIONS | HTML_EXTENSIONS:
            handle_unsupported(source, policy)
            continue
        try:
            documents.append(_load_file(fpath, source, selector))
        except (OSError, ValueError, DocumentLoadError) as exc:
            logger.warning("Skipping %s: %s", source, exc)

    logger.info("Loaded %d document(s) from %s", len(documents), root)
    return documents


# ── dispatch ──────────────────────────────────────────────────────────


def load_documents(source: SourceSpec) -> list[Document]:
    """Load *source* with the loader matching its kind.

    Raises :class:`~docqa.errors.ConfigurationError` for an unknown kind
    before touching the filesystem or network.
    """
    kind = source.resolved_kind()

    if kind is SourceKind.DIRECTORY:
        return load_directory(source.location)

    from docqa.ingestion.web import load_github, load_url

    if kind is SourceKind.URL:
        return load_url(source.location)
    return load_github(source.location, branch=source.branch)
