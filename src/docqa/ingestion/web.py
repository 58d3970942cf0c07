"""Network loaders — a single web page, or every text file of a GitHub repository."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import quote, urlparse

import requests

from docqa.config import settings
from docqa.errors import ConfigurationError, DocumentLoadError
from docqa.ingestion.loader import (
    HTML_EXTENSIONS,
    UnsupportedPolicy,
    handle_unsupported,
    normalise_text,
    parse_html,
)
from docqa.ingestion.models import make_document

if TYPE_CHECKING:
    from langchain_core.documents import Document

logger = logging.getLogger(__name__)

RAW_CONTENT_URL = "https://raw.githubusercontent.com"

# Files fetched from a repository; anything else is "unknown".
GITHUB_TEXT_EXTENSIONS = frozenset(
    {
        ".md", ".mdx", ".txt", ".rst", ".adoc", ".html", ".htm",
        ".js", ".mjs", ".cjs", ".ts", ".tsx", ".jsx", ".json",
        ".py", ".java", ".go", ".rs", ".c", ".h", ".cpp", ".hpp", ".cs",
        ".css", ".scss", ".yml", ".yaml", ".toml", ".ini", ".cfg",
        ".sh", ".xml", ".sql",
    }
)


# ── single page ───────────────────────────────────────────────────────


def load_url(
    url: str,
    *,
    selector: str = "body",
    timeout: float | None = None,
    session: requests.Session | None = None,
) -> list[Document]:
    """Fetch *url* and return its visible text as one Document.

    HTTP errors and unreachable hosts propagate: the page *is* the source.
    """
    http = session or requests
    resp = http.get(url, timeout=timeout or settings.request_timeout)
    resp.raise_for_status()

    content, title, description = parse_html(resp.text, selector)
    if not content:
        logger.warning("No text content at %s", url)
        return []
    return [make_document(content, url, title=title, description=description)]


# ── GitHub repository ─────────────────────────────────────────────────


def parse_repo_url(repo_url: str) -> tuple[str, str]:
    """Return ``(owner, repo)`` for ``https://github.com/<owner>/<repo>[/...]``."""
    parsed = urlparse(repo_url)
    parts = [p for p in parsed.path.split("/") if p]
    if parsed.netloc not in ("github.com", "www.github.com") or len(parts) < 2:
        raise ConfigurationError(f"Not a GitHub repository URL: {repo_url!r}")
    repo = parts[1].removesuffix(".git")
    return parts[0], repo


class GithubRepoLoader:
    """Enumerate a repository tree at *branch* and fetch recognised files.

    Parameters
    ----------
    repo_url:
        ``https://github.com/<owner>/<repo>``.
    branch:
        Branch (or any tree-ish) to read.
    token:
        Optional GitHub token, sent as a bearer ``Authorization`` header.
    unsupported:
        Policy for files with unknown extensions.
    """

    def __init__(
        self,
        repo_url: str,
        *,
        branch: str | None = None,
        token: str | None = None,
        unsupported: UnsupportedPolicy | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.owner, self.repo = parse_repo_url(repo_url)
        self.branch = branch or settings.github_branch
        self.unsupported = unsupported or settings.unsupported_file_policy
        self.api_url = (api_url or settings.github_api_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self._session = session or requests.Session()
        token = token if token is not None else settings.github_token
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    def list_files(self) -> list[str]:
        """Return every blob path of the tree, recursively."""
        tree = quote(self.branch, safe="")
        url = f"{self.api_url}/repos/{self.owner}/{self.repo}/git/trees/{tree}"
        resp = self._session.get(url, params={"recursive": "1"}, timeout=self.timeout)
        resp.raise_for_status()
        payload = resp.json()
        if payload.get("truncated"):
            logger.warning("Tree listing for %s was truncated by the API", self.repository)
        return [e["path"] for e in payload.get("tree", []) if e.get("type") == "blob"]

    def fetch_file(self, path: str) -> Document:
        ref, file_path = quote(self.branch, safe="/"), quote(path, safe="/")
        url = f"{RAW_CONTENT_URL}/{self.owner}/{self.repo}/{ref}/{file_path}"
        try:
            resp = self._session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise DocumentLoadError(path, str(exc)) from exc

        extra = {"repository": self.repository, "branch": self.branch, "url": url}
        if PurePosixPath(path).suffix.lower() in HTML_EXTENSIONS:
            content, title, description = parse_html(resp.text, settings.html_content_selector)
            extra.update(title=title, description=description)
        else:
            content = normalise_text(resp.text)
        if not content:
            raise DocumentLoadError(path, "empty file")
        return make_document(content, path, **extra)

    def load(self) -> list[Document]:
        documents: list[Document] = []
        for path in self.list_files():
            if PurePosixPath(path).suffix.lower() not in GITHUB_TEXT_EXTENSIONS:
                handle_unsupported(path, self.unsupported)
                continue
            try:
                documents.append(self.fetch_file(path))
            except DocumentLoadError as exc:
                logger.warning("Skipping %s: %s", path, exc)

        logger.info(
            "Loaded %d document(s) from %s@%s", len(documents), self.repository, self.branch
        )
        return documents


def load_github(repo_url: str, *, branch: str | None = None, **kwargs) -> list[Document]:
    """Load every recognised file of a GitHub repository (see :class:`GithubRepoLoader`)."""
    return GithubRepoLoader(repo_url, branch=branch, **kwargs).load()
