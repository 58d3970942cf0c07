"""Text chunking strategies."""

from __future__ import annotations

from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

from docqa.errors import ConfigurationError


def chunk_documents(
    documents: list[Document],
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
) -> list[Document]:
    """Split *documents* into smaller chunks for embedding.

    Parameters
    ----------
    documents:
        Source documents produced by a loader.
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of overlapping characters between consecutive chunks.

    Returns
    -------
    list[Document]
        Chunks in document order, then position order.  Each chunk copies
        its parent's metadata and adds ``chunk_index``.  Blank documents
        yield no chunks.
    """
    if chunk_size <= 0 or chunk_overlap < 0 or chunk_overlap >= chunk_size:
        raise ConfigurationError(
            f"Invalid chunking parameters: chunk_size={chunk_size}, chunk_overlap={chunk_overlap}"
        )

    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
        separators=["\n\n", "\n", ". ", " ", ""],
    )

    chunks: list[Document] = []
    for doc in documents:
        if not doc.page_content.strip():
            continue
        for index, text in enumerate(splitter.split_text(doc.page_content)):
            chunks.append(Document(page_content=text, metadata={**doc.metadata, "chunk_index": index}))
    return chunks
