"""Unit tests for the chunker module."""

import pytest
from langchain_core.documents import Document

from docqa.errors import ConfigurationError
from docqa.ingestion.chunker import chunk_documents

WORDS = [f"w{i:03d}" for i in range(300)]


def _overlap(prev: list[str], nxt: list[str]) -> int:
    """Length of the longest suffix of *prev* that prefixes *nxt*."""
    for k in range(min(len(prev), len(nxt)), 0, -1):
        if prev[-k:] == nxt[:k]:
            return k
    return 0


def test_chunk_documents_splits_long_text() -> None:
    """A document longer than chunk_size should be split."""
    long_text = "word " * 500  # ~2500 chars
    docs = [Document(page_content=long_text, metadata={"source": "test"})]
    chunks = chunk_documents(docs, chunk_size=256, chunk_overlap=32)
    assert len(chunks) > 1


def test_chunk_documents_preserves_metadata() -> None:
    """Metadata from the source document should be preserved in chunks."""
    docs = [Document(page_content="Short text.", metadata={"source": "test.md", "title": "T"})]
    chunks = chunk_documents(docs, chunk_size=256, chunk_overlap=0)
    assert all(c.metadata.get("source") == "test.md" for c in chunks)
    assert chunks[0].metadata == {"source": "test.md", "title": "T", "chunk_index": 0}


def test_chunk_documents_empty_input() -> None:
    """An empty list should return an empty list."""
    assert chunk_documents([]) == []


def test_blank_documents_produce_no_chunks() -> None:
    docs = [
        Document(page_content="", metadata={"source": "empty.md"}),
        Document(page_content="  \n ", metadata={"source": "blank.md"}),
    ]
    assert chunk_documents(docs) == []


def test_chunks_are_length_bounded() -> None:
    docs = [Document(page_content=" ".join(WORDS), metadata={"source": "words.txt"})]
    chunks = chunk_documents(docs, chunk_size=100, chunk_overlap=20)
    assert len(chunks) > 1
    assert all(len(c.page_content) <= 100 for c in chunks)


def test_consecutive_chunks_overlap_and_reconstruct() -> None:
    docs = [Document(page_content=" ".join(WORDS), metadata={"source": "words.txt"})]
    chunks = chunk_documents(docs, chunk_size=100, chunk_overlap=20)

    rebuilt = chunks[0].page_content.split()
    for prev, nxt in zip(chunks, chunks[1:]):
        prev_words, next_words = prev.page_content.split(), nxt.page_content.split()
        k = _overlap(prev_words, next_words)
        assert k >= 1
        assert len(" ".join(next_words[:k])) <= 20
        rebuilt.extend(next_words[k:])

    assert rebuilt == WORDS


def test_chunk_order_and_index_are_stable() -> None:
    docs = [
        Document(page_content=" ".join(WORDS[:60]), metadata={"source": "first.txt"}),
        Document(page_content=" ".join(WORDS[60:120]), metadata={"source": "second.txt"}),
    ]
    chunks = chunk_documents(docs, chunk_size=100, chunk_overlap=10)

    sources = [c.metadata["source"] for c in chunks]
    first_count = sources.count("first.txt")
    assert sources == ["first.txt"] * first_count + ["second.txt"] * (len(chunks) - first_count)
    assert [c.metadata["chunk_index"] for c in chunks[:first_count]] == list(range(first_count))
    assert chunks[first_count].metadata["chunk_index"] == 0


@pytest.mark.parametrize(("size", "overlap"), [(100, 100), (100, 150), (0, 0), (100, -1)])
def test_invalid_parameters(size: int, overlap: int) -> None:
    with pytest.raises(ConfigurationError):
        chunk_documents([], chunk_size=size, chunk_overlap=overlap)
