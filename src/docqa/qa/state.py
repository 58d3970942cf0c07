"""Question-answering state — shared across the graph nodes.

One state dict exists per question; nothing is shared between concurrent
questions.
"""

from __future__ import annotations

from typing import Literal, TypedDict

from docqa.retrieval.models import SearchHit

Status = Literal["idle", "retrieving", "answering"]


class QAState(TypedDict, total=False):
    """Typed state that flows through the QA graph.

    Attributes
    ----------
    question:
        The user's natural-language question.
    k:
        Number of chunks to retrieve.
    status:
        ``idle`` before and after a run, ``retrieving`` while the
        question is embedded and searched, ``answering`` while the LLM
        generates.
    hits:
        Retrieved chunks, most similar first.
    context:
        The retrieved chunk texts joined for the prompt.
    prompt:
        The rendered prompt sent to the LLM.
    answer:
        The LLM's text response.
    """

    question: str
    k: int
    status: Status
    hits: list[SearchHit]
    context: str
    prompt: str
    answer: str


def create_initial_state(question: str, *, k: int = 4) -> QAState:
    """Build the initial state dict for ``graph.ainvoke()``."""
    return {
        "question": question,
        "k": k,
        "status": "idle",
        "hits": [],
        "context": "",
        "prompt": "",
        "answer": "",
    }
