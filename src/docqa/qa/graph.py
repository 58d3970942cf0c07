"""LangGraph graph definition — the question-answering workflow.

1. **Retrieve** — embed the question and fetch the top-k chunks.
2. **Answer** — render the prompt with the retrieved context and call the LLM.

Nodes are injected so the graph can run without Chroma or an LLM server
(see tests).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from langgraph.graph import END, StateGraph

from docqa.qa.state import QAState

Node = Callable[[QAState], Awaitable[dict[str, Any]]]


def build_graph(retrieve: Node, answer: Node) -> Any:
    """Construct and return the compiled QA graph.

    Graph topology::

        START → retrieve → answer → END

    Returns
    -------
    CompiledGraph
        A compiled LangGraph workflow ready for ``.ainvoke()``.
    """
    workflow = StateGraph(QAState)

    workflow.add_node("retrieve", retrieve)
    workflow.add_node("answer", answer)

    workflow.set_entry_point("retrieve")
    workflow.add_edge("retrieve", "answer")
    workflow.add_edge("answer", END)

    return workflow.compile()
