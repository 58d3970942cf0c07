"""
QA — retrieval-augmented question answering built with LangGraph.

Public API
----------
- :class:`QAOrchestrator` — embed, retrieve, prompt, generate.
- :func:`build_graph` — compile the two-node workflow.
- :class:`QAState` — the TypedDict flowing through every node.
"""

from docqa.qa.graph import build_graph
from docqa.qa.orchestrator import QAOrchestrator
from docqa.qa.prompts import QA_PROMPT, QA_TEMPLATE, build_qa_prompt
from docqa.qa.state import QAState, create_initial_state

__all__ = [
    "QAOrchestrator",
    "QAState",
    "QA_PROMPT",
    "QA_TEMPLATE",
    "build_graph",
    "build_qa_prompt",
    "create_initial_state",
]
