"""Prompt template for retrieval-augmented answering.

The template is kept in one place so it is easy to audit and version.
"""

from __future__ import annotations

from langchain_core.prompts import PromptTemplate

from docqa.retrieval.models import SearchHit

QA_TEMPLATE = """\
Use the following pieces of context to answer the question at the end. If you \
don't know the answer, just say that you don't know, don't try to make up an answer.

{context}

Question: {question}
Helpful Answer:"""

QA_PROMPT = PromptTemplate.from_template(QA_TEMPLATE)


def format_context(hits: list[SearchHit]) -> str:
    """Concatenate retrieved chunk texts, most relevant first."""
    return "\n\n".join(h.content for h in hits)


def build_qa_prompt(
    question: str,
    context: str,
    template: PromptTemplate = QA_PROMPT,
) -> str:
    """Render *template* with ``{context}`` and ``{question}`` substituted."""
    return template.format(context=context, question=question)
