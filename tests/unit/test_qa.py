"""Unit tests for the question-answering orchestrator, prompt and graph."""

from __future__ import annotations

import asyncio

import pytest

from docqa.errors import QueryError
from docqa.qa.orchestrator import QAOrchestrator
from docqa.qa.prompts import QA_TEMPLATE, build_qa_prompt, format_context
from docqa.qa.state import create_initial_state
from docqa.retrieval.models import SearchHit

WIDGET = SearchHit(id="x-1", content="X is a widget.", score=0.9, metadata={"source": "x.md", "chunk_index": 0})


class BrokenEmbeddings:
    async def aembed_query(self, text: str) -> list[float]:
        raise ConnectionError("embedding server down")


@pytest.fixture()
def widget_store(make_store):
    return make_store(hits=[WIDGET])


# ── prompt ─────────────────────────────────────────────────────────────


class TestPrompt:
    def test_build_qa_prompt_substitutes_context_and_question(self) -> None:
        prompt = build_qa_prompt("What is X?", "X is a widget.")
        assert prompt == (
            "Use the following pieces of context to answer the question at the end. If you "
            "don't know the answer, just say that you don't know, don't try to make up an answer."
            "\n\nX is a widget.\n\nQuestion: What is X?\nHelpful Answer:"
        )

    def test_template_has_both_variables(self) -> None:
        assert "{context}" in QA_TEMPLATE
        assert "{question}" in QA_TEMPLATE

    def test_format_context_joins_in_order(self, fake_store) -> None:
        hits = fake_store._hits[:2]
        assert format_context(hits) == f"{hits[0].content}\n\n{hits[1].content}"
        assert format_context([]) == ""

    def test_initial_state(self) -> None:
        state = create_initial_state("q", k=2)
        assert state["status"] == "idle"
        assert state["k"] == 2
        assert state["hits"] == []


# ── orchestrator ───────────────────────────────────────────────────────


class TestQAOrchestrator:
    @pytest.mark.asyncio
    async def test_answer_uses_retrieved_context(self, widget_store, embeddings, make_llm) -> None:
        llm = make_llm(reply="X is a widget used for demos.")
        qa = QAOrchestrator(widget_store, embeddings, llm)

        answer = await qa.ask("What is X?")

        assert answer == "X is a widget used for demos."
        assert len(llm.prompts) == 1
        assert "X is a widget." in llm.prompts[0]
        assert "What is X?" in llm.prompts[0]
        assert llm.prompts[0] == build_qa_prompt("What is X?", "X is a widget.")
        assert embeddings.queries == ["What is X?"]

    @pytest.mark.asyncio
    async def test_run_returns_final_state(self, fake_store, embeddings, make_llm) -> None:
        qa = QAOrchestrator(fake_store, embeddings, make_llm())

        state = await qa.run("What loads IFC?")

        assert state["status"] == "idle"
        assert state["answer"] == "stub answer"
        assert [h.id for h in state["hits"]] == ["doc-001", "doc-002", "doc-003"]
        assert state["prompt"].endswith("Question: What loads IFC?\nHelpful Answer:")

    @pytest.mark.asyncio
    async def test_ask_with_sources(self, fake_store, embeddings, make_llm) -> None:
        qa = QAOrchestrator(fake_store, embeddings, make_llm(), k=2)

        answer, sources = await qa.ask_with_sources("q")

        assert answer == "stub answer"
        assert [s.short_ref() for s in sources] == ["[plugins/ifc.md§3]", "[annotations.md§1]"]

    @pytest.mark.asyncio
    async def test_k_is_forwarded_to_the_store(self, fake_store, embeddings, make_llm) -> None:
        qa = QAOrchestrator(fake_store, embeddings, make_llm(), k=4)

        await qa.ask("q")
        assert fake_store.last_k == 4

        await qa.ask("q", k=1)
        assert fake_store.last_k == 1

    @pytest.mark.asyncio
    async def test_no_hits_still_answers(self, make_store, embeddings, make_llm) -> None:
        llm = make_llm(reply="I don't know.")
        qa = QAOrchestrator(make_store(), embeddings, llm)

        assert await qa.ask("Anything?") == "I don't know."
        assert llm.prompts[0] == build_qa_prompt("Anything?", "")

    @pytest.mark.asyncio
    async def test_plain_string_response(self, widget_store, embeddings) -> None:
        class CompletionLLM:
            async def ainvoke(self, prompt: str) -> str:
                return "plain text"

        qa = QAOrchestrator(widget_store, embeddings, CompletionLLM())
        assert await qa.ask("What is X?") == "plain text"

    @pytest.mark.asyncio
    async def test_concurrent_questions_do_not_share_state(self, widget_store, embeddings, make_llm) -> None:
        llm = make_llm()
        qa = QAOrchestrator(widget_store, embeddings, llm)

        states = await asyncio.gather(*(qa.run(f"Question {i}?") for i in range(5)))

        assert [s["question"] for s in states] == [f"Question {i}?" for i in range(5)]
        assert all(s["status"] == "idle" for s in states)
        assert len(llm.prompts) == 5


class TestQueryErrors:
    @pytest.mark.asyncio
    async def test_embedding_failure(self, widget_store, make_llm) -> None:
        llm = make_llm()
        qa = QAOrchestrator(widget_store, BrokenEmbeddings(), llm)

        with pytest.raises(QueryError) as exc_info:
            await qa.ask("What is X?")

        assert exc_info.value.stage == "embed"
        assert "embedding server down" in str(exc_info.value)
        assert llm.prompts == []

    @pytest.mark.asyncio
    async def test_search_failure(self, make_store, embeddings, make_llm) -> None:
        class DownStore(make_store):
            async def similarity_search(self, query_embedding, *, k=4):
                raise TimeoutError("chroma timed out")

        llm = make_llm()
        qa = QAOrchestrator(DownStore(), embeddings, llm)

        with pytest.raises(QueryError) as exc_info:
            await qa.ask("What is X?")

        assert exc_info.value.stage == "search"
        assert llm.prompts == []

    @pytest.mark.asyncio
    async def test_generation_failure_is_not_retried(self, widget_store, embeddings, make_llm) -> None:
        llm = make_llm(error=RuntimeError("model unavailable"))
        qa = QAOrchestrator(widget_store, embeddings, llm)

        with pytest.raises(QueryError, match="generate failed: model unavailable") as exc_info:
            await qa.ask("What is X?")

        assert exc_info.value.stage == "generate"
        assert len(llm.prompts) == 1


# ── wiring ─────────────────────────────────────────────────────────────


def test_get_llm_points_at_configured_endpoint() -> None:
    from langchain_openai import ChatOpenAI

    from docqa.config import settings
    from docqa.qa.llm import get_llm

    llm = get_llm()

    assert isinstance(llm, ChatOpenAI)
    assert llm.model_name == settings.llm_model_name
    assert llm.openai_api_base == settings.llm_base_url


def test_from_settings_uses_given_store(fake_store) -> None:
    from docqa.config import settings

    qa = QAOrchestrator.from_settings(fake_store)

    assert qa.retriever.store is fake_store
    assert qa.k == settings.retrieval_k
