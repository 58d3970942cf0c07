"""Chat model factory for the answer step.

``DOCQA_LLM_BASE_URL`` selects the endpoint.  The default is a local Ollama
server (``http://localhost:11434/v1``), which speaks the OpenAI
``/v1/chat/completions`` protocol.  An empty value means the OpenAI cloud API.
"""

from __future__ import annotations

import logging

from langchain_openai import ChatOpenAI

from docqa.config import settings

logger = logging.getLogger(__name__)


def get_llm(temperature: float = 0.0) -> ChatOpenAI:
    """Return the configured chat model.

    Local servers ignore the API key, but the client insists on one, so an
    empty key becomes ``"EMPTY"`` just as for the embedding client.
    """
    base_url = settings.llm_base_url or None
    logger.info("Chat model %s at %s", settings.llm_model_name, base_url or "OpenAI cloud")
    return ChatOpenAI(
        model=settings.llm_model_name,
        temperature=temperature,
        base_url=base_url,
        api_key=settings.openai_api_key or "EMPTY",
    )
