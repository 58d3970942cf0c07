"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from ``DOCQA_*`` env vars or .env file."""

    # LLM / embeddings
    openai_api_key: str = Field(
        default="ollama",
        description="API key for the OpenAI-compatible endpoint (any non-empty value for Ollama)",
    )
    llm_model_name: str = Field(default="llama3.1", description="Chat model identifier")
    llm_base_url: str = Field(
        default="http://localhost:11434/v1",
        description=(
            "Base URL of the OpenAI-compatible generation API. Leave empty to use "
            "OpenAI cloud; the default points at a local Ollama server."
        ),
    )
    embedding_provider: Literal["openai", "huggingface"] = "openai"
    embedding_model_name: str = Field(default="llama3.1", description="Embedding model identifier")
    embedding_base_url: str = "http://localhost:11434/v1"

    # Vector store
    vector_store_url: str = "http://localhost:8000"
    vector_store_timeout: float = Field(default=3.0, description="Per-request timeout in seconds")
    collection_name: str = "docqa"

    # Chunking
    chunk_size: int = 1000
    chunk_overlap: int = 200

    # Ingestion
    batch_size: int = 50
    concurrency_limit: int = 5
    max_retries: int = 3
    retry_initial_delay: float = Field(default=1.0, description="Seconds before the first retry")

    # Retrieval
    retrieval_k: int = 4

    # Loaders
    html_content_selector: str = ".content"
    unsupported_file_policy: Literal["warn", "ignore", "error"] = "warn"
    github_branch: str = "master"
    github_token: str = ""
    github_api_url: str = "https://api.github.com"
    request_timeout: float = 30.0

    log_level: str = "INFO"

    model_config = {"env_prefix": "DOCQA_", "env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
