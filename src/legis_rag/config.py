"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for a local endpoint)")
    llm_model_name: str = Field(default="gpt-4o-mini", description="Chat model used for answers and summaries")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible chat API. Leave empty to use "
            "OpenAI cloud, e.g. 'http://localhost:8000/v1' for a local vLLM server."
        ),
    )
    llm_temperature: float = 0.2

    # Embedding
    embedding_model: str = "sentence-transformers/all-mpnet-base-v2"
    fallback_embedding_model: str = "models/gemini-embedding-001"
    google_api_key: str = Field(default="", description="Google AI key for the fallback embedding endpoint")
    embedding_dimension: int = 768
    embedding_workers: int = Field(default=4, ge=1, description="Max concurrent embedding calls per ingestion")

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "legislative_bills"

    # Chunking
    chunk_size: int = 1000
    chunk_overlap: int = 200
    min_chunk_length: int = 50

    # Ingestion / retrieval
    summary_context_chunks: int = 3
    existing_summary_chunks: int = 5
    existing_count_limit: int = 10_000
    retrieval_top_k: int = 5
    preview_length: int = 200

    # Network
    request_timeout: float = Field(default=60.0, description="Timeout in seconds for each outbound network call")

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


# Singleton: import `settings` wherever needed.
settings = Settings()
