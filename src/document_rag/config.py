"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Document
    document_path: str = Field(default="document.pdf", description="Document ingested at startup")

    # Embedding
    embedding_backend: Literal["ollama", "huggingface"] = "ollama"
    embedding_model: str = "nomic-embed-text"
    ollama_host: str = "http://localhost:11434"
    embed_max_concurrency: int = Field(
        default=8,
        ge=1,
        description="Maximum number of embedding calls in flight during ingestion",
    )
    embed_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single embedding call",
    )

    # LLM
    openai_api_key: str = Field(default="", description="API key (or empty for a local endpoint)")
    llm_model_name: str = Field(default="phi3", description="LLM model identifier")
    llm_base_url: str = Field(
        default="http://localhost:11434/v1",
        description=(
            "Base URL of an OpenAI-compatible chat endpoint. The default points "
            "at Ollama's /v1 API; leave empty to use the OpenAI cloud."
        ),
    )
    llm_temperature: float = Field(default=0.0, ge=0.0, le=2.0)

    # Chunking / retrieval
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=100, ge=0)
    k_results: int = Field(default=3, ge=1, description="Number of chunks forwarded to the LLM")

    # Serving
    host: str = "0.0.0.0"
    port: int = 3000
    ingest_in_background: bool = Field(
        default=False,
        description="Start serving before ingestion finishes; queries get 503 until ready",
    )
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_chunking(self) -> Settings:
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        return self

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton: import `settings` wherever needed.
settings = Settings()
