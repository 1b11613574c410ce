"""Runtime configuration loaded from environment variables / ``.env``."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Immutable application settings.

    Construct once at process start and pass the instance explicitly to
    provider construction and the ingestion / query pipelines.
    """

    # Provider
    provider: Literal["ollama", "openai"] = Field(
        default="ollama",
        description="Which backend serves embeddings and chat completions.",
    )
    ollama_base_url: str = "http://localhost:11434"
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for local servers)")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible API. Leave empty to use the "
            "OpenAI cloud, e.g. 'http://localhost:11434/v1' for Ollama."
        ),
    )

    # Models
    embedding_model: str = "nomic-embed-text"
    chat_model: str = "qwen2.5:3b"
    chat_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    chat_max_tokens: int = Field(default=1000, gt=0)
    request_timeout: float = Field(default=120.0, gt=0)

    # Chunking / retrieval
    chunk_size: int = Field(default=500, gt=0)
    chunk_overlap: int = Field(default=50, ge=0)
    top_k: int = Field(default=3, gt=0)
    embed_batch_size: int = Field(default=10, gt=0)

    # Filesystem
    knowledge_dir: Path = Path("./knowledge")
    store_path: Path = Path("./data/vectors.json")

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> Settings:
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be < chunk_size ({self.chunk_size})"
            )
        return self
