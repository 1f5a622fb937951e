"""
Application configuration loaded from environment variables.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from persona_rag.errors import InvalidConfiguration

DEFAULT_PERSONA_NAME = "Spral"
DEFAULT_PERSONA_DESCRIPTION = "a 15-year-old self-taught full-stack web developer"


class Settings(BaseSettings):
    """Centralised application settings."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")
    llm_model_name: str = Field(default="gpt-4o-mini", alias="LLM_MODEL_NAME")
    llm_temperature: float = Field(default=0.3, alias="LLM_TEMPERATURE")
    embedding_model_name: str = Field(default="text-embedding-3-small", alias="EMBEDDING_MODEL_NAME")
    embedding_dimensions: int | None = Field(default=None, alias="EMBEDDING_DIMENSIONS")

    vector_store_path: str = Field(default="./data/vector_store", alias="VECTOR_STORE_PATH")
    chroma_host: str | None = Field(default=None, alias="CHROMA_HOST")
    chroma_port: int = Field(default=8000, alias="CHROMA_PORT")
    collection_name: str = Field(default="persona-rag", alias="COLLECTION_NAME")

    document_path: str = Field(default="./data/biography.txt", alias="DOCUMENT_PATH")

    chunk_size_chars: int = Field(default=1000, alias="CHUNK_SIZE_CHARS")
    chunk_overlap_chars: int = Field(default=200, alias="CHUNK_OVERLAP_CHARS")
    top_k: int = Field(default=3, alias="TOP_K")
    relevance_threshold: float | None = Field(default=None, alias="RELEVANCE_THRESHOLD")

    embed_batch_size: int = Field(default=64, alias="EMBED_BATCH_SIZE")
    embed_concurrency: int = Field(default=4, alias="EMBED_CONCURRENCY")
    request_timeout_sec: float = Field(default=30.0, alias="REQUEST_TIMEOUT_SEC")
    max_retries: int = Field(default=3, alias="MAX_RETRIES")
    retry_initial_wait_sec: float = Field(default=1.0, alias="RETRY_INITIAL_WAIT_SEC")

    persona_name: str = Field(default=DEFAULT_PERSONA_NAME, alias="PERSONA_NAME")
    persona_description: str = Field(default=DEFAULT_PERSONA_DESCRIPTION, alias="PERSONA_DESCRIPTION")

    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")


settings = Settings()


def setup_logging() -> logging.Logger:
    """
    Configure base logging for the app.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    )
    return logging.getLogger("persona_rag")


def validate_chunking(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise InvalidConfiguration(f"chunk size must be positive, got {chunk_size}")
    if overlap < 0 or overlap >= chunk_size:
        raise InvalidConfiguration(
            f"chunk overlap must satisfy 0 <= overlap < chunk size, got overlap={overlap}, size={chunk_size}"
        )


def validate_settings(config: Settings | None = None) -> Settings:
    """
    Fail fast on settings the pipeline cannot run with.
    Called once at process start by every entry point.
    """
    config = config or settings
    if config.openai_api_key is None or not config.openai_api_key.get_secret_value():
        raise InvalidConfiguration("OPENAI_API_KEY is not configured")
    validate_chunking(config.chunk_size_chars, config.chunk_overlap_chars)
    if config.top_k <= 0:
        raise InvalidConfiguration(f"TOP_K must be positive, got {config.top_k}")
    if config.embed_batch_size <= 0 or config.embed_concurrency <= 0:
        raise InvalidConfiguration("EMBED_BATCH_SIZE and EMBED_CONCURRENCY must be positive")
    if config.max_retries <= 0:
        raise InvalidConfiguration(f"MAX_RETRIES must be positive, got {config.max_retries}")
    return config


def public_settings(config: Settings | None = None) -> Dict[str, Any]:
    """
    Return settings without secrets for safe logging/inspection.
    """
    config = config or settings
    return config.model_dump(
        exclude={"openai_api_key"},
        exclude_none=True,
    )


__all__ = [
    "Settings",
    "settings",
    "setup_logging",
    "validate_chunking",
    "validate_settings",
    "public_settings",
]
