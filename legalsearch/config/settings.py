"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Paths
    data_dir: Path = Path("data")
    db_path: Path = Path("data/legalsearch.db")
    faiss_index_path: Path = Path("data/indices/faiss")
    faiss_index_type: Literal["Flat", "HNSW"] = "Flat"

    # Embeddings: "sentence_transformers" (local) or "ollama" (HTTP)
    embedding_provider: str = "sentence_transformers"
    embedding_model: str = "paraphrase-multilingual-MiniLM-L12-v2"
    embedding_dimension: int = 384

    # Ollama
    ollama_url: str = "http://localhost:11434"
    ollama_embedding_model: str = "nomic-embed-text"
    ollama_timeout: float = 30.0

    # Search
    search_default_limit: int = 10
    semantic_similarity_threshold: float = 0.7
    default_semantic_weight: float = 0.7
    # None keeps embedding/backend calls unbounded
    search_timeout_seconds: float | None = None

    # Telemetry
    telemetry_log_to_db: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
