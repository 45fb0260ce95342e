"""
Tests for settings, error taxonomy and logging setup.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from .errors import (
    BackendSearchError,
    EmbeddingError,
    ErrorCode,
    InvalidEmbeddingError,
    LegalSearchError,
    StorageError,
)
from .logging import configure_logging, get_logger
from .settings import Settings


# --- Settings Tests ---


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Test default configuration values."""
    monkeypatch.chdir(tmp_path)
    settings = Settings()

    assert settings.db_path == Path("data/legalsearch.db")
    assert settings.embedding_provider == "sentence_transformers"
    assert settings.embedding_dimension == 384
    assert settings.semantic_similarity_threshold == 0.7
    assert settings.default_semantic_weight == 0.7
    assert settings.search_timeout_seconds is None
    assert settings.telemetry_log_to_db is False
    assert settings.faiss_index_type == "Flat"


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Test environment variables override defaults."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TELEMETRY_LOG_TO_DB", "true")
    monkeypatch.setenv("EMBEDDING_PROVIDER", "ollama")
    monkeypatch.setenv("SEARCH_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("FAISS_INDEX_TYPE", "HNSW")

    settings = Settings()

    assert settings.telemetry_log_to_db is True
    assert settings.embedding_provider == "ollama"
    assert settings.search_timeout_seconds == 2.5
    assert settings.faiss_index_type == "HNSW"


# --- Error Tests ---


def test_error_to_dict() -> None:
    """Test errors serialize to a machine-readable dictionary."""
    error = StorageError("Database unavailable", {"path": "x.db"})
    assert error.to_dict() == {
        "code": "STORAGE_CONNECTION_FAILED",
        "message": "Database unavailable",
        "details": {"path": "x.db"},
    }
    assert str(error) == "[STORAGE_CONNECTION_FAILED] Database unavailable"


def test_domain_error_codes() -> None:
    """Test domain exceptions carry their codes."""
    assert EmbeddingError("x").code == ErrorCode.EMBEDDING_FAILED
    assert EmbeddingError("x", code=ErrorCode.EMBEDDING_TIMEOUT).code == ErrorCode.EMBEDDING_TIMEOUT
    assert InvalidEmbeddingError("x").code == ErrorCode.EMBEDDING_INVALID
    assert BackendSearchError("x").code == ErrorCode.SEARCH_BACKEND_FAILED
    assert isinstance(BackendSearchError("x"), LegalSearchError)


def test_error_codes() -> None:
    """Test the taxonomy only holds codes the application raises."""
    assert {code.value for code in ErrorCode} == {
        "EMBEDDING_FAILED",
        "EMBEDDING_TIMEOUT",
        "EMBEDDING_INVALID",
        "SEARCH_BACKEND_FAILED",
        "SEARCH_BACKEND_TIMEOUT",
        "TELEMETRY_PERSIST_FAILED",
        "ANALYTICS_FAILED",
        "STORAGE_CONNECTION_FAILED",
    }


# --- Logging Tests ---


@pytest.fixture
def restore_logging() -> Generator[logging.Logger, None, None]:
    """Give back the root handlers and structlog defaults after a test."""
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        yield root
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        structlog.reset_defaults()


def test_configure_logging_json(
    restore_logging: logging.Logger, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test JSON mode renders structlog and stdlib records as JSON lines."""
    configure_logging("DEBUG", json_output=True)

    assert restore_logging.level == logging.DEBUG
    assert len(restore_logging.handlers) == 1
    assert isinstance(restore_logging.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    get_logger("legalsearch.test").info("search_query_processed", total_ms=42, query="ley")
    logging.getLogger("legalsearch.plain").warning("Loaded %d documents", 3)

    lines = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line]
    structured, plain = lines

    assert structured["event"] == "search_query_processed"
    assert structured["level"] == "info"
    assert structured["logger"] == "legalsearch.test"
    assert structured["total_ms"] == 42
    assert "timestamp" in structured

    assert plain["event"] == "Loaded 3 documents"
    assert plain["level"] == "warning"
    assert plain["logger"] == "legalsearch.plain"


def test_configure_logging_filters_level(
    restore_logging: logging.Logger, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test records below the configured level are dropped."""
    configure_logging("WARNING", json_output=True)

    get_logger("legalsearch.test").info("search_query_processed")
    get_logger("legalsearch.test").error("search_query_failed", error="boom")

    lines = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line]
    assert [line["event"] for line in lines] == ["search_query_failed"]


def test_configure_logging_console(
    restore_logging: logging.Logger, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test console mode renders readable lines with structured fields."""
    configure_logging("INFO")

    get_logger("legalsearch.test").info("search_query_processed", total_ms=42)

    output = capsys.readouterr().err
    assert "search_query_processed" in output
    assert "total_ms" in output
