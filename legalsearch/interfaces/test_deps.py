"""Tests for service wiring."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from legalsearch.adapters.ollama import OllamaEmbeddingClient
from legalsearch.config import Settings

from . import deps

_FACTORIES = [
    deps.get_document_repository,
    deps.get_analytics_store,
    deps.get_telemetry_store,
    deps.get_similarity_index,
    deps.get_embedding_client,
    deps.get_telemetry_recorder,
    deps.get_analytics_service,
    deps.get_semantic_search,
    deps.get_hybrid_search,
]


def _clear() -> None:
    for factory in _FACTORIES:
        factory.cache_clear()


@pytest.fixture
def settings(tmp_path: Path) -> Generator[Settings, None, None]:
    """Point every singleton at a temporary data directory."""
    settings = Settings(
        data_dir=tmp_path,
        db_path=tmp_path / "test.db",
        faiss_index_path=tmp_path / "faiss",
        embedding_provider="ollama",
        embedding_dimension=3,
        telemetry_log_to_db=True,
    )
    _clear()
    with patch.object(deps, "get_settings", return_value=settings):
        yield settings
    _clear()


def test_embedding_provider_selection(settings: Settings) -> None:
    """Test the configured provider is used."""
    client = deps.get_embedding_client()
    assert isinstance(client, OllamaEmbeddingClient)
    assert client.model == settings.ollama_embedding_model


def test_unknown_embedding_provider(settings: Settings) -> None:
    """Test an unknown provider is rejected."""
    bad = settings.model_copy(update={"embedding_provider": "word2vec"})
    with patch.object(deps, "get_settings", return_value=bad):
        with pytest.raises(ValueError):
            deps.get_embedding_client()


def test_singletons_are_shared(settings: Settings) -> None:
    """Test services share the same adapters."""
    assert deps.get_hybrid_search() is deps.get_hybrid_search()
    assert deps.get_telemetry_recorder().persistence_enabled is True
    assert deps.get_similarity_index().dimension == 3
    assert deps.get_similarity_index().index_type == "Flat"


def test_similarity_index_type_from_settings(settings: Settings) -> None:
    """Test the configured FAISS index type reaches the index."""
    hnsw = settings.model_copy(update={"faiss_index_type": "HNSW"})
    with patch.object(deps, "get_settings", return_value=hnsw):
        assert deps.get_similarity_index().index_type == "HNSW"


async def test_init_and_cleanup(settings: Settings) -> None:
    """Test startup creates the schema and an empty index."""
    await deps.init_services()
    try:
        assert await deps.get_document_repository().get_document_count() == 0
        assert deps.get_similarity_index().size == 0
        assert await deps.get_telemetry_recorder().count_records() == 0
    finally:
        await deps.cleanup_services()
