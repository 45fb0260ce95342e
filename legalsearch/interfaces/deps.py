"""
Dependencies - Wiring of adapters into the search, telemetry and analytics domains.

Provides singleton instances of storage, index and service objects.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from legalsearch.adapters.faiss import FaissSimilarityIndex
from legalsearch.adapters.ollama import OllamaEmbeddingClient
from legalsearch.adapters.sqlite import (
    SQLiteAnalyticsStore,
    SQLiteDocumentRepository,
    SQLiteTelemetryStore,
)
from legalsearch.config import get_settings
from legalsearch.domains.analytics import SearchAnalyticsService
from legalsearch.domains.search import (
    EmbeddingClient,
    HybridSearchService,
    SemanticSearchService,
)
from legalsearch.domains.telemetry import TelemetryRecorder

logger = logging.getLogger(__name__)


@lru_cache
def get_document_repository() -> SQLiteDocumentRepository:
    """Get document repository singleton."""
    return SQLiteDocumentRepository(get_settings().db_path)


@lru_cache
def get_analytics_store() -> SQLiteAnalyticsStore:
    """Get analytics store singleton."""
    return SQLiteAnalyticsStore(get_settings().db_path)


@lru_cache
def get_telemetry_store() -> SQLiteTelemetryStore:
    """Get telemetry store singleton."""
    return SQLiteTelemetryStore(get_settings().db_path)


@lru_cache
def get_similarity_index() -> FaissSimilarityIndex:
    """Get FAISS index singleton."""
    settings = get_settings()
    return FaissSimilarityIndex(
        dimension=settings.embedding_dimension,
        index_type=settings.faiss_index_type,
    )


@lru_cache
def get_embedding_client() -> EmbeddingClient:
    """Get the embedding client selected by ``embedding_provider``."""
    settings = get_settings()

    if settings.embedding_provider == "ollama":
        return OllamaEmbeddingClient(
            base_url=settings.ollama_url,
            model=settings.ollama_embedding_model,
            timeout=settings.ollama_timeout,
        )

    if settings.embedding_provider == "sentence_transformers":
        # Imports torch
        from legalsearch.adapters.sentence_transformers import SentenceTransformerEmbedder

        return SentenceTransformerEmbedder(settings.embedding_model)

    raise ValueError(f"Unknown embedding provider: {settings.embedding_provider}")


@lru_cache
def get_telemetry_recorder() -> TelemetryRecorder:
    """Get telemetry recorder singleton."""
    return TelemetryRecorder(
        log_to_db=get_settings().telemetry_log_to_db,
        store=get_telemetry_store(),
    )


@lru_cache
def get_analytics_service() -> SearchAnalyticsService:
    """Get search analytics singleton."""
    return SearchAnalyticsService(get_analytics_store(), get_document_repository())


@lru_cache
def get_semantic_search() -> SemanticSearchService:
    """Get semantic search singleton."""
    return SemanticSearchService(
        embedder=get_embedding_client(),
        similarity_backend=get_similarity_index(),
        recorder=get_telemetry_recorder(),
        analytics=get_analytics_service(),
        timeout=get_settings().search_timeout_seconds,
    )


@lru_cache
def get_hybrid_search() -> HybridSearchService:
    """Get hybrid search singleton."""
    return HybridSearchService(
        embedder=get_embedding_client(),
        similarity_backend=get_similarity_index(),
        keyword_backend=get_document_repository(),
        recorder=get_telemetry_recorder(),
        analytics=get_analytics_service(),
        timeout=get_settings().search_timeout_seconds,
    )


async def init_services() -> None:
    """
    Initialize services on startup.

    Creates the SQLite schemas and loads the FAISS index when one was saved.
    """
    settings = get_settings()

    await get_document_repository().initialize()
    await get_analytics_store().initialize()
    await get_telemetry_store().initialize()

    index = get_similarity_index()
    if (settings.faiss_index_path / "faiss_index.bin").exists():
        await index.load(settings.faiss_index_path)
    else:
        logger.warning("No FAISS index at %s; starting empty", settings.faiss_index_path)
        await index.initialize()


async def cleanup_services() -> None:
    """Flush background work and close connections on shutdown."""
    await get_telemetry_recorder().drain()
    await get_analytics_service().drain()

    if get_embedding_client.cache_info().currsize:
        embedder = get_embedding_client()
        if isinstance(embedder, OllamaEmbeddingClient):
            await embedder.close()

    await get_document_repository().close()
    await get_analytics_store().close()
    await get_telemetry_store().close()
