"""
Adapters - External service integrations.

All storage, index and embedding calls are wrapped here to isolate domains
from third-party changes.
"""

from .faiss import FaissSimilarityIndex
from .ollama import OllamaEmbeddingClient
from .sqlite import SQLiteAnalyticsStore, SQLiteDocumentRepository, SQLiteTelemetryStore

__all__ = [
    "FaissSimilarityIndex",
    "OllamaEmbeddingClient",
    "SQLiteDocumentRepository",
    "SQLiteAnalyticsStore",
    "SQLiteTelemetryStore",
]
