"""
SQLite Adapter - Documents, analytics and telemetry storage.
"""

from .analytics import SQLiteAnalyticsStore
from .base import SQLiteStore
from .documents import SQLiteDocumentRepository
from .telemetry import SQLiteTelemetryStore

__all__ = [
    "SQLiteStore",
    "SQLiteDocumentRepository",
    "SQLiteAnalyticsStore",
    "SQLiteTelemetryStore",
]
