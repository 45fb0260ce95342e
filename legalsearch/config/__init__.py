"""
Configuration - Application settings, error taxonomy, and logging setup.
"""

from .errors import (
    AnalyticsError,
    BackendSearchError,
    EmbeddingError,
    ErrorCode,
    InvalidEmbeddingError,
    LegalSearchError,
    StorageError,
    TelemetryPersistError,
)
from .logging import configure_logging, get_logger
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "LegalSearchError",
    "EmbeddingError",
    "InvalidEmbeddingError",
    "BackendSearchError",
    "TelemetryPersistError",
    "AnalyticsError",
    "StorageError",
    # Logging
    "configure_logging",
    "get_logger",
]
