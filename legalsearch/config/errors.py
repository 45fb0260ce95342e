"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from legalsearch.config.errors import ErrorCode, LegalSearchError

    raise LegalSearchError(ErrorCode.EMBEDDING_FAILED, "Embedding service unreachable")

Fatal errors (surfaced to the caller):
- EmbeddingError
- InvalidEmbeddingError
- BackendSearchError

Observability errors (always caught and logged, never surfaced):
- TelemetryPersistError
- AnalyticsError
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Embedding errors
    EMBEDDING_FAILED = "EMBEDDING_FAILED"
    EMBEDDING_TIMEOUT = "EMBEDDING_TIMEOUT"
    EMBEDDING_INVALID = "EMBEDDING_INVALID"

    # Search errors
    SEARCH_BACKEND_FAILED = "SEARCH_BACKEND_FAILED"
    SEARCH_BACKEND_TIMEOUT = "SEARCH_BACKEND_TIMEOUT"

    # Observability errors
    TELEMETRY_PERSIST_FAILED = "TELEMETRY_PERSIST_FAILED"
    ANALYTICS_FAILED = "ANALYTICS_FAILED"

    # Storage errors
    STORAGE_CONNECTION_FAILED = "STORAGE_CONNECTION_FAILED"


class LegalSearchError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


# Domain-specific exceptions for cleaner imports
class EmbeddingError(LegalSearchError):
    """Embedding client failed or timed out. Not retried."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.EMBEDDING_FAILED,
    ) -> None:
        super().__init__(code, message, details)


class InvalidEmbeddingError(LegalSearchError):
    """Malformed query vector (empty, non-finite, wrong dimension)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.EMBEDDING_INVALID, message, details)


class BackendSearchError(LegalSearchError):
    """Similarity or keyword backend failed."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.SEARCH_BACKEND_FAILED,
    ) -> None:
        super().__init__(code, message, details)


class TelemetryPersistError(LegalSearchError):
    """Telemetry record could not be persisted."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.TELEMETRY_PERSIST_FAILED, message, details)


class AnalyticsError(LegalSearchError):
    """Analytics read or write failed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.ANALYTICS_FAILED, message, details)


class StorageError(LegalSearchError):
    """Storage/database errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.STORAGE_CONNECTION_FAILED, message, details)
