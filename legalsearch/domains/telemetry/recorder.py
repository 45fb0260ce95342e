"""
Telemetry Recorder - Observability for the retrieval pipeline.

This recorder provides:
- Structured logging of every query (always, synchronously)
- Optional persistence to a telemetry store (fire-and-forget)
- Score statistics and answer summaries for records

Privacy:
- Logged queries are truncated to 200 characters
- Only a truncated answer summary is ever stored
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING

from legalsearch.config.errors import TelemetryPersistError
from legalsearch.config.logging import get_logger

from .background import BackgroundTasks
from .models import ScoreStatistics, TelemetryRecord, TelemetryState

if TYPE_CHECKING:
    from .contracts import TelemetryStore

logger = get_logger(__name__)

__all__ = ["TelemetryRecorder", "calculate_metrics", "create_answer_summary"]

LOGGED_QUERY_LENGTH = 200


def calculate_metrics(scores: Sequence[float]) -> ScoreStatistics:
    """
    Average, max and min of ``scores``.

    An empty sequence yields all-zero statistics.
    """
    if not scores:
        return ScoreStatistics()

    return ScoreStatistics(
        avg_score=sum(scores) / len(scores),
        max_score=max(scores),
        min_score=min(scores),
    )


def create_answer_summary(answer: str, max_length: int = 150) -> str:
    """
    Truncate ``answer`` for storage, preferring a word boundary.

    The cut falls back to a hard truncation when the last space is in the
    first 80% of the window.
    """
    if len(answer) <= max_length:
        return answer

    truncated = answer[:max_length]
    last_space = truncated.rfind(" ")

    if last_space > max_length * 0.8:
        return truncated[:last_space] + "..."

    return truncated + "..."


class TelemetryRecorder:
    """
    Log and optionally persist per-query telemetry.

    Persistence never fails the caller: errors are logged as warnings and
    the record ends in ``PERSIST_FAILED``.

    Example:
        >>> recorder = TelemetryRecorder(log_to_db=True, store=telemetry_store)
        >>> task = recorder.record(record)
        >>> await task
        <TelemetryState.PERSISTED: 'persisted'>
    """

    def __init__(
        self,
        log_to_db: bool = False,
        store: TelemetryStore | None = None,
    ) -> None:
        """
        Initialize recorder.

        Args:
            log_to_db: Persist records to ``store`` in the background
            store: Telemetry store (required for persistence and read paths)
        """
        self._log_to_db = log_to_db and store is not None
        self._store = store
        self._tasks = BackgroundTasks()

        if log_to_db and store is None:
            logger.warning("search_telemetry_store_missing")
        elif self._log_to_db:
            logger.info("search_telemetry_persistence_enabled")

    @property
    def persistence_enabled(self) -> bool:
        return self._log_to_db

    def record(self, record: TelemetryRecord) -> asyncio.Task[TelemetryState] | None:
        """
        Record telemetry for one query.

        Logs synchronously, then schedules persistence when enabled.

        Returns:
            Task resolving to the final state, or None when persistence is off
        """
        self.log_to_sink(record)

        if not self._log_to_db:
            return None

        return self._tasks.spawn(self._persist(record), name=f"telemetry-{record.id}")

    def log_to_sink(self, record: TelemetryRecord) -> TelemetryState:
        """Emit the structured log line for ``record``."""
        fields = {
            "query": record.query_original[:LOGGED_QUERY_LENGTH],
            "query_length": len(record.query_original),
            "embedding_ms": record.timing.embedding_ms,
            "search_ms": record.timing.search_ms,
            "context_build_ms": record.timing.context_build_ms,
            "total_ms": record.timing.total_ms,
            "documents_found": record.context.documents_found,
            "documents_used": record.context.documents_used,
            "avg_score": round(record.context.avg_score, 3),
            "max_score": round(record.context.max_score, 3),
            "min_score": round(record.context.min_score, 3),
            "context_chars": record.context.context_length_chars,
            "sources_count": len(record.sources),
            "success": record.success,
            "error": record.error_message,
            "user_id": record.requester.user_id if record.requester else None,
        }

        if record.success:
            logger.info("search_query_processed", **fields)
        else:
            logger.error("search_query_failed", **fields)

        return TelemetryState.LOGGED

    async def _persist(self, record: TelemetryRecord) -> TelemetryState:
        """Persist ``record``; failures are logged, never raised."""
        assert self._store is not None  # Guaranteed by _log_to_db

        try:
            await self._store.insert_record(record)
        except Exception as e:
            error = e if isinstance(e, TelemetryPersistError) else TelemetryPersistError(str(e))
            logger.warning(
                "search_telemetry_persist_failed",
                error=error.message,
                telemetry_id=record.id,
            )
            return TelemetryState.PERSIST_FAILED

        logger.debug("search_telemetry_persisted", telemetry_id=record.id)
        return TelemetryState.PERSISTED

    async def get_recent_records(
        self,
        limit: int = 50,
        offset: int = 0,
        user_id: str | None = None,
    ) -> list[TelemetryRecord]:
        """Newest stored records first; empty on any store failure."""
        if self._store is None:
            return []

        try:
            return await self._store.get_recent_records(limit=limit, offset=offset, user_id=user_id)
        except Exception as e:
            logger.error("search_telemetry_query_failed", error=str(e))
            return []

    async def count_records(self, user_id: str | None = None) -> int:
        """Number of stored records; zero on any store failure."""
        if self._store is None:
            return 0

        try:
            return await self._store.count_records(user_id=user_id)
        except Exception as e:
            logger.warning("search_telemetry_count_failed", error=str(e))
            return 0

    @staticmethod
    def calculate_metrics(scores: Sequence[float]) -> ScoreStatistics:
        """See :func:`calculate_metrics`."""
        return calculate_metrics(scores)

    @staticmethod
    def create_answer_summary(answer: str, max_length: int = 150) -> str:
        """See :func:`create_answer_summary`."""
        return create_answer_summary(answer, max_length)

    async def drain(self) -> None:
        """Wait for pending persistence tasks (shutdown, tests)."""
        await self._tasks.drain()
