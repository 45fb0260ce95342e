"""
Search Instrumentation - Guarded collaborator calls and outcome recording.

Shared by the semantic and hybrid orchestrators:
- Embedding/backend calls with optional timeouts and error mapping
- Telemetry + analytics recording for successful and failed queries
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Sequence
from typing import TYPE_CHECKING, TypeVar

from legalsearch.config.errors import (
    BackendSearchError,
    EmbeddingError,
    ErrorCode,
    LegalSearchError,
)
from legalsearch.domains.analytics.service import normalize_query
from legalsearch.domains.telemetry.models import (
    ContextMetrics,
    RequestContext,
    SourceAttribution,
    TelemetryRecord,
    TimingMetrics,
)
from legalsearch.domains.telemetry.recorder import calculate_metrics, create_answer_summary

from .models import ScoredResult

if TYPE_CHECKING:
    from legalsearch.domains.analytics import SearchAnalyticsService
    from legalsearch.domains.telemetry import TelemetryRecorder

    from .contracts import EmbeddingClient
    from .fusion import FusedPool

logger = logging.getLogger(__name__)

__all__ = ["SearchInstrumentation", "call_backend", "elapsed_ms", "embed_query"]

T = TypeVar("T")


def elapsed_ms(start: float) -> int:
    """Milliseconds since ``start`` (a ``time.perf_counter()`` reading)."""
    return int((time.perf_counter() - start) * 1000)


async def embed_query(
    client: EmbeddingClient,
    text: str,
    timeout: float | None = None,
) -> list[float]:
    """
    Embed ``text``, mapping every failure to EmbeddingError.

    Raises:
        EmbeddingError: Client failed or exceeded ``timeout``
    """
    try:
        if timeout is None:
            return await client.embed(text)
        return await asyncio.wait_for(client.embed(text), timeout)
    except EmbeddingError:
        raise
    except asyncio.TimeoutError as e:
        raise EmbeddingError(
            f"Embedding request timed out after {timeout}s",
            code=ErrorCode.EMBEDDING_TIMEOUT,
        ) from e
    except Exception as e:
        raise EmbeddingError(f"Embedding request failed: {e}") from e


async def call_backend(
    name: str,
    call: Awaitable[T],
    timeout: float | None = None,
) -> T:
    """
    Await a search backend call, mapping unexpected failures.

    Errors from the taxonomy (e.g. InvalidEmbeddingError) pass through.

    Raises:
        BackendSearchError: Backend failed or exceeded ``timeout``
    """
    try:
        if timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout)
    except LegalSearchError:
        raise
    except asyncio.TimeoutError as e:
        raise BackendSearchError(
            f"{name} search timed out after {timeout}s",
            {"backend": name},
            code=ErrorCode.SEARCH_BACKEND_TIMEOUT,
        ) from e
    except Exception as e:
        raise BackendSearchError(f"{name} search failed: {e}", {"backend": name}) from e


class SearchInstrumentation:
    """Record telemetry and analytics for a finished (or failed) query."""

    def __init__(
        self,
        recorder: TelemetryRecorder,
        analytics: SearchAnalyticsService,
    ) -> None:
        self._recorder = recorder
        self._analytics = analytics

    async def record_success(
        self,
        query: str,
        pool: FusedPool,
        results: Sequence[ScoredResult],
        timing: TimingMetrics,
        requester: RequestContext | None = None,
    ) -> str:
        """
        Record a successful query.

        Returns:
            Analytics search query id ("" if analytics failed)
        """
        stats = calculate_metrics(pool.scores)
        sources = [
            SourceAttribution(
                document_id=r.document_id,
                document_title=r.document.title,
                score=r.relevance_score,
                snippet_length=len(r.excerpt or ""),
            )
            for r in results
        ]
        record = TelemetryRecord(
            query_original=query,
            query_normalized=normalize_query(query),
            timing=timing,
            context=ContextMetrics(
                documents_found=len(pool.ranked),
                documents_used=len(results),
                avg_score=stats.avg_score,
                max_score=stats.max_score,
                min_score=stats.min_score,
                context_length_chars=sum(s.snippet_length for s in sources),
            ),
            sources=sources,
            answer_summary=create_answer_summary("; ".join(r.document.title for r in results)),
            success=True,
            requester=requester,
        )

        try:
            self._recorder.record(record)
        except Exception as e:
            logger.warning("Telemetry recording failed: %s", e)

        return await self._analytics.record_search_query(
            query,
            total_results=len(results),
            execution_time_ms=timing.total_ms,
            user_id=requester.user_id if requester else None,
        )

    async def record_failure(
        self,
        query: str,
        error: BaseException,
        timing: TimingMetrics,
        requester: RequestContext | None = None,
    ) -> None:
        """Record a failed query as zero results. Never raises."""
        try:
            self._recorder.record(
                TelemetryRecord(
                    query_original=query,
                    query_normalized=normalize_query(query),
                    timing=timing,
                    success=False,
                    error_message=str(error),
                    requester=requester,
                )
            )
        except Exception as e:
            logger.warning("Telemetry recording of failed query failed: %s", e)

        try:
            await self._analytics.record_search_query(
                query,
                total_results=0,
                execution_time_ms=timing.total_ms,
                user_id=requester.user_id if requester else None,
            )
        except Exception as e:
            logger.warning("Analytics recording of failed query failed: %s", e)
