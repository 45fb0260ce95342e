"""
Search Analytics Service - Query and document-view reporting.

Records every search and every document view as an append-only fact and
answers aggregate reports over them:
- Top queries
- Zero-result queries (content gaps)
- Most viewed documents
- History of a single query

Analytics never breaks the primary path: every read or write failure is
logged and suppressed.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING

from legalsearch.config.errors import AnalyticsError
from legalsearch.domains.telemetry.background import BackgroundTasks

from .date_range import resolve_window
from .models import (
    DocumentViewEntry,
    DocumentViewStats,
    QueryStats,
    SearchQueryLogEntry,
    ViewCount,
)

if TYPE_CHECKING:
    from .contracts import AnalyticsStore, DocumentLookup

logger = logging.getLogger(__name__)

__all__ = ["SearchAnalyticsService", "normalize_query"]

MAX_STORED_QUERY_LENGTH = 500
MISSING_DOCUMENT_TITLE = "Document not found"

_WHITESPACE = re.compile(r"\s+")


def normalize_query(query: str) -> str:
    """Lower-case, trimmed, single-spaced grouping key for a query."""
    return _WHITESPACE.sub(" ", query.strip().lower())[:MAX_STORED_QUERY_LENGTH]


class SearchAnalyticsService:
    """
    Record and report search analytics.

    Example:
        >>> analytics = SearchAnalyticsService(store, documents)
        >>> query_id = await analytics.record_search_query("despido", total_results=3)
        >>> top = await analytics.get_top_queries(limit=5, days=7)
    """

    def __init__(
        self,
        store: AnalyticsStore,
        documents: DocumentLookup | None = None,
    ) -> None:
        """
        Initialize service.

        Args:
            store: Append-only analytics storage
            documents: Metadata lookup for view reports
        """
        self._store = store
        self._documents = documents
        self._tasks = BackgroundTasks()

    async def record_search_query(
        self,
        query: str,
        total_results: int,
        execution_time_ms: int = 0,
        user_id: str | None = None,
    ) -> str:
        """
        Record an executed search.

        Returns:
            Stored entry id, or "" when recording failed
        """
        try:
            entry = SearchQueryLogEntry(
                user_id=user_id,
                query=query[:MAX_STORED_QUERY_LENGTH],
                normalized_query=normalize_query(query),
                total_results=total_results,
                has_results=total_results > 0,
                execution_time_ms=max(0, execution_time_ms),
            )
            entry_id = await self._store.insert_search_query(entry)
        except Exception as e:
            logger.error("Error recording search query: %s", _describe(e))
            return ""

        logger.debug("Search query recorded: %s", entry_id)
        return entry_id

    async def record_document_view(
        self,
        document_id: str,
        user_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        referer: str | None = None,
    ) -> None:
        """Record a document view; failures are logged only."""
        try:
            entry = DocumentViewEntry(
                document_id=document_id,
                user_id=user_id,
                ip_address=ip_address,
                user_agent=user_agent,
                referer=referer,
            )
            await self._store.insert_document_view(entry)
        except Exception as e:
            logger.error("Error recording document view: %s", _describe(e))
            return

        logger.debug("Document view recorded: %s", document_id)

    def record_document_view_background(
        self,
        document_id: str,
        user_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        referer: str | None = None,
    ) -> asyncio.Task[None]:
        """Schedule :meth:`record_document_view` without waiting for it."""
        return self._tasks.spawn(
            self.record_document_view(document_id, user_id, ip_address, user_agent, referer),
            name=f"document-view-{document_id}",
        )

    async def get_top_queries(
        self,
        limit: int = 10,
        days: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[QueryStats]:
        """Most frequent queries with average latency and result counts."""
        try:
            window = resolve_window(days, start_date, end_date)
            return await self._store.aggregate_queries(window, limit)
        except Exception as e:
            logger.error("Error reading top queries: %s", _describe(e))
            return []

    async def get_zero_result_queries(
        self,
        limit: int = 20,
        days: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[QueryStats]:
        """Most frequent queries that returned nothing."""
        try:
            window = resolve_window(days, start_date, end_date)
            return await self._store.aggregate_queries(window, limit, zero_results_only=True)
        except Exception as e:
            logger.error("Error reading zero-result queries: %s", _describe(e))
            return []

    async def get_top_viewed_documents(
        self,
        limit: int = 10,
        days: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[DocumentViewStats]:
        """Most viewed documents with their metadata."""
        try:
            window = resolve_window(days, start_date, end_date)
            counts = await self._store.aggregate_views(window, limit)
            return list(await asyncio.gather(*(self._with_metadata(c) for c in counts)))
        except Exception as e:
            logger.error("Error reading top viewed documents: %s", _describe(e))
            return []

    async def get_query_history(
        self,
        query: str,
        days: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[SearchQueryLogEntry]:
        """Every recorded execution of ``query``, newest first."""
        try:
            window = resolve_window(days, start_date, end_date)
            return await self._store.query_history(normalize_query(query), window)
        except Exception as e:
            logger.error("Error reading query history: %s", _describe(e))
            return []

    async def _with_metadata(self, count: ViewCount) -> DocumentViewStats:
        """Attach document metadata, or a placeholder for missing documents."""
        document = None
        if self._documents is not None:
            document = await self._documents.get_document(count.document_id)

        if document is None:
            return DocumentViewStats(
                document_id=count.document_id,
                title=MISSING_DOCUMENT_TITLE,
                view_count=count.view_count,
                last_viewed=count.last_viewed,
            )

        document_type = getattr(document, "document_type", None)
        return DocumentViewStats(
            document_id=count.document_id,
            title=document.title,
            document_number=getattr(document, "document_number", None),
            document_type=str(document_type) if document_type is not None else None,
            view_count=count.view_count,
            last_viewed=count.last_viewed,
        )

    async def drain(self) -> None:
        """Wait for pending background view recordings."""
        await self._tasks.drain()


def _describe(error: Exception) -> str:
    if isinstance(error, AnalyticsError):
        return error.message
    return f"{type(error).__name__}: {error}"
