"""
Analytics Contracts - Interfaces for analytics storage and document metadata.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .models import (
    DocumentViewEntry,
    QueryStats,
    SearchQueryLogEntry,
    TimeWindow,
    ViewCount,
)


@runtime_checkable
class AnalyticsStore(Protocol):
    """Contract for append-only analytics fact storage."""

    async def insert_search_query(self, entry: SearchQueryLogEntry) -> str:
        """Append a query fact and return its id."""
        ...

    async def insert_document_view(self, entry: DocumentViewEntry) -> str:
        """Append a view fact and return its id."""
        ...

    async def aggregate_queries(
        self,
        window: TimeWindow,
        limit: int,
        zero_results_only: bool = False,
    ) -> list[QueryStats]:
        """Group queries by normalized text, most frequent first."""
        ...

    async def aggregate_views(self, window: TimeWindow, limit: int) -> list[ViewCount]:
        """Group views by document, most viewed first."""
        ...

    async def query_history(
        self,
        normalized_query: str,
        window: TimeWindow,
    ) -> list[SearchQueryLogEntry]:
        """Every fact for one normalized query, newest first."""
        ...


@runtime_checkable
class DocumentLookup(Protocol):
    """
    Contract for fetching document metadata by identifier.

    Returned objects expose ``title``, ``document_number`` and
    ``document_type``.
    """

    async def get_document(self, doc_id: str) -> Any | None:
        """Get document by ID."""
        ...
