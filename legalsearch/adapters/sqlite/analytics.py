"""
SQLite Analytics Store - Append-only search and document-view facts.

Timestamps are stored as epoch seconds so that local-day windows compare
correctly regardless of the server timezone.
"""

from __future__ import annotations

import logging
from typing import Any

import aiosqlite

from legalsearch.domains.analytics.models import (
    DocumentViewEntry,
    QueryStats,
    SearchQueryLogEntry,
    TimeWindow,
    ViewCount,
)

from .base import SQLiteStore, from_epoch, to_epoch

logger = logging.getLogger(__name__)

__all__ = ["SQLiteAnalyticsStore"]


def _window_clause(column: str, window: TimeWindow) -> tuple[str, list[Any]]:
    """SQL conditions (inclusive on both ends) for a reporting window."""
    conditions: list[str] = []
    params: list[Any] = []
    if window.start is not None:
        conditions.append(f"{column} >= ?")
        params.append(to_epoch(window.start))
    if window.end is not None:
        conditions.append(f"{column} <= ?")
        params.append(to_epoch(window.end))
    return " AND ".join(conditions), params


class SQLiteAnalyticsStore(SQLiteStore):
    """
    SQLite storage for search analytics.

    Example:
        >>> store = SQLiteAnalyticsStore("data/legalsearch.db")
        >>> await store.initialize()
        >>> await store.insert_search_query(entry)
        >>> stats = await store.aggregate_queries(TimeWindow(), limit=10)
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS search_queries (
            id TEXT PRIMARY KEY,
            user_id TEXT,
            query TEXT NOT NULL,
            normalized_query TEXT NOT NULL,
            total_results INTEGER NOT NULL DEFAULT 0,
            has_results INTEGER NOT NULL DEFAULT 0,
            execution_time_ms INTEGER NOT NULL DEFAULT 0,
            created_at REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS document_views (
            id TEXT PRIMARY KEY,
            document_id TEXT NOT NULL,
            user_id TEXT,
            ip_address TEXT,
            user_agent TEXT,
            referer TEXT,
            viewed_at REAL NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_search_queries_normalized ON search_queries(normalized_query);
        CREATE INDEX IF NOT EXISTS idx_search_queries_created ON search_queries(created_at);
        CREATE INDEX IF NOT EXISTS idx_document_views_document ON document_views(document_id);
        CREATE INDEX IF NOT EXISTS idx_document_views_viewed ON document_views(viewed_at);
    """

    async def insert_search_query(self, entry: SearchQueryLogEntry) -> str:
        """Append a query fact and return its id."""
        conn = await self._get_connection()

        await conn.execute(
            """
            INSERT INTO search_queries
            (id, user_id, query, normalized_query, total_results, has_results,
             execution_time_ms, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.user_id,
                entry.query,
                entry.normalized_query,
                entry.total_results,
                int(entry.has_results),
                entry.execution_time_ms,
                to_epoch(entry.created_at),
            ),
        )

        await conn.commit()
        return entry.id

    async def insert_document_view(self, entry: DocumentViewEntry) -> str:
        """Append a view fact and return its id."""
        conn = await self._get_connection()

        await conn.execute(
            """
            INSERT INTO document_views
            (id, document_id, user_id, ip_address, user_agent, referer, viewed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.document_id,
                entry.user_id,
                entry.ip_address,
                entry.user_agent,
                entry.referer,
                to_epoch(entry.viewed_at),
            ),
        )

        await conn.commit()
        return entry.id

    async def aggregate_queries(
        self,
        window: TimeWindow,
        limit: int,
        zero_results_only: bool = False,
    ) -> list[QueryStats]:
        """Group queries by normalized text, most frequent first."""
        conn = await self._get_connection()

        conditions, params = _window_clause("created_at", window)
        if zero_results_only:
            conditions = " AND ".join(filter(None, [conditions, "has_results = 0"]))

        sql = """
            SELECT normalized_query,
                   COUNT(*) AS count,
                   AVG(execution_time_ms) AS avg_execution_time_ms,
                   AVG(total_results) AS avg_total_results,
                   MAX(created_at) AS last_searched
            FROM search_queries
        """
        if conditions:
            sql += f" WHERE {conditions}"
        sql += " GROUP BY normalized_query ORDER BY count DESC, last_searched DESC LIMIT ?"
        params.append(limit)

        cursor = await conn.execute(sql, params)
        rows = await cursor.fetchall()

        return [
            QueryStats(
                query=row["normalized_query"],
                count=row["count"],
                avg_execution_time_ms=round(row["avg_execution_time_ms"] or 0.0, 2),
                avg_total_results=round(row["avg_total_results"] or 0.0, 2),
                last_searched=from_epoch(row["last_searched"]),
            )
            for row in rows
        ]

    async def aggregate_views(self, window: TimeWindow, limit: int) -> list[ViewCount]:
        """Group views by document, most viewed first."""
        conn = await self._get_connection()

        conditions, params = _window_clause("viewed_at", window)
        sql = """
            SELECT document_id, COUNT(*) AS view_count, MAX(viewed_at) AS last_viewed
            FROM document_views
        """
        if conditions:
            sql += f" WHERE {conditions}"
        sql += " GROUP BY document_id ORDER BY view_count DESC, last_viewed DESC LIMIT ?"
        params.append(limit)

        cursor = await conn.execute(sql, params)
        rows = await cursor.fetchall()

        return [
            ViewCount(
                document_id=row["document_id"],
                view_count=row["view_count"],
                last_viewed=from_epoch(row["last_viewed"]),
            )
            for row in rows
        ]

    async def query_history(
        self,
        normalized_query: str,
        window: TimeWindow,
    ) -> list[SearchQueryLogEntry]:
        """Every fact for one normalized query, newest first."""
        conn = await self._get_connection()

        conditions, params = _window_clause("created_at", window)
        sql = "SELECT * FROM search_queries WHERE normalized_query = ?"
        if conditions:
            sql += f" AND {conditions}"
        sql += " ORDER BY created_at DESC"

        cursor = await conn.execute(sql, [normalized_query, *params])
        rows = await cursor.fetchall()
        return [self._row_to_entry(row) for row in rows]

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> SearchQueryLogEntry:
        return SearchQueryLogEntry(
            id=row["id"],
            user_id=row["user_id"],
            query=row["query"],
            normalized_query=row["normalized_query"],
            total_results=row["total_results"],
            has_results=bool(row["has_results"]),
            execution_time_ms=row["execution_time_ms"],
            created_at=from_epoch(row["created_at"]),
        )
