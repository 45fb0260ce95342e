"""
SQLite Telemetry Store - Durable per-query telemetry records.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import aiosqlite

from legalsearch.domains.telemetry.models import (
    ContextMetrics,
    RequestContext,
    SourceAttribution,
    TelemetryRecord,
    TimingMetrics,
)

from .base import SQLiteStore, from_epoch, to_epoch

logger = logging.getLogger(__name__)

__all__ = ["SQLiteTelemetryStore"]


class SQLiteTelemetryStore(SQLiteStore):
    """
    SQLite storage for telemetry records.

    Example:
        >>> store = SQLiteTelemetryStore("data/legalsearch.db")
        >>> await store.initialize()
        >>> recorder = TelemetryRecorder(log_to_db=True, store=store)
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS search_telemetry (
            id TEXT PRIMARY KEY,
            created_at REAL NOT NULL,
            user_id TEXT,
            ip_address TEXT,
            user_agent TEXT,
            query_original TEXT NOT NULL,
            query_normalized TEXT,
            timing TEXT NOT NULL,
            context TEXT NOT NULL,
            sources TEXT NOT NULL DEFAULT '[]',
            answer_summary TEXT,
            success INTEGER NOT NULL DEFAULT 1,
            error_message TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_search_telemetry_created ON search_telemetry(created_at);
        CREATE INDEX IF NOT EXISTS idx_search_telemetry_user ON search_telemetry(user_id);
    """

    async def insert_record(self, record: TelemetryRecord) -> None:
        """Persist a record."""
        conn = await self._get_connection()
        requester = record.requester or RequestContext()

        await conn.execute(
            """
            INSERT INTO search_telemetry
            (id, created_at, user_id, ip_address, user_agent, query_original,
             query_normalized, timing, context, sources, answer_summary, success,
             error_message)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                to_epoch(record.created_at),
                requester.user_id,
                requester.ip_address,
                requester.user_agent,
                record.query_original,
                record.query_normalized,
                record.timing.model_dump_json(),
                record.context.model_dump_json(),
                json.dumps([s.model_dump() for s in record.sources]),
                record.answer_summary,
                int(record.success),
                record.error_message,
            ),
        )

        await conn.commit()

    async def get_recent_records(
        self,
        limit: int = 50,
        offset: int = 0,
        user_id: str | None = None,
    ) -> list[TelemetryRecord]:
        """Newest records first."""
        conn = await self._get_connection()

        sql = "SELECT * FROM search_telemetry"
        params: list[Any] = []
        if user_id:
            sql += " WHERE user_id = ?"
            params.append(user_id)
        sql += " ORDER BY created_at DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        cursor = await conn.execute(sql, params)
        rows = await cursor.fetchall()
        return [self._row_to_record(row) for row in rows]

    async def count_records(self, user_id: str | None = None) -> int:
        """Total number of stored records."""
        conn = await self._get_connection()

        if user_id:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM search_telemetry WHERE user_id = ?", (user_id,)
            )
        else:
            cursor = await conn.execute("SELECT COUNT(*) FROM search_telemetry")

        row = await cursor.fetchone()
        return row[0] if row else 0

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> TelemetryRecord:
        requester = None
        if row["user_id"] or row["ip_address"] or row["user_agent"]:
            requester = RequestContext(
                user_id=row["user_id"],
                ip_address=row["ip_address"],
                user_agent=row["user_agent"],
            )

        return TelemetryRecord(
            id=row["id"],
            created_at=from_epoch(row["created_at"]),
            query_original=row["query_original"],
            query_normalized=row["query_normalized"],
            timing=TimingMetrics.model_validate_json(row["timing"]),
            context=ContextMetrics.model_validate_json(row["context"]),
            sources=[SourceAttribution.model_validate(s) for s in json.loads(row["sources"])],
            answer_summary=row["answer_summary"] or "",
            success=bool(row["success"]),
            error_message=row["error_message"],
            requester=requester,
        )
