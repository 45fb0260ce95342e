"""
SQLite Document Repository - Legal document storage with keyword search.

Features:
- Async operations via aiosqlite
- Case-insensitive substring search over title, summary and full text
- Exact keyword tag matching
- Type, scope, active and published filters
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import aiosqlite

from legalsearch.domains.search.models import (
    MAX_RESULT_LIMIT,
    CandidateDocument,
    DocumentStatus,
    KeywordSearchOptions,
)

from .base import SQLiteStore, from_epoch, to_epoch

logger = logging.getLogger(__name__)

__all__ = ["SQLiteDocumentRepository"]


def _casefold(value: str | None) -> str | None:
    # SQLite's LOWER() only folds ASCII; legal text is not ASCII-only
    return value.casefold() if value is not None else None


class SQLiteDocumentRepository(SQLiteStore):
    """
    SQLite repository for legal documents.

    Example:
        >>> repo = SQLiteDocumentRepository("data/legalsearch.db")
        >>> await repo.initialize()
        >>> await repo.insert_document(CandidateDocument(id="ley-1", title="Ley de Contratos"))
        >>> docs = await repo.search_by_keywords("contratos", KeywordSearchOptions())
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS documents (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            document_number TEXT,
            document_type TEXT NOT NULL DEFAULT 'LAW',
            hierarchy_level INTEGER NOT NULL DEFAULT 0,
            scope TEXT,
            issuing_entity TEXT,
            status TEXT NOT NULL DEFAULT 'PUBLISHED',
            is_active INTEGER NOT NULL DEFAULT 1,
            summary TEXT,
            full_text TEXT,
            keywords TEXT NOT NULL DEFAULT '[]',
            published_at REAL,
            created_at REAL NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_documents_type ON documents(document_type);
        CREATE INDEX IF NOT EXISTS idx_documents_scope ON documents(scope);
        CREATE INDEX IF NOT EXISTS idx_documents_created ON documents(created_at);
    """

    async def _get_connection(self) -> aiosqlite.Connection:
        first = self._connection is None
        conn = await super()._get_connection()
        if first:
            await conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    async def insert_document(self, document: CandidateDocument) -> str:
        """
        Insert or replace a document.

        Returns:
            Document ID
        """
        conn = await self._get_connection()

        await conn.execute(
            """
            INSERT OR REPLACE INTO documents
            (id, title, document_number, document_type, hierarchy_level, scope,
             issuing_entity, status, is_active, summary, full_text, keywords,
             published_at, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                document.id,
                document.title,
                document.document_number,
                document.document_type,
                document.hierarchy_level,
                document.scope,
                document.issuing_entity,
                document.status.value,
                int(document.is_active),
                document.summary,
                document.full_text,
                json.dumps(document.keywords),
                to_epoch(document.published_at),
                time.time(),
            ),
        )

        await conn.commit()
        return document.id

    async def get_document(self, doc_id: str) -> CandidateDocument | None:
        """Get document by ID."""
        conn = await self._get_connection()

        cursor = await conn.execute("SELECT * FROM documents WHERE id = ?", (doc_id,))
        row = await cursor.fetchone()

        if row:
            return self._row_to_document(row)
        return None

    async def search_by_keywords(
        self,
        query: str,
        options: KeywordSearchOptions,
    ) -> list[CandidateDocument]:
        """
        Keyword search.

        A document matches when the query is a case-insensitive substring of
        its title, summary or full text, or when one of its keywords equals a
        whitespace-separated query word. Newest documents first.

        Args:
            query: Search query
            options: Limit and filters

        Returns:
            Matching documents; list order is the backend rank
        """
        conn = await self._get_connection()

        needle = query.casefold()
        words = query.split()

        conditions = [
            "instr(casefold(title), ?) > 0",
            "instr(coalesce(casefold(summary), ''), ?) > 0",
            "instr(coalesce(casefold(full_text), ''), ?) > 0",
        ]
        params: list[Any] = [needle, needle, needle]

        if words:
            placeholders = ", ".join("?" for _ in words)
            conditions.append(
                f"EXISTS (SELECT 1 FROM json_each(documents.keywords) WHERE value IN ({placeholders}))"
            )
            params.extend(words)

        sql = f"SELECT * FROM documents WHERE ({' OR '.join(conditions)})"

        if options.document_type:
            sql += " AND document_type = ?"
            params.append(options.document_type)
        if options.scope:
            sql += " AND scope = ?"
            params.append(options.scope)
        if options.only_active:
            sql += " AND is_active = 1"
        if options.only_published:
            sql += " AND status = ?"
            params.append(DocumentStatus.PUBLISHED.value)

        sql += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(min(max(1, int(options.limit)), MAX_RESULT_LIMIT))

        cursor = await conn.execute(sql, params)
        rows = await cursor.fetchall()

        logger.debug("Keyword search %r matched %d documents", query[:50], len(rows))
        return [self._row_to_document(row) for row in rows]

    async def get_document_count(self) -> int:
        """Get total document count."""
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT COUNT(*) FROM documents")
        row = await cursor.fetchone()
        return row[0] if row else 0

    @staticmethod
    def _row_to_document(row: aiosqlite.Row) -> CandidateDocument:
        return CandidateDocument(
            id=row["id"],
            title=row["title"],
            document_number=row["document_number"],
            document_type=row["document_type"],
            hierarchy_level=row["hierarchy_level"],
            scope=row["scope"],
            issuing_entity=row["issuing_entity"],
            status=DocumentStatus(row["status"]),
            is_active=bool(row["is_active"]),
            summary=row["summary"],
            full_text=row["full_text"],
            keywords=json.loads(row["keywords"] or "[]"),
            published_at=from_epoch(row["published_at"]),
        )
