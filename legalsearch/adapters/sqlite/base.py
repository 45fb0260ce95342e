"""
SQLite base - Shared connection handling for the SQLite stores.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

from legalsearch.config.errors import StorageError

logger = logging.getLogger(__name__)

__all__ = ["SQLiteStore", "from_epoch", "to_epoch"]


def to_epoch(value: datetime | None) -> float | None:
    """Epoch seconds; naive datetimes are local time."""
    return value.timestamp() if value is not None else None


def from_epoch(value: float | None) -> datetime | None:
    """Timezone-aware local datetime from epoch seconds."""
    return datetime.fromtimestamp(value).astimezone() if value is not None else None


class SQLiteStore:
    """
    Lazily connected SQLite database with a schema script.

    Subclasses set ``SCHEMA``.
    """

    SCHEMA = ""

    def __init__(self, db_path: str | Path) -> None:
        """
        Initialize store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection: aiosqlite.Connection | None = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            try:
                self._connection = await aiosqlite.connect(str(self.db_path))
            except Exception as e:
                raise StorageError(
                    f"Cannot open database: {e}", {"db_path": str(self.db_path)}
                ) from e
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def initialize(self) -> None:
        """Initialize database schema."""
        conn = await self._get_connection()
        await conn.executescript(self.SCHEMA)
        await conn.commit()
        logger.info("%s initialized: %s", type(self).__name__, self.db_path)

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
