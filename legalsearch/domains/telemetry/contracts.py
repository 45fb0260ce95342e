"""
Telemetry Contracts - Interfaces for telemetry persistence.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import TelemetryRecord


@runtime_checkable
class TelemetryStore(Protocol):
    """Contract for durable telemetry storage."""

    async def insert_record(self, record: TelemetryRecord) -> None:
        """Persist a record."""
        ...

    async def get_recent_records(
        self,
        limit: int = 50,
        offset: int = 0,
        user_id: str | None = None,
    ) -> list[TelemetryRecord]:
        """Newest records first."""
        ...

    async def count_records(self, user_id: str | None = None) -> int:
        """Total number of stored records."""
        ...
