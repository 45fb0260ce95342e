"""
Analytics Models - Append-only facts and aggregate report rows.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class SearchQueryLogEntry(BaseModel):
    """One executed search (successful or not)."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str | None = None
    query: str
    normalized_query: str
    total_results: int = Field(default=0, ge=0)
    has_results: bool = False
    execution_time_ms: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class DocumentViewEntry(BaseModel):
    """One view of a document."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    document_id: str
    user_id: str | None = None
    ip_address: str | None = Field(default=None, max_length=45)
    user_agent: str | None = None
    referer: str | None = None
    viewed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class TimeWindow(BaseModel):
    """Inclusive reporting window; open ends are unbounded."""

    start: datetime | None = None
    end: datetime | None = None

    model_config = {"frozen": True}


class QueryStats(BaseModel):
    """Aggregate for one normalized query."""

    query: str
    count: int
    avg_execution_time_ms: float = 0.0
    avg_total_results: float = 0.0
    last_searched: datetime | None = None


class ViewCount(BaseModel):
    """Raw view aggregate for one document, before metadata lookup."""

    document_id: str
    view_count: int
    last_viewed: datetime | None = None


class DocumentViewStats(BaseModel):
    """View aggregate for one document with denormalized metadata."""

    document_id: str
    title: str
    document_number: str | None = None
    document_type: str | None = None
    view_count: int
    last_viewed: datetime | None = None
