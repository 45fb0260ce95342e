"""
Telemetry Models - Per-query observability records.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class RequestContext(BaseModel):
    """Who issued a query, as far as the caller knows."""

    user_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    model_config = {"frozen": True}


class TelemetryState(str, Enum):
    """Lifecycle of a telemetry record once ``record()`` has logged it."""

    LOGGED = "logged"
    PERSISTED = "persisted"
    PERSIST_FAILED = "persist_failed"


class TimingMetrics(BaseModel):
    """Stage latencies in milliseconds. ``total_ms`` is measured end-to-end."""

    embedding_ms: int = Field(default=0, ge=0)
    search_ms: int = Field(default=0, ge=0)
    context_build_ms: int = Field(default=0, ge=0)
    total_ms: int = Field(default=0, ge=0)

    model_config = {"frozen": True}


class ScoreStatistics(BaseModel):
    """Aggregate statistics over a list of scores."""

    avg_score: float = 0.0
    max_score: float = 0.0
    min_score: float = 0.0

    model_config = {"frozen": True}


class ContextMetrics(ScoreStatistics):
    """Candidate pool metrics, computed before truncation to the limit."""

    documents_found: int = 0
    documents_used: int = 0
    context_length_chars: int = 0


class SourceAttribution(BaseModel):
    """A document that contributed to a response."""

    document_id: str
    document_title: str
    chunk_id: str | None = None
    chunk_index: int = 0
    score: float = 0.0
    snippet_length: int = 0

    model_config = {"frozen": True}


class TelemetryRecord(BaseModel):
    """Complete telemetry for one query. Created once, never mutated."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    query_original: str
    query_normalized: str | None = None
    timing: TimingMetrics = Field(default_factory=TimingMetrics)
    context: ContextMetrics = Field(default_factory=ContextMetrics)
    sources: list[SourceAttribution] = Field(default_factory=list)
    answer_summary: str = ""
    success: bool = True
    error_message: str | None = None
    requester: RequestContext | None = None

    model_config = {"frozen": True}
