"""
Telemetry Domain - Per-query observability.

This domain handles:
- Timing, context and source metrics per query
- Structured log output for every query
- Optional background persistence of telemetry records
"""

from .background import BackgroundTasks
from .contracts import TelemetryStore
from .models import (
    ContextMetrics,
    RequestContext,
    ScoreStatistics,
    SourceAttribution,
    TelemetryRecord,
    TelemetryState,
    TimingMetrics,
)
from .recorder import TelemetryRecorder, calculate_metrics, create_answer_summary

__all__ = [
    "TelemetryStore",
    "TelemetryRecorder",
    "BackgroundTasks",
    "TelemetryRecord",
    "TelemetryState",
    "TimingMetrics",
    "ContextMetrics",
    "ScoreStatistics",
    "SourceAttribution",
    "RequestContext",
    "calculate_metrics",
    "create_answer_summary",
]
