"""
Analytics Domain - Historical search reporting.

This domain handles:
- Append-only query and document-view facts
- Top queries and zero-result queries
- Most viewed documents
- Local-calendar-day reporting windows
"""

from .contracts import AnalyticsStore, DocumentLookup
from .date_range import parse_local_day, resolve_window
from .models import (
    DocumentViewEntry,
    DocumentViewStats,
    QueryStats,
    SearchQueryLogEntry,
    TimeWindow,
    ViewCount,
)
from .service import SearchAnalyticsService, normalize_query

__all__ = [
    "AnalyticsStore",
    "DocumentLookup",
    "SearchAnalyticsService",
    "SearchQueryLogEntry",
    "DocumentViewEntry",
    "QueryStats",
    "DocumentViewStats",
    "ViewCount",
    "TimeWindow",
    "normalize_query",
    "parse_local_day",
    "resolve_window",
]
