"""Tests for SQLite document, analytics and telemetry stores."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from legalsearch.domains.analytics.date_range import resolve_window
from legalsearch.domains.analytics.models import (
    DocumentViewEntry,
    SearchQueryLogEntry,
    TimeWindow,
)
from legalsearch.domains.search.models import (
    CandidateDocument,
    DocumentStatus,
    KeywordSearchOptions,
)
from legalsearch.domains.telemetry.models import (
    ContextMetrics,
    RequestContext,
    SourceAttribution,
    TelemetryRecord,
    TimingMetrics,
)

from .analytics import SQLiteAnalyticsStore
from .documents import SQLiteDocumentRepository
from .telemetry import SQLiteTelemetryStore


@pytest.fixture
async def repo(tmp_path: Path):
    """Create a document repository with temporary database."""
    repo = SQLiteDocumentRepository(tmp_path / "test.db")
    await repo.initialize()
    yield repo
    await repo.close()


@pytest.fixture
async def analytics_store(tmp_path: Path):
    """Create an analytics store with temporary database."""
    store = SQLiteAnalyticsStore(tmp_path / "test.db")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
async def telemetry_store(tmp_path: Path):
    """Create a telemetry store with temporary database."""
    store = SQLiteTelemetryStore(tmp_path / "test.db")
    await store.initialize()
    yield store
    await store.close()


def _query(text: str, total: int, created_at: datetime, ms: int = 10) -> SearchQueryLogEntry:
    return SearchQueryLogEntry(
        query=text,
        normalized_query=text.lower(),
        total_results=total,
        has_results=total > 0,
        execution_time_ms=ms,
        created_at=created_at,
    )


# --- Documents ---


async def test_initialize_creates_tables(
    repo: SQLiteDocumentRepository,
    analytics_store: SQLiteAnalyticsStore,
    telemetry_store: SQLiteTelemetryStore,
):
    """Test that initialize creates all required tables."""
    conn = await repo._get_connection()
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {row[0] for row in await cursor.fetchall()}

    assert {"documents", "search_queries", "document_views", "search_telemetry"} <= tables


async def test_insert_and_get_document(repo: SQLiteDocumentRepository):
    """Test inserting and retrieving a document."""
    published = datetime(2024, 3, 1, 9, 30).astimezone()
    doc = CandidateDocument(
        id="ley-35-2010",
        title="Ley de medidas urgentes para la reforma del mercado de trabajo",
        document_number="35/2010",
        scope="NATIONAL",
        keywords=["despido", "contratación"],
        full_text="Artículo 1. Objeto de la ley.",
        published_at=published,
    )

    assert await repo.insert_document(doc) == "ley-35-2010"

    stored = await repo.get_document("ley-35-2010")
    assert stored is not None
    assert stored.title == doc.title
    assert stored.keywords == ["despido", "contratación"]
    assert stored.status == DocumentStatus.PUBLISHED
    assert stored.published_at == published
    assert await repo.get_document("missing") is None
    assert await repo.get_document_count() == 1


async def test_search_by_keywords_text_match(repo: SQLiteDocumentRepository):
    """Test case-insensitive substring search over title, summary and text."""
    await repo.insert_document(CandidateDocument(id="1", title="RESCISIÓN de contratos"))
    await repo.insert_document(
        CandidateDocument(id="2", title="Otro", summary="Trata la rescisión de contratos")
    )
    await repo.insert_document(CandidateDocument(id="3", title="Ajeno", full_text="Nada"))

    results = await repo.search_by_keywords("rescisión de contratos", KeywordSearchOptions())

    # Newest first
    assert [d.id for d in results] == ["2", "1"]


async def test_search_by_keywords_exact_keyword(repo: SQLiteDocumentRepository):
    """Test documents match when a keyword equals a query word."""
    await repo.insert_document(
        CandidateDocument(id="1", title="Estatuto", keywords=["despido", "salario"])
    )
    await repo.insert_document(CandidateDocument(id="2", title="Código", keywords=["Despidos"]))

    results = await repo.search_by_keywords("despido objetivo", KeywordSearchOptions())
    assert [d.id for d in results] == ["1"]


async def test_search_by_keywords_filters(repo: SQLiteDocumentRepository):
    """Test type, scope, active and published filters."""
    base = {"title": "Reglamento de contratos", "document_type": "DECREE", "scope": "STATE"}
    await repo.insert_document(CandidateDocument(id="ok", **base))
    await repo.insert_document(CandidateDocument(id="law", **{**base, "document_type": "LAW"}))
    await repo.insert_document(CandidateDocument(id="inactive", is_active=False, **base))
    await repo.insert_document(CandidateDocument(id="draft", status=DocumentStatus.DRAFT, **base))
    await repo.insert_document(CandidateDocument(id="fed", **{**base, "scope": "FEDERAL"}))

    options = KeywordSearchOptions(document_type="DECREE", scope="STATE")
    results = await repo.search_by_keywords("contratos", options)
    assert [d.id for d in results] == ["ok"]

    options = KeywordSearchOptions(
        document_type="DECREE", scope="STATE", only_active=False, only_published=False
    )
    results = await repo.search_by_keywords("contratos", options)
    assert {d.id for d in results} == {"ok", "inactive", "draft"}


async def test_search_by_keywords_limit_clamped(repo: SQLiteDocumentRepository):
    """Test limit is clamped to at least one result."""
    for i in range(3):
        await repo.insert_document(CandidateDocument(id=str(i), title="Ley general"))

    results = await repo.search_by_keywords("ley", KeywordSearchOptions(limit=0))
    assert len(results) == 1

    results = await repo.search_by_keywords("ley", KeywordSearchOptions(limit=2))
    assert len(results) == 2


# --- Analytics ---


async def test_top_queries_aggregation(analytics_store: SQLiteAnalyticsStore):
    """Test grouping by normalized query, most frequent first."""
    now = datetime.now()
    await analytics_store.insert_search_query(_query("despido", 3, now, ms=10))
    await analytics_store.insert_search_query(_query("Despido", 1, now, ms=30))
    await analytics_store.insert_search_query(_query("herencia", 0, now))

    stats = await analytics_store.aggregate_queries(TimeWindow(), limit=10)

    assert [s.query for s in stats] == ["despido", "herencia"]
    assert stats[0].count == 2
    assert stats[0].avg_execution_time_ms == 20.0
    assert stats[0].avg_total_results == 2.0
    assert stats[0].last_searched is not None


async def test_zero_result_queries(analytics_store: SQLiteAnalyticsStore):
    """Test zero-result filter."""
    now = datetime.now()
    await analytics_store.insert_search_query(_query("despido", 3, now))
    await analytics_store.insert_search_query(_query("herencia", 0, now))

    stats = await analytics_store.aggregate_queries(TimeWindow(), limit=10, zero_results_only=True)
    assert [s.query for s in stats] == ["herencia"]


async def test_date_range_includes_late_local_start_day(analytics_store: SQLiteAnalyticsStore):
    """Test a two-day range includes a query at 23:59 local on the start day."""
    await analytics_store.insert_search_query(_query("late", 1, datetime(2025, 11, 13, 23, 59)))
    await analytics_store.insert_search_query(_query("before", 1, datetime(2025, 11, 12, 23, 59)))
    await analytics_store.insert_search_query(_query("after", 1, datetime(2025, 11, 15, 0, 0)))

    window = resolve_window(start_date="2025-11-13", end_date="2025-11-14")
    stats = await analytics_store.aggregate_queries(window, limit=10)

    assert [s.query for s in stats] == ["late"]


async def test_relative_window(analytics_store: SQLiteAnalyticsStore):
    """Test a days window excludes older facts."""
    now = datetime.now()
    await analytics_store.insert_search_query(_query("recent", 1, now - timedelta(days=1)))
    await analytics_store.insert_search_query(_query("old", 1, now - timedelta(days=30)))

    stats = await analytics_store.aggregate_queries(resolve_window(days=7), limit=10)
    assert [s.query for s in stats] == ["recent"]


async def test_view_aggregation(analytics_store: SQLiteAnalyticsStore):
    """Test views are counted per document, most viewed first."""
    for doc_id in ["a", "b", "b", "b", "a", "c"]:
        await analytics_store.insert_document_view(DocumentViewEntry(document_id=doc_id))

    counts = await analytics_store.aggregate_views(TimeWindow(), limit=2)
    assert [(c.document_id, c.view_count) for c in counts] == [("b", 3), ("a", 2)]


async def test_query_history_newest_first(analytics_store: SQLiteAnalyticsStore):
    """Test history returns every fact for one normalized query."""
    base = datetime(2025, 1, 1, 12, 0)
    for i in range(3):
        await analytics_store.insert_search_query(_query("ley", i, base + timedelta(hours=i)))
    await analytics_store.insert_search_query(_query("otra", 1, base))

    history = await analytics_store.query_history("ley", TimeWindow())

    assert [e.total_results for e in history] == [2, 1, 0]
    assert history[0].created_at.tzinfo is not None
    assert history[0].created_at == base.astimezone() + timedelta(hours=2)


# --- Telemetry ---


def _record(query: str, user_id: str | None = None, offset_s: int = 0) -> TelemetryRecord:
    return TelemetryRecord(
        created_at=datetime.now().astimezone() + timedelta(seconds=offset_s),
        query_original=query,
        query_normalized=query.lower(),
        timing=TimingMetrics(embedding_ms=5, search_ms=20, total_ms=30),
        context=ContextMetrics(documents_found=2, documents_used=1, max_score=0.9),
        sources=[SourceAttribution(document_id="d1", document_title="Ley", score=0.9)],
        answer_summary="Ley",
        requester=RequestContext(user_id=user_id) if user_id else None,
    )


async def test_telemetry_roundtrip(telemetry_store: SQLiteTelemetryStore):
    """Test a record survives persistence."""
    record = _record("despido", user_id="u1")
    await telemetry_store.insert_record(record)

    [stored] = await telemetry_store.get_recent_records()
    assert stored.id == record.id
    assert stored.timing == record.timing
    assert stored.context == record.context
    assert stored.sources == record.sources
    assert stored.requester == RequestContext(user_id="u1")


async def test_telemetry_recent_pagination_and_filter(telemetry_store: SQLiteTelemetryStore):
    """Test newest-first ordering, offset and user filter."""
    await telemetry_store.insert_record(_record("first", user_id="u1", offset_s=0))
    await telemetry_store.insert_record(_record("second", user_id="u2", offset_s=1))
    await telemetry_store.insert_record(_record("third", user_id="u1", offset_s=2))

    records = await telemetry_store.get_recent_records(limit=2)
    assert [r.query_original for r in records] == ["third", "second"]

    records = await telemetry_store.get_recent_records(limit=2, offset=2)
    assert [r.query_original for r in records] == ["first"]

    records = await telemetry_store.get_recent_records(user_id="u1")
    assert [r.query_original for r in records] == ["third", "first"]

    assert await telemetry_store.count_records() == 3
    assert await telemetry_store.count_records(user_id="u2") == 1
