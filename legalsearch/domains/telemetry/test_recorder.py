"""
Tests for the telemetry recorder.
"""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest
from structlog.testing import capture_logs

from .background import BackgroundTasks
from .models import (
    ContextMetrics,
    RequestContext,
    TelemetryRecord,
    TelemetryState,
    TimingMetrics,
)
from .recorder import TelemetryRecorder, calculate_metrics, create_answer_summary


@pytest.fixture
def record() -> TelemetryRecord:
    """Create a successful telemetry record."""
    return TelemetryRecord(
        query_original="¿Cuándo procede el despido disciplinario?",
        query_normalized="¿cuándo procede el despido disciplinario?",
        timing=TimingMetrics(embedding_ms=12, search_ms=30, context_build_ms=1, total_ms=45),
        context=ContextMetrics(
            documents_found=4,
            documents_used=2,
            avg_score=0.612345,
            max_score=0.9,
            min_score=0.3,
        ),
        requester=RequestContext(user_id="user-1"),
    )


@pytest.fixture
def mock_store() -> AsyncMock:
    """Create a mock telemetry store."""
    mock = AsyncMock()
    mock.insert_record.return_value = None
    mock.get_recent_records.return_value = []
    mock.count_records.return_value = 0
    return mock


# --- Metrics helpers Tests ---


def test_calculate_metrics_empty() -> None:
    """Test empty scores give all-zero statistics."""
    stats = calculate_metrics([])
    assert stats.avg_score == 0.0
    assert stats.max_score == 0.0
    assert stats.min_score == 0.0


def test_calculate_metrics_values() -> None:
    """Test average, max and min."""
    stats = calculate_metrics([0.2, 0.5, 0.8])
    assert stats.avg_score == pytest.approx(0.5)
    assert stats.max_score == 0.8
    assert stats.min_score == 0.2


def test_create_answer_summary_short() -> None:
    """Test short answers are kept verbatim."""
    assert create_answer_summary("Ley de Contratos") == "Ley de Contratos"


def test_create_answer_summary_word_boundary() -> None:
    """Test truncation prefers a late word boundary."""
    answer = "palabra " * 30
    summary = create_answer_summary(answer, max_length=50)
    assert summary.endswith("...")
    assert not summary[:-3].endswith(" ")
    assert len(summary) <= 53


def test_create_answer_summary_hard_cut() -> None:
    """Test hard truncation when there is no late word boundary."""
    answer = "x" * 200
    assert create_answer_summary(answer, max_length=100) == "x" * 100 + "..."


# --- Recorder Tests ---


async def test_record_without_persistence(record: TelemetryRecord, mock_store: AsyncMock) -> None:
    """Test log_to_db=False only logs."""
    recorder = TelemetryRecorder(log_to_db=False, store=mock_store)

    assert recorder.persistence_enabled is False
    assert recorder.record(record) is None
    mock_store.insert_record.assert_not_called()


async def test_record_persists_in_background(
    record: TelemetryRecord, mock_store: AsyncMock
) -> None:
    """Test log_to_db=True persists exactly once."""
    recorder = TelemetryRecorder(log_to_db=True, store=mock_store)

    task = recorder.record(record)
    assert task is not None
    assert await task == TelemetryState.PERSISTED
    mock_store.insert_record.assert_awaited_once_with(record)


async def test_persist_failure_is_swallowed(
    record: TelemetryRecord, mock_store: AsyncMock
) -> None:
    """Test a failing store ends in PERSIST_FAILED and only logs a warning."""
    mock_store.insert_record.side_effect = RuntimeError("disk full")
    recorder = TelemetryRecorder(log_to_db=True, store=mock_store)

    with capture_logs() as logs:
        task = recorder.record(record)
        assert task is not None
        assert await task == TelemetryState.PERSIST_FAILED

    failure = next(e for e in logs if e["event"] == "search_telemetry_persist_failed")
    assert failure["log_level"] == "warning"
    assert "disk full" in failure["error"]
    assert failure["telemetry_id"] == record.id


def test_telemetry_states_are_observable_outcomes() -> None:
    """Test every state is one the recorder can return."""
    assert [s.value for s in TelemetryState] == ["logged", "persisted", "persist_failed"]


async def test_persistence_requires_store(record: TelemetryRecord) -> None:
    """Test log_to_db without a store degrades to logging only."""
    recorder = TelemetryRecorder(log_to_db=True, store=None)
    assert recorder.persistence_enabled is False
    assert recorder.record(record) is None


def test_log_to_sink_structured_fields(record: TelemetryRecord) -> None:
    """Test the structured log line carries rounded metrics."""
    recorder = TelemetryRecorder()

    with capture_logs() as logs:
        state = recorder.log_to_sink(record)

    assert state == TelemetryState.LOGGED
    assert len(logs) == 1
    entry = logs[0]
    assert entry["event"] == "search_query_processed"
    assert entry["log_level"] == "info"
    assert entry["avg_score"] == 0.612
    assert entry["total_ms"] == 45
    assert entry["documents_found"] == 4
    assert entry["user_id"] == "user-1"
    assert entry["success"] is True


def test_log_to_sink_truncates_query() -> None:
    """Test logged query text is capped at 200 characters."""
    long_record = TelemetryRecord(query_original="a" * 500, success=False, error_message="boom")

    with capture_logs() as logs:
        TelemetryRecorder().log_to_sink(long_record)

    entry = logs[-1]
    assert entry["event"] == "search_query_failed"
    assert entry["log_level"] == "error"
    assert entry["error"] == "boom"
    assert len(entry["query"]) == 200
    assert entry["query_length"] == 500


async def test_read_paths_suppress_failures(mock_store: AsyncMock) -> None:
    """Test read failures return empty results."""
    mock_store.get_recent_records.side_effect = RuntimeError("locked")
    mock_store.count_records.side_effect = RuntimeError("locked")
    recorder = TelemetryRecorder(store=mock_store)

    assert await recorder.get_recent_records() == []
    assert await recorder.count_records() == 0


async def test_read_paths_without_store() -> None:
    """Test read paths without a store."""
    recorder = TelemetryRecorder()
    assert await recorder.get_recent_records(limit=5) == []
    assert await recorder.count_records(user_id="u") == 0


async def test_read_paths_forward_arguments(mock_store: AsyncMock) -> None:
    """Test pagination and user filter reach the store."""
    mock_store.count_records.return_value = 7
    recorder = TelemetryRecorder(store=mock_store)

    await recorder.get_recent_records(limit=5, offset=10, user_id="u")
    mock_store.get_recent_records.assert_awaited_once_with(limit=5, offset=10, user_id="u")
    assert await recorder.count_records(user_id="u") == 7


# --- Background tasks Tests ---


async def test_background_tasks_drain(caplog: pytest.LogCaptureFixture) -> None:
    """Test failed tasks are logged and drained without raising."""
    tasks = BackgroundTasks()

    async def fail() -> None:
        raise RuntimeError("background boom")

    async def succeed() -> int:
        return 1

    with caplog.at_level(logging.WARNING):
        tasks.spawn(fail(), name="failing")
        ok = tasks.spawn(succeed(), name="ok")
        await tasks.drain()

    assert ok.result() == 1
    assert tasks.pending == 0
    assert "background boom" in caplog.text
