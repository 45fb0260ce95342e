"""
Reporting windows.

Explicit ``YYYY-MM-DD`` ranges are local calendar days: the start is the
local midnight of the start day and the end is the last microsecond of the
end day, both as naive local datetimes. No UTC normalization happens here.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from .models import TimeWindow

__all__ = ["parse_local_day", "resolve_window"]


def parse_local_day(value: str, end_of_day: bool = False) -> datetime:
    """Parse ``YYYY-MM-DD`` into a naive local start- or end-of-day datetime."""
    day = date.fromisoformat(value.strip())
    return datetime.combine(day, time.max if end_of_day else time.min)


def resolve_window(
    days: int | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    now: datetime | None = None,
) -> TimeWindow:
    """
    Resolve report arguments into a time window.

    Precedence: an explicit range (both dates required), then a relative
    ``days`` window ending now, then an unbounded window.

    Raises:
        ValueError: A date is not ``YYYY-MM-DD``
    """
    if start_date and end_date:
        return TimeWindow(
            start=parse_local_day(start_date),
            end=parse_local_day(end_date, end_of_day=True),
        )

    if days:
        since = (now or datetime.now()) - timedelta(days=days)
        return TimeWindow(start=since)

    return TimeWindow()
