"""
Background Tasks - Fire-and-forget coroutines whose failures only reach logs.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

__all__ = ["BackgroundTasks"]

T = TypeVar("T")


class BackgroundTasks:
    """
    Track spawned tasks so they are not garbage-collected mid-flight.

    Example:
        >>> tasks = BackgroundTasks()
        >>> tasks.spawn(store.insert_record(record), name="telemetry-persist")
        >>> await tasks.drain()
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def spawn(self, coro: Coroutine[Any, Any, T], name: str | None = None) -> asyncio.Task[T]:
        """Schedule ``coro`` on the running loop and return its task."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Background task %s failed: %s", task.get_name(), exc)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every pending task to settle."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
