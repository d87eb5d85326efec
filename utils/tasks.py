"""
utils/tasks.py
--------------
Detached background tasks for fire-and-forget side effects
(activity timestamps, analytics). Failures land in the sink's log
and are never propagated to the update that spawned them.
"""

import asyncio
from typing import Awaitable

from utils.logger import get_logger

logger = get_logger(__name__)


class TaskSink:
    """
    Owns fire-and-forget tasks and captures their failures.

    Construct once at startup and share it between components.
    """

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()
        self.failures = 0

    def spawn(self, coro: Awaitable, operation: str) -> asyncio.Task:
        """
        Schedule ``coro`` without awaiting it.

        Args:
            coro: The coroutine to run.
            operation: Short name used when logging a failure.

        Returns:
            The created task (callers normally ignore it).
        """
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_done(t, operation))
        return task

    def _on_done(self, task: asyncio.Task, operation: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.failures += 1
            logger.error(f"Background task '{operation}' failed: {exc!r}")

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every pending task (used on shutdown and in tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
