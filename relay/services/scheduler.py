"""Background task scheduler for fire-and-forget relays."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Optional, Set

logger = logging.getLogger(__name__)


class TaskScheduler:
    """Spawns detached asyncio tasks and keeps them alive until they finish.

    The event loop only keeps weak references to tasks, so every spawned task
    is held in `_tasks` until its done-callback removes it. `drain()` is
    awaited on application shutdown so in-flight relays complete before the
    worker exits.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: Optional[str] = None) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background task %s was cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task %s failed", task.get_name(), exc_info=exc)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for every pending task, or until `timeout` seconds pass."""
        if not self._tasks:
            return
        logger.info("Waiting for %d background task(s)", len(self._tasks))
        _, still_pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        if still_pending:
            logger.warning("%d background task(s) still running after drain", len(still_pending))
