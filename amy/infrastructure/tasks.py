"""
Best-effort background tasks.

Side effects such as notification emails run detached from the request that
triggered them. Their failures are logged here and never reach the caller.
"""

import asyncio
import logging
from typing import Any, Coroutine, Optional, Set


logger = logging.getLogger(__name__)


class BackgroundTaskRunner:
    """
    Spawns coroutines on the running loop and keeps them referenced until done.

    Owned by the application lifespan; ``drain()`` is awaited on shutdown.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"Background task {task.get_name()} was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Background task {task.get_name()} failed: {exc}",
                exc_info=exc,
            )

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for all pending tasks (including ones spawned while waiting)."""
        while self._tasks:
            pending = list(self._tasks)
            done, not_done = await asyncio.wait(pending, timeout=timeout)
            if not_done:
                logger.warning(f"{len(not_done)} background task(s) still running after drain timeout")
                return
