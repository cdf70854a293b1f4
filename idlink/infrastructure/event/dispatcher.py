"""asyncio-backed background dispatcher."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from idlink.domain.shared.port.dispatcher import BackgroundDispatcher

logger = logging.getLogger(__name__)


class AsyncioBackgroundDispatcher(BackgroundDispatcher):
    """Runs submitted coroutines as tasks on the running event loop.

    Holds a strong reference to every pending task until it finishes, and
    logs failures. `drain()` waits for outstanding work at shutdown.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, job: Coroutine[Any, Any, Any], *, name: str | None = None) -> None:
        task = asyncio.create_task(job, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background task '%s' cancelled", task.get_name())
            return
        error = task.exception()
        if error is not None:
            logger.error("Background task '%s' failed: %s", task.get_name(), error, exc_info=error)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for pending tasks; cancel whatever is still running after `timeout`."""
        if not self._tasks:
            return
        logger.info("Draining %d background tasks", len(self._tasks))
        _, still_running = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
