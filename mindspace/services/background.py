"""
Process-wide holder for enrichment tasks that outlive their request.

A request hands its unfinished enrichment tasks over when it ends, so the
response is not held back by the generation call. The application lifespan
waits for whatever is still running on shutdown:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await background_task_manager.shutdown()
"""

import asyncio
import logging
from typing import Iterable, Optional, Set

logger = logging.getLogger("MindSpace.Background")


class BackgroundTaskManager:
    """Keeps strong references to detached tasks until they finish."""

    def __init__(self, shutdown_timeout: float = 30.0):
        self._tasks: Set[asyncio.Task] = set()
        self._shutdown_timeout = shutdown_timeout

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def adopt(self, tasks: Iterable[asyncio.Task]) -> None:
        for task in tasks:
            if task.done() or task in self._tasks:
                continue
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def shutdown(self, timeout: Optional[float] = None) -> None:
        """Wait for adopted tasks; cancel the ones still running after ``timeout``."""
        if not self._tasks:
            return
        tasks = list(self._tasks)
        logger.info("Waiting for %d background task(s) before shutdown", len(tasks))
        _, still_running = await asyncio.wait(
            tasks, timeout=timeout if timeout is not None else self._shutdown_timeout
        )
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning("Cancelled %d background task(s) at shutdown", len(still_running))
            await asyncio.gather(*still_running, return_exceptions=True)


background_task_manager = BackgroundTaskManager()
