"""Fire-and-forget background tasks with logged failures."""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

logger = structlog.get_logger(__name__)


class BackgroundTaskQueue:
    """
    Runs coroutines in the background without awaiting them.

    Tasks are referenced until they finish so they are not garbage
    collected mid-run. At most one task per name is pending at a time.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[object]] = {}

    @property
    def pending(self) -> list[str]:
        """Names of tasks that have not finished yet."""
        return [name for name, task in self._tasks.items() if not task.done()]

    def enqueue(self, factory: Callable[[], Awaitable[object]], name: str) -> bool:
        """
        Schedule ``factory()`` on the running loop.

        Args:
            factory: Zero-argument callable returning the awaitable to run
            name: Task name; a pending task with this name blocks the enqueue

        Returns:
            True if a task was scheduled
        """
        existing = self._tasks.get(name)
        if existing is not None and not existing.done():
            logger.debug("Background task already pending", task=name)
            return False

        async def run() -> object:
            return await factory()

        task = asyncio.create_task(run(), name=name)
        self._tasks[name] = task
        task.add_done_callback(lambda t: self._on_done(name, t))
        logger.debug("Background task scheduled", task=name)
        return True

    def _on_done(self, name: str, task: asyncio.Task[object]) -> None:
        if self._tasks.get(name) is task:
            del self._tasks[name]

        if task.cancelled():
            logger.info("background_task_cancelled", task=name)
            return

        error = task.exception()
        if error is not None:
            logger.error(
                "background_task_failed",
                task=name,
                error=repr(error),
                exc_info=error,
            )

    async def drain(self) -> None:
        """Wait for every pending task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)
            # Let done callbacks run
            await asyncio.sleep(0)

    async def cancel_all(self) -> None:
        """Cancel pending tasks and wait for them to stop."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
