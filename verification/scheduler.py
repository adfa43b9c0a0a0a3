"""Fire-and-forget deferred tasks with cancellation handles."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DeferredCallback = Callable[[], Awaitable[None]]


class ScheduledTask:
    def __init__(self, name: str, task: asyncio.Task) -> None:
        self.name = name
        self._task = task

    @property
    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        return self._task.cancel()


class DeferredScheduler:
    """Runs callbacks after a delay on the running event loop.

    Pending tasks are dropped on shutdown; nothing is drained.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    def call_later(self, delay: float, callback: DeferredCallback, name: str = "deferred") -> ScheduledTask:
        task = asyncio.get_running_loop().create_task(self._run(delay, callback, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return ScheduledTask(name, task)

    async def _run(self, delay: float, callback: DeferredCallback, name: str) -> None:
        await asyncio.sleep(delay)
        try:
            await callback()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Deferred task failed", extra={"task": name})

    async def shutdown(self) -> None:
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
