"""In-flight dispatch tasks.

The dispatcher hands every accepted message to its own task so a slow
provider never stalls feed intake. Tasks are held here until they finish
and whatever is still running at stop is cancelled.
"""

from __future__ import annotations

import asyncio
from typing import Coroutine, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class TaskRegistry:
    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[object]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[object, object, T], name: str) -> asyncio.Task[T]:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)  # type: ignore[arg-type]
        task.add_done_callback(self._forget)  # type: ignore[arg-type]
        return task

    def _forget(self, task: asyncio.Task[object]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Task failed", task=task.get_name(), exc_info=task.exception())

    async def join(self) -> None:
        """Wait for every task, including ones spawned while waiting."""
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    async def shutdown(self, timeout: float) -> None:
        """Cancel what is still running and wait up to ``timeout`` seconds."""
        if not self._tasks:
            return
        running = set(self._tasks)
        for task in running:
            task.cancel()
        _, pending = await asyncio.wait(running, timeout=timeout)
        if pending:
            logger.warning(
                "Tasks still running after shutdown timeout",
                pending=sorted(task.get_name() for task in pending),
                timeout=timeout,
            )
        else:
            logger.info("Tasks cancelled", count=len(running))
