"""Named background tasks with explicit cancellation."""

import asyncio
import logging
from typing import Awaitable, Optional


logger = logging.getLogger(__name__)


class TaskSlots:
    """
    A small registry of asyncio tasks keyed by name.

    Starting a task under a name that is already running cancels the old
    one first, so each slot holds at most one live timer or loop. Owners
    call ``cancel_all`` (or ``aclose``) when they leave a state or shut
    down, which guarantees nothing keeps firing afterwards.
    """

    def __init__(self, owner: str = ""):
        self.owner = owner
        self._tasks: dict[str, asyncio.Task] = {}

    def start(self, name: str, coro: Awaitable) -> asyncio.Task:
        self.cancel(name)
        task = asyncio.ensure_future(coro)
        self._tasks[name] = task
        task.add_done_callback(lambda t, n=name: self._finished(n, t))
        return task

    def cancel(self, name: str) -> bool:
        task = self._tasks.pop(name, None)
        if task is None or task.done():
            return False
        # a task cancelling its own slot must not interrupt itself
        if task is asyncio.current_task():
            return False
        task.cancel()
        return True

    def cancel_all(self) -> None:
        for name in list(self._tasks):
            self.cancel(name)

    def get(self, name: str) -> Optional[asyncio.Task]:
        return self._tasks.get(name)

    def running(self, name: str) -> bool:
        task = self._tasks.get(name)
        return task is not None and not task.done()

    @property
    def names(self) -> list[str]:
        return [name for name, task in self._tasks.items() if not task.done()]

    async def aclose(self) -> None:
        """Cancel every slot and wait for the tasks to unwind."""
        tasks = [t for t in self._tasks.values() if not t.done() and t is not asyncio.current_task()]
        self.cancel_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _finished(self, name: str, task: asyncio.Task) -> None:
        if self._tasks.get(name) is task:
            del self._tasks[name]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"[{self.owner}] task {name} failed: {type(exc).__name__}: {exc}")
