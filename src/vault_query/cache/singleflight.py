"""Per-key single-flight registry.

Maps a key to the one operation currently running for it. Concurrent
callers for the same key join the running operation instead of starting
a duplicate. The check-and-set in ``do`` has no ``await`` between the
lookup and the insert, so it is atomic on a single event loop.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


def _retrieve_exception(task: asyncio.Task[Any]) -> None:
    # Marks the exception as retrieved when every waiter was cancelled.
    if not task.cancelled():
        task.exception()


class SingleFlight(Generic[T]):
    """Registry of in-progress operations keyed by string.

    Operations are shielded: cancelling a waiter never cancels the shared
    operation, which always runs to completion and settles every waiter
    with the same outcome.
    """

    def __init__(self) -> None:
        self._calls: dict[str, asyncio.Task[T]] = {}

    def __len__(self) -> int:
        return len(self._calls)

    def in_flight(self, key: str) -> bool:
        return key in self._calls

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run ``fn`` for ``key`` unless an operation is already running; await it."""
        task = self._calls.get(key)
        if task is None:
            task = asyncio.create_task(self._run(key, fn))
            task.add_done_callback(_retrieve_exception)
            self._calls[key] = task
        return await asyncio.shield(task)

    async def join(self, key: str) -> T | None:
        """Await the running operation for ``key``, re-raising its error.

        Returns ``None`` immediately when nothing is running.
        """
        task = self._calls.get(key)
        if task is None:
            return None
        return await asyncio.shield(task)

    async def settle(self, key: str) -> None:
        """Wait for the running operation for ``key`` to finish, ignoring its outcome."""
        task = self._calls.get(key)
        if task is not None:
            await asyncio.wait({task})

    async def settle_all(self) -> None:
        """Wait for every running operation to finish."""
        tasks = set(self._calls.values())
        if tasks:
            await asyncio.wait(tasks)

    async def _run(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        finally:
            self._calls.pop(key, None)
