"""Background idle sweep for the session cache.

Runs ``SessionCache.sweep`` on a fixed interval until ``stop()`` is
called. A failed pass is logged and the loop carries on; the next pass
retries whatever the failed one left behind.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from vault_query.cache.session_cache import SessionCache

log = structlog.get_logger(__name__)


class CacheSweeper:
    """Periodic worker that reclaims idle cached sessions."""

    def __init__(self, cache: SessionCache, interval_seconds: float) -> None:
        self._cache = cache
        self._interval_seconds = interval_seconds
        self._stopped = asyncio.Event()
        self._passes = 0

    @property
    def passes(self) -> int:
        """Number of completed sweep passes."""
        return self._passes

    async def run(self) -> None:
        """Main sweep loop."""
        log.info("sweeper_started", interval_seconds=self._interval_seconds)

        while not self._stopped.is_set():
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self._interval_seconds)
            except TimeoutError:
                pass
            else:
                break

            try:
                evicted = await self._cache.sweep()
            except Exception:
                log.exception("sweep_pass_failed")
                continue

            self._passes += 1
            if evicted:
                log.info("sweep_pass_completed", evicted=len(evicted))

        log.info("sweeper_stopped", passes=self._passes)

    def stop(self) -> None:
        """Signal the sweep loop to stop after the current pass."""
        self._stopped.set()
