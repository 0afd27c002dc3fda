"""Unit tests for the periodic cache sweeper loop."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

from vault_query.cache.sweeper import CacheSweeper


class TestCacheSweeper:
    async def test_sweeps_on_interval_until_stopped(self) -> None:
        cache = AsyncMock()
        cache.sweep.return_value = []
        sweeper = CacheSweeper(cache, interval_seconds=0.01)

        task = asyncio.create_task(sweeper.run())
        await asyncio.sleep(0.1)
        sweeper.stop()
        await asyncio.wait_for(task, timeout=1)

        assert cache.sweep.await_count >= 2
        assert sweeper.passes == cache.sweep.await_count

    async def test_failed_pass_does_not_stop_loop(self) -> None:
        calls = 0

        async def flaky_sweep() -> list[str]:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("boom")
            return ["did:vda:testnet:a"]

        cache = AsyncMock()
        cache.sweep.side_effect = flaky_sweep
        sweeper = CacheSweeper(cache, interval_seconds=0.01)

        task = asyncio.create_task(sweeper.run())
        await asyncio.sleep(0.1)
        sweeper.stop()
        await asyncio.wait_for(task, timeout=1)

        assert cache.sweep.await_count >= 2
        assert sweeper.passes == cache.sweep.await_count - 1

    async def test_stop_before_first_pass(self) -> None:
        cache = AsyncMock()
        sweeper = CacheSweeper(cache, interval_seconds=10)

        task = asyncio.create_task(sweeper.run())
        await asyncio.sleep(0)
        sweeper.stop()
        await asyncio.wait_for(task, timeout=1)

        cache.sweep.assert_not_awaited()
