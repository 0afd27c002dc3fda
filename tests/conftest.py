"""Shared pytest fixtures for the vault-query test suite.

This conftest provides the fake session factory, a manual clock and a
session cache wired to both. No identity network access is required
for unit tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.fixtures.sessions import FakeSessionFactory, ManualClock
from vault_query.cache.session_cache import SessionCache

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@pytest.fixture()
def session_factory() -> FakeSessionFactory:
    """A fresh fake session factory with no latency."""
    return FakeSessionFactory()


@pytest.fixture()
def clock() -> ManualClock:
    """A manual clock starting at 2024-01-01T00:00:00Z."""
    return ManualClock()


@pytest.fixture()
async def session_cache(
    session_factory: FakeSessionFactory,
    clock: ManualClock,
) -> AsyncIterator[SessionCache]:
    """Session cache with a 180s expiry and no background sweeper."""
    cache = SessionCache(
        session_factory,
        network="testnet",
        expiry_seconds=180.0,
        clock=clock,
    )
    yield cache
    await cache.close()
