"""Identity-keyed cache of established network sessions.

Sessions are expensive to open (network connect + context open), so one
is kept per identity and shared by every request for that identity.

Lifecycle per identity::

    ABSENT -> CREATING -> READY -> CLOSING -> ABSENT
                 |                    ^
                 +---- (failure) -----+ (entry removed, no close)

All mutation of an entry is serialized through ``SingleFlight``: creation
and teardown are published under the identity key, and every other
operation awaits a published operation before reading the entry.

Eviction policy: an entry is reclaimed by ``sweep`` once it has been idle
longer than ``expiry_seconds`` AND no caller token remains. Setting
``evict_referenced`` drops the second condition.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import partial
from typing import TYPE_CHECKING, Any

import structlog

from vault_query.cache.singleflight import SingleFlight
from vault_query.cache.sweeper import CacheSweeper
from vault_query.domain.errors import (
    UNREGISTERED_MARKER,
    AuthInvalid,
    ConnectionFailed,
    DerivationFailed,
    SessionError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from vault_query.ports.session_factory import Session, SessionFactory
    from vault_query.settings import Settings

log = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class CacheEntry:
    """Cached state for one identity."""

    identity: str
    last_touch: datetime
    caller_ids: list[str] = field(default_factory=list)
    session: Session | None = None

    def drop_caller(self, caller_token: str) -> bool:
        """Remove one occurrence of ``caller_token``. Returns False if absent."""
        try:
            self.caller_ids.remove(caller_token)
        except ValueError:
            return False
        return True

    def idle_seconds(self, now: datetime) -> float:
        return (now - self.last_touch).total_seconds()


class SessionCache:
    """Process-owned registry mapping identity -> shared ``Session``.

    Create one per application (see ``from_settings``), call ``start()``
    to launch the periodic sweeper and ``close()`` on shutdown.
    """

    def __init__(
        self,
        factory: SessionFactory,
        *,
        network: str,
        expiry_seconds: float = 180.0,
        sweep_interval_seconds: float = 0.0,
        evict_referenced: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._factory = factory
        self._network = network
        self._expiry_seconds = expiry_seconds
        self._sweep_interval_seconds = sweep_interval_seconds
        self._evict_referenced = evict_referenced
        self._clock = clock

        self._entries: dict[str, CacheEntry] = {}
        self._flights: SingleFlight[Any] = SingleFlight()
        self._sweep_task: asyncio.Task[None] | None = None
        self._sweeper: CacheSweeper | None = None
        self._sweeper_task: asyncio.Task[None] | None = None
        self._closed = False

    # -- lifecycle ----------------------------------------------------------

    @classmethod
    def from_settings(cls, factory: SessionFactory, settings: Settings) -> SessionCache:
        """Factory: build a cache configured from application settings."""
        return cls(
            factory,
            network=settings.network.name,
            expiry_seconds=settings.cache.expiry_seconds,
            sweep_interval_seconds=settings.cache.sweep_interval_seconds,
            evict_referenced=settings.cache.evict_referenced,
        )

    async def start(self) -> None:
        """Start the periodic sweeper, if an interval is configured."""
        if self._sweep_interval_seconds > 0 and self._sweeper_task is None:
            self._sweeper = CacheSweeper(self, self._sweep_interval_seconds)
            self._sweeper_task = asyncio.create_task(self._sweeper.run())

    async def close(self) -> None:
        """Stop sweeping and tear down every cached session."""
        self._closed = True

        if self._sweeper is not None and self._sweeper_task is not None:
            self._sweeper.stop()
            await self._sweeper_task
            self._sweeper = None
            self._sweeper_task = None

        if self._sweep_task is not None and not self._sweep_task.done():
            self._sweep_task.cancel()
            await asyncio.wait({self._sweep_task})

        await self._flights.settle_all()
        for identity in list(self._entries):
            # Teardown must own the key; wait out anything still running for it.
            while self._flights.in_flight(identity):
                await self._flights.settle(identity)
            entry = self._entries.get(identity)
            if entry is not None:
                await self._flights.do(identity, partial(self._teardown, entry, "shutdown"))

        log.info("session_cache_closed")

    # -- public operations --------------------------------------------------

    async def derive_identity(self, credential: str) -> str:
        """Resolve a credential to its identity via the session factory."""
        if not credential:
            msg = "Credential is empty"
            raise DerivationFailed(msg)
        try:
            return await self._factory.derive_identity(credential)
        except SessionError:
            raise
        except Exception as exc:
            raise DerivationFailed(str(exc) or "Unable to derive identity") from exc

    async def acquire(self, credential: str, caller_token: str) -> Session:
        """Return the shared session for a credential, establishing it if needed.

        ``caller_token`` is recorded against the session until released.
        """
        identity = await self.derive_identity(credential)
        return await self._acquire(identity, credential, caller_token)

    async def release(self, identity: str, caller_token: str) -> None:
        """Drop a caller token; close the session when no callers remain."""
        entry = self._entries.get(identity)
        if entry is None:
            log.debug("release_unknown_identity", identity=identity)
            return

        entry.drop_caller(caller_token)
        await self._flights.settle(identity)

        entry = self._entries.get(identity)
        if entry is None or entry.caller_ids or self._flights.in_flight(identity):
            return
        await self._flights.do(identity, partial(self._teardown, entry, "released"))

    def touch(self, identity: str) -> None:
        """Refresh the idle timer for an identity; no-op if not cached."""
        entry = self._entries.get(identity)
        if entry is not None:
            entry.last_touch = self._clock()

    async def sweep(self) -> list[str]:
        """Close and remove expired entries. Returns the evicted identities."""
        now = self._clock()
        evicted: list[str] = []
        for identity in list(self._entries):
            entry = self._entries.get(identity)
            if entry is None or self._flights.in_flight(identity):
                continue
            if not self._is_expired(entry, now):
                continue
            await self._flights.do(identity, partial(self._teardown, entry, "idle"))
            evicted.append(identity)
        return evicted

    @asynccontextmanager
    async def lease(self, credential: str, caller_token: str) -> AsyncIterator[Session]:
        """Hold a session for the duration of a request.

        On exit the caller token is dropped and the entry touched, but the
        session stays cached for later requests until the idle sweep
        reclaims it.
        """
        identity = await self.derive_identity(credential)
        session = await self._acquire(identity, credential, caller_token)
        try:
            yield session
        finally:
            entry = self._entries.get(identity)
            if entry is not None:
                entry.drop_caller(caller_token)
                entry.last_touch = self._clock()

    @property
    def closed(self) -> bool:
        return self._closed

    def get_entry(self, identity: str) -> CacheEntry | None:
        return self._entries.get(identity)

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict[str, Any]:
        """Snapshot of cache occupancy for health reporting."""
        now = self._clock()
        return {
            "entries": len(self._entries),
            "in_flight": len(self._flights),
            "sessions": [
                {
                    "identity": entry.identity,
                    "ready": entry.session is not None,
                    "callers": len(entry.caller_ids),
                    "idle_seconds": round(entry.idle_seconds(now), 1),
                }
                for entry in self._entries.values()
            ],
        }

    # -- internals ----------------------------------------------------------

    async def _acquire(self, identity: str, credential: str, caller_token: str) -> Session:
        if self._closed:
            msg = "Session cache is closed"
            raise ConnectionFailed(msg)

        # Join whatever is running (creation or teardown) and re-check.
        while self._flights.in_flight(identity):
            await self._flights.join(identity)
        if self._closed:
            msg = "Session cache is closed"
            raise ConnectionFailed(msg)

        entry = self._entries.get(identity)
        if entry is not None and entry.session is not None:
            entry.caller_ids.append(caller_token)
            entry.last_touch = self._clock()
            self._schedule_sweep()
            return entry.session

        entry = CacheEntry(
            identity=identity,
            last_touch=self._clock(),
            caller_ids=[caller_token],
        )
        self._entries[identity] = entry
        log.debug("session_establishing", identity=identity, caller=caller_token)
        return await self._flights.do(identity, partial(self._establish, credential, entry))

    async def _establish(self, credential: str, entry: CacheEntry) -> Session:
        identity = entry.identity
        try:
            session = await self._factory.establish(credential)
        except Exception as exc:
            if self._entries.get(identity) is entry:
                del self._entries[identity]
            log.warning(
                "session_establish_failed",
                identity=identity,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            if isinstance(exc, SessionError):
                raise
            if UNREGISTERED_MARKER in str(exc):
                raise AuthInvalid(self._network) from exc
            if isinstance(exc, OSError):
                raise ConnectionFailed(str(exc) or type(exc).__name__) from exc
            raise

        # Merge into the live entry so tokens added while connecting survive.
        entry.session = session
        entry.last_touch = self._clock()
        log.info("session_established", identity=identity, callers=len(entry.caller_ids))
        return session

    async def _teardown(self, entry: CacheEntry, reason: str) -> None:
        identity = entry.identity
        session, entry.session = entry.session, None
        try:
            if session is not None:
                await session.context.close()
        except Exception:
            log.exception("session_close_failed", identity=identity)
        finally:
            if self._entries.get(identity) is entry:
                del self._entries[identity]
        log.info("session_evicted", identity=identity, reason=reason)

    def _is_expired(self, entry: CacheEntry, now: datetime) -> bool:
        if entry.idle_seconds(now) <= self._expiry_seconds:
            return False
        return self._evict_referenced or not entry.caller_ids

    def _schedule_sweep(self) -> None:
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.create_task(self._opportunistic_sweep())

    async def _opportunistic_sweep(self) -> None:
        try:
            await self.sweep()
        except Exception:
            log.exception("opportunistic_sweep_failed")
