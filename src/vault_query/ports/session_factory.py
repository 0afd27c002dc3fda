"""Session factory port interface.

Uses typing.Protocol for structural subtyping (not ABCs).
The identity network SDK binding implements ``SessionFactory``; the
session cache is its only consumer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class Datastore(Protocol):
    """A schema-scoped datastore inside an open context."""

    async def get_many(
        self,
        selector: dict[str, Any],
        options: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Return documents matching a Mango-style selector."""
        ...

    async def info(self) -> dict[str, Any]:
        """Return database info; must include ``doc_count``."""
        ...

    async def get_indexes(self) -> dict[str, Any]:
        """Return index info; must include ``total_rows``."""
        ...


class Context(Protocol):
    """An application context opened for one identity."""

    async def open_datastore(
        self,
        schema_url: str,
        options: dict[str, Any] | None = None,
    ) -> Datastore:
        """Open the datastore for a schema URL."""
        ...

    async def close(self) -> None:
        """Close the context and release its network resources."""
        ...


@dataclass(frozen=True, slots=True)
class Session:
    """An established network/context bundle for one identity.

    Owned by the cache entry that created it; callers share it read-only
    and never close it themselves.
    """

    network: Any
    context: Context
    account: Any
    identity: str


class SessionFactory(Protocol):
    """Protocol for turning a secret credential into a live session."""

    async def derive_identity(self, credential: str) -> str:
        """Derive the stable identity string for a credential.

        Deterministic for a given network configuration. Raises on a
        malformed credential.
        """
        ...

    async def establish(self, credential: str) -> Session:
        """Connect to the network and open the vault context.

        Raises with an "Unable to locate" message when the identity is not
        registered on the network.
        """
        ...
