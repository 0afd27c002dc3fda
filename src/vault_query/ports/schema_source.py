"""Schema document source port interface."""

from __future__ import annotations

from typing import Any, Protocol


class SchemaSource(Protocol):
    """Protocol for fetching JSON schema documents by URL."""

    async def fetch(self, url: str) -> Any:
        """Return the decoded JSON document at ``url``."""
        ...

    async def close(self) -> None:
        """Release underlying connections."""
        ...
