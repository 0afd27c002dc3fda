"""Application settings via Pydantic BaseSettings.

All configuration uses the VQ_ environment variable prefix.
Centralized here to prevent hardcoded magic numbers across the codebase.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class CacheSettings(BaseSettings):
    """Session cache lifecycle settings."""

    model_config = {"env_prefix": "VQ_CACHE_"}

    # Idle time after which a cached session may be reclaimed
    expiry_seconds: float = 180.0

    # Period of the background sweep; 0 disables the sweeper task
    sweep_interval_seconds: float = 30.0

    # Evict idle sessions even while callers still hold tokens
    evict_referenced: bool = False


class NetworkSettings(BaseSettings):
    """Identity network settings handed to the session factory."""

    model_config = {"env_prefix": "VQ_NETWORK_"}

    name: str = "myrtle"
    context_name: str = "Verida: Vault"

    # Dotted path ("package.module:attr") to the SessionFactory implementation
    session_factory: str | None = None


class ResourceSettings(BaseSettings):
    """Schema resource settings."""

    model_config = {"env_prefix": "VQ_RESOURCE_"}

    base_url: str = "verida://datastore/"
    fetch_timeout_seconds: float = 10.0


# ---------------------------------------------------------------------------
# Schema registry
# ---------------------------------------------------------------------------

SCHEMAS: dict[str, str] = {
    "DATA_CONNECTIONS": (
        "https://vault.schemas.verida.io/data-connections/connection/v0.3.0/schema.json"
    ),
    "SYNC_POSITION": (
        "https://vault.schemas.verida.io/data-connections/sync-position/v0.2.0/schema.json"
    ),
    "SYNC_LOG": (
        "https://vault.schemas.verida.io/data-connections/activity-log/v0.2.0/schema.json"
    ),
    "FOLLOWING": "https://common.schemas.verida.io/social/following/v0.1.0/schema.json",
    "POST": "https://common.schemas.verida.io/social/post/v0.1.0/schema.json",
    "EMAIL": "https://common.schemas.verida.io/social/email/v0.1.0/schema.json",
    "FAVOURITE": "https://common.schemas.verida.io/favourite/v0.1.0/schema.json",
    "FILE": "https://common.schemas.verida.io/file/v0.1.0/schema.json",
    "CHAT_GROUP": "https://common.schemas.verida.io/social/chat/group/v0.1.0/schema.json",
    "CHAT_MESSAGE": "https://common.schemas.verida.io/social/chat/message/v0.1.0/schema.json",
    "CALENDAR": "https://common.schemas.verida.io/social/calendar/v0.1.0/schema.json",
    "EVENT": "https://common.schemas.verida.io/social/event/v0.1.0/schema.json",
}


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "VQ_"}

    app_name: str = "vault-query"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    # Default credential used when a request does not carry its own
    private_key: str | None = None

    cache: CacheSettings = Field(default_factory=CacheSettings)
    network: NetworkSettings = Field(default_factory=NetworkSettings)
    resources: ResourceSettings = Field(default_factory=ResourceSettings)
