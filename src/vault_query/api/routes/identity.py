"""Identity endpoint.

GET /v1/identity — the identity derived from the request credential.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from vault_query.api.dependencies import get_credential, get_session_cache, get_settings
from vault_query.cache.session_cache import SessionCache  # noqa: TCH001 — runtime: Depends()
from vault_query.domain.models import IdentityResponse
from vault_query.settings import Settings  # noqa: TCH001 — runtime: Depends()

router = APIRouter(tags=["identity"])

SessionCacheDep = Annotated[SessionCache, Depends(get_session_cache)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
CredentialDep = Annotated[str, Depends(get_credential)]


@router.get("/identity", response_model=IdentityResponse)
async def get_identity(
    session_cache: SessionCacheDep,
    settings: SettingsDep,
    credential: CredentialDep,
) -> IdentityResponse:
    """Derive the identity for a credential without opening a session."""
    identity = await session_cache.derive_identity(credential)
    return IdentityResponse(
        identity=identity,
        network=settings.network.name,
        timestamp=datetime.now(UTC).isoformat(),
    )
