"""Session factory loading from a dotted path.

``VQ_NETWORK_SESSION_FACTORY`` names the SDK binding as
``package.module:attr``. ``attr`` is either a ready ``SessionFactory``
instance or a callable taking ``NetworkSettings`` and returning one.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

import structlog

from vault_query.domain.errors import ConfigurationError

if TYPE_CHECKING:
    from vault_query.ports.session_factory import SessionFactory
    from vault_query.settings import NetworkSettings

log = structlog.get_logger(__name__)

_REQUIRED_METHODS = ("derive_identity", "establish")


def _is_factory(obj: object) -> bool:
    return all(callable(getattr(obj, name, None)) for name in _REQUIRED_METHODS)


def load_session_factory(path: str | None, settings: NetworkSettings) -> SessionFactory:
    """Import and build the session factory named by ``path``."""
    if not path:
        msg = "No session factory configured (set VQ_NETWORK_SESSION_FACTORY)"
        raise ConfigurationError(msg)

    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        msg = f"Session factory path must look like 'package.module:attr', got '{path}'"
        raise ConfigurationError(msg)

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import session factory module '{module_name}': {exc}"
        raise ConfigurationError(msg) from exc

    try:
        target = getattr(module, attr)
    except AttributeError:
        msg = f"Module '{module_name}' has no attribute '{attr}'"
        raise ConfigurationError(msg) from None

    # Classes satisfy _is_factory too, so instantiate them before checking.
    if _is_factory(target) and not isinstance(target, type):
        factory = target
    elif callable(target):
        factory = target(settings)
    else:
        factory = None
    if not _is_factory(factory):
        msg = f"'{path}' did not produce a SessionFactory"
        raise ConfigurationError(msg)

    log.info("session_factory_loaded", path=path, network=settings.name)
    return factory  # type: ignore[no-any-return]
