"""Error taxonomy for session brokering and request handling.

Pure Python — zero framework imports. The HTTP layer maps these to
status codes in ``vault_query.api.middleware``.
"""

from __future__ import annotations

# Substring the identity network reports for an unregistered account
UNREGISTERED_MARKER = "Unable to locate"


class SessionError(Exception):
    """Base class for failures surfaced by the session cache."""


class DerivationFailed(SessionError):
    """The credential could not be turned into an identity (malformed key)."""


class AuthInvalid(SessionError):
    """The credential is well-formed but unknown to the network."""

    def __init__(self, network: str) -> None:
        self.network = network
        super().__init__(
            f"Invalid credentials or account is not registered to this network: {network}"
        )


class ConnectionFailed(SessionError):
    """The network connection or context could not be opened."""


class MissingCredential(Exception):
    """A request arrived without a credential and no default is configured."""


class ConfigurationError(Exception):
    """Raised when settings cannot be turned into working components."""


class NotFoundError(Exception):
    """Base class for lookups of resources, schemas or tools that do not exist."""


class InvalidResourceUri(NotFoundError):
    def __init__(self, schema_name: str, resource_type: str) -> None:
        self.schema_name = schema_name
        self.resource_type = resource_type
        super().__init__(f"Invalid resource URI: {schema_name} {resource_type}")


class UnknownSchema(NotFoundError):
    def __init__(self, schema_name: str) -> None:
        self.schema_name = schema_name
        super().__init__(f"Unknown schema: {schema_name}")


class UnknownTool(NotFoundError):
    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class ToolError(Exception):
    """A tool ran but its backing query failed."""

    def __init__(self, tool_name: str, message: str, schema_name: str | None) -> None:
        self.tool_name = tool_name
        self.message = message
        self.schema_name = schema_name
        super().__init__(f"Tool error: {tool_name} {message} {schema_name}")
