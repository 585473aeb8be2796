"""Exception taxonomy shared by the client, the governor and the MCP tools.

Pure module: no MCP or httpx imports, so anything can depend on it.
"""

from __future__ import annotations


class LinearMCPError(Exception):
    """Base class for errors raised by linear-mcp itself."""


class ConfigurationError(LinearMCPError):
    """Required configuration is missing or malformed. Fatal at startup."""


class LinearError(LinearMCPError):
    """The Linear API reported a failure (HTTP status or GraphQL errors)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LinearNotFoundError(LinearError):
    """The Linear API could not find the requested entity."""


class RateLimitExceeded(LinearMCPError):
    """The rate governor refused to admit another upstream call."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Rate limit exceeded: {limit} requests per hour")
        self.limit = limit


class ValidationError(LinearMCPError, ValueError):
    """Bad caller input: malformed URI, unknown resource, missing entity."""

    def __init__(self, message: str, *, code: str = "validation_error") -> None:
        super().__init__(message)
        self.code = code
