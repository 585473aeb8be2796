"""Helpers and types shared across MCP tool modules.

This module has NO dependency on ``mcp_server``, so tool modules can import
it freely without circular-import issues.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from mcp.types import TextContent

from linear_mcp.client import LinearClient
from linear_mcp.errors import LinearError, RateLimitExceeded, ValidationError
from linear_mcp.rate_limit import RateGovernor
from linear_mcp.shaping import with_metrics
from linear_mcp.types.api import ErrorResponse

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


@dataclass
class ToolContext:
    """Collaborators injected into every tool handler."""

    client: LinearClient
    governor: RateGovernor


ToolHandler = Callable[[ToolContext, dict[str, Any]], Awaitable[Mapping[str, Any]]]


def _text(content: object) -> list[TextContent]:
    if isinstance(content, str):
        return [TextContent(type="text", text=content)]
    return [TextContent(type="text", text=json.dumps(content, indent=2, default=str))]


def _respond(ctx: ToolContext, payload: Mapping[str, Any]) -> list[TextContent]:
    """Serialize *payload* with the current ``apiMetrics`` snapshot attached."""
    return _text(with_metrics(payload, ctx.governor))


async def _upstream(ctx: ToolContext, call: Callable[..., Awaitable[_T]], *args: Any, **kwargs: Any) -> _T:
    """Admit through the governor, then await one client call and time it."""
    ctx.governor.admit()
    t0 = time.monotonic()
    try:
        return await call(*args, **kwargs)
    finally:
        ctx.governor.record_latency((time.monotonic() - t0) * 1000)


def _error_response(exc: BaseException, tool: str) -> ErrorResponse:
    """Translate a handler failure into the standard error envelope."""
    if isinstance(exc, ValidationError):
        return ErrorResponse(error=str(exc), code=exc.code)
    if isinstance(exc, RateLimitExceeded):
        return ErrorResponse(error=str(exc), code="rate_limited")
    if isinstance(exc, LinearError):
        return ErrorResponse(error=f"Linear API Error: {exc}", code="upstream_error")
    return ErrorResponse(error=f"Internal error while running {tool}", code="internal_error")


# ---------------------------------------------------------------------------
# Argument validation
#
# The MCP SDK checks arguments against each tool's inputSchema; these guards
# cover handlers invoked directly and give messages in our own wording.
# ---------------------------------------------------------------------------


def _require_str(arguments: Mapping[str, Any], name: str) -> str:
    value = arguments.get(name)
    if not isinstance(value, str) or not value.strip():
        msg = f"{name} is required and must be a non-empty string"
        raise ValidationError(msg)
    return value


def _validate_str(value: Any, name: str) -> None:
    """Raise if *value* is not ``None`` and not a ``str``."""
    if value is not None and not isinstance(value, str):
        msg = f"{name} must be a string"
        raise ValidationError(msg)


def _validate_int_range(
    value: Any,
    name: str,
    min_val: int | None = None,
    max_val: int | None = None,
) -> None:
    """Raise if *value* is not ``None`` and not an integer inside the range."""
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer"
        raise ValidationError(msg)
    if min_val is not None and value < min_val:
        msg = f"{name} must be >= {min_val}"
        raise ValidationError(msg)
    if max_val is not None and value > max_val:
        msg = f"{name} must be <= {max_val}"
        raise ValidationError(msg)


def _validate_number(value: Any, name: str) -> None:
    if value is not None and (isinstance(value, bool) or not isinstance(value, int | float)):
        msg = f"{name} must be a number"
        raise ValidationError(msg)


def _validate_str_list(value: Any, name: str) -> None:
    if value is None:
        return
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        msg = f"{name} must be an array of strings"
        raise ValidationError(msg)
