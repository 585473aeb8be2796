"""Shared test helpers for MCP tests.

Test modules import these directly (``from tests.mcp._helpers import _call``)
instead of reaching into conftest, which pytest discourages.
"""

from __future__ import annotations

import json
from typing import Any

from linear_mcp.mcp_server import call_tool
from linear_mcp.mcp_tools.common import ToolContext


def _parse(result: list[Any]) -> Any:
    """Extract text content from MCP response and parse as JSON if possible."""
    assert len(result) == 1
    text = result[0].text
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


async def _call(ctx: ToolContext, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    """Invoke a tool through the server boundary and return the decoded payload."""
    data = _parse(await call_tool(ctx, name, arguments or {}))
    assert isinstance(data, dict)
    return data
