"""``linear://`` resource resolution, shared by the read-resource tool and MCP resources."""

from __future__ import annotations

import re
from typing import Any

from mcp.types import Tool

from linear_mcp.errors import ValidationError
from linear_mcp.mcp_tools.common import ToolContext, ToolHandler, _require_str, _upstream
from linear_mcp.shaping import map_issue, map_organization, map_team
from linear_mcp.types.api import ResourceResponse

URI_SCHEME = "linear"
RESOURCE_TYPES = ("issues", "organization", "teams")

# linear://<type>, linear://<type>/ and linear://<type>/<id>
_URI_RE = re.compile(rf"^{URI_SCHEME}://([^/]+)(?:/(.*))?$")


def parse_uri(uri: str) -> tuple[str, str | None]:
    """Split a ``linear://`` URI into ``(resource_type, id_or_None)``."""
    match = _URI_RE.match(uri)
    if not match:
        msg = f"Invalid Linear URI format: {uri}"
        raise ValidationError(msg)
    resource_type, resource_id = match.groups()
    if resource_type not in RESOURCE_TYPES:
        msg = f"Unknown resource type: {resource_type}"
        raise ValidationError(msg)
    return resource_type, resource_id or None


async def resolve_resource(ctx: ToolContext, uri: str) -> Any:
    """Fetch and shape the data behind *uri*. One governed upstream call."""
    resource_type, resource_id = parse_uri(uri)

    if resource_type == "issues":
        if resource_id is None:
            nodes = await _upstream(ctx, ctx.client.issues)
            return [map_issue(n) for n in nodes]
        issue = await _upstream(ctx, ctx.client.issue, resource_id)
        if issue is None:
            msg = f"Issue not found: {resource_id}"
            raise ValidationError(msg, code="not_found")
        return map_issue(issue)

    if resource_type == "organization":
        org = await _upstream(ctx, ctx.client.organization)
        return map_organization(org)

    if resource_id is None:
        teams = await _upstream(ctx, ctx.client.teams)
        return [map_team(t) for t in teams]
    team = await _upstream(ctx, ctx.client.team, resource_id)
    if team is None:
        msg = f"Team not found: {resource_id}"
        raise ValidationError(msg, code="not_found")
    return map_team(team)


def register() -> tuple[list[Tool], dict[str, ToolHandler]]:
    """Return (tool_definitions, handler_map) for resource tools."""
    tools = [
        Tool(
            name="read-resource",
            description="Read a Linear resource",
            inputSchema={
                "type": "object",
                "properties": {
                    "uri": {
                        "type": "string",
                        "description": (
                            "Resource URI to read e.g. linear://issues/4cb972e7-9ba1-4c52-8465-cdf2679ccea7, "
                            "linear://teams or linear://organization"
                        ),
                    },
                },
                "required": ["uri"],
            },
        ),
    ]

    handlers: dict[str, ToolHandler] = {
        "read-resource": _handle_read_resource,
    }

    return tools, handlers


async def _handle_read_resource(ctx: ToolContext, arguments: dict[str, Any]) -> ResourceResponse:
    uri = _require_str(arguments, "uri")
    return ResourceResponse(data=await resolve_resource(ctx, uri))
