"""MCP tools for creating and searching Linear issues."""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.types import Tool

from linear_mcp.errors import LinearError, ValidationError
from linear_mcp.mcp_tools.common import (
    ToolContext,
    ToolHandler,
    _require_str,
    _upstream,
    _validate_int_range,
    _validate_number,
    _validate_str,
    _validate_str_list,
)
from linear_mcp.query import compile_query
from linear_mcp.shaping import PRIORITY_LABELS, map_issue
from linear_mcp.types.api import CreateIssueResponse, SearchResponse

logger = logging.getLogger(__name__)

_PRIORITY_HELP = ", ".join(f"{i}: {label}" for i, label in enumerate(PRIORITY_LABELS))

# create-issue arguments forwarded verbatim into Linear's IssueCreateInput.
_CREATE_FIELDS = ("title", "teamId", "description", "priority", "stateId", "assigneeId", "estimate", "labelIds")


def register() -> tuple[list[Tool], dict[str, ToolHandler]]:
    """Return (tool_definitions, handler_map) for issue tools."""
    tools = [
        Tool(
            name="create-issue",
            description="Create a new Linear issue",
            inputSchema={
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Issue title"},
                    "teamId": {"type": "string", "description": "Team ID"},
                    "description": {"type": "string", "description": "Issue description"},
                    "priority": {
                        "type": "integer",
                        "minimum": 0,
                        "maximum": 4,
                        "description": f"Issue priority ({_PRIORITY_HELP})",
                    },
                    "stateId": {"type": "string", "description": "State ID"},
                    "assigneeId": {"type": "string", "description": "Assignee ID"},
                    "estimate": {"type": "number", "description": "Issue estimate"},
                    "labelIds": {"type": "array", "items": {"type": "string"}, "description": "Label IDs"},
                },
                "required": ["title", "teamId"],
            },
        ),
        Tool(
            name="search-issues",
            description=(
                "Search Linear issues. Query syntax: free text plus assignee:@me, priority:<0-4|urgent|high|medium|low>, "
                'state:<name>, status:<name>, team:<name>, label:<name>; quote values with spaces (team:"Core Platform").'
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search query"},
                    "teamId": {"type": "string", "description": "Team ID to filter by"},
                    "status": {"type": "string", "description": "Status to filter by"},
                    "assigneeId": {"type": "string", "description": "Assignee ID to filter by"},
                },
                "required": ["query"],
            },
        ),
    ]

    handlers: dict[str, ToolHandler] = {
        "create-issue": _handle_create_issue,
        "search-issues": _handle_search_issues,
    }

    return tools, handlers


async def _handle_create_issue(ctx: ToolContext, arguments: dict[str, Any]) -> CreateIssueResponse:
    _require_str(arguments, "title")
    _require_str(arguments, "teamId")
    for name in ("description", "stateId", "assigneeId"):
        _validate_str(arguments.get(name), name)
    _validate_int_range(arguments.get("priority"), "priority", min_val=0, max_val=len(PRIORITY_LABELS) - 1)
    _validate_number(arguments.get("estimate"), "estimate")
    _validate_str_list(arguments.get("labelIds"), "labelIds")

    issue_input = {k: arguments[k] for k in _CREATE_FIELDS if arguments.get(k) is not None}
    payload = await _upstream(ctx, ctx.client.create_issue, issue_input)
    if not payload.get("success") or not payload.get("issue"):
        msg = "Failed to create issue"
        raise LinearError(msg)

    return CreateIssueResponse(success=True, issue=map_issue(payload["issue"]))


async def _handle_search_issues(ctx: ToolContext, arguments: dict[str, Any]) -> SearchResponse:
    query = arguments.get("query")
    if not isinstance(query, str):
        msg = "query is required and must be a string"
        raise ValidationError(msg)
    ignored = {k: arguments[k] for k in ("teamId", "status", "assigneeId") if arguments.get(k)}
    if ignored:
        logger.debug("search-issues filters only on query; ignoring %s", sorted(ignored))

    compiled = compile_query(query)

    if compiled.is_my_issues:
        # priority: is not applied to the my-issues search.
        nodes = await _upstream(ctx, ctx.client.assigned_issues, compiled.filter)
        suffix = " assigned to you"
    else:
        nodes = await _upstream(ctx, ctx.client.issues, compiled.search_filter())
        suffix = ""

    issues = [map_issue(n) for n in nodes]
    if nodes and logger.isEnabledFor(logging.DEBUG):
        logger.debug("search-issues raw issue: %s", json.dumps(nodes[0], default=str))
        logger.debug("search-issues mapped issue: %s", json.dumps(issues[0], default=str))

    return SearchResponse(
        message=f"Found {len(issues)} issues{suffix}",
        total=len(issues),
        issues=issues,
    )
