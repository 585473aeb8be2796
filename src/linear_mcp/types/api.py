"""TypedDicts for MCP tool responses (before ``apiMetrics`` is merged in)."""

from __future__ import annotations

from typing import Any, TypedDict

from linear_mcp.types.core import IssueSummary


class ErrorResponse(TypedDict):
    """Standard error envelope returned by every failing tool call."""

    error: str
    code: str


class CreateIssueResponse(TypedDict):
    success: bool
    issue: IssueSummary


class SearchResponse(TypedDict):
    message: str
    total: int
    issues: list[IssueSummary]


class ResourceResponse(TypedDict):
    """``data`` is an issue, issue list, team, team list or organization."""

    data: Any
