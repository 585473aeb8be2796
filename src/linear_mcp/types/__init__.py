# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
"""Typed return-value contracts for the shaper and the MCP tool layer."""

from __future__ import annotations

from linear_mcp.types.api import (
    CreateIssueResponse,
    ErrorResponse,
    ResourceResponse,
    SearchResponse,
)
from linear_mcp.types.core import (
    EpochMillis,
    IssueSummary,
    OrganizationSummary,
    StateSummary,
    TeamSummary,
    UsageMetrics,
)

__all__ = [
    "CreateIssueResponse",
    "EpochMillis",
    "ErrorResponse",
    "IssueSummary",
    "OrganizationSummary",
    "ResourceResponse",
    "SearchResponse",
    "StateSummary",
    "TeamSummary",
    "UsageMetrics",
]
