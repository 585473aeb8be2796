"""Shapes of records returned to MCP clients after mapping Linear data."""

from __future__ import annotations

from typing import TypedDict

# Milliseconds since the Unix epoch, as Linear's JS SDK reports Date.now().
EpochMillis = int


class UsageMetrics(TypedDict):
    """Rate governor snapshot attached to every tool response as ``apiMetrics``."""

    totalRequests: int
    requestsInLastHour: int
    remainingRequests: int
    lastRequestTime: EpochMillis | None
    averageRequestTime: float


class IssueSummary(TypedDict):
    """Stable issue shape. Absent upstream fields map to ``None`` (labels to ``[]``)."""

    id: str | None
    identifier: str | None
    title: str | None
    status: str | None
    assignee: str | None
    priority: str
    url: str | None
    createdAt: str | None
    estimate: float | None
    labels: list[str]
    description: str | None


class StateSummary(TypedDict):
    id: str | None
    name: str | None
    type: str | None


class TeamSummary(TypedDict):
    id: str | None
    name: str | None
    key: str | None
    description: str | None
    states: list[StateSummary]


class OrganizationSummary(TypedDict):
    id: str | None
    name: str | None
    urlKey: str | None
    createdAt: str | None
