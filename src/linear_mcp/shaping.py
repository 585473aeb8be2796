"""Map raw Linear GraphQL records into the stable shapes sent to MCP clients."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from linear_mcp.types.core import IssueSummary, OrganizationSummary, StateSummary, TeamSummary

if TYPE_CHECKING:
    from linear_mcp.rate_limit import RateGovernor

PRIORITY_LABELS: tuple[str, ...] = ("No priority", "Urgent", "High", "Medium", "Low")

METRICS_KEY = "apiMetrics"


def priority_label(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < len(PRIORITY_LABELS):
        return PRIORITY_LABELS[0]
    return PRIORITY_LABELS[value]


def _name_of(value: Any) -> str | None:
    if isinstance(value, Mapping):
        return value.get("name")
    return None


def _nodes(connection: Any) -> list[Mapping[str, Any]]:
    """Unwrap a GraphQL ``{nodes: [...]}`` connection, tolerating absence."""
    if not isinstance(connection, Mapping):
        return []
    nodes = connection.get("nodes")
    return [n for n in nodes if isinstance(n, Mapping)] if isinstance(nodes, list) else []


def map_issue(issue: Mapping[str, Any]) -> IssueSummary:
    return IssueSummary(
        id=issue.get("id"),
        identifier=issue.get("identifier"),
        title=issue.get("title"),
        status=_name_of(issue.get("state")),
        assignee=_name_of(issue.get("assignee")),
        priority=priority_label(issue.get("priority")),
        url=issue.get("url"),
        createdAt=issue.get("createdAt"),
        estimate=issue.get("estimate"),
        labels=[label["name"] for label in _nodes(issue.get("labels")) if "name" in label],
        description=issue.get("description"),
    )


def map_state(state: Mapping[str, Any]) -> StateSummary:
    return StateSummary(id=state.get("id"), name=state.get("name"), type=state.get("type"))


def map_team(team: Mapping[str, Any]) -> TeamSummary:
    return TeamSummary(
        id=team.get("id"),
        name=team.get("name"),
        key=team.get("key"),
        description=team.get("description"),
        states=[map_state(s) for s in _nodes(team.get("states"))],
    )


def map_organization(org: Mapping[str, Any]) -> OrganizationSummary:
    return OrganizationSummary(
        id=org.get("id"),
        name=org.get("name"),
        urlKey=org.get("urlKey"),
        createdAt=org.get("createdAt"),
    )


def with_metrics(payload: Mapping[str, Any], governor: RateGovernor) -> dict[str, Any]:
    """Return *payload* plus the governor's current snapshot under ``apiMetrics``."""
    return {**payload, METRICS_KEY: governor.get_metrics()}
