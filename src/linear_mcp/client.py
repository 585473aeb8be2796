"""Async client for Linear's GraphQL API.

Each public method issues exactly one GraphQL request, so callers can gate
every method call through the rate governor one-for-one.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from linear_mcp.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, USER_AGENT, LinearConfig
from linear_mcp.errors import LinearError, LinearNotFoundError

logger = logging.getLogger(__name__)

# Linear caps connection pages at 250; the tools ask for 100.
DEFAULT_PAGE_SIZE = 100

# ---------------------------------------------------------------------------
# Query / mutation documents
# ---------------------------------------------------------------------------

_ISSUE_FIELDS = """
  id
  identifier
  title
  description
  priority
  estimate
  url
  createdAt
  state { id name type }
  assignee { id name }
  labels { nodes { id name } }
"""

_TEAM_FIELDS = """
  id
  name
  key
  description
  states { nodes { id name type } }
"""

_CREATE_ISSUE_MUTATION = f"""
mutation CreateIssue($input: IssueCreateInput!) {{
  issueCreate(input: $input) {{
    success
    issue {{ {_ISSUE_FIELDS} }}
  }}
}}
"""

_ISSUES_QUERY = f"""
query Issues($first: Int!, $filter: IssueFilter, $orderBy: PaginationOrderBy, $includeArchived: Boolean) {{
  issues(first: $first, filter: $filter, orderBy: $orderBy, includeArchived: $includeArchived) {{
    nodes {{ {_ISSUE_FIELDS} }}
  }}
}}
"""

_ASSIGNED_ISSUES_QUERY = f"""
query AssignedIssues($first: Int!, $filter: IssueFilter, $orderBy: PaginationOrderBy) {{
  viewer {{
    id
    assignedIssues(first: $first, filter: $filter, orderBy: $orderBy) {{
      nodes {{ {_ISSUE_FIELDS} }}
    }}
  }}
}}
"""

_ISSUE_QUERY = f"""
query Issue($id: String!) {{
  issue(id: $id) {{ {_ISSUE_FIELDS} }}
}}
"""

_ORGANIZATION_QUERY = """
query Organization {
  organization { id name urlKey createdAt }
}
"""

_TEAMS_QUERY = f"""
query Teams($first: Int!) {{
  teams(first: $first) {{
    nodes {{ {_TEAM_FIELDS} }}
  }}
}}
"""

_TEAM_QUERY = f"""
query Team($id: String!) {{
  team(id: $id) {{ {_TEAM_FIELDS} }}
}}
"""


def _is_not_found(errors: list[Any]) -> bool:
    for err in errors:
        if not isinstance(err, Mapping):
            continue
        message = str(err.get("message", ""))
        extensions = err.get("extensions")
        code = extensions.get("code") if isinstance(extensions, Mapping) else None
        if message.lower().startswith("entity not found") or code == "NOT_FOUND":
            return True
    return False


def _nodes(connection: Any) -> list[dict[str, Any]]:
    if not isinstance(connection, Mapping):
        return []
    return list(connection.get("nodes") or [])


class LinearClient:
    """Thin GraphQL wrapper; raises :class:`LinearError` on any API failure."""

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url
        self._http = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": api_key,
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            },
        )

    @classmethod
    def from_config(cls, config: LinearConfig) -> LinearClient:
        return cls(config.api_key, api_url=config.api_url, timeout=config.timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> LinearClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """POST one GraphQL document and return its ``data`` object."""
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            resp = await self._http.post(self._api_url, json=payload)
        except httpx.HTTPError as exc:
            msg = f"Request to Linear failed: {exc}"
            raise LinearError(msg) from exc

        try:
            body = resp.json()
        except ValueError:
            body = None

        errors = body.get("errors") if isinstance(body, Mapping) else None
        if errors:
            messages = "; ".join(str(e.get("message", e)) if isinstance(e, Mapping) else str(e) for e in errors)
            error_cls = LinearNotFoundError if _is_not_found(errors) else LinearError
            raise error_cls(messages, status_code=resp.status_code)
        if resp.status_code >= 400:
            msg = f"HTTP {resp.status_code}: {resp.text[:500]}"
            raise LinearError(msg, status_code=resp.status_code)
        if not isinstance(body, Mapping):
            msg = "Linear returned a non-JSON response"
            raise LinearError(msg, status_code=resp.status_code)

        data = body.get("data")
        return dict(data) if isinstance(data, Mapping) else {}

    # -- Issues ------------------------------------------------------------

    async def create_issue(self, issue_input: dict[str, Any]) -> dict[str, Any]:
        """Return the ``issueCreate`` payload: ``{success, issue}``."""
        data = await self.execute(_CREATE_ISSUE_MUTATION, {"input": issue_input})
        return dict(data.get("issueCreate") or {"success": False, "issue": None})

    async def issues(
        self,
        issue_filter: dict[str, Any] | None = None,
        *,
        first: int = DEFAULT_PAGE_SIZE,
        order_by: str = "updatedAt",
        include_archived: bool = False,
    ) -> list[dict[str, Any]]:
        variables: dict[str, Any] = {"first": first, "orderBy": order_by, "includeArchived": include_archived}
        if issue_filter:
            variables["filter"] = issue_filter
        data = await self.execute(_ISSUES_QUERY, variables)
        return _nodes(data.get("issues"))

    async def assigned_issues(
        self,
        issue_filter: dict[str, Any] | None = None,
        *,
        first: int = DEFAULT_PAGE_SIZE,
        order_by: str = "updatedAt",
    ) -> list[dict[str, Any]]:
        """Issues assigned to the user who owns the API key."""
        variables: dict[str, Any] = {"first": first, "orderBy": order_by}
        if issue_filter:
            variables["filter"] = issue_filter
        data = await self.execute(_ASSIGNED_ISSUES_QUERY, variables)
        viewer = data.get("viewer")
        if not isinstance(viewer, Mapping):
            msg = "Failed to get current user information"
            raise LinearError(msg)
        return _nodes(viewer.get("assignedIssues"))

    async def issue(self, issue_id: str) -> dict[str, Any] | None:
        try:
            data = await self.execute(_ISSUE_QUERY, {"id": issue_id})
        except LinearNotFoundError:
            logger.debug("Linear has no issue %s", issue_id)
            return None
        issue = data.get("issue")
        return dict(issue) if isinstance(issue, Mapping) else None

    # -- Organization & teams ----------------------------------------------

    async def organization(self) -> dict[str, Any]:
        data = await self.execute(_ORGANIZATION_QUERY)
        return dict(data.get("organization") or {})

    async def teams(self, *, first: int = DEFAULT_PAGE_SIZE) -> list[dict[str, Any]]:
        """All teams, each with its workflow states inline."""
        data = await self.execute(_TEAMS_QUERY, {"first": first})
        return _nodes(data.get("teams"))

    async def team(self, team_id: str) -> dict[str, Any] | None:
        try:
            data = await self.execute(_TEAM_QUERY, {"id": team_id})
        except LinearNotFoundError:
            logger.debug("Linear has no team %s", team_id)
            return None
        team = data.get("team")
        return dict(team) if isinstance(team, Mapping) else None
