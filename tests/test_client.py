"""LinearClient against a mocked GraphQL endpoint."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from linear_mcp.client import LinearClient
from linear_mcp.config import USER_AGENT, LinearConfig
from linear_mcp.errors import LinearError, LinearNotFoundError
from tests._fakes import make_issue, make_team

API_URL = "https://linear.test/graphql"

Responder = Callable[[dict[str, Any]], httpx.Response]


class Recorder:
    """Collects the GraphQL bodies the client sends and answers via *responder*."""

    def __init__(self, responder: Responder) -> None:
        self.responder = responder
        self.requests: list[httpx.Request] = []
        self.bodies: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content)
        self.bodies.append(body)
        return self.responder(body)


def _data(data: dict[str, Any]) -> Responder:
    return lambda _body: httpx.Response(200, json={"data": data})


def _client(recorder: Recorder) -> LinearClient:
    return LinearClient("lin_api_test", api_url=API_URL, transport=httpx.MockTransport(recorder))


class TestRequests:
    async def test_headers_and_endpoint(self) -> None:
        rec = Recorder(_data({"organization": {"id": "o", "name": "Acme"}}))
        async with _client(rec) as client:
            await client.organization()
        request = rec.requests[0]
        assert str(request.url) == API_URL
        assert request.method == "POST"
        assert request.headers["Authorization"] == "lin_api_test"
        assert request.headers["User-Agent"] == USER_AGENT

    async def test_issues_variables(self) -> None:
        rec = Recorder(_data({"issues": {"nodes": [make_issue()]}}))
        issue_filter = {"state": {"name": {"eq": "Done"}}}
        async with _client(rec) as client:
            nodes = await client.issues(issue_filter)
        assert nodes[0]["identifier"] == "ENG-42"
        assert rec.bodies[0]["variables"] == {
            "first": 100,
            "orderBy": "updatedAt",
            "includeArchived": False,
            "filter": issue_filter,
        }
        assert "query Issues" in rec.bodies[0]["query"]

    async def test_issues_without_filter(self) -> None:
        rec = Recorder(_data({"issues": {"nodes": []}}))
        async with _client(rec) as client:
            assert await client.issues() == []
        assert "filter" not in rec.bodies[0]["variables"]

    async def test_assigned_issues(self) -> None:
        rec = Recorder(_data({"viewer": {"id": "u-1", "assignedIssues": {"nodes": [make_issue()]}}}))
        async with _client(rec) as client:
            nodes = await client.assigned_issues({"state": {"type": {"nin": ["completed"]}}})
        assert len(nodes) == 1
        assert "viewer" in rec.bodies[0]["query"]

    async def test_assigned_issues_without_viewer(self) -> None:
        rec = Recorder(_data({"viewer": None}))
        async with _client(rec) as client:
            with pytest.raises(LinearError, match="current user"):
                await client.assigned_issues()

    async def test_create_issue(self) -> None:
        rec = Recorder(_data({"issueCreate": {"success": True, "issue": make_issue(title="New")}}))
        async with _client(rec) as client:
            payload = await client.create_issue({"title": "New", "teamId": "team-1"})
        assert payload["success"] is True
        assert rec.bodies[0]["variables"] == {"input": {"title": "New", "teamId": "team-1"}}

    async def test_create_issue_missing_payload(self) -> None:
        rec = Recorder(_data({}))
        async with _client(rec) as client:
            payload = await client.create_issue({"title": "New", "teamId": "team-1"})
        assert payload == {"success": False, "issue": None}

    async def test_teams_include_states(self) -> None:
        rec = Recorder(_data({"teams": {"nodes": [make_team()]}}))
        async with _client(rec) as client:
            teams = await client.teams()
        assert teams[0]["states"]["nodes"][0]["name"] == "Todo"
        assert "states" in rec.bodies[0]["query"]


class TestNotFound:
    async def test_issue_null(self) -> None:
        rec = Recorder(_data({"issue": None}))
        async with _client(rec) as client:
            assert await client.issue("missing") is None

    async def test_issue_entity_not_found_error(self) -> None:
        rec = Recorder(
            lambda _b: httpx.Response(200, json={"data": None, "errors": [{"message": "Entity not found: Issue"}]})
        )
        async with _client(rec) as client:
            assert await client.issue("missing") is None

    async def test_team_not_found_extension_code(self) -> None:
        rec = Recorder(
            lambda _b: httpx.Response(
                200, json={"errors": [{"message": "Could not find referenced Team.", "extensions": {"code": "NOT_FOUND"}}]}
            )
        )
        async with _client(rec) as client:
            assert await client.team("t-404") is None

    async def test_not_found_elsewhere_still_raises(self) -> None:
        rec = Recorder(lambda _b: httpx.Response(200, json={"errors": [{"message": "Entity not found: Team"}]}))
        async with _client(rec) as client:
            with pytest.raises(LinearNotFoundError):
                await client.issues({"team": {"id": {"eq": "t-404"}}})


class TestErrors:
    async def test_graphql_errors_joined(self) -> None:
        rec = Recorder(
            lambda _b: httpx.Response(400, json={"errors": [{"message": "Argument invalid"}, {"message": "Field unknown"}]})
        )
        async with _client(rec) as client:
            with pytest.raises(LinearError) as excinfo:
                await client.organization()
        assert str(excinfo.value) == "Argument invalid; Field unknown"
        assert excinfo.value.status_code == 400

    async def test_http_error_without_json(self) -> None:
        rec = Recorder(lambda _b: httpx.Response(502, text="Bad gateway"))
        async with _client(rec) as client:
            with pytest.raises(LinearError, match="HTTP 502"):
                await client.teams()

    async def test_transport_error(self) -> None:
        def _boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = LinearClient("k", api_url=API_URL, transport=httpx.MockTransport(_boom))
        try:
            with pytest.raises(LinearError, match="Request to Linear failed"):
                await client.organization()
        finally:
            await client.aclose()

    async def test_non_json_success(self) -> None:
        rec = Recorder(lambda _b: httpx.Response(200, text="<html>"))
        async with _client(rec) as client:
            with pytest.raises(LinearError, match="non-JSON"):
                await client.organization()


def test_from_config() -> None:
    client = LinearClient.from_config(LinearConfig(api_key="k", api_url=API_URL, timeout=5.0))
    assert client._api_url == API_URL
    assert client._http.timeout.read == 5.0
