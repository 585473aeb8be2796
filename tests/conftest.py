"""Shared pytest fixtures for linear-mcp tests."""

from __future__ import annotations

import pytest

from linear_mcp.mcp_tools.common import ToolContext
from linear_mcp.rate_limit import RateGovernor
from tests._fakes import FakeClock, FakeLinearClient, make_issue, make_team


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def governor(clock: FakeClock) -> RateGovernor:
    return RateGovernor(5, clock=clock)


@pytest.fixture
def fake_client() -> FakeLinearClient:
    client = FakeLinearClient()
    issue = make_issue()
    client.issues_by_id[issue["id"]] = issue
    client.listed_issues = [issue, make_issue(id="i-2", identifier="ENG-43", title="Slow search", priority=4)]
    client.my_issues = [issue]
    team = make_team()
    client.teams_by_id[team["id"]] = team
    return client


@pytest.fixture
def ctx(fake_client: FakeLinearClient, governor: RateGovernor) -> ToolContext:
    return ToolContext(client=fake_client, governor=governor)  # type: ignore[arg-type]
