"""The tool boundary turns every failure into an error envelope with metrics."""

from __future__ import annotations

import logging

import pytest

from linear_mcp.errors import LinearError
from linear_mcp.mcp_tools.common import ToolContext
from linear_mcp.rate_limit import WINDOW_MS
from tests._fakes import FakeClock, FakeLinearClient
from tests.mcp._helpers import _call


class TestRateLimited:
    async def test_sixth_call_refused(self, ctx: ToolContext, fake_client: FakeLinearClient) -> None:
        for _ in range(5):
            data = await _call(ctx, "search-issues", {"query": "crash"})
            assert "error" not in data
        data = await _call(ctx, "search-issues", {"query": "crash"})
        assert data["error"] == "Rate limit exceeded: 5 requests per hour"
        assert data["code"] == "rate_limited"
        assert data["apiMetrics"]["remainingRequests"] == 0
        assert len(fake_client.calls) == 5

    async def test_recovers_after_window(self, ctx: ToolContext, clock: FakeClock) -> None:
        for _ in range(5):
            await _call(ctx, "read-resource", {"uri": "linear://organization"})
        assert (await _call(ctx, "read-resource", {"uri": "linear://organization"}))["code"] == "rate_limited"
        clock.advance(WINDOW_MS)
        data = await _call(ctx, "read-resource", {"uri": "linear://organization"})
        assert data["data"]["name"] == "Acme"
        assert data["apiMetrics"]["requestsInLastHour"] == 1
        assert data["apiMetrics"]["totalRequests"] == 6

    async def test_refusal_logged_as_rate_limited(self, ctx: ToolContext, caplog: pytest.LogCaptureFixture) -> None:
        for _ in range(5):
            await _call(ctx, "read-resource", {"uri": "linear://organization"})
        with caplog.at_level(logging.INFO, logger="linear_mcp"):
            await _call(ctx, "read-resource", {"uri": "linear://organization"})
        records = [r for r in caplog.records if r.getMessage() == "rate_limited"]
        assert [r.levelno for r in records] == [logging.WARNING]
        assert records[0].tool == "read-resource"  # type: ignore[attr-defined]
        assert not [r for r in caplog.records if r.getMessage() == "tool_error"]


class TestUpstreamFailures:
    async def test_linear_error_message(self, ctx: ToolContext, fake_client: FakeLinearClient) -> None:
        fake_client.error = LinearError("Authentication required, not authenticated", status_code=401)
        data = await _call(ctx, "search-issues", {"query": "crash"})
        assert data["error"] == "Linear API Error: Authentication required, not authenticated"
        assert data["code"] == "upstream_error"
        # The call was admitted before it failed.
        assert data["apiMetrics"]["totalRequests"] == 1

    async def test_unexpected_exception_is_generic(
        self, ctx: ToolContext, fake_client: FakeLinearClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        fake_client.error = KeyError("secret-internal-detail")
        with caplog.at_level(logging.ERROR, logger="linear_mcp"):
            data = await _call(ctx, "read-resource", {"uri": "linear://teams"})
        assert data["error"] == "Internal error while running read-resource"
        assert data["code"] == "internal_error"
        assert "secret-internal-detail" not in data["error"]
        assert "apiMetrics" in data
        assert any(r.getMessage() == "tool_error" and r.exc_info for r in caplog.records)


class TestBoundary:
    async def test_unknown_tool(self, ctx: ToolContext) -> None:
        data = await _call(ctx, "delete-everything", {})
        assert data["error"] == "Unknown tool: delete-everything"
        assert data["code"] == "validation_error"
        assert "apiMetrics" in data

    async def test_none_arguments(self, ctx: ToolContext) -> None:
        data = await _call(ctx, "read-resource", None)
        assert data["code"] == "validation_error"

    async def test_success_is_logged(self, ctx: ToolContext, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="linear_mcp"):
            await _call(ctx, "read-resource", {"uri": "linear://organization"})
        records = [r for r in caplog.records if r.getMessage() == "tool_call"]
        assert len(records) == 1
        assert records[0].tool == "read-resource"  # type: ignore[attr-defined]
        assert records[0].duration_ms >= 0  # type: ignore[attr-defined]

    async def test_expected_errors_logged_as_warning(self, ctx: ToolContext, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="linear_mcp"):
            await _call(ctx, "read-resource", {"uri": "bad"})
        records = [r for r in caplog.records if r.getMessage() == "tool_error"]
        assert [r.levelno for r in records] == [logging.WARNING]
        assert records[0].error == "Invalid Linear URI format: bad"  # type: ignore[attr-defined]
