"""MCP server exposing Linear issues, teams and organization over stdio.

Tools, resources and prompts are plain functions wired into a fresh
``mcp.server.Server`` by :func:`create_server`; collaborators (API client,
rate governor) travel in a :class:`ToolContext` instead of module globals.

Usage:
    linear-mcp                          # reads LINEAR_API_KEY from env / .env
    linear-mcp --rate-limit 500         # cap upstream calls per hour
    linear-mcp --log-file linear.log    # JSONL log file instead of stderr
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    GetPromptResult,
    Prompt,
    PromptMessage,
    Resource,
    ResourceTemplate,
    TextContent,
    Tool,
)

from linear_mcp import __version__
from linear_mcp.client import LinearClient
from linear_mcp.config import LinearConfig, load_config
from linear_mcp.errors import ConfigurationError, LinearError, RateLimitExceeded, ValidationError
from linear_mcp.logging import setup_logging
from linear_mcp.mcp_tools import issues, resources
from linear_mcp.mcp_tools.common import ToolContext, ToolHandler, _error_response, _respond
from linear_mcp.rate_limit import RateGovernor

logger = logging.getLogger(__name__)

SERVER_NAME = "linear"

# ---------------------------------------------------------------------------
# Tool table
# ---------------------------------------------------------------------------


def build_tool_table() -> tuple[list[Tool], dict[str, ToolHandler]]:
    """Collect every tool module's ``register()`` into one capability table."""
    tools: list[Tool] = []
    handlers: dict[str, ToolHandler] = {}
    for module in (issues, resources):
        mod_tools, mod_handlers = module.register()
        duplicate = handlers.keys() & mod_handlers.keys()
        if duplicate:
            msg = f"Duplicate tool names: {sorted(duplicate)}"
            raise RuntimeError(msg)
        tools.extend(mod_tools)
        handlers.update(mod_handlers)
    return tools, handlers


_TOOLS, _HANDLERS = build_tool_table()


async def call_tool(ctx: ToolContext, name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
    """Run one tool. Every outcome, failures included, becomes a JSON text response."""
    arguments = arguments or {}
    t0 = time.monotonic()
    try:
        handler = _HANDLERS.get(name)
        if handler is None:
            msg = f"Unknown tool: {name}"
            raise ValidationError(msg)
        payload = await handler(ctx, arguments)
    except RateLimitExceeded as exc:
        error = _error_response(exc, name)
        logger.warning("rate_limited", extra={"tool": name, "args_data": arguments, "error": error["error"]})
        return _respond(ctx, error)
    except (ValidationError, LinearError) as exc:
        error = _error_response(exc, name)
        logger.warning("tool_error", extra={"tool": name, "args_data": arguments, "error": error["error"]})
        return _respond(ctx, error)
    except Exception as exc:
        logger.error("tool_error", extra={"tool": name, "args_data": arguments}, exc_info=True)
        return _respond(ctx, _error_response(exc, name))

    duration_ms = round((time.monotonic() - t0) * 1000, 1)
    logger.info("tool_call", extra={"tool": name, "args_data": arguments, "duration_ms": duration_ms})
    return _respond(ctx, payload)


# ---------------------------------------------------------------------------
# Resources & prompts
# ---------------------------------------------------------------------------

STATIC_RESOURCES = [
    Resource(
        uri="linear://organization",  # type: ignore[arg-type]
        name="Organization",
        description="The Linear organization the API key belongs to",
        mimeType="application/json",
    ),
    Resource(
        uri="linear://teams",  # type: ignore[arg-type]
        name="Teams",
        description="All teams with their workflow states",
        mimeType="application/json",
    ),
    Resource(
        uri="linear://issues",  # type: ignore[arg-type]
        name="Recent issues",
        description="The 100 most recently updated issues",
        mimeType="application/json",
    ),
]

RESOURCE_TEMPLATES = [
    ResourceTemplate(
        uriTemplate="linear://issues/{id}",
        name="Issue",
        description="A single issue by ID or identifier (e.g. ENG-123)",
        mimeType="application/json",
    ),
    ResourceTemplate(
        uriTemplate="linear://teams/{id}",
        name="Team",
        description="A single team with its workflow states",
        mimeType="application/json",
    ),
]

DEFAULT_PROMPT_NAME = "default"
DEFAULT_PROMPT_TEXT = (
    "You are a Linear assistant that helps manage issues and projects. "
    "For issue queries, use the search-issues tool directly with appropriate filters "
    "like 'assignee:@me' and 'priority:high'."
)


async def list_tools() -> list[Tool]:
    return list(_TOOLS)


async def list_resources() -> list[Resource]:
    return list(STATIC_RESOURCES)


async def list_resource_templates() -> list[ResourceTemplate]:
    return list(RESOURCE_TEMPLATES)


async def read_resource(ctx: ToolContext, uri: str) -> str:
    """Resolve *uri* for the MCP resources API. Errors propagate as ``ValueError`` subclasses."""
    data = await resources.resolve_resource(ctx, uri)
    return json.dumps(data, indent=2, default=str)


async def list_prompts() -> list[Prompt]:
    return [Prompt(name=DEFAULT_PROMPT_NAME, description="Default prompt for Linear MCP Server")]


async def get_prompt(name: str, arguments: dict[str, str] | None = None) -> GetPromptResult:
    if name != DEFAULT_PROMPT_NAME:
        msg = f"Unknown prompt: {name}"
        raise ValueError(msg)
    return GetPromptResult(
        description="Default prompt for Linear MCP Server",
        messages=[PromptMessage(role="user", content=TextContent(type="text", text=DEFAULT_PROMPT_TEXT))],
    )


def create_server(ctx: ToolContext) -> Server:
    """Build an MCP ``Server`` and register every handler against it.

    Handlers that need upstream access close over *ctx*; the rest are the
    module-level functions above.
    """
    server: Server = Server(SERVER_NAME, version=__version__)

    async def _call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        return await call_tool(ctx, name, arguments)

    async def _read_resource(uri: Any) -> str:
        return await read_resource(ctx, str(uri))

    server.list_tools()(list_tools)  # type: ignore[no-untyped-call]
    server.call_tool()(_call_tool)
    server.list_resources()(list_resources)  # type: ignore[no-untyped-call]
    server.list_resource_templates()(list_resource_templates)  # type: ignore[no-untyped-call]
    server.read_resource()(_read_resource)  # type: ignore[no-untyped-call]
    server.list_prompts()(list_prompts)  # type: ignore[no-untyped-call]
    server.get_prompt()(get_prompt)  # type: ignore[no-untyped-call]
    return server


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


async def _run(config: LinearConfig) -> None:
    governor = RateGovernor(config.requests_per_hour)
    async with LinearClient.from_config(config) as client:
        server = create_server(ToolContext(client=client, governor=governor))
        logger.info(
            "mcp_server_start",
            extra={"tool": "server", "args_data": {"api_url": config.api_url, "rate_limit": config.requests_per_hour}},
        )
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    parser = argparse.ArgumentParser(description="Linear MCP server")
    parser.add_argument("--rate-limit", type=int, default=None, help="Max Linear API calls per hour (default 1000)")
    parser.add_argument("--log-file", type=Path, default=None, help="Write JSONL logs here instead of stderr")
    args = parser.parse_args()

    try:
        config = load_config()
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.rate_limit is not None:
        if args.rate_limit < 1:
            parser.error("--rate-limit must be >= 1")
        config = dataclasses.replace(config, requests_per_hour=args.rate_limit)
    if args.log_file is not None:
        config = dataclasses.replace(config, log_file=args.log_file)

    setup_logging(config.log_file)
    try:
        asyncio.run(_run(config))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.critical("mcp_server_failed", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
