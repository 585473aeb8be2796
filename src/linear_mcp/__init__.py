"""linear-mcp: MCP server for Linear issues, teams and organization."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("linear-mcp")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from linear_mcp.query import CompiledQuery, compile_query
from linear_mcp.rate_limit import RateGovernor

__all__ = ["CompiledQuery", "RateGovernor", "__version__", "compile_query"]
