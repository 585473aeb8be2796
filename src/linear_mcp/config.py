"""Environment-driven configuration.

Values come from the process environment, after ``.env`` in the working
directory has been loaded with python-dotenv. Never put the API key in
code or commit the ``.env`` file.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from linear_mcp.errors import ConfigurationError
from linear_mcp.rate_limit import DEFAULT_REQUESTS_PER_HOUR

DEFAULT_API_URL = "https://api.linear.app/graphql"
DEFAULT_TIMEOUT = 30.0
USER_AGENT = "Linear MCP Server/1.0.0"


@dataclass(frozen=True)
class LinearConfig:
    api_key: str
    api_url: str = DEFAULT_API_URL
    requests_per_hour: int = DEFAULT_REQUESTS_PER_HOUR
    timeout: float = DEFAULT_TIMEOUT
    log_file: Path | None = None


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ConfigurationError(msg) from None
    if value < 1:
        msg = f"{name} must be >= 1, got {value}"
        raise ConfigurationError(msg)
    return value


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        msg = f"{name} must be a number, got {raw!r}"
        raise ConfigurationError(msg) from None
    if value <= 0:
        msg = f"{name} must be > 0, got {value}"
        raise ConfigurationError(msg)
    return value


def load_config(environ: Mapping[str, str] | None = None) -> LinearConfig:
    """Build a :class:`LinearConfig`, raising ``ConfigurationError`` if unusable.

    With *environ* omitted, ``.env`` is loaded (without overriding variables
    already set) and ``os.environ`` is read.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    api_key = (environ.get("LINEAR_API_KEY") or "").strip()
    if not api_key:
        msg = "LINEAR_API_KEY is not set (export it or add it to .env)"
        raise ConfigurationError(msg)

    log_file = (environ.get("LINEAR_MCP_LOG_FILE") or "").strip()
    return LinearConfig(
        api_key=api_key,
        api_url=(environ.get("LINEAR_API_URL") or "").strip() or DEFAULT_API_URL,
        requests_per_hour=_read_int(environ, "LINEAR_RATE_LIMIT", DEFAULT_REQUESTS_PER_HOUR),
        timeout=_read_float(environ, "LINEAR_TIMEOUT", DEFAULT_TIMEOUT),
        log_file=Path(log_file) if log_file else None,
    )
