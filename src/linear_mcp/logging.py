"""Structured JSON logging for linear-mcp.

Writes JSONL to stderr, or to a rotating file (5MB, 3 backups) when one is
configured. stdout is reserved for the MCP stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOGGER_NAME = "linear_mcp"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "tool"):
            entry["tool"] = record.tool
        if hasattr(record, "args_data"):
            entry["args"] = record.args_data
        if hasattr(record, "duration_ms"):
            entry["duration_ms"] = record.duration_ms
        if hasattr(record, "error"):
            entry["error"] = record.error
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


def _is_ours(handler: logging.Handler) -> bool:
    return isinstance(handler.formatter, _JsonFormatter)


def setup_logging(log_file: Path | None = None, *, level: int = logging.INFO) -> logging.Logger:
    """Attach a JSON handler to the ``linear_mcp`` logger and return it.

    Idempotent: calling again with the same target keeps the existing
    handler; a different target replaces it.
    """
    logger = logging.getLogger(LOGGER_NAME)
    target = os.path.abspath(str(log_file)) if log_file is not None else None

    with _setup_lock:
        for h in logger.handlers[:]:
            if not _is_ours(h):
                continue
            current = h.baseFilename if isinstance(h, RotatingFileHandler) else None
            if current == target:
                logger.setLevel(level)
                return logger
            # Different target: remove stale handler to avoid duplicates.
            logger.removeHandler(h)
            h.close()

        handler: logging.Handler
        if target is not None:
            handler = RotatingFileHandler(target, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT)
        else:
            handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
