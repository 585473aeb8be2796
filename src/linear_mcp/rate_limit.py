"""Sliding-window rate governor for outbound Linear API calls.

Counts admitted calls over the trailing hour (not fixed buckets) and
refuses new ones once the configured ceiling is reached. State lives in
memory for the lifetime of the process.

Notes:
- Not thread-safe. ``admit()`` contains no ``await``, so on a single
  asyncio event loop the check-then-append cannot interleave with another
  admit. A multi-threaded caller would need a lock around ``admit()``.
- ``get_metrics()`` never prunes; until the next ``admit()`` it may count
  calls that have already aged out of the window.
"""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable

from linear_mcp.errors import RateLimitExceeded
from linear_mcp.types.core import EpochMillis, UsageMetrics

WINDOW_MS = 3_600_000
DEFAULT_REQUESTS_PER_HOUR = 1000


def _now_ms() -> EpochMillis:
    return int(time.time() * 1000)


class RateGovernor:
    """Gate every upstream call through :meth:`admit`."""

    def __init__(
        self,
        requests_per_hour: int = DEFAULT_REQUESTS_PER_HOUR,
        *,
        clock: Callable[[], EpochMillis] = _now_ms,
    ) -> None:
        if requests_per_hour < 1:
            raise ValueError("requests_per_hour must be >= 1")
        self._limit = requests_per_hour
        self._clock = clock
        self._window: deque[EpochMillis] = deque()
        self._total = 0
        self._last_admitted: EpochMillis | None = None
        self._latency_total_ms = 0.0
        self._latency_samples = 0

    @property
    def limit(self) -> int:
        return self._limit

    def admit(self) -> None:
        """Record one upstream call, or raise ``RateLimitExceeded`` without recording it."""
        now = self._clock()
        # Insertion order is chronological, so expired entries sit at the left.
        while self._window and now - self._window[0] >= WINDOW_MS:
            self._window.popleft()
        if len(self._window) >= self._limit:
            raise RateLimitExceeded(self._limit)
        self._window.append(now)
        self._total += 1
        self._last_admitted = now

    def record_latency(self, duration_ms: float) -> None:
        """Feed one observed upstream round-trip into ``averageRequestTime``."""
        if duration_ms < 0:
            return
        self._latency_total_ms += duration_ms
        self._latency_samples += 1

    def get_metrics(self) -> UsageMetrics:
        in_window = len(self._window)
        average = self._latency_total_ms / self._latency_samples if self._latency_samples else 0.0
        return UsageMetrics(
            totalRequests=self._total,
            requestsInLastHour=in_window,
            remainingRequests=max(0, self._limit - in_window),
            lastRequestTime=self._last_admitted,
            averageRequestTime=round(average, 1),
        )
