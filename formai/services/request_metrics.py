"""In-process request counters for the fallback orchestrator.

One :class:`RequestMetrics` lives on each orchestrator and counts logical
requests (one OCR or analysis call, however many provider attempts it
took).  Counters reset when the process restarts.
"""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Callable
from typing import Any


class RequestMetrics:
    """Totals, outcome split, mean latency and which provider served each success."""

    def __init__(self, timer: Callable[[], float] = time.monotonic) -> None:
        self._timer = timer
        self._started_at = timer()
        self._total = 0
        self._successful = 0
        self._failed = 0
        self._total_time_ms = 0
        self._provider_usage: Counter[str] = Counter()

    def record_success(self, provider_name: str, elapsed_ms: int) -> None:
        self._record(elapsed_ms)
        self._successful += 1
        self._provider_usage[provider_name] += 1

    def record_failure(self, elapsed_ms: int) -> None:
        self._record(elapsed_ms)
        self._failed += 1

    def snapshot(self) -> dict[str, Any]:
        """Return the counters as a JSON-ready dict."""
        average = round(self._total_time_ms / self._total) if self._total else 0
        return {
            "uptime_seconds": round(self._timer() - self._started_at, 3),
            "total_requests": self._total,
            "successful_requests": self._successful,
            "failed_requests": self._failed,
            "average_response_time_ms": average,
            "provider_usage": dict(self._provider_usage),
        }

    def _record(self, elapsed_ms: int) -> None:
        self._total += 1
        self._total_time_ms += max(0, elapsed_ms)
