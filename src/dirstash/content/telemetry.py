"""Call and latency counters for the related-items engine."""

import threading
from datetime import UTC, datetime

from pydantic import BaseModel


class MetricsSnapshot(BaseModel):
    """Read-only view of the counters."""

    total_calls: int
    cache_hits: int
    cache_hit_rate: float
    average_response_time: float
    total_response_time: float
    last_call_time: datetime | None
    cache_size: int = 0


class PerformanceMetrics:
    """Cumulative call count, cache hits and mean latency (milliseconds)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._total_calls = 0
            self._cache_hits = 0
            self._total_response_time = 0.0
            self._average_response_time = 0.0
            self._last_call_time: datetime | None = None

    def record(self, duration_ms: float, cache_hit: bool = False) -> None:
        with self._lock:
            self._total_calls += 1
            self._total_response_time += duration_ms
            self._average_response_time = self._total_response_time / self._total_calls
            self._last_call_time = datetime.now(UTC)
            if cache_hit:
                self._cache_hits += 1

    def snapshot(self, cache_size: int = 0) -> MetricsSnapshot:
        with self._lock:
            hit_rate = (
                self._cache_hits / self._total_calls * 100 if self._total_calls else 0.0
            )
            return MetricsSnapshot(
                total_calls=self._total_calls,
                cache_hits=self._cache_hits,
                cache_hit_rate=round(hit_rate, 2),
                average_response_time=round(self._average_response_time, 2),
                total_response_time=round(self._total_response_time, 2),
                last_call_time=self._last_call_time,
                cache_size=cache_size,
            )
