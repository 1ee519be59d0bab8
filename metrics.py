"""
In-process metrics for the Movie DNA service.

Counters and duration summaries keyed by name plus sorted labels, e.g.
``dna_requests{outcome=ok}``. Pipeline workers record concurrently; a
single lock guards all state.

Metric names used by the service:
    dna_requests{outcome=...}          requests by final outcome
    dna_reports                        reports assembled
    tmdb_request_duration_ms{endpoint} TMDB call latency
    completion_duration_ms{model}      completion call latency
    provider_errors{provider,status}   failed provider calls
    axis_failures{axis}                discovery axes degraded to empty
    generation_failures{kind}          analysis/insight completions that failed
    similar_dropped_unrelated          similarity candidates filtered out
    pipeline_duration_ms               end-to-end pipeline latency
"""

import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional


class DurationSummary:
    """Running count, total, min and max of observed durations (ms)."""

    __slots__ = ("count", "total", "min", "max")

    def __init__(self):
        self.count = 0
        self.total = 0.0
        self.min: Optional[float] = None
        self.max = 0.0

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.min = value if self.min is None else min(self.min, value)
        self.max = max(self.max, value)

    def as_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "avg": round(self.total / self.count, 2) if self.count else 0.0,
            "min": round(self.min, 2) if self.min is not None else 0.0,
            "max": round(self.max, 2),
        }


def metric_key(name: str, labels: Optional[Dict[str, Any]] = None) -> str:
    if not labels:
        return name
    return name + "{" + ",".join(f"{k}={labels[k]}" for k in sorted(labels)) + "}"


class Metrics:
    """
    Thread-safe metric registry.

    Usage:
        metrics.inc("dna_requests", labels={"outcome": "ok"})
        with metrics.timer("pipeline_duration_ms"):
            ...
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[str, int] = {}
        self._durations: Dict[str, DurationSummary] = {}

    def inc(self, name: str, amount: int = 1, labels: Optional[Dict[str, Any]] = None) -> None:
        key = metric_key(name, labels)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + amount

    def observe(self, name: str, value: float, labels: Optional[Dict[str, Any]] = None) -> None:
        """Record one duration in milliseconds."""
        key = metric_key(name, labels)
        with self._lock:
            summary = self._durations.get(key)
            if summary is None:
                summary = self._durations[key] = DurationSummary()
            summary.add(value)

    @contextmanager
    def timer(self, name: str, labels: Optional[Dict[str, Any]] = None):
        """Time the wrapped block; recorded even when it raises."""
        start = time.monotonic()
        try:
            yield
        finally:
            self.observe(name, (time.monotonic() - start) * 1000, labels)

    def get_counter(self, name: str, labels: Optional[Dict[str, Any]] = None) -> int:
        with self._lock:
            return self._counters.get(metric_key(name, labels), 0)

    def get_stats(self) -> Dict[str, Any]:
        """Snapshot for the /metrics endpoint."""
        with self._lock:
            return {
                "counters": dict(sorted(self._counters.items())),
                "histograms": {k: v.as_dict() for k, v in sorted(self._durations.items())},
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._durations.clear()


# Global instance
metrics = Metrics()
