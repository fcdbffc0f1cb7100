"""Injected metrics collector for the orchestrator.

Each collector owns its own lock and counters; nothing is shared at module
level, so two orchestrators never see each other's numbers.
"""

from __future__ import annotations

import threading
from collections import deque

import numpy as np

from src.orchestration._models import RetrievalStats


class MetricsCollector:
    """Thread-safe query counters plus a bounded window of latencies."""

    def __init__(self, max_samples: int = 10_000) -> None:
        self._lock = threading.Lock()
        self._latencies_ms: deque[float] = deque(maxlen=max_samples)
        self._queries = 0
        self._hits = 0
        self._misses = 0
        self._failures = 0

    def record_query(self, *, latency_ms: float, cache_hit: bool) -> None:
        with self._lock:
            self._queries += 1
            if cache_hit:
                self._hits += 1
            else:
                self._misses += 1
            self._latencies_ms.append(latency_ms)

    def record_failure(self, *, latency_ms: float) -> None:
        with self._lock:
            self._queries += 1
            self._failures += 1
            self._latencies_ms.append(latency_ms)

    def snapshot(self) -> RetrievalStats:
        with self._lock:
            latencies = np.fromiter(self._latencies_ms, dtype=np.float64)
            stats = RetrievalStats(
                queries=self._queries,
                cache_hits=self._hits,
                cache_misses=self._misses,
                failures=self._failures,
            )

        if latencies.size:
            stats.latency_mean_ms = float(latencies.mean())
            stats.latency_p50_ms = float(np.percentile(latencies, 50))
            stats.latency_p95_ms = float(np.percentile(latencies, 95))
        return stats

    def reset(self) -> None:
        with self._lock:
            self._latencies_ms.clear()
            self._queries = self._hits = self._misses = self._failures = 0
