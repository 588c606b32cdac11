"""Cell cache statistics.

Counts, per column, how many requested cells were already resolved (served
from the store) and how many had to be requested from the loader, plus the
number of loader calls issued.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class CacheStats:
    """Immutable snapshot of cache statistics."""

    hits: int = 0
    misses: int = 0
    loads: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Hit rate as a float in [0.0, 1.0]; 0.0 when no requests."""
        if self.total == 0:
            return 0.0
        return self.hits / self.total


class CacheStatsCollector:
    """Thread-safe per-column counters.

    Usage::

        stats = CacheStatsCollector()
        stats.record_hits("name", 10)
        stats.record_load("name", 5)
        print(stats.get("name").hit_rate)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits: dict[str, int] = {}
        self._misses: dict[str, int] = {}
        self._loads: dict[str, int] = {}

    def record_hits(self, column: str, count: int = 1) -> None:
        if count <= 0:
            return
        with self._lock:
            self._hits[column] = self._hits.get(column, 0) + count

    def record_load(self, column: str, num_cells: int) -> None:
        """Record one loader call that requests *num_cells* cells of *column*."""
        with self._lock:
            self._misses[column] = self._misses.get(column, 0) + num_cells
            self._loads[column] = self._loads.get(column, 0) + 1

    def get(self, column: str) -> CacheStats:
        with self._lock:
            return self._snapshot(column)

    def all(self) -> dict[str, CacheStats]:
        """Return snapshots for every column that has recorded data."""
        with self._lock:
            names = set(self._hits) | set(self._misses)
            return {name: self._snapshot(name) for name in sorted(names)}

    def total(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=sum(self._hits.values()),
                misses=sum(self._misses.values()),
                loads=sum(self._loads.values()),
            )

    def reset(self, column: str | None = None) -> None:
        """Reset counters.  If *column* is ``None``, reset all."""
        with self._lock:
            if column is None:
                self._hits.clear()
                self._misses.clear()
                self._loads.clear()
            else:
                self._hits.pop(column, None)
                self._misses.pop(column, None)
                self._loads.pop(column, None)

    def _snapshot(self, column: str) -> CacheStats:
        return CacheStats(
            hits=self._hits.get(column, 0),
            misses=self._misses.get(column, 0),
            loads=self._loads.get(column, 0),
        )


__all__ = ["CacheStats", "CacheStatsCollector"]
