"""Data sources, the cell cache and fetch helpers."""

from .array_source import ArraySource, LazyArraySource
from .cache_stats import CacheStats, CacheStatsCollector
from .cached_source import CachedSource, RangeLoader
from .cancel import CancelToken
from .cell_store import CellStore
from .fetching import fetch_column, fetch_range, group_contiguous
from .filtered import FilteredSource
from .sortable import RankCache, SortableSource
from .types import PENDING, Cell, DataSource, Resolved, is_resolved

__all__ = [
    "ArraySource",
    "CacheStats",
    "CacheStatsCollector",
    "CachedSource",
    "CancelToken",
    "Cell",
    "CellStore",
    "DataSource",
    "FilteredSource",
    "LazyArraySource",
    "PENDING",
    "RangeLoader",
    "RankCache",
    "Resolved",
    "SortableSource",
    "fetch_column",
    "fetch_range",
    "group_contiguous",
    "is_resolved",
]
