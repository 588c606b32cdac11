"""In-memory data sources."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Sequence

from ..core.order_by import OrderByLike
from ..events.bus import EventBus
from .cache_stats import CacheStatsCollector
from .cached_source import CachedSource
from .cancel import CancelToken, raise_if_cancelled
from .types import Cell, ColumnCompleteCallback, Resolved
from .validation import check_order_by, validate_column, validate_fetch_params, validate_row


def _columns_from_rows(rows: Sequence[Mapping[str, Any]]) -> tuple[str, ...]:
    return tuple(rows[0].keys()) if rows else ()


def _to_column_data(rows: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> dict[str, list[Any]]:
    data: dict[str, list[Any]] = {column: [] for column in columns}
    for index, row in enumerate(rows):
        for column in columns:
            if column not in row:
                raise KeyError(f'Column "{column}" not found in row {index}')
            data[column].append(row[column])
    return data


class ArraySource:
    """Static table: every cell is resolved from the start.

    ``fetch`` resolves nothing new; it only reports the requested values
    through ``on_column_complete`` so that range helpers work uniformly.
    """

    def __init__(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Optional[Sequence[str]] = None,
        *,
        events: Optional[EventBus] = None,
    ) -> None:
        self._columns = tuple(columns) if columns is not None else _columns_from_rows(rows)
        self._data = _to_column_data(rows, self._columns)
        self._num_rows = len(rows)
        self.events = events or EventBus()

    @classmethod
    def from_columns(cls, data: Mapping[str, Sequence[Any]]) -> "ArraySource":
        lengths = {len(values) for values in data.values()}
        if len(lengths) > 1:
            raise ValueError("All columns must have the same length")
        num_rows = lengths.pop() if lengths else 0
        rows = [{column: values[i] for column, values in data.items()} for i in range(num_rows)]
        return cls(rows, columns=tuple(data))

    @property
    def num_rows(self) -> int:
        return self._num_rows

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    @property
    def sortable_columns(self) -> frozenset[str]:
        return frozenset()

    def get_cell(self, row: int, column: str, order_by: OrderByLike = None) -> Cell:
        validate_column(column, self._columns)
        validate_row(row, self._num_rows)
        check_order_by(order_by, self._columns, self.sortable_columns)
        return Resolved(self._data[column][row])

    def get_row_number(self, row: int, order_by: OrderByLike = None) -> Cell:
        validate_row(row, self._num_rows)
        check_order_by(order_by, self._columns, self.sortable_columns)
        return Resolved(row)

    async def fetch(
        self,
        row_start: int,
        row_end: int,
        columns: Optional[Sequence[str]] = None,
        order_by: OrderByLike = None,
        cancel_token: Optional[CancelToken] = None,
        on_column_complete: Optional[ColumnCompleteCallback] = None,
    ) -> None:
        raise_if_cancelled(cancel_token)
        requested = validate_fetch_params(row_start, row_end, columns, self._num_rows, self._columns)
        check_order_by(order_by, self._columns, self.sortable_columns)
        if on_column_complete is not None:
            for column in requested:
                on_column_complete(column, self._data[column][row_start:row_end])


class LazyArraySource(CachedSource):
    """In-memory table whose cells resolve only when fetched.

    Each loader call sleeps *delay* seconds first, which makes it a stand-in
    for a remote source in demos and tests.  ``load_calls`` records every
    ``(column, row_start, row_end)`` the cache asked for.
    """

    def __init__(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Optional[Sequence[str]] = None,
        *,
        delay: float = 0.0,
        events: Optional[EventBus] = None,
        stats: Optional[CacheStatsCollector] = None,
    ) -> None:
        resolved_columns = tuple(columns) if columns is not None else _columns_from_rows(rows)
        self._data = _to_column_data(rows, resolved_columns)
        self._delay = delay
        self.load_calls: list[tuple[str, int, int]] = []
        super().__init__(self._load, len(rows), resolved_columns, events=events, stats=stats)

    async def _load(
        self, column: str, row_start: int, row_end: int, cancel_token: Optional[CancelToken]
    ) -> Sequence[Any]:
        self.load_calls.append((column, row_start, row_end))
        await asyncio.sleep(self._delay)
        raise_if_cancelled(cancel_token)
        return self._data[column][row_start:row_end]


__all__ = ["ArraySource", "LazyArraySource"]
