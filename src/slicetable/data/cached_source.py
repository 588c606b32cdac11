"""Fetch/cache reconciliation over a raw asynchronous range loader."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

from ..core.order_by import OrderByLike
from ..core.selection import Range
from ..errors import FetchLengthMismatchError
from ..events.bus import EventBus
from ..events.table_events import CellsResolvedEvent, DataUpdatedEvent, NumRowsChangedEvent
from .cache_stats import CacheStatsCollector
from .cancel import CancelToken, raise_if_cancelled
from .cell_store import CellStore
from .fetching import gather_settled
from .types import Cell, ColumnCompleteCallback, Resolved
from .validation import check_order_by, validate_column, validate_fetch_params, validate_row

LOGGER = logging.getLogger(__name__)

# ``await loader(column, row_start, row_end, cancel_token)`` returns the values of
# ``column`` for rows ``[row_start, row_end)``.
RangeLoader = Callable[[str, int, int, Optional[CancelToken]], Awaitable[Sequence[Any]]]


class CachedSource:
    """Unsorted data source that caches what a loader returns.

    ``fetch`` only asks the loader for cells that are still pending: for every
    requested column, the pending rows of the requested range are coalesced
    into maximal runs and each run costs exactly one loader call.  A fully
    resolved range costs none.

    Failure semantics:

    * the cancel token is checked on entry and after every loader call;
    * values returned by a loader are stored even when the token was cancelled
      meanwhile, so nothing delivered is ever lost;
    * a failing loader call leaves its rows pending and does not prevent the
      other runs of the same fetch from completing.  Once every run settled,
      the first real error is raised, or :class:`FetchAbortedError` if runs
      were only aborted.  Nothing is retried.

    ``on_column_complete`` fires for each column as soon as that column's
    runs have settled successfully.
    """

    def __init__(
        self,
        loader: RangeLoader,
        num_rows: int,
        columns: Sequence[str],
        *,
        events: Optional[EventBus] = None,
        stats: Optional[CacheStatsCollector] = None,
    ) -> None:
        self._loader = loader
        self._columns = tuple(columns)
        self._store = CellStore(num_rows)
        self.events = events if events is not None else EventBus()
        self.stats = stats if stats is not None else CacheStatsCollector()

    # ------------------------------------------------------------------
    # DataSource protocol
    # ------------------------------------------------------------------
    @property
    def num_rows(self) -> int:
        return self._store.num_rows

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    @property
    def sortable_columns(self) -> frozenset[str]:
        return frozenset()

    @property
    def store(self) -> CellStore:
        return self._store

    def get_cell(self, row: int, column: str, order_by: OrderByLike = None) -> Cell:
        validate_column(column, self._columns)
        validate_row(row, self.num_rows)
        check_order_by(order_by, self._columns, self.sortable_columns)
        return self._store.get_cell(row, column)

    def get_row_number(self, row: int, order_by: OrderByLike = None) -> Cell:
        validate_row(row, self.num_rows)
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
        requested = validate_fetch_params(row_start, row_end, columns, self.num_rows, self._columns)
        check_order_by(order_by, self._columns, self.sortable_columns)
        if row_start == row_end or not requested:
            return

        jobs = []
        for column in requested:
            runs = self._store.pending_runs(column, row_start, row_end)
            cached = (row_end - row_start) - sum(len(r) for r in runs)
            self.stats.record_hits(column, cached)
            jobs.append(self._load_column(column, runs, row_start, row_end, cancel_token, on_column_complete))

        LOGGER.debug("Fetching %d columns for rows %d-%d", len(jobs), row_start, row_end)
        await gather_settled(*jobs)
        raise_if_cancelled(cancel_token)

    # ------------------------------------------------------------------
    # Streaming updates and lifecycle
    # ------------------------------------------------------------------
    def update_cells(self, column: str, row_start: int, values: Sequence[Any]) -> int:
        """Replace already-known values, e.g. from a live feed; returns the number changed."""
        validate_column(column, self._columns)
        validate_fetch_params(row_start, row_start + len(values), (column,), self.num_rows, self._columns)
        changed = self._store.set_range(column, row_start, values)
        if changed:
            self.events.publish(
                DataUpdatedEvent(row_start=row_start, row_end=row_start + len(values), columns=(column,))
            )
        return changed

    def set_num_rows(self, num_rows: int) -> None:
        if num_rows == self.num_rows:
            return
        self._store.resize(num_rows)
        self.events.publish(NumRowsChangedEvent(num_rows=num_rows))

    def clear_cache(self) -> None:
        self._store.clear()
        self.stats.reset()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    async def _load_column(
        self,
        column: str,
        runs: Sequence[Range],
        row_start: int,
        row_end: int,
        cancel_token: Optional[CancelToken],
        on_column_complete: Optional[ColumnCompleteCallback],
    ) -> None:
        await gather_settled(*(self._load_run(column, run.start, run.end, cancel_token) for run in runs))
        raise_if_cancelled(cancel_token)
        if on_column_complete is not None:
            cells = [self._store.get_cell(row, column) for row in range(row_start, row_end)]
            on_column_complete(column, [cell.value for cell in cells if isinstance(cell, Resolved)])

    async def _load_run(
        self, column: str, row_start: int, row_end: int, cancel_token: Optional[CancelToken]
    ) -> None:
        self.stats.record_load(column, row_end - row_start)
        values = await self._loader(column, row_start, row_end, cancel_token)
        if len(values) != row_end - row_start:
            raise FetchLengthMismatchError(
                f"Fetched data length {len(values)} does not match expected length {row_end - row_start}"
            )
        if self._store.set_range(column, row_start, values):
            self.events.publish(CellsResolvedEvent(row_start=row_start, row_end=row_end, columns=(column,)))
        raise_if_cancelled(cancel_token)


__all__ = ["CachedSource", "RangeLoader"]
