"""Sorted view over an unsorted data source."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

import numpy as np

from ..core.order_by import OrderBy, OrderByLike, serialize_order_by
from ..core.ranking import RankedKey, compute_indexes, compute_ranks
from ..errors import InvalidColumnError
from ..events.bus import EventBus, Subscription
from ..events.table_events import CellsResolvedEvent, DataUpdatedEvent, NumRowsChangedEvent
from .cancel import CancelToken, raise_if_cancelled
from .fetching import fetch_column, gather_settled, group_contiguous
from .types import PENDING, Cell, ColumnCompleteCallback, DataSource, Resolved
from .validation import check_order_by, validate_column, validate_fetch_params, validate_row

LOGGER = logging.getLogger(__name__)


class RankCache:
    """Rank tables per column and permutations per serialised order-by.

    Both belong to one source identity: call :meth:`clear` when the source
    is replaced.  When the row count changes only the permutations are
    dropped; a rank table of the wrong length is recomputed on next use from
    the upstream cells, which stay cached.
    """

    def __init__(self) -> None:
        self._ranks: dict[str, np.ndarray] = {}
        self._indexes: dict[str, np.ndarray] = {}

    def get_ranks(self, column: str) -> Optional[np.ndarray]:
        return self._ranks.get(column)

    def set_ranks(self, column: str, ranks: np.ndarray) -> None:
        self._ranks[column] = ranks

    def get_indexes(self, key: str) -> Optional[np.ndarray]:
        return self._indexes.get(key)

    def set_indexes(self, key: str, indexes: np.ndarray) -> None:
        self._indexes[key] = indexes

    def drop_indexes(self) -> None:
        self._indexes.clear()

    @property
    def ranked_columns(self) -> tuple[str, ...]:
        return tuple(self._ranks)

    def clear(self) -> None:
        self._ranks.clear()
        self._indexes.clear()


class SortableSource:
    """Expose *source* in any order made of its sortable columns.

    Sorting a column fetches the whole column once and ranks it.  The rank
    table is reused by every order-by that mentions the column; permutations
    are cached per order-by.  Until the permutation of an order-by is known,
    sorted rows are pending.
    """

    def __init__(self, source: DataSource, sortable_columns: Optional[Iterable[str]] = None) -> None:
        self._source = source
        sortable = frozenset(source.columns if sortable_columns is None else sortable_columns)
        for column in sortable:
            validate_column(column, source.columns)
        self._sortable = sortable
        self.rank_cache = RankCache()
        self.events = EventBus()
        self._forwarding: Optional[Subscription] = None
        self._active_fetches = 0
        self._upstream_subs = [
            source.events.subscribe(NumRowsChangedEvent, self._on_num_rows_changed),
            source.events.subscribe(DataUpdatedEvent, self._on_data_updated),
        ]

    # ------------------------------------------------------------------
    # DataSource protocol
    # ------------------------------------------------------------------
    @property
    def source(self) -> DataSource:
        return self._source

    @property
    def num_rows(self) -> int:
        return self._source.num_rows

    @property
    def columns(self) -> tuple[str, ...]:
        return self._source.columns

    @property
    def sortable_columns(self) -> frozenset[str]:
        return self._sortable

    def get_unsorted_row(self, row: int, order_by: OrderByLike = None) -> Cell:
        """Return the source row shown at sorted position *row*, or ``PENDING``."""
        validate_row(row, self.num_rows)
        normalized = check_order_by(order_by, self.columns, self._sortable)
        if not normalized:
            return Resolved(row)
        indexes = self.rank_cache.get_indexes(serialize_order_by(normalized))
        if indexes is None or len(indexes) != self.num_rows:
            return PENDING
        return Resolved(int(indexes[row]))

    def get_cell(self, row: int, column: str, order_by: OrderByLike = None) -> Cell:
        validate_column(column, self.columns)
        upstream = self.get_unsorted_row(row, order_by)
        if not isinstance(upstream, Resolved):
            return PENDING
        return self._source.get_cell(upstream.value, column)

    def get_row_number(self, row: int, order_by: OrderByLike = None) -> Cell:
        upstream = self.get_unsorted_row(row, order_by)
        if not isinstance(upstream, Resolved):
            return PENDING
        return self._source.get_row_number(upstream.value)

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
        requested = validate_fetch_params(row_start, row_end, columns, self.num_rows, self.columns)
        normalized = check_order_by(order_by, self.columns, self._sortable)

        self._start_forwarding()
        try:
            if not normalized:
                await self._source.fetch(
                    row_start,
                    row_end,
                    columns=requested,
                    cancel_token=cancel_token,
                    on_column_complete=on_column_complete,
                )
                return
            if row_start == row_end:
                return

            indexes = await self.fetch_indexes(normalized, cancel_token)
            if not requested:
                return
            upstream_rows = sorted({int(i) for i in indexes[row_start:row_end]})
            await gather_settled(
                *(
                    self._source.fetch(start, end, columns=requested, cancel_token=cancel_token)
                    for start, end in group_contiguous(upstream_rows)
                )
            )
            raise_if_cancelled(cancel_token)
            if on_column_complete is not None:
                self._report_columns(indexes[row_start:row_end], requested, on_column_complete)
        finally:
            self._stop_forwarding()

    # ------------------------------------------------------------------
    # Ranks and permutations
    # ------------------------------------------------------------------
    async def fetch_indexes(self, order_by: OrderBy, cancel_token: Optional[CancelToken] = None) -> np.ndarray:
        """Return the permutation for *order_by*, computing and caching it if needed."""
        key = serialize_order_by(order_by)
        indexes = self.rank_cache.get_indexes(key)
        if indexes is not None and len(indexes) == self.num_rows:
            return indexes

        # Loop until every rank table matches the row count, which may grow
        # while a column is being fetched.
        while True:
            raise_if_cancelled(cancel_token)
            missing = [item.column for item in order_by if not self._has_current_ranks(item.column)]
            if not missing:
                break
            LOGGER.debug("Ranking columns %s", ", ".join(missing))
            await gather_settled(*(self._rank_column(column, cancel_token) for column in missing))

        keys = [RankedKey(item.direction, self.rank_cache.get_ranks(item.column)) for item in order_by]
        indexes = compute_indexes(keys)
        self.rank_cache.set_indexes(key, indexes)
        self.events.publish(CellsResolvedEvent())
        return indexes

    def _has_current_ranks(self, column: str) -> bool:
        ranks = self.rank_cache.get_ranks(column)
        return ranks is not None and len(ranks) == self.num_rows

    async def _rank_column(self, column: str, cancel_token: Optional[CancelToken]) -> None:
        if column not in self.columns:
            raise InvalidColumnError(f"Invalid column: {column}")
        values = await fetch_column(self._source, column, cancel_token)
        self.rank_cache.set_ranks(column, compute_ranks(values))

    def _report_columns(
        self,
        upstream_rows: np.ndarray,
        columns: Sequence[str],
        on_column_complete: ColumnCompleteCallback,
    ) -> None:
        for column in columns:
            values: list[Any] = []
            for upstream in upstream_rows:
                cell = self._source.get_cell(int(upstream), column)
                if not isinstance(cell, Resolved):
                    break
                values.append(cell.value)
            else:
                on_column_complete(column, values)

    # ------------------------------------------------------------------
    # Upstream events
    # ------------------------------------------------------------------
    def _start_forwarding(self) -> None:
        self._active_fetches += 1
        if self._forwarding is None:
            self._forwarding = self._source.events.subscribe(CellsResolvedEvent, self._forward_resolved)

    def _stop_forwarding(self) -> None:
        self._active_fetches -= 1
        if self._active_fetches == 0 and self._forwarding is not None:
            self._forwarding.cancel()
            self._forwarding = None

    def _forward_resolved(self, event: CellsResolvedEvent) -> None:
        # Upstream rows do not map to a contiguous sorted range.
        self.events.publish(CellsResolvedEvent(columns=event.columns))

    def _on_num_rows_changed(self, event: NumRowsChangedEvent) -> None:
        self.rank_cache.drop_indexes()
        self.events.publish(NumRowsChangedEvent(num_rows=event.num_rows))

    def _on_data_updated(self, event: DataUpdatedEvent) -> None:
        self.events.publish(
            DataUpdatedEvent(row_start=event.row_start, row_end=event.row_end, columns=event.columns)
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Drop every rank table and permutation."""
        self.rank_cache.clear()

    def dispose(self) -> None:
        for sub in self._upstream_subs:
            sub.cancel()
        self._upstream_subs.clear()
        if self._forwarding is not None:
            self._forwarding.cancel()
            self._forwarding = None


__all__ = ["RankCache", "SortableSource"]
