"""Row-subset view of an upstream source."""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence

from ..core.order_by import OrderByLike
from ..errors import InvalidRowError
from ..events.bus import EventBus
from ..events.table_events import CellsResolvedEvent
from .cancel import CancelToken, raise_if_cancelled
from .fetching import gather_settled, group_contiguous
from .types import Cell, ColumnCompleteCallback, DataSource, Resolved
from .validation import check_order_by, validate_column, validate_fetch_params, validate_row


class FilteredSource:
    """Unsortable view exposing only some rows of *source*, in upstream order.

    Rows are chosen once, either explicitly or with a predicate on the
    upstream row index.  Wrap the result in ``SortableSource`` to sort the
    subset: ranking then only touches the filtered rows.  Row numbers keep
    pointing at the upstream identities.
    """

    def __init__(
        self,
        source: DataSource,
        predicate: Optional[Callable[[int], bool]] = None,
        *,
        rows: Optional[Iterable[int]] = None,
    ) -> None:
        if (predicate is None) == (rows is None):
            raise ValueError("Pass exactly one of predicate or rows")
        self._source = source
        if rows is not None:
            upstream_rows = sorted(set(rows))
            for row in upstream_rows:
                validate_row(row, source.num_rows)
        else:
            upstream_rows = [row for row in range(source.num_rows) if predicate(row)]
        self._upstream_rows: list[int] = upstream_rows
        self.events = EventBus()

    @property
    def num_rows(self) -> int:
        return len(self._upstream_rows)

    @property
    def columns(self) -> tuple[str, ...]:
        return self._source.columns

    @property
    def sortable_columns(self) -> frozenset[str]:
        return frozenset()

    @property
    def upstream_rows(self) -> tuple[int, ...]:
        return tuple(self._upstream_rows)

    def get_upstream_row(self, row: int) -> int:
        validate_row(row, self.num_rows)
        try:
            return self._upstream_rows[row]
        except IndexError:
            raise InvalidRowError(f"Upstream row not found for row {row}") from None

    def get_cell(self, row: int, column: str, order_by: OrderByLike = None) -> Cell:
        validate_column(column, self.columns)
        check_order_by(order_by, self.columns, self.sortable_columns)
        return self._source.get_cell(self.get_upstream_row(row), column)

    def get_row_number(self, row: int, order_by: OrderByLike = None) -> Cell:
        check_order_by(order_by, self.columns, self.sortable_columns)
        return self._source.get_row_number(self.get_upstream_row(row))

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
        check_order_by(order_by, self.columns, self.sortable_columns)
        if row_start == row_end:
            return

        subscription = self._source.events.subscribe(
            CellsResolvedEvent, lambda event: self.events.publish(CellsResolvedEvent(columns=event.columns))
        )
        try:
            runs = group_contiguous(self._upstream_rows[row_start:row_end])
            await gather_settled(
                *(
                    self._source.fetch(start, end, columns=requested, cancel_token=cancel_token)
                    for start, end in runs
                )
            )
        finally:
            subscription.cancel()
        raise_if_cancelled(cancel_token)

        if on_column_complete is not None:
            for column in requested:
                cells = [self.get_cell(row, column) for row in range(row_start, row_end)]
                if all(isinstance(cell, Resolved) for cell in cells):
                    on_column_complete(column, [cell.value for cell in cells])


__all__ = ["FilteredSource"]
