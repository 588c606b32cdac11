"""Selection gestures over a possibly sorted, possibly remote table.

The selection is expressed in row numbers (source identities), never in
sorted positions, so it survives re-sorting.  Gestures that need data (shift
ranges in a sorted view, select-all) run asynchronously; starting a gesture
aborts the previous one, and an aborted gesture applies nothing.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from slicetable.core.order_by import OrderBy, OrderByLike, as_order_by, serialize_order_by
from slicetable.core.selection import (
    Selection,
    count_selected,
    is_selected,
    ranges_from_indexes,
    select_range,
    toggle_index_in_selection,
    unselect_range,
)
from slicetable.data.cancel import CancelToken
from slicetable.data.types import DataSource, Resolved
from slicetable.errors import CellNotResolvedError, FetchAbortedError
from slicetable.errors.handler import ErrorHandler, ErrorSeverity
from slicetable.events.table_events import NumRowsChangedEvent

from .base import BaseViewModel
from .signal import ObservableProperty, Signal


class SelectionController(BaseViewModel):
    """Apply user selection gestures to an immutable :class:`Selection`."""

    def __init__(
        self,
        source: DataSource,
        order_by: OrderByLike = None,
        selection: Optional[Selection] = None,
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        super().__init__()
        self._logger = logging.getLogger(__name__)
        self._error_handler = error_handler
        self._source = source
        self._order_by: OrderBy = as_order_by(order_by)
        self._gesture: Optional[CancelToken] = None
        # serialised order-by -> {row number: sorted row}
        self._row_by_row_number: dict[str, dict[int, int]] = {}

        self.selection = ObservableProperty(selection if selection is not None else Selection.empty())
        # True / False, or None while unknown
        self.all_selected = ObservableProperty(self._quick_all_selected())
        self.gesture_pending = ObservableProperty(False)

        self.selection_changed = Signal()
        self.error_occurred = Signal()

        self.subscribe_event(source.events, NumRowsChangedEvent, self._on_num_rows_changed)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def source(self) -> DataSource:
        return self._source

    @property
    def num_rows(self) -> int:
        return self._source.num_rows

    @property
    def order_by(self) -> OrderBy:
        return self._order_by

    @order_by.setter
    def order_by(self, order_by: OrderByLike) -> None:
        self._order_by = as_order_by(order_by)

    def set_source(self, source: DataSource) -> None:
        self.cancel_gesture()
        self.release_subscriptions()
        self._source = source
        self._row_by_row_number.clear()
        self.subscribe_event(source.events, NumRowsChangedEvent, self._on_num_rows_changed)
        self.all_selected.value = self._quick_all_selected()

    def is_row_selected(self, row_number: Optional[int]) -> Optional[bool]:
        if row_number is None:
            return None
        return is_selected(self.selection.value.ranges, row_number)

    def set_selection(self, selection: Selection) -> None:
        """Replace the selection, e.g. with one restored by the host."""
        self._apply(selection)

    # ------------------------------------------------------------------
    # Gesture lifecycle
    # ------------------------------------------------------------------
    def start_gesture(self) -> CancelToken:
        if self._gesture is not None:
            self._gesture.cancel("Superseded by a newer selection gesture")
        token = CancelToken()
        self._gesture = token
        self.gesture_pending.value = True
        return token

    def stop_gesture(self, token: CancelToken) -> None:
        token.cancel("Selection gesture finished")
        if self._gesture is token:
            self._gesture = None
            self.gesture_pending.value = False

    def cancel_gesture(self) -> None:
        if self._gesture is not None:
            self.stop_gesture(self._gesture)

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------
    def toggle_row_number(self, row_number: int) -> None:
        """Plain click on a row: toggle it and make it the anchor."""
        token = self.start_gesture()
        try:
            self._apply(toggle_index_in_selection(self.selection.value, row_number))
        finally:
            self.stop_gesture(token)

    def clear(self) -> None:
        token = self.start_gesture()
        try:
            self._apply(Selection.empty())
        finally:
            self.stop_gesture(token)

    async def toggle_range_to_row(self, row: int, row_number: int) -> bool:
        """Shift-click on sorted *row* whose identity is *row_number*.

        Returns ``True`` when the new selection was applied.
        """
        return await self._run_gesture(lambda token: self._toggle_range(row, row_number, token))

    async def toggle_all_rows(self) -> bool:
        return await self._run_gesture(self._toggle_all)

    async def refresh_all_selected(self) -> Optional[bool]:
        """Recompute :attr:`all_selected`, fetching row numbers if needed."""
        token = self.start_gesture()
        try:
            value = await self.fetch_are_all_selected(self.selection.value, token)
            token.raise_if_cancelled()
        except FetchAbortedError:
            return None
        except Exception as exc:
            self._report(exc, "refresh_all_selected")
            return None
        finally:
            self.stop_gesture(token)
        self.all_selected.value = value
        return value

    # ------------------------------------------------------------------
    # Data helpers
    # ------------------------------------------------------------------
    async def fetch_row_numbers(
        self, row_start: int, row_end: int, order_by: OrderByLike, token: CancelToken
    ) -> list[int]:
        await self._source.fetch(row_start, row_end, order_by=order_by, cancel_token=token)
        token.raise_if_cancelled()
        row_numbers = []
        for row in range(row_start, row_end):
            cell = self._source.get_row_number(row, order_by)
            if not isinstance(cell, Resolved):
                raise CellNotResolvedError(
                    f"Row number is not resolved for row {row} with order by {serialize_order_by(order_by)}"
                )
            row_numbers.append(cell.value)
        return row_numbers

    async def fetch_row(self, row_number: int, token: CancelToken) -> Optional[int]:
        """Return the sorted row showing *row_number* in the current order, or ``None``."""
        key = serialize_order_by(self._order_by)
        rows = self._row_by_row_number.get(key)
        if rows is None:
            row_numbers = await self.fetch_row_numbers(0, self.num_rows, self._order_by, token)
            rows = {number: row for row, number in enumerate(row_numbers)}
            self._row_by_row_number[key] = rows
        return rows.get(row_number)

    async def fetch_are_all_selected(self, selection: Selection, token: CancelToken) -> bool:
        quick = self._quick_all_selected(selection)
        if quick is not None:
            return quick
        # The selection may be shared with other views of the same rows,
        # so covering num_rows indexes does not prove every row is selected.
        row_numbers = await self.fetch_row_numbers(0, self.num_rows, None, token)
        return bool(row_numbers) and all(is_selected(selection.ranges, n) for n in row_numbers)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    async def _toggle_range(self, row: int, row_number: int, token: CancelToken) -> Selection:
        selection = self.selection.value
        anchor = selection.anchor
        if anchor is None or anchor == row_number:
            return toggle_index_in_selection(selection, row_number)

        anchor_row = await self.fetch_row(anchor, token)
        if anchor_row is None or anchor_row == row:
            return toggle_index_in_selection(selection, row_number)

        if anchor_row < row:
            row_start, row_end = anchor_row + 1, row + 1
        else:
            row_start, row_end = row, anchor_row
        row_numbers = await self.fetch_row_numbers(row_start, row_end, self._order_by, token)

        new_anchor = self._source.get_row_number(row, self._order_by)
        if not isinstance(new_anchor, Resolved):
            raise CellNotResolvedError(f"Row number is not resolved for row {row}")

        apply = select_range if is_selected(selection.ranges, anchor) else unselect_range
        ranges = selection.ranges
        for block in ranges_from_indexes(row_numbers):
            ranges = apply(ranges, block)
        return Selection(ranges=ranges, anchor=new_anchor.value)

    async def _toggle_all(self, token: CancelToken) -> Selection:
        selection = self.selection.value
        all_selected = await self.fetch_are_all_selected(selection, token)
        row_numbers = await self.fetch_row_numbers(0, self.num_rows, None, token)
        apply = unselect_range if all_selected else select_range
        ranges = selection.ranges
        for block in ranges_from_indexes(row_numbers):
            ranges = apply(ranges, block)
        return Selection(ranges=ranges, anchor=None)

    async def _run_gesture(self, gesture: Callable[[CancelToken], Awaitable[Selection]]) -> bool:
        token = self.start_gesture()
        try:
            selection = await gesture(token)
            token.raise_if_cancelled()
        except FetchAbortedError:
            self._logger.debug("Selection gesture aborted")
            return False
        except Exception as exc:
            self._report(exc, "selection_gesture")
            return False
        finally:
            self.stop_gesture(token)
        self._apply(selection)
        return True

    def _apply(self, selection: Selection) -> None:
        if selection == self.selection.value:
            return
        self.selection.value = selection
        self.all_selected.value = self._quick_all_selected(selection)
        self.selection_changed.emit(selection)

    def _quick_all_selected(self, selection: Optional[Selection] = None) -> Optional[bool]:
        if selection is None:
            selection = self.selection.value
        num_rows = self.num_rows
        if num_rows == 0 or count_selected(selection.ranges) < num_rows:
            return False
        return None

    def _on_num_rows_changed(self, event: NumRowsChangedEvent) -> None:
        self._row_by_row_number.clear()
        self.all_selected.value = self._quick_all_selected()

    def _report(self, exc: Exception, operation: str) -> None:
        if self._error_handler is not None:
            self._error_handler.handle(exc, ErrorSeverity.ERROR, context={"operation": operation})
        else:
            self._logger.error("Selection %s failed: %s", operation, exc)
        self.error_occurred.emit(str(exc))

    def dispose(self) -> None:
        self.cancel_gesture()
        super().dispose()


__all__ = ["SelectionController"]
