"""TableViewModel — pure Python, no Qt dependency.

Binds one data source to a host view: scroll geometry in, rendered rows
and change notifications out.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from slicetable.core.order_by import OrderBy, as_order_by, toggle_column, validate_order_by
from slicetable.core.selection import Range, Selection
from slicetable.core.windowing import Viewport, compute_render_range, scroll_offset_for_row
from slicetable.data.types import Cell, DataSource, Resolved
from slicetable.errors import GeometryError
from slicetable.errors.handler import ErrorHandler, ErrorSeverity
from slicetable.events.bus import EventBus
from slicetable.events.table_events import CellsResolvedEvent, DataUpdatedEvent, NumRowsChangedEvent
from slicetable.settings.manager import EngineSettings
from slicetable.utils.throttle import Throttle

from .base import BaseViewModel
from .selection_controller import SelectionController
from .signal import ObservableProperty, Signal
from .viewport_fetcher import ViewportFetcher


@dataclass(frozen=True)
class RowSlice:
    """One rendered row: sorted position, identity, cells and selection state."""

    row: int
    row_number: Cell
    cells: tuple[Cell, ...]
    selected: Optional[bool] = None


class TableViewModel(BaseViewModel):
    """Table ViewModel — pure Python, no Qt dependency."""

    def __init__(
        self,
        source: DataSource,
        settings: Optional[EngineSettings] = None,
        *,
        event_bus: Optional[EventBus] = None,
        error_handler: Optional[ErrorHandler] = None,
        selection: Optional[Selection] = None,
        columns: Optional[Sequence[str]] = None,
    ) -> None:
        super().__init__()
        self._logger = logging.getLogger(__name__)
        self._settings = settings if settings is not None else EngineSettings()
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self._error_handler = error_handler or ErrorHandler(self._logger, self.event_bus)
        self._source = source

        # Observable properties
        self.order_by = ObservableProperty(())
        self.num_rows = ObservableProperty(source.num_rows)
        self.viewport = ObservableProperty(Viewport.for_rows(source.num_rows))
        self.visible_range = ObservableProperty(Range(0, 0))
        self.render_range = ObservableProperty(Range(0, 0))
        self.columns = ObservableProperty(tuple(columns) if columns is not None else source.columns)

        # Signals
        self.rows_changed = Signal()
        self.error_occurred = Signal()

        self.fetcher = ViewportFetcher(self._error_handler)
        self.selection_controller = SelectionController(
            source, selection=selection, error_handler=self._error_handler
        )
        self.selection = self.selection_controller.selection

        self._throttle = Throttle(self.rows_changed.emit, self._settings.notify_throttle_ms)
        self.connect_signal(self.fetcher.error_occurred, self.error_occurred.emit)
        self.connect_signal(self.selection_controller.error_occurred, self.error_occurred.emit)
        self.connect_signal(self.selection_controller.selection_changed, lambda _s: self._throttle())
        self._attach(source)

    # ------------------------------------------------------------------
    # Source lifecycle
    # ------------------------------------------------------------------
    @property
    def source(self) -> DataSource:
        return self._source

    def set_source(self, source: DataSource, columns: Optional[Sequence[str]] = None) -> None:
        """Switch to another source; sort keys that no longer apply are dropped."""
        self.fetcher.cancel()
        self._throttle.cancel()
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions.clear()
        self._source = source
        self.selection_controller.set_source(source)
        self.columns.value = tuple(columns) if columns is not None else source.columns
        order_by = tuple(
            item for item in self.order_by.value
            if item.column in source.columns and item.column in source.sortable_columns
        )
        self._set_order_by(order_by)
        self.num_rows.value = source.num_rows
        self._attach(source)
        self._recompute_ranges(self.viewport.value.scroll_offset, self.viewport.value.viewport_size)
        self.rows_changed.emit()

    def _attach(self, source: DataSource) -> None:
        self.subscribe_event(source.events, CellsResolvedEvent, lambda _e: self._throttle())
        self.subscribe_event(source.events, DataUpdatedEvent, lambda _e: self._throttle())
        self.subscribe_event(source.events, NumRowsChangedEvent, self._on_num_rows_changed)

    # ------------------------------------------------------------------
    # Scrolling
    # ------------------------------------------------------------------
    async def update_viewport(self, scroll_offset: float, viewport_size: float) -> bool:
        """Recompute the visible rows and fetch them; ``True`` if the fetch completed."""
        if not self._recompute_ranges(scroll_offset, viewport_size):
            return False
        return await self.refresh()

    def on_scroll(self, scroll_offset: float, viewport_size: float) -> Optional[asyncio.Task]:
        """Host scroll callback; schedules the fetch on the running event loop."""
        if not self._recompute_ranges(scroll_offset, viewport_size):
            return None
        return asyncio.get_running_loop().create_task(self.refresh())

    async def refresh(self) -> bool:
        """Fetch the current visible range with the current sort."""
        visible = self.visible_range.value
        done = await self.fetcher.request(
            self._source, visible.start, visible.end, self.columns.value, self.order_by.value
        )
        if done:
            self._throttle()
        return done

    def scroll_offset_for_row(self, row: int) -> Optional[float]:
        return scroll_offset_for_row(
            row, self.viewport.value, self._settings.row_height, self._settings.header_height
        )

    def _recompute_ranges(self, scroll_offset: float, viewport_size: float) -> bool:
        num_rows = self._source.num_rows
        try:
            viewport = Viewport.for_rows(num_rows, scroll_offset, viewport_size, self._settings.row_height)
            visible = viewport.visible_range(num_rows, self._settings.overscan)
            rendered = compute_render_range(
                visible, num_rows, self._settings.padding, self._settings.max_rendered_rows
            )
        except GeometryError as exc:
            self._error_handler.handle(exc, ErrorSeverity.ERROR, context={"operation": "scroll"})
            self.error_occurred.emit(str(exc))
            return False
        self.viewport.value = viewport
        self.visible_range.value = visible
        self.render_range.value = rendered
        return True

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------
    def toggle_column_sort(self, column: str) -> OrderBy:
        """Cycle the sort of *column* (none → ascending → descending → none)."""
        order_by = validate_order_by(
            toggle_column(column, self.order_by.value),
            self._source.columns,
            self._source.sortable_columns,
        )
        self._set_order_by(order_by)
        self._throttle()
        return order_by

    def set_order_by(self, order_by) -> None:
        normalized = validate_order_by(order_by, self._source.columns, self._source.sortable_columns)
        self._set_order_by(normalized)
        self._throttle()

    def _set_order_by(self, order_by) -> None:
        normalized = as_order_by(order_by)
        self.order_by.value = normalized
        self.selection_controller.order_by = normalized

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------
    def rows(self) -> list[RowSlice]:
        """Return the rows of the render range with whatever is already resolved."""
        order_by = self.order_by.value
        columns = self.columns.value
        render = self.render_range.value
        result = []
        for row in range(render.start, min(render.end, self._source.num_rows)):
            row_number = self._source.get_row_number(row, order_by)
            cells = tuple(self._source.get_cell(row, column, order_by) for column in columns)
            selected = None
            if isinstance(row_number, Resolved):
                selected = self.selection_controller.is_row_selected(row_number.value)
            result.append(RowSlice(row=row, row_number=row_number, cells=cells, selected=selected))
        return result

    # ------------------------------------------------------------------
    # Selection shortcuts
    # ------------------------------------------------------------------
    def toggle_row(self, row: int) -> None:
        row_number = self._source.get_row_number(row, self.order_by.value)
        if isinstance(row_number, Resolved):
            self.selection_controller.toggle_row_number(row_number.value)

    async def extend_to_row(self, row: int) -> bool:
        row_number = self._source.get_row_number(row, self.order_by.value)
        if not isinstance(row_number, Resolved):
            return False
        return await self.selection_controller.toggle_range_to_row(row, row_number.value)

    # ------------------------------------------------------------------
    # EventBus handlers
    # ------------------------------------------------------------------
    def _on_num_rows_changed(self, event: NumRowsChangedEvent) -> None:
        self.num_rows.value = event.num_rows
        viewport = self.viewport.value
        self._recompute_ranges(viewport.scroll_offset, viewport.viewport_size)
        self._throttle()

    def dispose(self) -> None:
        self._throttle.cancel()
        self.fetcher.dispose()
        self.selection_controller.dispose()
        super().dispose()


__all__ = ["RowSlice", "TableViewModel"]
