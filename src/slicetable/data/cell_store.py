"""Sparse per-column store of resolved cells."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Sequence

from ..core.selection import Range
from ..viewmodels.signal import Connection, Signal
from .types import PENDING, Cell, Resolved

LOGGER = logging.getLogger(__name__)


def _same_value(a: Any, b: Any) -> bool:
    if a is b:
        return True
    try:
        if a == b:
            return True
        # NaN never equals itself
        return bool(a != a and b != b)
    except (TypeError, ValueError):
        # array-like values without a scalar truth value
        return False


class CellStore:
    """Resolved/pending map for the cells and row numbers of one source.

    A cell is pending until a value is stored for it.  Writes are batched:
    :meth:`set_range` stores a run of values and emits ``changed`` once, and
    only when at least one stored value differs from the previous one.

    ``changed`` handlers receive ``(row_start, row_end, columns)``.
    """

    def __init__(self, num_rows: int = 0) -> None:
        self._num_rows = num_rows
        self._cells: dict[str, dict[int, Any]] = {}
        self._row_numbers: dict[int, int] = {}
        self.changed = Signal()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def num_rows(self) -> int:
        return self._num_rows

    def resize(self, num_rows: int) -> None:
        """Change the row count; cells beyond a shrunk end are discarded."""
        if num_rows < self._num_rows:
            for column_cells in self._cells.values():
                for row in [r for r in column_cells if r >= num_rows]:
                    del column_cells[row]
            for row in [r for r in self._row_numbers if r >= num_rows]:
                del self._row_numbers[row]
        self._num_rows = num_rows

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_cell(self, row: int, column: str) -> Cell:
        column_cells = self._cells.get(column)
        if column_cells is None or row not in column_cells:
            return PENDING
        return Resolved(column_cells[row])

    def get_row_number(self, row: int) -> Cell:
        if row not in self._row_numbers:
            return PENDING
        return Resolved(self._row_numbers[row])

    def is_resolved(self, row: int, column: str) -> bool:
        column_cells = self._cells.get(column)
        return column_cells is not None and row in column_cells

    def pending_runs(self, column: str, row_start: int, row_end: int) -> list[Range]:
        """Return the maximal runs of pending rows of *column* within ``[row_start, row_end)``."""
        column_cells = self._cells.get(column, {})
        runs: list[Range] = []
        start = None
        for row in range(row_start, row_end):
            if row in column_cells:
                if start is not None:
                    runs.append(Range(start, row))
                    start = None
            elif start is None:
                start = row
        if start is not None:
            runs.append(Range(start, row_end))
        return runs

    def count_resolved(self, column: str, row_start: int, row_end: int) -> int:
        column_cells = self._cells.get(column)
        if not column_cells:
            return 0
        return sum(1 for row in range(row_start, row_end) if row in column_cells)

    @property
    def cached_columns(self) -> tuple[str, ...]:
        return tuple(self._cells)

    def cached_rows(self, column: str) -> list[int]:
        return sorted(self._cells.get(column, ()))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def set_range(self, column: str, row_start: int, values: Sequence[Any]) -> int:
        """Store *values* for rows ``row_start..``; return the number of changed cells."""
        column_cells = self._cells.setdefault(column, {})
        changed = 0
        for offset, value in enumerate(values):
            row = row_start + offset
            if row >= self._num_rows:
                LOGGER.warning(
                    "Ignoring %d values past the end of column %s (num_rows=%d)",
                    len(values) - offset, column, self._num_rows,
                )
                break
            if row in column_cells and _same_value(column_cells[row], value):
                continue
            column_cells[row] = value
            changed += 1
        if changed:
            self.changed.emit(row_start, row_start + len(values), (column,))
        return changed

    def set_cell(self, row: int, column: str, value: Any) -> bool:
        return self.set_range(column, row, (value,)) > 0

    def set_row_numbers(self, row_start: int, row_numbers: Iterable[int]) -> int:
        changed = 0
        end = row_start
        for offset, row_number in enumerate(row_numbers):
            row = row_start + offset
            end = row + 1
            if self._row_numbers.get(row) == row_number:
                continue
            self._row_numbers[row] = row_number
            changed += 1
        if changed:
            self.changed.emit(row_start, end, ())
        return changed

    def clear(self) -> None:
        had_data = bool(self._cells) or bool(self._row_numbers)
        self._cells.clear()
        self._row_numbers.clear()
        if had_data:
            self.changed.emit(0, self._num_rows, ())

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def connect(self, handler: Callable[[int, int, tuple[str, ...]], None]) -> Connection:
        return self.changed.connect(handler)

    def dispose(self) -> None:
        self.changed.disconnect_all()


__all__ = ["CellStore"]
