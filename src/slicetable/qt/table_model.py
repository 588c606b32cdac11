"""Qt table model exposing a :class:`TableViewModel` to item views."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from PySide6.QtCore import QAbstractTableModel, QModelIndex, QObject, Qt, Signal

from ..data.types import Resolved
from ..viewmodels.table_viewmodel import TableViewModel


class TableRoles(IntEnum):
    """Custom roles for the table model."""

    PendingRole = Qt.ItemDataRole.UserRole + 1
    RowNumberRole = Qt.ItemDataRole.UserRole + 2
    SelectedRole = Qt.ItemDataRole.UserRole + 3


class SliceTableModel(QAbstractTableModel):
    """Read-only model over the whole table; only resolved cells have data.

    Pending cells report ``None`` for ``DisplayRole`` and ``True`` for
    ``PendingRole``.  The view model drives fetching; this class only
    translates its change notifications into Qt signals.
    """

    # Qt Signals use camelCase by convention (noqa: N815)
    errorOccurred = Signal(str)  # noqa: N815

    def __init__(self, view_model: TableViewModel, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._view_model = view_model
        self._num_rows = view_model.source.num_rows
        self._columns = view_model.columns.value
        self._connections = [
            view_model.rows_changed.connect(self._on_rows_changed),
            view_model.num_rows.changed.connect(self._on_layout_changed),
            view_model.columns.changed.connect(self._on_layout_changed),
            view_model.order_by.changed.connect(self._on_layout_changed),
            view_model.error_occurred.connect(self.errorOccurred.emit),
        ]

    def roleNames(self) -> dict[int, bytes]:  # noqa: N802  # Qt override
        roles = dict(super().roleNames())
        roles[TableRoles.PendingRole] = b"pending"
        roles[TableRoles.RowNumberRole] = b"rowNumber"
        roles[TableRoles.SelectedRole] = b"selected"
        return roles

    def rowCount(self, parent: QModelIndex | None = None) -> int:  # noqa: N802  # Qt override
        if parent is not None and parent.isValid():
            return 0
        return self._num_rows

    def columnCount(self, parent: QModelIndex | None = None) -> int:  # noqa: N802  # Qt override
        if parent is not None and parent.isValid():
            return 0
        return len(self._columns)

    def headerData(  # noqa: N802  # Qt override
        self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole
    ) -> Any:
        if role != Qt.ItemDataRole.DisplayRole:
            return None
        if orientation == Qt.Orientation.Horizontal:
            if 0 <= section < len(self._columns):
                return self._columns[section]
            return None
        if 0 <= section < self._num_rows:
            row_number = self._view_model.source.get_row_number(section, self._view_model.order_by.value)
            if isinstance(row_number, Resolved):
                return row_number.value + 1
        return None

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        row, column = index.row(), index.column()
        if not index.isValid() or not (0 <= row < self._num_rows) or not (0 <= column < len(self._columns)):
            return None

        source = self._view_model.source
        order_by = self._view_model.order_by.value
        if role in (Qt.ItemDataRole.DisplayRole, TableRoles.PendingRole):
            cell = source.get_cell(row, self._columns[column], order_by)
            if role == TableRoles.PendingRole:
                return not isinstance(cell, Resolved)
            return cell.value if isinstance(cell, Resolved) else None
        if role in (TableRoles.RowNumberRole, TableRoles.SelectedRole):
            row_number = source.get_row_number(row, order_by)
            if not isinstance(row_number, Resolved):
                return None
            if role == TableRoles.RowNumberRole:
                return row_number.value
            return self._view_model.selection_controller.is_row_selected(row_number.value)
        return None

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable

    # ------------------------------------------------------------------
    # View-model notifications
    # ------------------------------------------------------------------
    def _on_rows_changed(self) -> None:
        render = self._view_model.render_range.value
        if render.end <= render.start or not self._columns:
            return
        top_left = self.index(render.start, 0)
        bottom_right = self.index(min(render.end, self._num_rows) - 1, len(self._columns) - 1)
        self.dataChanged.emit(top_left, bottom_right)

    def _on_layout_changed(self, *_args: Any) -> None:
        self.beginResetModel()
        self._num_rows = self._view_model.source.num_rows
        self._columns = self._view_model.columns.value
        self.endResetModel()

    def dispose(self) -> None:
        for connection in self._connections:
            connection.disconnect()
        self._connections.clear()


__all__ = ["SliceTableModel", "TableRoles"]
