"""Virtual-table data engine.

Fetches, caches, sorts and selects the rows of large tables while a view only
renders the visible slice.  The Qt adapter lives in :mod:`slicetable.qt` and
is not imported here.
"""

from __future__ import annotations

from .core.order_by import ColumnOrderBy, OrderBy, toggle_column
from .core.reorder import convert_selection, invert_permutation
from .core.selection import Range, Selection
from .core.windowing import Viewport
from .data import (
    PENDING,
    ArraySource,
    CachedSource,
    CancelToken,
    FilteredSource,
    LazyArraySource,
    Resolved,
    SortableSource,
)
from .errors import SliceTableError
from .settings import EngineSettings
from .viewmodels.table_viewmodel import RowSlice, TableViewModel

__version__ = "0.1.0"

__all__ = [
    "ArraySource",
    "CachedSource",
    "CancelToken",
    "ColumnOrderBy",
    "EngineSettings",
    "FilteredSource",
    "LazyArraySource",
    "OrderBy",
    "PENDING",
    "Range",
    "Resolved",
    "RowSlice",
    "Selection",
    "SliceTableError",
    "SortableSource",
    "TableViewModel",
    "Viewport",
    "convert_selection",
    "invert_permutation",
    "toggle_column",
]
