"""Pure, synchronous table algorithms: selection, sorting, windowing."""

from .order_by import ColumnOrderBy, OrderBy, serialize_order_by, toggle_column, validate_order_by
from .ranking import compute_indexes, compute_ranks
from .reorder import convert_selection, invert_permutation, validate_permutation
from .selection import Range, Selection
from .windowing import Viewport, compute_render_range, compute_visible_range

__all__ = [
    "ColumnOrderBy",
    "OrderBy",
    "Range",
    "Selection",
    "Viewport",
    "compute_indexes",
    "compute_ranks",
    "compute_render_range",
    "compute_visible_range",
    "convert_selection",
    "invert_permutation",
    "serialize_order_by",
    "toggle_column",
    "validate_order_by",
    "validate_permutation",
]
