"""Argument checks shared by every data source."""

from __future__ import annotations

from typing import Collection, Optional, Sequence

from ..core.order_by import OrderBy, OrderByLike, as_order_by, validate_order_by
from ..errors import InvalidColumnError, InvalidOrderByError, InvalidRangeError, InvalidRowError


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_row(row: int, num_rows: int) -> None:
    if not _is_int(row) or row < 0 or row >= num_rows:
        raise InvalidRowError(f"Invalid row index: {row!r}, num_rows: {num_rows}")


def validate_column(column: str, columns: Sequence[str]) -> None:
    if column not in columns:
        raise InvalidColumnError(f"Invalid column: {column}")


def validate_fetch_params(
    row_start: int,
    row_end: int,
    columns: Optional[Sequence[str]],
    num_rows: int,
    known_columns: Sequence[str],
) -> tuple[str, ...]:
    """Check a fetch request and return its columns as a tuple.

    Empty ranges are allowed (``row_start == row_end``) and fetch nothing.
    """

    if not (_is_int(row_start) and _is_int(row_end)) or row_start < 0 or row_end > num_rows or row_start > row_end:
        raise InvalidRangeError(f"Invalid row range: {row_start!r} - {row_end!r}, num_rows: {num_rows}")
    requested = tuple(columns or ())
    for column in requested:
        validate_column(column, known_columns)
    return requested


def check_order_by(
    order_by: OrderByLike,
    columns: Sequence[str],
    sortable_columns: Collection[str],
) -> OrderBy:
    """Normalise *order_by*; unsortable sources only accept an empty one."""

    normalized = as_order_by(order_by)
    if normalized and not sortable_columns:
        raise InvalidOrderByError("This source cannot be sorted")
    return validate_order_by(normalized, columns, sortable_columns)


__all__ = ["check_order_by", "validate_column", "validate_fetch_params", "validate_row"]
