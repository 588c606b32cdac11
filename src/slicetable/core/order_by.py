"""Sort keys: a tuple of ``(column, direction)`` pairs in priority order."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Collection, Iterable, Literal, Optional, Sequence, Union

from ..errors import InvalidColumnError, InvalidOrderByError

Direction = Literal["ascending", "descending"]

ASCENDING: Direction = "ascending"
DESCENDING: Direction = "descending"

# ``None`` means ascending, matching the host default when a header is first clicked.
_DIRECTION_ALIASES: dict[Optional[str], Direction] = {
    None: ASCENDING,
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
}


def normalize_direction(direction: Optional[str]) -> Direction:
    try:
        return _DIRECTION_ALIASES[direction]
    except KeyError:
        raise InvalidOrderByError(f"Invalid sort direction: {direction!r}") from None


@dataclass(frozen=True)
class ColumnOrderBy:
    column: str
    direction: Optional[str] = ASCENDING

    @property
    def normalized_direction(self) -> Direction:
        return normalize_direction(self.direction)

    @property
    def descending(self) -> bool:
        return self.normalized_direction == DESCENDING

    def normalized(self) -> "ColumnOrderBy":
        return ColumnOrderBy(self.column, self.normalized_direction)


OrderBy = tuple[ColumnOrderBy, ...]
OrderByLike = Optional[Iterable[Union[ColumnOrderBy, tuple[str, Optional[str]]]]]


def as_order_by(order_by: OrderByLike) -> OrderBy:
    """Coerce ``None``, ``ColumnOrderBy`` items or ``(column, direction)`` pairs to a normalised tuple."""

    if not order_by:
        return ()
    items: list[ColumnOrderBy] = []
    for item in order_by:
        if isinstance(item, ColumnOrderBy):
            items.append(item.normalized())
        else:
            column, direction = item
            items.append(ColumnOrderBy(column, normalize_direction(direction)))
    return tuple(items)


def serialize_order_by(order_by: OrderByLike) -> str:
    """Stable cache key for an order-by; aliases serialise like their canonical form."""

    return json.dumps(
        [{"column": item.column, "direction": item.direction} for item in as_order_by(order_by)],
        separators=(",", ":"),
    )


def are_equal_order_by(a: OrderByLike, b: OrderByLike) -> bool:
    return as_order_by(a) == as_order_by(b)


def has_duplicate_columns(order_by: OrderByLike) -> bool:
    seen: set[str] = set()
    for item in as_order_by(order_by):
        if item.column in seen:
            return True
        seen.add(item.column)
    return False


def validate_order_by(
    order_by: OrderByLike,
    columns: Sequence[str],
    sortable_columns: Optional[Collection[str]] = None,
) -> OrderBy:
    """Check that every key names a known, sortable column at most once.

    Returns the normalised order-by so callers validate and coerce in one step.
    """

    normalized = as_order_by(order_by)
    for item in normalized:
        if item.column not in columns:
            raise InvalidColumnError(f"Invalid column: {item.column}")
    if has_duplicate_columns(normalized):
        raise InvalidOrderByError("Duplicate column in order by")
    if sortable_columns is not None:
        for item in normalized:
            if item.column not in sortable_columns:
                raise InvalidOrderByError(f"Column is not sortable: {item.column}")
    return normalized


def partition_order_by(
    order_by: OrderByLike, column: str
) -> tuple[OrderBy, Optional[ColumnOrderBy], OrderBy]:
    """Split an order-by around *column*: ``(prefix, item, suffix)``.

    When *column* is absent, ``item`` is ``None`` and everything lands in the prefix.
    """

    normalized = as_order_by(order_by)
    if has_duplicate_columns(normalized):
        raise InvalidOrderByError("Duplicate column in order by")
    for position, item in enumerate(normalized):
        if item.column == column:
            return normalized[:position], item, normalized[position + 1:]
    return normalized, None, ()


def toggle_column(column: str, order_by: OrderByLike) -> OrderBy:
    """Cycle the sort of *column*: none → ascending → descending → none.

    Only the principal (first) key cycles; clicking any other column promotes
    it to principal key in ascending order and keeps the others as tie-breakers.
    """

    prefix, item, suffix = partition_order_by(order_by, column)
    if item is not None and not prefix:
        if item.direction == ASCENDING:
            return (ColumnOrderBy(column, DESCENDING),) + suffix
        return suffix
    return (ColumnOrderBy(column, ASCENDING),) + prefix + suffix


__all__ = [
    "ASCENDING",
    "ColumnOrderBy",
    "DESCENDING",
    "Direction",
    "OrderBy",
    "OrderByLike",
    "are_equal_order_by",
    "as_order_by",
    "has_duplicate_columns",
    "normalize_direction",
    "partition_order_by",
    "serialize_order_by",
    "toggle_column",
    "validate_order_by",
]
