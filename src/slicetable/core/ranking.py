"""Rank tables and sort permutations.

A rank table maps each source row of one column to the position of its value
in ascending order.  Tied values share the rank of the first tied element, so
``[25, 30, 20, 20]`` ranks as ``[2, 3, 0, 0]``.  Permutations are computed from
rank tables only, which lets one column's ranks serve every order-by that
mentions it.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Sequence

import numpy as np

from ..errors import InvalidOrderByError
from .order_by import DESCENDING, normalize_direction


class RankedKey(NamedTuple):
    """One sort key ready for :func:`compute_indexes`."""

    direction: str
    ranks: np.ndarray


def _sort_key(value: Any) -> tuple[bool, Any]:
    # Missing values sort before everything else.
    return (value is not None, value)


def compute_ranks(values: Sequence[Any]) -> np.ndarray:
    """Return the ascending rank of every value (ties take the lowest rank)."""

    count = len(values)
    ranks = np.empty(count, dtype=np.int64)
    try:
        order = sorted(range(count), key=lambda i: _sort_key(values[i]))
    except TypeError as exc:
        raise InvalidOrderByError(f"Column values are not comparable: {exc}") from exc

    last_value: Any = None
    last_rank = 0
    for position, index in enumerate(order):
        value = values[index]
        if position > 0 and value == last_value:
            ranks[index] = last_rank
            continue
        ranks[index] = position
        last_value, last_rank = value, position
    return ranks


def compute_indexes(order_by_with_ranks: Sequence[RankedKey | tuple[str, Sequence[int]]]) -> np.ndarray:
    """Return source row indexes sorted by the given keys.

    ``result[sorted_row]`` is the source row displayed at ``sorted_row``.  Keys
    are compared in priority order; descending keys compare negated ranks and
    the source row index breaks the remaining ties.
    """

    if not order_by_with_ranks:
        raise InvalidOrderByError("At least one sort key is required")

    arrays: list[np.ndarray] = []
    num_rows: int | None = None
    for direction, ranks in order_by_with_ranks:
        array = np.asarray(ranks, dtype=np.int64)
        if num_rows is None:
            num_rows = len(array)
        elif len(array) != num_rows:
            raise InvalidOrderByError("Rank arrays have different lengths")
        arrays.append(-array if normalize_direction(direction) == DESCENDING else array)

    # np.lexsort treats the last key as the primary one.
    keys = [np.arange(num_rows, dtype=np.int64)] + arrays[::-1]
    return np.lexsort(keys)


__all__ = ["RankedKey", "compute_indexes", "compute_ranks"]
