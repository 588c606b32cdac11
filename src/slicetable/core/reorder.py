"""Move selections between sorted-view positions and source-row identities.

A permutation maps ``sorted_row -> source_row``.  Converting a selection
through a permutation moves each selected index and the anchor to its image;
converting the result through the inverse permutation restores the original
membership, although the range boundaries generally differ in between.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ..errors import InvalidIndexError, InvalidPermutationError, InvalidRangesError
from .selection import Selection, are_valid_ranges, is_valid_index, ranges_from_indexes


def validate_permutation(permutation: Sequence[int] | np.ndarray, num_rows: Optional[int] = None) -> np.ndarray:
    """Return *permutation* as an integer array after checking it is a bijection."""

    array = np.asarray(permutation)
    if array.ndim != 1:
        raise InvalidPermutationError("Invalid permutation: expected a flat sequence")
    if array.size and not np.issubdtype(array.dtype, np.integer):
        if not np.issubdtype(array.dtype, np.floating) or not np.all(np.mod(array, 1) == 0):
            raise InvalidPermutationError("Invalid index: not an integer")
    array = array.astype(np.int64, copy=False)
    if num_rows is not None and array.size != num_rows:
        raise InvalidPermutationError(
            f"Invalid permutation: expected {num_rows} indexes, got {array.size}"
        )
    if array.size and (array.min() < 0 or array.max() >= array.size):
        raise InvalidPermutationError("Invalid index: out of bounds")
    if np.unique(array).size != array.size:
        raise InvalidPermutationError("Duplicate index")
    return array


def invert_permutation(permutation: Sequence[int] | np.ndarray) -> np.ndarray:
    array = validate_permutation(permutation)
    inverse = np.empty_like(array)
    inverse[array] = np.arange(array.size, dtype=array.dtype)
    return inverse


def convert_selection(selection: Selection, permutation: Sequence[int] | np.ndarray) -> Selection:
    """Map every selected index and the anchor through *permutation*."""

    if not are_valid_ranges(selection.ranges):
        raise InvalidRangesError(f"Invalid ranges: {list(selection.ranges)!r}")
    if selection.anchor is not None and not is_valid_index(selection.anchor):
        raise InvalidIndexError(f"Invalid anchor: {selection.anchor!r}")
    array = validate_permutation(permutation)

    size = array.size
    if selection.ranges and selection.ranges[-1].end > size:
        raise InvalidIndexError("Invalid index: out of bounds")
    if selection.anchor is not None and selection.anchor >= size:
        raise InvalidIndexError("Invalid anchor: out of bounds")

    if selection.ranges:
        selected = np.concatenate([np.arange(r.start, r.end) for r in selection.ranges])
        ranges = ranges_from_indexes(int(i) for i in array[selected])
    else:
        ranges = ()
    anchor = None if selection.anchor is None else int(array[selection.anchor])
    return Selection(ranges=ranges, anchor=anchor)


__all__ = ["convert_selection", "invert_permutation", "validate_permutation"]
