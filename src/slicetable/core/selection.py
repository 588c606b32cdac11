"""Interval algebra for row selections.

A selection is an ordered tuple of half-open :class:`Range` objects.  Ranges
are strictly increasing and *separated*: the end of one range is strictly less
than the start of the next one, so adjacent blocks are always merged.  Every
operation validates its inputs before doing any work and returns a new tuple;
inputs are never mutated.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional, Sequence

from ..errors import InvalidIndexError, InvalidLengthError, InvalidRangeError, InvalidRangesError


@dataclass(frozen=True)
class Range:
    """Half-open block ``[start, end)`` of row indices."""

    start: int
    end: int

    def __len__(self) -> int:
        return max(self.end - self.start, 0)

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index < self.end


Ranges = tuple[Range, ...]


@dataclass(frozen=True)
class Selection:
    """Selected rows plus the pivot used by shift-extend gestures.

    ``anchor`` need not be selected itself.
    """

    ranges: Ranges = ()
    anchor: Optional[int] = None

    @classmethod
    def empty(cls) -> "Selection":
        return cls()

    def is_selected(self, index: int) -> bool:
        return is_selected(self.ranges, index)

    def __len__(self) -> int:
        return count_selected(self.ranges)


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------

def is_valid_index(index: object) -> bool:
    return isinstance(index, int) and not isinstance(index, bool) and index >= 0


def is_valid_range(range_: object) -> bool:
    return (
        isinstance(range_, Range)
        and is_valid_index(range_.start)
        and is_valid_index(range_.end)
        and range_.end > range_.start
    )


def are_valid_ranges(ranges: Sequence[Range]) -> bool:
    previous: Range | None = None
    for current in ranges:
        if not is_valid_range(current):
            return False
        if previous is not None and previous.end >= current.start:
            return False
        previous = current
    return True


def _check_ranges(ranges: Sequence[Range]) -> None:
    if not are_valid_ranges(ranges):
        raise InvalidRangesError(f"Invalid ranges: {list(ranges)!r}")


def _check_range(range_: Range) -> None:
    if not is_valid_range(range_):
        raise InvalidRangeError(f"Invalid range: {range_!r}")


def _check_index(index: int) -> None:
    if not is_valid_index(index):
        raise InvalidIndexError(f"Invalid index: {index!r}")


def _check_length(length: int) -> None:
    if not is_valid_index(length):
        raise InvalidLengthError(f"Invalid length: {length!r}")


# ----------------------------------------------------------------------
# Queries
# ----------------------------------------------------------------------

def is_selected(ranges: Sequence[Range], index: int) -> bool:
    _check_index(index)
    _check_ranges(ranges)
    position = bisect_right(ranges, index, key=lambda r: r.start) - 1
    return position >= 0 and index < ranges[position].end


def are_all_selected(ranges: Sequence[Range], length: int) -> bool:
    """Return ``True`` when exactly ``[0, length)`` is selected.

    An empty table is never reported as fully selected.
    """
    _check_ranges(ranges)
    _check_length(length)
    return len(ranges) == 1 and ranges[0] == Range(0, length)


def count_selected(ranges: Sequence[Range]) -> int:
    return sum(r.end - r.start for r in ranges)


def iter_indexes(ranges: Sequence[Range]) -> Iterator[int]:
    """Yield every selected index in increasing order."""
    for r in ranges:
        yield from range(r.start, r.end)


def ranges_from_indexes(indexes: Iterable[int]) -> Ranges:
    """Build separated ranges from arbitrary (unordered, repeated) indexes."""
    result: list[Range] = []
    start = end = None
    for index in sorted(set(indexes)):
        _check_index(index)
        if end is not None and index == end:
            end += 1
            continue
        if start is not None:
            result.append(Range(start, end))
        start, end = index, index + 1
    if start is not None:
        result.append(Range(start, end))
    return tuple(result)


# ----------------------------------------------------------------------
# Mutations
# ----------------------------------------------------------------------

def select_range(ranges: Sequence[Range], range_: Range) -> Ranges:
    _check_ranges(ranges)
    _check_range(range_)
    result: list[Range] = []
    position = 0
    count = len(ranges)

    while position < count and ranges[position].end < range_.start:
        result.append(ranges[position])
        position += 1

    # ranges touching or overlapping the new block are absorbed
    start, end = range_.start, range_.end
    while position < count and ranges[position].start <= end:
        start = min(start, ranges[position].start)
        end = max(end, ranges[position].end)
        position += 1
    result.append(Range(start, end))

    result.extend(ranges[position:])
    return tuple(result)


def unselect_range(ranges: Sequence[Range], range_: Range) -> Ranges:
    _check_ranges(ranges)
    _check_range(range_)
    result: list[Range] = []
    position = 0
    count = len(ranges)

    while position < count and ranges[position].end < range_.start:
        result.append(ranges[position])
        position += 1

    while position < count and ranges[position].start < range_.end:
        current = ranges[position]
        if current.start < range_.start:
            result.append(Range(current.start, range_.start))
        if current.end > range_.end:
            result.append(Range(range_.end, current.end))
        position += 1

    result.extend(ranges[position:])
    return tuple(result)


def select_index(ranges: Sequence[Range], index: int) -> Ranges:
    _check_index(index)
    return select_range(ranges, Range(index, index + 1))


def unselect_index(ranges: Sequence[Range], index: int) -> Ranges:
    _check_index(index)
    return unselect_range(ranges, Range(index, index + 1))


def toggle_index(ranges: Sequence[Range], index: int) -> Ranges:
    if is_selected(ranges, index):
        return unselect_index(ranges, index)
    return select_index(ranges, index)


def toggle_all(ranges: Sequence[Range], length: int) -> Ranges:
    """Two-state toggle: everything selected becomes nothing, anything else becomes everything."""
    if are_all_selected(ranges, length) or length == 0:
        return ()
    return (Range(0, length),)


def toggle_all_indexes(ranges: Sequence[Range], indexes: Iterable[int]) -> Ranges:
    """Two-state toggle restricted to *indexes*, e.g. the rows of a filtered view.

    Unselects all of them when every one is selected, otherwise selects the
    missing ones.  Indexes outside of the set are left untouched, except that
    an empty *indexes* clears the selection.
    """
    _check_ranges(ranges)
    blocks = ranges_from_indexes(indexes)
    if not blocks:
        return ()
    all_selected = all(_covers(ranges, block) for block in blocks)
    apply = unselect_range if all_selected else select_range
    result: Ranges = tuple(ranges)
    for block in blocks:
        result = apply(result, block)
    return result


def _covers(ranges: Sequence[Range], block: Range) -> bool:
    position = bisect_right(ranges, block.start, key=lambda r: r.start) - 1
    return position >= 0 and ranges[position].end >= block.end


def extend_from_anchor(ranges: Sequence[Range], anchor: Optional[int], index: int) -> Ranges:
    """Apply a shift-click on *index* relative to *anchor*.

    The inclusive span between both rows takes the state *anchor* had before
    the gesture.  Without a usable anchor only *index* is toggled.
    """
    _check_ranges(ranges)
    _check_index(index)
    if anchor is None or anchor == index:
        return toggle_index(ranges, index)
    _check_index(anchor)
    span = Range(min(anchor, index), max(anchor, index) + 1)
    if is_selected(ranges, anchor):
        return select_range(ranges, span)
    return unselect_range(ranges, span)


# ----------------------------------------------------------------------
# Selection-level helpers
# ----------------------------------------------------------------------

def toggle_index_in_selection(selection: Selection, index: int) -> Selection:
    return Selection(ranges=toggle_index(selection.ranges, index), anchor=index)


def extend_selection(selection: Selection, index: int) -> Selection:
    ranges = extend_from_anchor(selection.ranges, selection.anchor, index)
    return Selection(ranges=ranges, anchor=index)


def toggle_all_in_selection(selection: Selection, length: int) -> Selection:
    return Selection(ranges=toggle_all(selection.ranges, length), anchor=None)


def with_anchor(selection: Selection, anchor: Optional[int]) -> Selection:
    if anchor is not None:
        _check_index(anchor)
    return replace(selection, anchor=anchor)


__all__ = [
    "Range",
    "Ranges",
    "Selection",
    "are_all_selected",
    "are_valid_ranges",
    "count_selected",
    "extend_from_anchor",
    "extend_selection",
    "is_selected",
    "is_valid_index",
    "is_valid_range",
    "iter_indexes",
    "ranges_from_indexes",
    "select_index",
    "select_range",
    "toggle_all",
    "toggle_all_in_selection",
    "toggle_all_indexes",
    "toggle_index",
    "toggle_index_in_selection",
    "unselect_index",
    "unselect_range",
    "with_anchor",
]
