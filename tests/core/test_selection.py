"""Tests for the selection interval algebra."""

from __future__ import annotations

import pytest

from slicetable.core.selection import (
    Range,
    Selection,
    are_all_selected,
    are_valid_ranges,
    count_selected,
    extend_from_anchor,
    extend_selection,
    is_selected,
    is_valid_index,
    is_valid_range,
    iter_indexes,
    ranges_from_indexes,
    select_range,
    toggle_all,
    toggle_all_in_selection,
    toggle_all_indexes,
    toggle_index,
    toggle_index_in_selection,
    unselect_range,
    with_anchor,
)
from slicetable.errors import InvalidIndexError, InvalidLengthError, InvalidRangeError, InvalidRangesError


def R(start: int, end: int) -> Range:
    return Range(start, end)


class TestValidation:
    def test_index_is_non_negative_integer(self):
        assert is_valid_index(0)
        assert is_valid_index(1)
        assert not is_valid_index(1.5)
        assert not is_valid_index(-1)
        assert not is_valid_index(float("nan"))
        assert not is_valid_index(float("inf"))
        assert not is_valid_index(True)

    def test_range_cannot_be_empty_or_reversed(self):
        assert is_valid_range(R(7, 8))
        assert not is_valid_range(R(7, 7))
        assert not is_valid_range(R(8, 7))
        assert not is_valid_range(R(-1, 1))
        assert not is_valid_range(Range(0, 1.5))

    def test_ranges_must_be_ordered_and_separated(self):
        assert are_valid_ranges([])
        assert are_valid_ranges([R(0, 1), R(2, 3), R(4, 5)])
        assert not are_valid_ranges([R(2, 3), R(0, 1)])
        assert not are_valid_ranges([R(0, 1), R(0, 1)])
        assert not are_valid_ranges([R(0, 2), R(1, 3)])
        # adjacent ranges must have been merged
        assert not are_valid_ranges([R(0, 2), R(2, 3)])


class TestToggleIndex:
    def test_invalid_index_raises(self):
        with pytest.raises(InvalidIndexError, match="Invalid index"):
            toggle_index((), -1)

    def test_invalid_ranges_raise(self):
        with pytest.raises(InvalidRangesError, match="Invalid ranges"):
            toggle_index((R(1, 0),), 0)

    def test_adds_separated_range(self):
        assert toggle_index((), 0) == (R(0, 1),)
        assert toggle_index((R(0, 1), R(4, 5)), 2) == (R(0, 1), R(2, 3), R(4, 5))

    def test_merges_with_neighbours(self):
        assert toggle_index((R(0, 1),), 1) == (R(0, 2),)
        assert toggle_index((R(1, 2),), 0) == (R(0, 2),)
        assert toggle_index((R(0, 1), R(2, 3)), 1) == (R(0, 3),)

    def test_splits_or_shrinks(self):
        assert toggle_index((R(0, 2),), 1) == (R(0, 1),)
        assert toggle_index((R(0, 2),), 0) == (R(1, 2),)
        assert toggle_index((R(0, 3),), 1) == (R(0, 1), R(2, 3))

    def test_removes_single_index_range(self):
        assert toggle_index((R(0, 1),), 0) == ()

    @pytest.mark.parametrize(
        "ranges",
        [(), (R(0, 1),), (R(0, 3), R(5, 9)), (R(2, 4), R(6, 7), R(10, 20))],
    )
    def test_twice_restores_input(self, ranges):
        for index in range(22):
            once = toggle_index(ranges, index)
            assert are_valid_ranges(once)
            assert toggle_index(once, index) == ranges


class TestQueries:
    def test_is_selected(self):
        assert is_selected((R(0, 1),), 0)
        assert is_selected((R(0, 2),), 1)
        assert not is_selected((R(0, 1),), 1)
        assert is_selected((R(0, 2), R(5, 8)), 7)
        assert not is_selected((R(0, 2), R(5, 8)), 4)

    def test_is_selected_validates(self):
        with pytest.raises(InvalidIndexError):
            is_selected((), -1)
        with pytest.raises(InvalidRangesError):
            is_selected((R(1, 0),), 0)

    def test_are_all_selected(self):
        assert are_all_selected((R(0, 3),), 3)
        assert not are_all_selected((R(0, 1),), 3)
        assert not are_all_selected((R(1, 3),), 3)
        assert not are_all_selected((), 0)

    def test_are_all_selected_validates(self):
        with pytest.raises(InvalidRangesError):
            are_all_selected((R(1, 0),), 0)
        with pytest.raises(InvalidLengthError, match="Invalid length"):
            are_all_selected((), -1)

    def test_count_and_iterate(self):
        ranges = (R(0, 2), R(5, 7))
        assert count_selected(ranges) == 4
        assert list(iter_indexes(ranges)) == [0, 1, 5, 6]
        assert len(Selection(ranges=ranges)) == 4

    def test_ranges_from_indexes(self):
        assert ranges_from_indexes([5, 1, 2, 2, 3, 9]) == (R(1, 4), R(5, 6), R(9, 10))
        assert ranges_from_indexes([]) == ()
        with pytest.raises(InvalidIndexError):
            ranges_from_indexes([0, -2])


class TestToggleAll:
    def test_all_selected_becomes_empty(self):
        assert toggle_all((R(0, 3),), 3) == ()

    def test_none_or_some_becomes_all(self):
        assert toggle_all((), 3) == (R(0, 3),)
        assert toggle_all((R(0, 1),), 3) == (R(0, 3),)

    def test_two_state_toggle_on_selection(self):
        first = toggle_all_in_selection(Selection(), 3)
        assert first == Selection(ranges=(R(0, 3),))
        assert toggle_all_in_selection(first, 3) == Selection()

    def test_validates(self):
        with pytest.raises(InvalidRangesError):
            toggle_all((R(1, 0),), 0)
        with pytest.raises(InvalidLengthError):
            toggle_all((), -1)

    def test_toggle_all_indexes(self):
        ranges = (R(0, 1), R(2, 3), R(5, 6), R(7, 8))
        assert toggle_all_indexes(ranges, [0, 2, 5, 7]) == ()
        assert toggle_all_indexes((), [1, 3, 5]) == (R(1, 2), R(3, 4), R(5, 6))
        assert toggle_all_indexes((R(1, 2),), [1, 2, 4, 5]) == (R(1, 3), R(4, 6))
        assert toggle_all_indexes((R(0, 5),), []) == ()
        with pytest.raises(InvalidRangesError):
            toggle_all_indexes((R(2, 1),), [1, 2, 3])

    def test_toggle_all_indexes_keeps_other_rows(self):
        assert toggle_all_indexes((R(0, 4),), [1, 2]) == (R(0, 1), R(3, 4))


class TestSelectRange:
    def test_invalid_range_raises(self):
        with pytest.raises(InvalidRangeError, match="Invalid range"):
            select_range((), R(-1, 0))
        with pytest.raises(InvalidRangeError):
            unselect_range((), R(3, 3))

    def test_invalid_ranges_raise_before_mutation(self):
        with pytest.raises(InvalidRangesError):
            select_range((R(0, 2), R(2, 4)), R(5, 6))

    def test_select_disjoint(self):
        assert select_range((R(0, 1),), R(3, 5)) == (R(0, 1), R(3, 5))
        assert select_range((R(6, 8),), R(0, 2)) == (R(0, 2), R(6, 8))

    def test_select_merges_overlapping_and_adjacent(self):
        assert select_range((R(0, 2), R(4, 6), R(9, 10)), R(2, 4)) == (R(0, 6), R(9, 10))
        assert select_range((R(0, 2), R(4, 6)), R(1, 8)) == (R(0, 8),)
        assert select_range((R(3, 5),), R(0, 3)) == (R(0, 5),)

    def test_select_inside_existing_range(self):
        assert select_range((R(0, 10),), R(2, 3)) == (R(0, 10),)

    def test_unselect_splits(self):
        assert unselect_range((R(0, 10),), R(2, 4)) == (R(0, 2), R(4, 10))
        assert unselect_range((R(0, 3), R(5, 8)), R(2, 6)) == (R(0, 2), R(6, 8))
        assert unselect_range((R(0, 3), R(5, 8)), R(0, 10)) == ()

    def test_unselect_disjoint_is_noop(self):
        assert unselect_range((R(0, 2), R(8, 9)), R(3, 6)) == (R(0, 2), R(8, 9))

    def test_inputs_are_not_mutated(self):
        ranges = [R(0, 2), R(4, 6)]
        select_range(ranges, R(2, 4))
        unselect_range(ranges, R(0, 6))
        assert ranges == [R(0, 2), R(4, 6)]


class TestExtendFromAnchor:
    def test_without_anchor_toggles_index(self):
        assert extend_from_anchor((), None, 3) == (R(3, 4),)
        assert extend_from_anchor((R(3, 4),), 3, 3) == ()

    def test_selected_anchor_selects_span(self):
        assert extend_from_anchor((R(2, 3),), 2, 5) == (R(2, 6),)
        assert extend_from_anchor((R(5, 6),), 5, 1) == (R(1, 6),)

    def test_unselected_anchor_unselects_span(self):
        assert extend_from_anchor((R(0, 10),), 12, 4) == (R(0, 4),)
        assert extend_from_anchor((R(0, 3), R(4, 10)), 3, 6) == (R(0, 3), R(7, 10))

    def test_validates(self):
        with pytest.raises(InvalidIndexError):
            extend_from_anchor((), -1, 2)
        with pytest.raises(InvalidIndexError):
            extend_from_anchor((), 2, -1)

    def test_extend_selection_moves_anchor(self):
        selection = Selection(ranges=(R(2, 3),), anchor=2)
        assert extend_selection(selection, 5) == Selection(ranges=(R(2, 6),), anchor=5)

    def test_toggle_index_in_selection_sets_anchor(self):
        assert toggle_index_in_selection(Selection(), 4) == Selection(ranges=(R(4, 5),), anchor=4)

    def test_with_anchor(self):
        selection = with_anchor(Selection(ranges=(R(0, 1),)), 7)
        assert selection.anchor == 7
        assert selection.ranges == (R(0, 1),)
        with pytest.raises(InvalidIndexError):
            with_anchor(selection, -3)


def test_every_mutation_returns_valid_ranges():
    ranges: tuple[Range, ...] = ()
    operations = [
        lambda r: select_range(r, R(3, 7)),
        lambda r: toggle_index(r, 7),
        lambda r: unselect_range(r, R(4, 5)),
        lambda r: extend_from_anchor(r, 3, 12),
        lambda r: toggle_index(r, 4),
        lambda r: select_range(r, R(0, 3)),
        lambda r: toggle_all(r, 20),
        lambda r: unselect_range(r, R(10, 11)),
    ]
    for operation in operations:
        ranges = operation(ranges)
        assert are_valid_ranges(ranges)
    assert ranges == (R(0, 10), R(11, 20))
