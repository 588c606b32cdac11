"""Tests for the sortable-view adapter."""

from __future__ import annotations

import asyncio

import pytest

from slicetable.core.order_by import ColumnOrderBy, serialize_order_by
from slicetable.data.array_source import ArraySource, LazyArraySource
from slicetable.data.cached_source import CachedSource
from slicetable.data.cancel import CancelToken
from slicetable.data.sortable import SortableSource
from slicetable.data.types import PENDING, Resolved
from slicetable.errors import FetchAbortedError, InvalidColumnError, InvalidOrderByError
from slicetable.events.table_events import CellsResolvedEvent, NumRowsChangedEvent

AGE_ASC = (ColumnOrderBy("age", "ascending"),)
AGE_DESC = (ColumnOrderBy("age", "descending"),)


def cells(source, column, order_by):
    return [source.get_cell(row, column, order_by) for row in range(source.num_rows)]


class TestUnsorted:
    def test_identity_without_order_by(self, array_source):
        sortable = SortableSource(array_source)
        assert sortable.get_unsorted_row(2) == Resolved(2)
        assert sortable.get_unsorted_row(2, ()) == Resolved(2)
        assert sortable.get_cell(1, "name") == Resolved("bob")

    def test_fetch_forwards_to_source(self, lazy_source):
        sortable = SortableSource(lazy_source)
        asyncio.run(sortable.fetch(0, 2, ["name"]))
        assert lazy_source.load_calls == [("name", 0, 2)]
        assert sortable.get_cell(1, "name") == Resolved("bob")


class TestSorted:
    def test_pending_until_permutation_is_computed(self, array_source):
        sortable = SortableSource(array_source)
        assert sortable.get_unsorted_row(0, AGE_ASC) is PENDING
        assert sortable.get_cell(0, "name", AGE_ASC) is PENDING
        assert sortable.get_row_number(0, AGE_ASC) is PENDING

    def test_ascending(self, array_source):
        sortable = SortableSource(array_source)
        asyncio.run(sortable.fetch(0, 4, ["name"], order_by=AGE_ASC))
        assert [c.value for c in cells(sortable, "name", AGE_ASC)] == ["carol", "dave", "alice", "bob"]
        assert sortable.get_row_number(0, AGE_ASC) == Resolved(2)

    def test_descending_keeps_ties_in_source_order(self, array_source):
        sortable = SortableSource(array_source)
        asyncio.run(sortable.fetch(0, 4, ["name"], order_by=AGE_DESC))
        assert [c.value for c in cells(sortable, "name", AGE_DESC)] == ["bob", "alice", "carol", "dave"]

    def test_direction_aliases_share_the_permutation(self, array_source):
        sortable = SortableSource(array_source)
        asyncio.run(sortable.fetch(0, 4, [], order_by=[("age", "asc")]))
        assert sortable.get_unsorted_row(0, AGE_ASC) == Resolved(2)

    def test_permutation_event(self, array_source):
        sortable = SortableSource(array_source)
        events = []
        sortable.events.subscribe(CellsResolvedEvent, events.append)

        async def scenario():
            await sortable.fetch(0, 4, [], order_by=AGE_ASC)
            await sortable.fetch(0, 4, [], order_by=AGE_ASC)

        asyncio.run(scenario())
        assert len(events) == 1

    def test_unknown_column_fails_before_fetching(self, lazy_source):
        sortable = SortableSource(lazy_source)
        with pytest.raises(InvalidColumnError, match="Invalid column: height"):
            asyncio.run(sortable.fetch(0, 4, ["name"], order_by=[("height", "asc")]))
        assert lazy_source.load_calls == []

    def test_unsortable_column(self, array_source):
        sortable = SortableSource(array_source, sortable_columns=["name"])
        assert sortable.sortable_columns == frozenset({"name"})
        with pytest.raises(InvalidOrderByError):
            asyncio.run(sortable.fetch(0, 4, ["name"], order_by=AGE_ASC))

    def test_invalid_sortable_columns(self, array_source):
        with pytest.raises(InvalidColumnError):
            SortableSource(array_source, sortable_columns=["height"])


class TestLazySource:
    def test_ranks_the_whole_column_then_fetches_the_slice(self):
        rows = [{"name": f"n{i}", "score": (i * 7) % 10} for i in range(10)]
        source = LazyArraySource(rows)
        sortable = SortableSource(source)
        order_by = (ColumnOrderBy("score", "ascending"),)

        asyncio.run(sortable.fetch(0, 3, ["name"], order_by=order_by))

        # scores: [0, 7, 4, 1, 8, 5, 2, 9, 6, 3] -> the three lowest live in rows 0, 3, 6
        assert source.load_calls[0] == ("score", 0, 10)
        assert sorted(source.load_calls[1:]) == [("name", 0, 1), ("name", 3, 4), ("name", 6, 7)]
        assert [sortable.get_cell(r, "name", order_by) for r in range(3)] == [
            Resolved("n0"),
            Resolved("n3"),
            Resolved("n6"),
        ]
        assert sortable.get_cell(3, "name", order_by) is PENDING

    def test_contiguous_source_rows_are_grouped(self):
        rows = [{"name": f"n{i}", "group": i // 5} for i in range(10)]
        source = LazyArraySource(rows)
        sortable = SortableSource(source)
        order_by = (ColumnOrderBy("group", "descending"),)

        asyncio.run(sortable.fetch(0, 5, ["name"], order_by=order_by))

        assert source.load_calls == [("group", 0, 10), ("name", 5, 10)]

    def test_rank_tables_are_reused_across_order_bys(self):
        rows = [{"a": i % 3, "b": -i} for i in range(6)]
        source = LazyArraySource(rows)
        sortable = SortableSource(source)

        async def scenario():
            await sortable.fetch(0, 6, [], order_by=[("a", "asc")])
            await sortable.fetch(0, 6, [], order_by=[("a", "desc")])
            await sortable.fetch(0, 6, [], order_by=[("b", "asc"), ("a", "asc")])

        asyncio.run(scenario())
        assert source.load_calls == [("a", 0, 6), ("b", 0, 6)]
        assert set(sortable.rank_cache.ranked_columns) == {"a", "b"}
        assert sortable.rank_cache.get_indexes(serialize_order_by([("a", "desc")])) is not None

    def test_forwards_resolved_events_during_fetch(self, lazy_source):
        sortable = SortableSource(lazy_source)
        events = []
        sortable.events.subscribe(CellsResolvedEvent, events.append)
        asyncio.run(sortable.fetch(0, 4, ["name"], order_by=AGE_ASC))
        assert any(e.columns == ("name",) for e in events)
        # forwarding stops with the fetch
        seen = len(events)
        lazy_source.events.publish(CellsResolvedEvent(columns=("age",)))
        assert len(events) == seen

    def test_cancelled_ranking_caches_nothing(self):
        rows = [{"v": i} for i in range(5)]
        source = LazyArraySource(rows, delay=0.05)
        sortable = SortableSource(source)
        token = CancelToken()

        async def scenario():
            task = asyncio.ensure_future(sortable.fetch(0, 5, ["v"], order_by=[("v", "asc")], cancel_token=token))
            await asyncio.sleep(0.01)
            token.cancel()
            await task

        with pytest.raises(FetchAbortedError):
            asyncio.run(scenario())
        assert sortable.rank_cache.ranked_columns == ()
        assert sortable.get_unsorted_row(0, [("v", "asc")]) is PENDING


class TestLifecycle:
    def test_reset_drops_caches(self, array_source):
        sortable = SortableSource(array_source)
        asyncio.run(sortable.fetch(0, 4, [], order_by=AGE_ASC))
        sortable.reset()
        assert sortable.get_unsorted_row(0, AGE_ASC) is PENDING

    def test_forwards_num_rows_changes_until_disposed(self, lazy_source):
        sortable = SortableSource(lazy_source)
        events = []
        sortable.events.subscribe(NumRowsChangedEvent, events.append)
        lazy_source.set_num_rows(2)
        sortable.dispose()
        lazy_source.set_num_rows(3)
        assert [e.num_rows for e in events] == [2]


class TestRowGrowth:
    GROWING = {"a": [3, 1, 4, 1, 5, 9, 2, 6], "b": [8, 7, 6, 5, 4, 3, 2, 1]}
    A_ASC = (ColumnOrderBy("a", "ascending"),)

    def make_growing(self):
        calls = []

        async def loader(column, row_start, row_end, cancel_token):
            calls.append((column, row_start, row_end))
            return self.GROWING[column][row_start:row_end]

        source = CachedSource(loader, 5, ("a", "b"))
        return source, SortableSource(source), calls

    def test_growth_drops_permutations(self):
        source, sortable, _ = self.make_growing()
        asyncio.run(sortable.fetch(0, 5, [], order_by=self.A_ASC))
        assert sortable.get_unsorted_row(0, self.A_ASC) == Resolved(1)

        source.set_num_rows(8)

        assert sortable.num_rows == 8
        assert sortable.get_unsorted_row(0, self.A_ASC) is PENDING

    def test_mixing_old_and_new_rank_tables(self):
        source, sortable, calls = self.make_growing()
        order_by = (ColumnOrderBy("a", "ascending"), ColumnOrderBy("b", "ascending"))

        async def scenario():
            await sortable.fetch(0, 5, [], order_by=self.A_ASC)
            source.set_num_rows(8)
            await sortable.fetch(0, 8, [], order_by=order_by)

        asyncio.run(scenario())

        assert [sortable.get_unsorted_row(r, order_by).value for r in range(8)] == [3, 1, 6, 0, 2, 4, 7, 5]
        # only the new tail of "a" is loaded again
        assert sorted(calls) == [("a", 0, 5), ("a", 5, 8), ("b", 0, 8)]

    def test_rows_past_the_old_end_resolve(self):
        source, sortable, _ = self.make_growing()

        async def scenario():
            await sortable.fetch(0, 5, ["a"], order_by=self.A_ASC)
            source.set_num_rows(8)
            await sortable.fetch(5, 8, ["a"], order_by=self.A_ASC)

        asyncio.run(scenario())

        assert cells(sortable, "a", self.A_ASC) == [Resolved(v) for v in [1, 1, 2, 3, 4, 5, 6, 9]]
