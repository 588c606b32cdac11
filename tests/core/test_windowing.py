"""Tests for the headless windowing helpers."""

from __future__ import annotations

import math

import pytest

from slicetable.core.selection import Range
from slicetable.core.windowing import (
    Viewport,
    canvas_size_for,
    compute_render_range,
    compute_visible_range,
    scroll_offset_for_row,
)
from slicetable.errors import GeometryError, RenderRangeTooLargeError, ViewportGeometryError

ROW_HEIGHT = 33


class TestVisibleRange:
    def test_top_of_table(self):
        visible = compute_visible_range(1000, 0, 100, 1001 * ROW_HEIGHT, overscan=20)
        assert visible.start == 0
        # ceil(1000 * 100 / 33033) = 4 rows, plus the overscan
        assert visible.end == 24

    def test_scrolled(self):
        canvas = canvas_size_for(1000, ROW_HEIGHT)
        visible = compute_visible_range(1000, 330 * ROW_HEIGHT, 10 * ROW_HEIGHT, canvas, overscan=0)
        assert visible.start == math.floor(1000 * 330 * ROW_HEIGHT / canvas)
        assert visible.end == math.ceil(1000 * 340 * ROW_HEIGHT / canvas)

    def test_clamped_at_the_bottom(self):
        canvas = canvas_size_for(50, ROW_HEIGHT)
        visible = compute_visible_range(50, canvas - 100, 100, canvas, overscan=20)
        assert visible.end == 50

    def test_empty_table(self):
        assert compute_visible_range(0, 0, 100, ROW_HEIGHT) == Range(0, 0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"scroll_offset": float("nan")},
            {"viewport_size": float("nan")},
            {"canvas_size": float("nan")},
            {"canvas_size": 0},
            {"scroll_offset": -1},
        ],
    )
    def test_malformed_geometry_raises(self, kwargs):
        params = {"num_rows": 10, "scroll_offset": 0, "viewport_size": 100, "canvas_size": 11 * ROW_HEIGHT}
        params.update(kwargs)
        with pytest.raises(ViewportGeometryError):
            compute_visible_range(**params)


class TestRenderRange:
    def test_padding_is_clamped(self):
        assert compute_render_range(Range(0, 24), 1000, padding=20) == Range(0, 44)
        assert compute_render_range(Range(990, 1000), 1000, padding=20) == Range(970, 1000)

    def test_too_many_rows_raises(self):
        with pytest.raises(RenderRangeTooLargeError, match="too many rows"):
            compute_render_range(Range(0, 990), 5000, padding=20)

    def test_ceiling_is_a_geometry_error(self):
        with pytest.raises(GeometryError):
            compute_render_range(Range(0, 10), 100, padding=0, max_rows=5)

    def test_at_ceiling_is_allowed(self):
        assert compute_render_range(Range(0, 1000), 1000, padding=20) == Range(0, 1000)

    def test_unbounded_viewport_raises(self):
        # A host rendering the whole table: its viewport is as tall as the canvas.
        viewport = Viewport.for_rows(5000, 0, 5001 * ROW_HEIGHT)
        with pytest.raises(RenderRangeTooLargeError):
            viewport.render_range(5000)


class TestViewport:
    def test_for_rows(self):
        viewport = Viewport.for_rows(1000, 0, 100)
        assert viewport.canvas_size == 1001 * ROW_HEIGHT
        assert viewport.visible_range(1000, overscan=20) == Range(0, 24)
        assert viewport.render_range(1000, overscan=20, padding=20) == Range(0, 44)

    def test_unmeasured_viewport_uses_fallback(self):
        viewport = Viewport.for_rows(1000, 0, 0)
        assert viewport.effective_size == 100
        assert viewport.visible_range(1000, overscan=0).end > 0


class TestScrollOffsetForRow:
    def test_visible_row(self):
        viewport = Viewport.for_rows(100, 0, 10 * ROW_HEIGHT)
        assert scroll_offset_for_row(3, viewport) is None

    def test_row_below(self):
        viewport = Viewport.for_rows(100, 0, 10 * ROW_HEIGHT)
        # header + 20 rows above the bottom of row 20
        assert scroll_offset_for_row(20, viewport) == (1 + 21) * ROW_HEIGHT - 10 * ROW_HEIGHT

    def test_row_above(self):
        viewport = Viewport.for_rows(100, 50 * ROW_HEIGHT, 10 * ROW_HEIGHT)
        assert scroll_offset_for_row(10, viewport) == 10 * ROW_HEIGHT

    def test_first_row_scrolls_to_top(self):
        viewport = Viewport.for_rows(100, 5 * ROW_HEIGHT, 10 * ROW_HEIGHT)
        assert scroll_offset_for_row(0, viewport) == 0.0
