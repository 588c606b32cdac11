"""Headless windowing — maps a scroll position to the rows worth fetching.

The canvas is ``(num_rows + 1) * row_height`` pixels tall: the extra row is
the sticky header.  Rows are mapped proportionally from pixels, so a canvas
that is not an exact multiple of the row height still yields sensible ranges.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..config import (
    DEFAULT_OVERSCAN,
    DEFAULT_PADDING,
    FALLBACK_VIEWPORT_SIZE,
    HEADER_HEIGHT,
    MAX_RENDERED_ROWS,
    ROW_HEIGHT,
)
from ..errors import RenderRangeTooLargeError, ViewportGeometryError
from .selection import Range


def _check_number(name: str, value: float) -> None:
    if math.isnan(value):
        raise ViewportGeometryError(f"{name} is NaN")
    if value < 0:
        raise ViewportGeometryError(f"{name} must not be negative, got {value}")


def canvas_size_for(num_rows: int, row_height: float = ROW_HEIGHT) -> float:
    """Height of the scrollable canvas, header row included."""
    return (num_rows + 1) * row_height


def compute_visible_range(
    num_rows: int,
    scroll_offset: float,
    viewport_size: float,
    canvas_size: float,
    overscan: int = DEFAULT_OVERSCAN,
) -> Range:
    """Return the ``[start, end)`` rows under the viewport, widened by *overscan*."""

    for name, value in (
        ("num_rows", num_rows),
        ("scroll_offset", scroll_offset),
        ("viewport_size", viewport_size),
        ("canvas_size", canvas_size),
        ("overscan", overscan),
    ):
        _check_number(name, value)
    if canvas_size <= 0:
        raise ViewportGeometryError(f"canvas_size must be positive, got {canvas_size}")
    if num_rows == 0:
        return Range(0, 0)

    start_view = math.floor(num_rows * scroll_offset / canvas_size)
    end_view = math.ceil(num_rows * (scroll_offset + viewport_size) / canvas_size)
    start = max(0, start_view - overscan)
    end = min(num_rows, end_view + overscan)
    return Range(min(start, end), end)


def compute_render_range(
    visible: Range,
    num_rows: int,
    padding: int = DEFAULT_PADDING,
    max_rows: int = MAX_RENDERED_ROWS,
) -> Range:
    """Widen *visible* by *padding* rows on each side, clamped to the table."""

    _check_number("padding", padding)
    start = max(0, visible.start - padding)
    end = min(num_rows, visible.end + padding)
    if end - start > max_rows:
        raise RenderRangeTooLargeError(
            f"attempted to render too many rows {end - start}: "
            "the table must be contained in a scrollable viewport"
        )
    return Range(start, max(start, end))


def scroll_offset_for_row(
    row: int,
    viewport: "Viewport",
    row_height: float = ROW_HEIGHT,
    header_height: float = HEADER_HEIGHT,
) -> Optional[float]:
    """Return the nearest scroll offset that shows *row* entirely.

    ``None`` means the row is already fully visible below the sticky header.
    """

    _check_number("row", row)
    top = header_height + row * row_height
    bottom = top + row_height
    if top < viewport.scroll_offset + header_height:
        return max(0.0, float(top - header_height))
    if bottom > viewport.scroll_offset + viewport.effective_size:
        return max(0.0, float(bottom - viewport.effective_size))
    return None


@dataclass(frozen=True)
class Viewport:
    """Scroll geometry reported by the host, in pixels."""

    scroll_offset: float = 0.0
    viewport_size: float = 0.0
    canvas_size: float = 0.0

    @classmethod
    def for_rows(
        cls,
        num_rows: int,
        scroll_offset: float = 0.0,
        viewport_size: float = 0.0,
        row_height: float = ROW_HEIGHT,
    ) -> "Viewport":
        return cls(scroll_offset, viewport_size, canvas_size_for(num_rows, row_height))

    @property
    def effective_size(self) -> float:
        # Hosts report 0 before their first layout pass.
        return self.viewport_size or FALLBACK_VIEWPORT_SIZE

    def visible_range(self, num_rows: int, overscan: int = DEFAULT_OVERSCAN) -> Range:
        return compute_visible_range(
            num_rows, self.scroll_offset, self.effective_size, self.canvas_size, overscan
        )

    def render_range(
        self,
        num_rows: int,
        overscan: int = DEFAULT_OVERSCAN,
        padding: int = DEFAULT_PADDING,
        max_rows: int = MAX_RENDERED_ROWS,
    ) -> Range:
        return compute_render_range(self.visible_range(num_rows, overscan), num_rows, padding, max_rows)


__all__ = [
    "Viewport",
    "canvas_size_for",
    "compute_render_range",
    "compute_visible_range",
    "scroll_offset_for_row",
]
