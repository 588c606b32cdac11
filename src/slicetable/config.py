"""Default configuration values for slicetable."""

from __future__ import annotations

from typing import Final

# Height of a data row in pixels.  The canvas reserves one extra row for the
# header, so a table of ``n`` rows has a canvas of ``(n + 1) * ROW_HEIGHT``.
ROW_HEIGHT: Final[int] = 33
HEADER_HEIGHT: Final[int] = ROW_HEIGHT

# Rows fetched outside of the viewport on each side.
DEFAULT_OVERSCAN: Final[int] = 20
# Rows rendered outside of the visible range on each side.
DEFAULT_PADDING: Final[int] = 20
DEFAULT_NUM_ROWS_PER_PAGE: Final[int] = 20

# A render range wider than this means the host is painting an unbounded
# viewport (for example a table that is not inside a scrollable container).
MAX_RENDERED_ROWS: Final[int] = 1000

# Viewport height used when the host has not measured its viewport yet.
FALLBACK_VIEWPORT_SIZE: Final[int] = 100

# Minimum delay between two "rows changed" notifications sent to the host.
NOTIFY_THROTTLE_MS: Final[int] = 100
