"""Custom exception hierarchy for slicetable."""

from __future__ import annotations


class SliceTableError(Exception):
    """Base class for all custom errors raised by slicetable."""


# --- 3-layer hierarchy ---

class InvariantError(SliceTableError, ValueError):
    """Base class for malformed arguments (ranges, indexes, permutations)."""


class SourceContractError(SliceTableError):
    """Base class for errors caused by a data source breaking its contract."""


class GeometryError(SliceTableError, ValueError):
    """Base class for invalid viewport geometry."""


# --- Invariant errors ---

class InvalidIndexError(InvariantError):
    """Raised when an index is not a non-negative integer."""


class InvalidRangeError(InvariantError):
    """Raised when a range is empty, reversed or has negative bounds."""


class InvalidRangesError(InvariantError):
    """Raised when a ranges sequence is unsorted, overlapping or unmerged."""


class InvalidLengthError(InvariantError):
    """Raised when a table length is not a non-negative integer."""


class InvalidPermutationError(InvariantError):
    """Raised when a permutation is not a bijection over ``[0, num_rows)``."""


class InvalidRowError(InvariantError):
    """Raised when a row index is outside of ``[0, num_rows)``."""


# --- Source contract errors ---

class InvalidColumnError(SourceContractError, KeyError):
    """Raised when a column is not part of the source."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0]) if self.args else ""


class InvalidOrderByError(SourceContractError, ValueError):
    """Raised when a sort key is empty, duplicated or not sortable."""


class FetchLengthMismatchError(SourceContractError):
    """Raised when a source returns a slice of unexpected length."""


class CellNotResolvedError(SourceContractError):
    """Raised when a cell is still pending after the fetch that should resolve it."""


# --- Geometry errors ---

class ViewportGeometryError(GeometryError):
    """Raised when viewport inputs produce NaN or negative bounds."""


class RenderRangeTooLargeError(GeometryError):
    """Raised when the render range exceeds the safety ceiling."""


# --- Cancellation ---

class FetchAbortedError(SliceTableError):
    """Raised when a fetch is cancelled through its :class:`CancelToken`.

    This is an expected outcome, not a failure: callers catch it before any
    generic error handling and never surface it to the user.
    """


# --- Settings ---

class SettingsError(SliceTableError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""


__all__ = [
    "CellNotResolvedError",
    "FetchAbortedError",
    "FetchLengthMismatchError",
    "GeometryError",
    "InvalidColumnError",
    "InvalidIndexError",
    "InvalidLengthError",
    "InvalidOrderByError",
    "InvalidPermutationError",
    "InvalidRangeError",
    "InvalidRangesError",
    "InvalidRowError",
    "InvariantError",
    "RenderRangeTooLargeError",
    "SettingsError",
    "SettingsLoadError",
    "SettingsValidationError",
    "SliceTableError",
    "SourceContractError",
    "ViewportGeometryError",
]
