"""Events published by data sources and forwarded by the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .bus import Event


@dataclass(kw_only=True)
class NumRowsChangedEvent(Event):
    """The number of rows of a source changed."""

    num_rows: int


@dataclass(kw_only=True)
class CellsResolvedEvent(Event):
    """Some cells, row numbers or a permutation became available synchronously."""

    row_start: Optional[int] = None
    row_end: Optional[int] = None
    columns: tuple[str, ...] = ()


@dataclass(kw_only=True)
class DataUpdatedEvent(Event):
    """Already-resolved values changed in a range (streaming sources)."""

    row_start: int
    row_end: int
    columns: tuple[str, ...] = field(default_factory=tuple)
    order_by_key: Optional[str] = None
