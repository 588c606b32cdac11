"""Cell values and the data-source contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Final,
    Generic,
    Optional,
    Protocol,
    Sequence,
    TypeVar,
    Union,
    runtime_checkable,
)

from ..core.order_by import OrderByLike
from ..events.bus import EventBus

if TYPE_CHECKING:
    from .cancel import CancelToken

T = TypeVar("T")


@dataclass(frozen=True)
class Resolved(Generic[T]):
    """A cell whose value is known.  ``Resolved(None)`` is a real, empty value."""

    value: T


class _Pending:
    """Marker for a cell that has not been fetched yet."""

    _instance: Optional["_Pending"] = None

    def __new__(cls) -> "_Pending":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "PENDING"

    def __reduce__(self) -> str:
        return "PENDING"


PENDING: Final = _Pending()

Cell = Union[Resolved[Any], _Pending]

# Called once per column with the values of the fetched rows, in row order.
ColumnCompleteCallback = Callable[[str, Sequence[Any]], None]


def is_resolved(cell: Cell) -> bool:
    return isinstance(cell, Resolved)


@runtime_checkable
class DataSource(Protocol):
    """Contract between the engine and a caller-supplied table.

    ``get_cell`` and ``get_row_number`` never start I/O: they report what is
    already known.  ``fetch`` resolves the requested slice, possibly in
    several asynchronous steps, and publishes ``CellsResolvedEvent`` on
    ``events`` as cells become available.
    """

    events: EventBus

    @property
    def num_rows(self) -> int: ...

    @property
    def columns(self) -> tuple[str, ...]: ...

    @property
    def sortable_columns(self) -> frozenset[str]: ...

    def get_cell(self, row: int, column: str, order_by: OrderByLike = None) -> Cell: ...

    def get_row_number(self, row: int, order_by: OrderByLike = None) -> Cell: ...

    async def fetch(
        self,
        row_start: int,
        row_end: int,
        columns: Optional[Sequence[str]] = None,
        order_by: OrderByLike = None,
        cancel_token: Optional["CancelToken"] = None,
        on_column_complete: Optional[ColumnCompleteCallback] = None,
    ) -> None: ...


__all__ = [
    "Cell",
    "ColumnCompleteCallback",
    "DataSource",
    "PENDING",
    "Resolved",
    "is_resolved",
]
