"""Range helpers built on top of ``DataSource.fetch``."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Iterable, Optional, Sequence

from ..errors import CellNotResolvedError, FetchAbortedError, FetchLengthMismatchError
from .cancel import CancelToken, raise_if_cancelled
from .types import DataSource, Resolved


async def gather_settled(*aws: Awaitable[Any]) -> list[Any]:
    """Await every awaitable to completion, then raise the first failure.

    Unlike a bare ``asyncio.gather`` no sibling is left running when one of
    them fails.  Real errors take precedence over aborts.
    """

    outcomes = await asyncio.gather(*aws, return_exceptions=True)
    aborted: Optional[FetchAbortedError] = None
    for outcome in outcomes:
        if isinstance(outcome, FetchAbortedError):
            aborted = aborted or outcome
        elif isinstance(outcome, BaseException):
            raise outcome
    if aborted is not None:
        raise aborted
    return outcomes


def group_contiguous(rows: Iterable[int]) -> list[tuple[int, int]]:
    """Group *rows* into ``(start, end)`` runs of consecutive values, in iteration order.

    ``[5, 6, 7, 2, 3]`` gives ``[(5, 8), (2, 4)]``; sort the input first to get
    the minimal number of runs.
    """

    runs: list[tuple[int, int]] = []
    start = end = None
    for row in rows:
        if end is not None and row == end:
            end += 1
            continue
        if start is not None:
            runs.append((start, end))
        start, end = row, row + 1
    if start is not None:
        runs.append((start, end))
    return runs


async def fetch_range(
    source: DataSource,
    column: str,
    row_start: int,
    row_end: int,
    cancel_token: Optional[CancelToken] = None,
) -> list[Any]:
    """Fetch one column over ``[row_start, row_end)`` and return its values."""

    expected = row_end - row_start
    delivered: list[Sequence[Any]] = []

    def on_column_complete(name: str, values: Sequence[Any]) -> None:
        if name == column:
            delivered.append(values)

    await source.fetch(
        row_start,
        row_end,
        columns=(column,),
        cancel_token=cancel_token,
        on_column_complete=on_column_complete,
    )
    raise_if_cancelled(cancel_token)

    if delivered:
        values = list(delivered[-1])
    else:
        # Sources that do not report columns still have to resolve them.
        values = []
        for row in range(row_start, row_end):
            cell = source.get_cell(row, column)
            if not isinstance(cell, Resolved):
                raise CellNotResolvedError(
                    f"Cell not resolved for row {row} and column {column} after fetch"
                )
            values.append(cell.value)

    if len(values) != expected:
        raise FetchLengthMismatchError(
            f"Fetched data length {len(values)} does not match expected length {expected}"
        )
    return values


async def fetch_column(
    source: DataSource,
    column: str,
    cancel_token: Optional[CancelToken] = None,
) -> list[Any]:
    """Return every value of *column*, fetching only the pending runs."""

    raise_if_cancelled(cancel_token)
    num_rows = source.num_rows
    values: list[Any] = [None] * num_rows
    pending: list[int] = []
    for row in range(num_rows):
        cell = source.get_cell(row, column)
        if isinstance(cell, Resolved):
            values[row] = cell.value
        else:
            pending.append(row)

    runs = group_contiguous(pending)
    if runs:
        results = await gather_settled(
            *(fetch_range(source, column, start, end, cancel_token) for start, end in runs)
        )
        for (start, end), fetched in zip(runs, results):
            values[start:end] = fetched
    raise_if_cancelled(cancel_token)
    return values


__all__ = ["fetch_column", "fetch_range", "gather_settled", "group_contiguous"]
