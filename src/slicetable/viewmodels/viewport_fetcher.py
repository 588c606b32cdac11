"""Fetch policy for the rows under the viewport."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from slicetable.core.order_by import OrderByLike
from slicetable.data.cancel import CancelToken
from slicetable.data.types import DataSource
from slicetable.errors import FetchAbortedError
from slicetable.errors.handler import ErrorHandler, ErrorSeverity

from .base import BaseViewModel
from .signal import ObservableProperty, Signal


class ViewportFetcher(BaseViewModel):
    """Keep only the latest viewport fetch alive.

    Every :meth:`request` gets a new request id and cancels the token of the
    previous request.  A request whose id is no longer the latest when it
    settles is stale: its completion and its errors are ignored.
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None) -> None:
        super().__init__()
        self._logger = logging.getLogger(__name__)
        self._error_handler = error_handler
        self._request_id = 0
        self._token: Optional[CancelToken] = None

        self.loading = ObservableProperty(False)

        # emits (row_start, row_end)
        self.fetch_completed = Signal()
        self.error_occurred = Signal()

    @property
    def request_id(self) -> int:
        return self._request_id

    async def request(
        self,
        source: DataSource,
        row_start: int,
        row_end: int,
        columns: Optional[Sequence[str]] = None,
        order_by: OrderByLike = None,
    ) -> bool:
        """Fetch ``[row_start, row_end)``; return ``True`` if this request completed and is current."""
        self._request_id += 1
        request_id = self._request_id
        if self._token is not None:
            self._token.cancel("Superseded by a newer viewport request")
        token = CancelToken()
        self._token = token

        self.loading.value = True
        try:
            await source.fetch(
                row_start,
                row_end,
                columns=columns,
                order_by=order_by,
                cancel_token=token,
            )
        except FetchAbortedError:
            self._logger.debug("Viewport request %d aborted", request_id)
            return False
        except Exception as exc:
            if request_id != self._request_id:
                self._logger.debug("Ignoring error of stale viewport request %d: %s", request_id, exc)
                return False
            self._report(exc, row_start, row_end)
            return False
        finally:
            if request_id == self._request_id:
                self.loading.value = False
                self._token = None

        if request_id != self._request_id:
            self._logger.debug("Ignoring stale viewport request %d", request_id)
            return False
        self.fetch_completed.emit(row_start, row_end)
        return True

    def cancel(self) -> None:
        """Abort the current request, if any; its outcome will be ignored."""
        self._request_id += 1
        if self._token is not None:
            self._token.cancel("Viewport request cancelled")
            self._token = None
        self.loading.value = False

    def dispose(self) -> None:
        self.cancel()
        super().dispose()

    def _report(self, exc: Exception, row_start: int, row_end: int) -> None:
        if self._error_handler is not None:
            self._error_handler.handle(
                exc,
                ErrorSeverity.ERROR,
                context={"operation": "viewport_fetch", "row_start": row_start, "row_end": row_end},
            )
        else:
            self._logger.error("Failed to fetch rows %d-%d: %s", row_start, row_end, exc)
        self.error_occurred.emit(str(exc))


__all__ = ["ViewportFetcher"]
