"""Recording test doubles for the Pool and Tx capabilities.

Each double records every dispatch in ``calls`` as
``(method, query, args, timeout)`` so tests can tell whether a call went to
the pool or to the transaction.
"""

from typing import Any, List, Optional, Sequence, Tuple

from platform_common.db.rows import Rows
from platform_common.db.types import TxOptions


class FakeCursor:
    """In-memory cursor returning records in fetch(n) batches."""

    def __init__(self, records: Sequence[Any], error: Optional[BaseException] = None):
        self._records = list(records)
        self._error = error
        self.fetch_sizes: List[int] = []

    async def fetch(self, n: int, *, timeout: Optional[float] = None) -> List[Any]:
        self.fetch_sizes.append(n)
        if self._error is not None:
            raise self._error
        batch, self._records = self._records[:n], self._records[n:]
        return batch


class RecordingRunner:
    """QueryRunner double serving canned records."""

    def __init__(
        self,
        label: str,
        records: Optional[Sequence[Any]] = None,
        status: str = "SELECT 0",
        error: Optional[BaseException] = None,
    ):
        self.label = label
        self.records = list(records or [])
        self.status = status
        self.error = error
        self.calls: List[Tuple[str, str, Tuple[Any, ...], Optional[float]]] = []
        self.closed_cursors = 0

    def _record(self, method: str, query: str, args: Tuple[Any, ...], timeout: Optional[float]) -> None:
        self.calls.append((method, query, args, timeout))
        if self.error is not None:
            raise self.error

    @property
    def methods(self) -> List[str]:
        return [call[0] for call in self.calls]

    async def execute(self, query: str, *args: Any, timeout: Optional[float] = None) -> str:
        self._record("execute", query, args, timeout)
        return self.status

    async def fetch(self, query: str, *args: Any, timeout: Optional[float] = None) -> List[Any]:
        self._record("fetch", query, args, timeout)
        return list(self.records)

    async def fetchrow(self, query: str, *args: Any, timeout: Optional[float] = None) -> Optional[Any]:
        self._record("fetchrow", query, args, timeout)
        return self.records[0] if self.records else None

    async def cursor(self, query: str, *args: Any, timeout: Optional[float] = None) -> Rows:
        self._record("cursor", query, args, timeout)

        async def on_close(error: Optional[BaseException]) -> None:
            self.closed_cursors += 1

        return Rows(FakeCursor(self.records), prefetch=2, on_close=on_close)


class FakeTx(RecordingRunner):
    """Tx double."""

    def __init__(self, *args: Any, rollback_error: Optional[BaseException] = None, **kwargs: Any):
        super().__init__("tx", *args, **kwargs)
        self.rollback_error = rollback_error
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True
        if self.rollback_error is not None:
            raise self.rollback_error


class FakePool(RecordingRunner):
    """Pool double handing out one FakeTx."""

    def __init__(self, *args: Any, tx: Optional[FakeTx] = None, begin_error: Optional[BaseException] = None, **kwargs: Any):
        super().__init__("pool", *args, **kwargs)
        self.tx = tx or FakeTx()
        self.begin_error = begin_error
        self.begin_calls: List[Tuple[Optional[TxOptions], Optional[float]]] = []
        self.pings = 0
        self.close_count = 0

    async def begin(self, options: Optional[TxOptions] = None, timeout: Optional[float] = None) -> FakeTx:
        self.begin_calls.append((options, timeout))
        if self.begin_error is not None:
            raise self.begin_error
        return self.tx

    async def ping(self, timeout: Optional[float] = None) -> None:
        self.pings += 1
        if self.error is not None:
            raise self.error

    async def close(self) -> None:
        self.close_count += 1
