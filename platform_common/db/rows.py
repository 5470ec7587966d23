"""Row cursor and deferred single-row handle."""

from collections import deque
from typing import Any, Awaitable, Callable, Deque, List, Optional, Protocol, Type, TypeVar

from platform_common.db.errors import NotFoundError
from platform_common.db.scan import decode_all, decode_row

T = TypeVar("T")

DEFAULT_PREFETCH = 50


class CursorProtocol(Protocol):
    """Server-side cursor: asyncpg.cursor.Cursor satisfies this."""

    async def fetch(self, n: int, *, timeout: Optional[float] = None) -> List[Any]: ...


class Rows:
    """Lazy, forward-only sequence of result rows.

    Rows are fetched from the cursor in batches of ``prefetch``. The cursor
    closes itself once exhausted; callers that stop early must call close()
    or use ``async with``.

    Usage:
        async with await db.query(ctx, q, user_id) as rows:
            async for record in rows:
                ...
    """

    def __init__(
        self,
        cursor: CursorProtocol,
        prefetch: int = DEFAULT_PREFETCH,
        on_close: Optional[Callable[[Optional[BaseException]], Awaitable[None]]] = None,
    ):
        if prefetch < 1:
            raise ValueError("prefetch must be at least 1")
        self._cursor = cursor
        self._prefetch = prefetch
        self._on_close = on_close
        self._buffer: Deque[Any] = deque()
        self._exhausted = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "Rows":
        return self

    async def __anext__(self) -> Any:
        if not self._buffer:
            if self._closed or self._exhausted:
                await self.close()
                raise StopAsyncIteration
            try:
                batch = await self._cursor.fetch(self._prefetch)
            except BaseException as e:
                await self.close(e)
                raise
            if len(batch) < self._prefetch:
                self._exhausted = True
            if not batch:
                await self.close()
                raise StopAsyncIteration
            self._buffer.extend(batch)
        return self._buffer.popleft()

    async def close(self, error: Optional[BaseException] = None) -> None:
        """Release the cursor. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._buffer.clear()
        if self._on_close is not None:
            await self._on_close(error)

    async def scan_all(self, dest: Type[T]) -> List[T]:
        """Decode every remaining row into dest, then close."""
        records = [record async for record in self]
        return decode_all(dest, records)

    async def __aenter__(self) -> "Rows":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close(exc)


class Row:
    """Result of a single-row query whose failure is reported on scan().

    Holds either the fetched record or the error raised while fetching it.
    """

    __slots__ = ("_record", "_error")

    def __init__(self, record: Any = None, error: Optional[BaseException] = None):
        self._record = record
        self._error = error

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def scan(self, dest: Type[T]) -> T:
        """Decode the row into dest.

        Raises:
            The fetch error, if the query failed
            NotFoundError: The query returned no row
            DecodeError: The row does not fit dest
        """
        if self._error is not None:
            raise self._error
        if self._record is None:
            raise NotFoundError()
        return decode_row(dest, self._record)


__all__ = [
    "DEFAULT_PREFETCH",
    "CursorProtocol",
    "Rows",
    "Row",
]
