"""asyncpg adapters implementing the Pool and Tx capabilities.

The executor never touches asyncpg directly. AsyncpgPool dispatches through
the shared asyncpg.Pool; PgTx pins one acquired connection inside an open
transaction until commit() or rollback() hands it back.
"""

from typing import Any, Awaitable, Callable, List, Optional

import asyncpg

from platform_common.db.errors import TxClosedError
from platform_common.db.rows import DEFAULT_PREFETCH, Rows
from platform_common.db.types import TxOptions


class PgTx:
    """Open transaction on a single pooled connection."""

    def __init__(
        self,
        conn: asyncpg.Connection,
        tx: Any,
        release: Callable[[asyncpg.Connection], Awaitable[None]],
        prefetch: int = DEFAULT_PREFETCH,
    ):
        self._conn = conn
        self._tx = tx
        self._release = release
        self._prefetch = prefetch
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise TxClosedError()

    async def execute(self, query: str, *args: Any, timeout: Optional[float] = None) -> str:
        self._check_open()
        return await self._conn.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args: Any, timeout: Optional[float] = None) -> List[Any]:
        self._check_open()
        return await self._conn.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args: Any, timeout: Optional[float] = None) -> Optional[Any]:
        self._check_open()
        return await self._conn.fetchrow(query, *args, timeout=timeout)

    async def cursor(self, query: str, *args: Any, timeout: Optional[float] = None) -> Rows:
        self._check_open()
        cur = await self._conn.cursor(query, *args, timeout=timeout)
        return Rows(cur, prefetch=self._prefetch)

    async def commit(self) -> None:
        self._check_open()
        self._closed = True
        try:
            await self._tx.commit()
        finally:
            await self._release(self._conn)

    async def rollback(self) -> None:
        """Roll back. A no-op once the transaction is already closed."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._tx.rollback()
        finally:
            await self._release(self._conn)

    async def __aenter__(self) -> "PgTx":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._closed:
            await self.commit()
        else:
            await self.rollback()


class AsyncpgPool:
    """Pool capability backed by asyncpg.Pool."""

    def __init__(self, pool: asyncpg.Pool, prefetch: int = DEFAULT_PREFETCH):
        self._pool = pool
        self._prefetch = prefetch

    @property
    def raw(self) -> asyncpg.Pool:
        """Underlying asyncpg pool."""
        return self._pool

    async def execute(self, query: str, *args: Any, timeout: Optional[float] = None) -> str:
        return await self._pool.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args: Any, timeout: Optional[float] = None) -> List[Any]:
        return await self._pool.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args: Any, timeout: Optional[float] = None) -> Optional[Any]:
        return await self._pool.fetchrow(query, *args, timeout=timeout)

    async def cursor(self, query: str, *args: Any, timeout: Optional[float] = None) -> Rows:
        """Open a cursor on a dedicated connection.

        asyncpg cursors only live inside a transaction, so the connection is
        held in one until the Rows are closed: committed after a clean read,
        rolled back after an error.
        """
        conn = await self._pool.acquire(timeout=timeout)
        tx = conn.transaction()
        started = False
        try:
            await tx.start()
            started = True
            cur = await conn.cursor(query, *args, timeout=timeout)
        except BaseException:
            try:
                if started:
                    await tx.rollback()
            finally:
                await self._pool.release(conn)
            raise

        async def finish(error: Optional[BaseException]) -> None:
            try:
                if error is None:
                    await tx.commit()
                else:
                    await tx.rollback()
            finally:
                await self._pool.release(conn)

        return Rows(cur, prefetch=self._prefetch, on_close=finish)

    async def begin(self, options: Optional[TxOptions] = None, timeout: Optional[float] = None) -> PgTx:
        conn = await self._pool.acquire(timeout=timeout)
        tx = conn.transaction(**(options or TxOptions()).to_asyncpg())
        try:
            await tx.start()
        except BaseException:
            await self._pool.release(conn)
            raise
        return PgTx(conn, tx, release=self._pool.release, prefetch=self._prefetch)

    async def ping(self, timeout: Optional[float] = None) -> None:
        await self._pool.fetchval("SELECT 1", timeout=timeout)

    async def close(self) -> None:
        await self._pool.close()


__all__ = [
    "AsyncpgPool",
    "PgTx",
]
