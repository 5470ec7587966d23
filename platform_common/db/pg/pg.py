"""Traced, transaction-aware PostgreSQL executor.

Every data call follows the same path: open a span named after the query,
log the query with its arguments interpolated, dispatch to the transaction
carried by the context (or to the pool when there is none), tag the span if
the driver raised, and end the span before returning. Driver errors are
re-raised unchanged; there are no retries.

Usage:
    db = PG(AsyncpgPool(pool))

    q = Query(name="user_get", raw="SELECT id, name FROM users WHERE id = $1")
    user = await db.scan_one(ctx, User, q, 42)

    tx = await db.begin_tx(ctx, TxOptions(iso_level=IsoLevel.READ_COMMITTED))
    tx_ctx = make_context_tx(ctx, tx)
    await db.exec(tx_ctx, insert_q, "Alice")   # runs inside tx
    await tx.commit()
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence, Type, TypeVar

import asyncpg
from opentelemetry import trace
from opentelemetry.trace import Span

from platform_common.context import Context
from platform_common.db.pg.context import tx_from_context
from platform_common.db.pg.driver import AsyncpgPool
from platform_common.db.prettier import PLACEHOLDER_DOLLAR, pretty
from platform_common.db.rows import Row, Rows
from platform_common.db.scan import decode_all, decode_one
from platform_common.db.types import CommandTag, DB, Pool, Query, QueryRunner, Tx, TxOptions
from platform_common.logging import get_component_logger
from platform_common.observability import get_tracer, start_span
from platform_common.protocols import LoggerProtocol

T = TypeVar("T")

QUERY_TAG = "query"
BEGIN_TX_SPAN = "BeginTx"


class PG:
    """Query executor over a Pool capability."""

    def __init__(
        self,
        pool: Pool,
        logger: Optional[LoggerProtocol] = None,
        tracer: Optional[trace.Tracer] = None,
        log_queries: bool = True,
    ):
        """Initialize executor.

        Args:
            pool: Pool capability (AsyncpgPool in production)
            logger: Logger for DI (uses context logger if not provided)
            tracer: OpenTelemetry tracer (global provider if not provided)
            log_queries: Log every query with its arguments interpolated
        """
        self._pool = pool
        self._logger = get_component_logger("pg", logger)
        self._tracer = tracer or get_tracer(__name__)
        self._log_queries = log_queries
        self._closed = False

    @property
    def pool(self) -> Pool:
        return self._pool

    def _runner(self, ctx: Context) -> QueryRunner:
        tx, ok = tx_from_context(ctx)
        if ok:
            return tx
        return self._pool

    def _log_query(self, q: Query, args: Sequence[Any]) -> None:
        if not self._log_queries:
            return
        self._logger.info(
            "sql_query",
            sql=q.name,
            query=pretty(q.raw, PLACEHOLDER_DOLLAR, *args),
        )

    @contextmanager
    def _traced(self, ctx: Context, q: Query, args: Sequence[Any]) -> Iterator[Span]:
        with start_span(self._tracer, q.name, {QUERY_TAG: q.raw}) as span:
            err = ctx.err()
            if err is not None:
                raise err
            self._log_query(q, args)
            yield span

    # ─── Routed operations ───

    async def scan_one(self, ctx: Context, dest: Type[T], q: Query, *args: Any) -> T:
        """Run q and decode its single row into dest.

        Raises:
            NotFoundError: No rows
            DecodeError: More than one row, or the row does not fit dest
        """
        with self._traced(ctx, q, args):
            records = await self._runner(ctx).fetch(q.raw, *args, timeout=ctx.remaining())
            return decode_one(dest, records)

    async def scan_all(self, ctx: Context, dest: Type[T], q: Query, *args: Any) -> List[T]:
        """Run q and decode every row into dest. No rows gives []."""
        with self._traced(ctx, q, args):
            records = await self._runner(ctx).fetch(q.raw, *args, timeout=ctx.remaining())
            return decode_all(dest, records)

    async def exec(self, ctx: Context, q: Query, *args: Any) -> CommandTag:
        """Run a statement that returns no rows."""
        with self._traced(ctx, q, args):
            status = await self._runner(ctx).execute(q.raw, *args, timeout=ctx.remaining())
            return CommandTag(status or "")

    async def query(self, ctx: Context, q: Query, *args: Any) -> Rows:
        """Open a lazy cursor over the rows of q.

        The caller must iterate the Rows to the end or close them.
        """
        with self._traced(ctx, q, args):
            return await self._runner(ctx).cursor(q.raw, *args, timeout=ctx.remaining())

    async def query_row(self, ctx: Context, q: Query, *args: Any) -> Row:
        """Fetch at most one row; any failure is raised later by Row.scan()."""
        try:
            with self._traced(ctx, q, args):
                record = await self._runner(ctx).fetchrow(q.raw, *args, timeout=ctx.remaining())
        except Exception as e:
            return Row(error=e)
        return Row(record)

    # ─── Pool-only operations ───

    async def begin_tx(self, ctx: Context, options: Optional[TxOptions] = None) -> Tx:
        """Open a new transaction on the pool.

        A transaction already carried by ctx is ignored: transactions are
        never nested.
        """
        with start_span(self._tracer, BEGIN_TX_SPAN):
            err = ctx.err()
            if err is not None:
                raise err
            return await self._pool.begin(options, timeout=ctx.remaining())

    async def ping(self, ctx: Context) -> None:
        err = ctx.err()
        if err is not None:
            raise err
        await self._pool.ping(timeout=ctx.remaining())

    async def close(self) -> None:
        """Close the pool. Later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        await self._pool.close()


def new_db(
    pool: asyncpg.Pool,
    logger: Optional[LoggerProtocol] = None,
    tracer: Optional[trace.Tracer] = None,
    log_queries: bool = True,
) -> DB:
    """Wrap an existing asyncpg pool as a DB."""
    return PG(AsyncpgPool(pool), logger=logger, tracer=tracer, log_queries=log_queries)


__all__ = [
    "PG",
    "new_db",
    "QUERY_TAG",
    "BEGIN_TX_SPAN",
]
