"""Run a unit of work inside a transaction.

Usage:
    manager = TxManager(client.db())

    async def transfer(tx_ctx: Context) -> None:
        await db.exec(tx_ctx, debit_q, account_from, amount)
        await db.exec(tx_ctx, credit_q, account_to, amount)

    await manager.read_committed(ctx, transfer)
"""

from typing import Awaitable, Callable, Optional, TypeVar

from platform_common.context import Context
from platform_common.db.pg.context import make_context_tx, tx_from_context
from platform_common.db.types import DB, IsoLevel, Tx, TxOptions
from platform_common.logging import get_component_logger
from platform_common.protocols import LoggerProtocol

T = TypeVar("T")

Handler = Callable[[Context], Awaitable[T]]


class TxManager:
    """Begins, commits and rolls back transactions around handlers."""

    def __init__(self, db: DB, logger: Optional[LoggerProtocol] = None):
        self._db = db
        self._logger = get_component_logger("tx_manager", logger)

    async def transaction(
        self,
        ctx: Context,
        options: Optional[TxOptions],
        handler: Handler[T],
    ) -> T:
        """Run handler with a context carrying a transaction.

        If ctx already carries a transaction the handler joins it. Otherwise
        a new one is opened, committed when the handler returns and rolled
        back when it raises (cancellation included). The handler's exception
        is re-raised; a failed rollback is only logged.
        """
        _, ok = tx_from_context(ctx)
        if ok:
            return await handler(ctx)

        tx = await self._db.begin_tx(ctx, options)
        try:
            result = await handler(make_context_tx(ctx, tx))
        except BaseException as e:
            await self._rollback(tx, e)
            raise

        await tx.commit()
        return result

    async def read_committed(self, ctx: Context, handler: Handler[T]) -> T:
        return await self.transaction(ctx, TxOptions(iso_level=IsoLevel.READ_COMMITTED), handler)

    async def _rollback(self, tx: Tx, cause: BaseException) -> None:
        try:
            await tx.rollback()
        except Exception as e:
            self._logger.warning(
                "tx_rollback_failed",
                error=str(e),
                error_type=type(e).__name__,
                cause=str(cause),
            )


__all__ = [
    "Handler",
    "TxManager",
]
