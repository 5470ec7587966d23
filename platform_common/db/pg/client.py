"""PostgreSQL client: owns the pool for the lifetime of a service."""

from typing import Any, Optional

import asyncpg
from opentelemetry import trace

from platform_common.context import Context
from platform_common.db.errors import ConnectError
from platform_common.db.pg.driver import AsyncpgPool
from platform_common.db.pg.pg import PG
from platform_common.db.types import DB
from platform_common.logging import get_component_logger
from platform_common.protocols import LoggerProtocol
from platform_common.settings import Settings, get_settings


class PGClient:
    """Client holding the service's DB."""

    def __init__(self, master: DB, logger: Optional[LoggerProtocol] = None):
        self._master = master
        self._logger = get_component_logger("pg_client", logger)
        self._closed = False

    def db(self) -> DB:
        return self._master

    async def close(self) -> None:
        """Close the underlying pool. Later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        await self._master.close()
        self._logger.info("postgres_disconnected")


async def new_client(
    ctx: Context,
    dsn: str,
    *,
    min_size: int = 5,
    max_size: int = 20,
    command_timeout: Optional[float] = 60.0,
    logger: Optional[LoggerProtocol] = None,
    tracer: Optional[trace.Tracer] = None,
    log_queries: bool = True,
    **connect_kwargs: Any,
) -> PGClient:
    """Create a pool for dsn and verify it with a ping.

    Raises:
        ConnectError: Pool creation or the ping failed
    """
    _logger = get_component_logger("pg_client", logger)

    remaining = ctx.remaining()
    if remaining is not None:
        connect_kwargs.setdefault("timeout", remaining)

    try:
        pool = await asyncpg.create_pool(
            dsn,
            min_size=min_size,
            max_size=max_size,
            command_timeout=command_timeout,
            **connect_kwargs,
        )
    except Exception as e:
        raise ConnectError(f"failed to connect to db: {e}") from e

    db = PG(AsyncpgPool(pool), logger=logger, tracer=tracer, log_queries=log_queries)
    try:
        await db.ping(ctx)
    except Exception as e:
        await db.close()
        raise ConnectError(f"failed to connect to db: {e}") from e

    _logger.info("postgres_connected", min_size=min_size, max_size=max_size)
    return PGClient(db, logger=logger)


async def new_client_from_settings(
    ctx: Context,
    settings: Optional[Settings] = None,
    logger: Optional[LoggerProtocol] = None,
    tracer: Optional[trace.Tracer] = None,
) -> PGClient:
    """Create a client from Settings (global settings if not provided)."""
    settings = settings or get_settings()
    return await new_client(
        ctx,
        settings.get_postgres_dsn(),
        min_size=settings.postgres_min_pool_size,
        max_size=settings.postgres_max_pool_size,
        command_timeout=settings.postgres_command_timeout,
        logger=logger,
        tracer=tracer,
        log_queries=settings.postgres_log_queries,
    )


__all__ = [
    "PGClient",
    "new_client",
    "new_client_from_settings",
]
