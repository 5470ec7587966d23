"""PostgreSQL (asyncpg) implementation of the db capabilities."""

from platform_common.db.pg.client import PGClient, new_client, new_client_from_settings
from platform_common.db.pg.context import make_context_tx, tx_from_context
from platform_common.db.pg.driver import AsyncpgPool, PgTx
from platform_common.db.pg.pg import PG, new_db

__all__ = [
    "PG",
    "PGClient",
    "AsyncpgPool",
    "PgTx",
    "new_db",
    "new_client",
    "new_client_from_settings",
    "make_context_tx",
    "tx_from_context",
]
