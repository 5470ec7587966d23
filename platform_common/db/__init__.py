"""Database infrastructure - query descriptors, protocols and utilities.

The asyncpg-backed executor lives in platform_common.db.pg.
"""

from platform_common.db.errors import (
    ConnectError,
    DatabaseError,
    DeadlineExceededError,
    DecodeError,
    NotFoundError,
    TxClosedError,
)
from platform_common.db.prettier import PLACEHOLDER_DOLLAR, PLACEHOLDER_QUESTION, pretty
from platform_common.db.rows import Row, Rows
from platform_common.db.types import (
    DB,
    AccessMode,
    Client,
    CommandTag,
    IsoLevel,
    Pool,
    Query,
    QueryRunner,
    Tx,
    TxOptions,
)

__all__ = [
    # Types
    "Query",
    "TxOptions",
    "IsoLevel",
    "AccessMode",
    "CommandTag",
    "Row",
    "Rows",
    # Protocols
    "DB",
    "Client",
    "Pool",
    "QueryRunner",
    "Tx",
    # Formatting
    "pretty",
    "PLACEHOLDER_DOLLAR",
    "PLACEHOLDER_QUESTION",
    # Errors
    "DatabaseError",
    "ConnectError",
    "NotFoundError",
    "DecodeError",
    "TxClosedError",
    "DeadlineExceededError",
]
