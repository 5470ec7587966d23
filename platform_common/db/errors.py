"""Database error taxonomy.

Driver errors (asyncpg.PostgresError, OSError, TimeoutError, ...) are never
wrapped: the executor re-raises them unchanged. The classes here cover the
failures this package raises on its own.
"""

from platform_common.context import DeadlineExceededError


class DatabaseError(Exception):
    """Base class for errors raised by platform_common.db."""


class ConnectError(DatabaseError):
    """Pool construction or the initial ping failed."""


class NotFoundError(DatabaseError):
    """A single-row read returned no rows."""

    def __init__(self, message: str = "no rows in result set"):
        super().__init__(message)


class DecodeError(DatabaseError):
    """A result row does not fit the requested destination."""


class TxClosedError(DatabaseError):
    """A transaction was used after commit or rollback."""

    def __init__(self, message: str = "tx is closed"):
        super().__init__(message)


__all__ = [
    "DatabaseError",
    "ConnectError",
    "NotFoundError",
    "DecodeError",
    "TxClosedError",
    "DeadlineExceededError",
]
