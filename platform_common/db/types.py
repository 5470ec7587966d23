"""Query descriptor, value types and capability protocols.

The executor talks to the driver only through the protocols below. asyncpg
is wrapped by platform_common.db.pg.driver; tests use recording doubles.

    QueryRunner  - execute / fetch / fetchrow / cursor
    Tx           - QueryRunner + commit / rollback
    Pool         - QueryRunner + begin / ping / close
    DB           - the traced, transaction-aware executor facade
    Client       - owns a DB and its shutdown
"""

from dataclasses import dataclass
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Optional,
    Protocol,
    Type,
    TypeVar,
    runtime_checkable,
)

if TYPE_CHECKING:
    from platform_common.context import Context
    from platform_common.db.rows import Row, Rows

T = TypeVar("T")


@dataclass(frozen=True)
class Query:
    """Named query template.

    Attributes:
        name: Operation label used for the span name and the log line
        raw: SQL text with positional placeholders ($1, $2, ...)
    """

    name: str
    raw: str


class IsoLevel(str, Enum):
    """Transaction isolation levels, valued as asyncpg expects them."""

    SERIALIZABLE = "serializable"
    REPEATABLE_READ = "repeatable_read"
    READ_COMMITTED = "read_committed"
    READ_UNCOMMITTED = "read_uncommitted"


class AccessMode(str, Enum):
    READ_WRITE = "read write"
    READ_ONLY = "read only"


@dataclass(frozen=True)
class TxOptions:
    """Options for a new transaction. None means the server default."""

    iso_level: Optional[IsoLevel] = None
    access_mode: Optional[AccessMode] = None
    deferrable: bool = False

    def to_asyncpg(self) -> Dict[str, Any]:
        """Keyword arguments for asyncpg Connection.transaction()."""
        kwargs: Dict[str, Any] = {}
        if self.iso_level is not None:
            kwargs["isolation"] = IsoLevel(self.iso_level).value
        if self.access_mode is not None:
            kwargs["readonly"] = AccessMode(self.access_mode) is AccessMode.READ_ONLY
        if self.deferrable:
            kwargs["deferrable"] = True
        return kwargs


@dataclass(frozen=True)
class CommandTag:
    """Completion status of a statement, e.g. "INSERT 0 1" or "UPDATE 3"."""

    status: str = ""

    @property
    def rows_affected(self) -> int:
        parts = self.status.split()
        if parts and parts[-1].isdigit():
            return int(parts[-1])
        return 0

    def insert(self) -> bool:
        return self.status.startswith("INSERT")

    def update(self) -> bool:
        return self.status.startswith("UPDATE")

    def delete(self) -> bool:
        return self.status.startswith("DELETE")

    def select(self) -> bool:
        return self.status.startswith("SELECT")

    def __str__(self) -> str:
        return self.status


# =============================================================================
# DRIVER CAPABILITIES
# =============================================================================

@runtime_checkable
class QueryRunner(Protocol):
    """Statement dispatch shared by the pool and a transaction."""

    async def execute(self, query: str, *args: Any, timeout: Optional[float] = None) -> str: ...
    async def fetch(self, query: str, *args: Any, timeout: Optional[float] = None) -> List[Any]: ...
    async def fetchrow(self, query: str, *args: Any, timeout: Optional[float] = None) -> Optional[Any]: ...
    async def cursor(self, query: str, *args: Any, timeout: Optional[float] = None) -> "Rows": ...


@runtime_checkable
class Tx(QueryRunner, Protocol):
    """Open transaction bound to one connection."""

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...


@runtime_checkable
class Pool(QueryRunner, Protocol):
    """Shared connection pool."""

    async def begin(self, options: Optional[TxOptions] = None, timeout: Optional[float] = None) -> Tx: ...
    async def ping(self, timeout: Optional[float] = None) -> None: ...
    async def close(self) -> None: ...


# =============================================================================
# FACADES
# =============================================================================

@runtime_checkable
class DB(Protocol):
    """Traced, transaction-aware query executor."""

    async def scan_one(self, ctx: "Context", dest: Type[T], q: Query, *args: Any) -> T: ...
    async def scan_all(self, ctx: "Context", dest: Type[T], q: Query, *args: Any) -> List[T]: ...
    async def exec(self, ctx: "Context", q: Query, *args: Any) -> CommandTag: ...
    async def query(self, ctx: "Context", q: Query, *args: Any) -> "Rows": ...
    async def query_row(self, ctx: "Context", q: Query, *args: Any) -> "Row": ...
    async def begin_tx(self, ctx: "Context", options: Optional[TxOptions] = None) -> Tx: ...
    async def ping(self, ctx: "Context") -> None: ...
    async def close(self) -> None: ...


@runtime_checkable
class Client(Protocol):
    """Owns a DB for the lifetime of a service."""

    def db(self) -> DB: ...
    async def close(self) -> None: ...


__all__ = [
    "Query",
    "IsoLevel",
    "AccessMode",
    "TxOptions",
    "CommandTag",
    "QueryRunner",
    "Tx",
    "Pool",
    "DB",
    "Client",
]
