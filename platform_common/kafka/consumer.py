"""Message consumer contract.

Broker clients live in the services; this module only fixes the shape they
expose so handlers can be written against one interface.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional, Protocol, runtime_checkable

from platform_common.context import Context


@dataclass(frozen=True)
class Message:
    """One consumed record."""

    topic: str
    value: bytes
    key: Optional[bytes] = None
    partition: int = 0
    offset: int = 0
    headers: Dict[str, bytes] = field(default_factory=dict)
    timestamp: Optional[datetime] = None


Handler = Callable[[Context, Message], Awaitable[None]]


@runtime_checkable
class Consumer(Protocol):
    """Consumes a topic, invoking handler once per message."""

    async def consume(self, ctx: Context, topic_name: str, handler: Handler) -> None: ...
    async def close(self) -> None: ...


__all__ = [
    "Message",
    "Handler",
    "Consumer",
]
