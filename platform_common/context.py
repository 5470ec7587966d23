"""Request-scoped Context for values and deadlines.

A Context is an immutable overlay chain. Every derivation wraps its parent
and adds exactly one value or a deadline; lookups walk the chain from the
newest overlay back to the root. Nothing is ever written to an existing
Context, so a derived context can be passed down a call chain while the
caller keeps using the original.

Usage:
    from platform_common.context import Context

    ctx = Context.background()
    ctx = ctx.with_value(REQUEST_ID_KEY, "req-123").with_timeout(5.0)

    ctx.value(REQUEST_ID_KEY)   # "req-123"
    ctx.remaining()             # seconds left before the deadline
"""

import time
from typing import Any, Hashable, Optional

_NO_KEY = object()


class DeadlineExceededError(TimeoutError):
    """Raised when work starts after the context deadline has passed."""

    def __init__(self, message: str = "context deadline exceeded"):
        super().__init__(message)


class Context:
    """Immutable key/value overlay with an optional monotonic deadline."""

    __slots__ = ("_parent", "_key", "_value", "_deadline")

    def __init__(
        self,
        parent: Optional["Context"] = None,
        key: Any = _NO_KEY,
        value: Any = None,
        deadline: Optional[float] = None,
    ):
        self._parent = parent
        self._key = key
        self._value = value
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

    @classmethod
    def background(cls) -> "Context":
        """Return an empty root context."""
        return cls()

    # ─── Values ───

    def with_value(self, key: Hashable, value: Any) -> "Context":
        """Derive a context carrying value under key."""
        if key is None:
            raise ValueError("context key must not be None")
        return Context(parent=self, key=key, value=value)

    def value(self, key: Hashable, default: Any = None) -> Any:
        """Look up key, newest overlay first."""
        node: Optional[Context] = self
        while node is not None:
            if node._key is not _NO_KEY and node._key == key:
                return node._value
            node = node._parent
        return default

    # ─── Deadlines ───

    def with_deadline(self, deadline: float) -> "Context":
        """Derive a context that expires at a time.monotonic() deadline.

        A parent deadline that is earlier still wins.
        """
        return Context(parent=self, deadline=deadline)

    def with_timeout(self, seconds: float) -> "Context":
        """Derive a context that expires after the given number of seconds."""
        return self.with_deadline(time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def err(self) -> Optional[DeadlineExceededError]:
        """Return DeadlineExceededError once the deadline has passed."""
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError()
        return None

    def __repr__(self) -> str:
        depth = 0
        node = self._parent
        while node is not None:
            depth += 1
            node = node._parent
        return f"Context(depth={depth}, deadline={self._deadline})"


__all__ = [
    "Context",
    "DeadlineExceededError",
]
