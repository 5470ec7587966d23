"""Carry an open transaction through a Context.

Any executor call made with a context derived by make_context_tx runs inside
that transaction, so a caller composes several calls transactionally by
deriving the context once and passing it down.
"""

from typing import Optional, Tuple

from platform_common.context import Context
from platform_common.db.types import Tx


class _TxKey:
    """Type-distinct key for the transaction slot."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<tx key>"


_TX_KEY = _TxKey()


def make_context_tx(ctx: Context, tx: Tx) -> Context:
    """Return a context derived from ctx that carries tx."""
    return ctx.with_value(_TX_KEY, tx)


def tx_from_context(ctx: Context) -> Tuple[Optional[Tx], bool]:
    """Return (tx, True) when ctx carries a transaction, else (None, False)."""
    tx = ctx.value(_TX_KEY)
    if tx is not None and isinstance(tx, Tx):
        return tx, True
    return None, False


__all__ = [
    "make_context_tx",
    "tx_from_context",
]
