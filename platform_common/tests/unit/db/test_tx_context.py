"""Unit tests for carrying a transaction through a Context."""

from platform_common.context import Context
from platform_common.db.pg.context import _TX_KEY, make_context_tx, tx_from_context
from platform_common.tests.fixtures.doubles import FakePool, FakeTx


class TestTxContext:

    def test_absent_on_fresh_context(self):
        tx, ok = tx_from_context(Context.background())

        assert tx is None
        assert ok is False

    def test_round_trip(self):
        tx = FakeTx()
        ctx = make_context_tx(Context.background(), tx)

        found, ok = tx_from_context(ctx)

        assert ok is True
        assert found is tx

    def test_parent_context_unaffected(self):
        parent = Context.background()
        make_context_tx(parent, FakeTx())

        assert tx_from_context(parent) == (None, False)

    def test_survives_further_derivation(self):
        tx = FakeTx()
        ctx = make_context_tx(Context.background(), tx).with_value("request_id", "r-1").with_timeout(5)

        assert tx_from_context(ctx) == (tx, True)

    def test_non_tx_value_is_absent(self):
        ctx = Context.background().with_value(_TX_KEY, "not a transaction")

        assert tx_from_context(ctx) == (None, False)

    def test_pool_is_not_a_tx(self):
        ctx = Context.background().with_value(_TX_KEY, FakePool())

        assert tx_from_context(ctx) == (None, False)

    def test_string_key_does_not_collide(self):
        ctx = Context.background().with_value("tx", FakeTx())

        assert tx_from_context(ctx) == (None, False)
