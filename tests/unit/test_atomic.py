"""Tests for the atomic() unit of work."""

import pytest

from dex.atomic import atomic
from dex.errors import SlippageExceeded
from tests.helpers import BOB, E18, TOKEN_A, TOKEN_B, fund


class TestAtomic:
    """Tests for atomic rollback over pools and ledger."""

    def test_commits_on_success(self, deep_pair_pool, ledger):
        fund(ledger, BOB, {TOKEN_A: E18})

        with atomic([deep_pair_pool], ledger):
            event = deep_pair_pool.swap(BOB, TOKEN_A, E18, TOKEN_B)

        assert ledger.balance_of(BOB, TOKEN_B) == event.amount_out
        assert deep_pair_pool.events[-1] == event

    def test_restores_on_error(self, deep_pair_pool, ledger):
        """State mutated inside the block is rolled back when it raises."""
        fund(ledger, BOB, {TOKEN_A: 2 * E18})
        pool_before = deep_pair_pool.snapshot()
        ledger_before = ledger.snapshot()

        with pytest.raises(SlippageExceeded):
            with atomic([deep_pair_pool], ledger):
                deep_pair_pool.swap(BOB, TOKEN_A, E18, TOKEN_B)
                deep_pair_pool.swap(BOB, TOKEN_A, E18, TOKEN_B)
                raise SlippageExceeded("late check failed")

        assert deep_pair_pool.snapshot() == pool_before
        assert ledger.snapshot() == ledger_before

    def test_restores_on_any_exception(self, deep_pair_pool, ledger):
        fund(ledger, BOB, {TOKEN_A: E18})
        ledger_before = ledger.snapshot()

        with pytest.raises(RuntimeError):
            with atomic([deep_pair_pool], ledger):
                deep_pair_pool.swap(BOB, TOKEN_A, E18, TOKEN_B)
                raise RuntimeError("boom")

        assert ledger.snapshot() == ledger_before

    def test_duplicate_pools_allowed(self, deep_pair_pool, ledger):
        """The same pool may appear on several hops; it is locked once."""
        with atomic([deep_pair_pool, deep_pair_pool], ledger):
            pass
