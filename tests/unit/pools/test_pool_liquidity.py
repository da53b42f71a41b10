"""Tests for Pool construction, liquidity provision and withdrawal."""

import pytest

from dex.errors import InsufficientBalance, InvalidAmount, InvalidPair, SlippageExceeded, ZeroAmount
from dex.ledger import TokenLedger
from dex.pools import LiquidityAdded, LiquidityWithdrawn, Pool
from tests.helpers import ALICE, BOB, OWNER, TOKEN_A, TOKEN_B, TOKEN_C, TOKEN_D, fund

POOL_ADDRESS = "0x" + "50" * 20


class TestPoolConstruction:
    """Tests for Pool.__init__ validation."""

    def test_two_and_three_tokens(self):
        ledger = TokenLedger()
        assert Pool(POOL_ADDRESS, [TOKEN_A, TOKEN_B], ledger, OWNER).tokens == (TOKEN_A, TOKEN_B)
        assert len(Pool(POOL_ADDRESS, [TOKEN_A, TOKEN_B, TOKEN_C], ledger, OWNER).tokens) == 3

    def test_one_token_rejected(self):
        with pytest.raises(InvalidPair):
            Pool(POOL_ADDRESS, [TOKEN_A], TokenLedger(), OWNER)

    def test_four_tokens_rejected(self):
        with pytest.raises(InvalidPair):
            Pool(POOL_ADDRESS, [TOKEN_A, TOKEN_B, TOKEN_C, TOKEN_D], TokenLedger(), OWNER)

    def test_duplicate_tokens_rejected(self):
        with pytest.raises(InvalidPair):
            Pool(POOL_ADDRESS, [TOKEN_A, TOKEN_A.upper().replace("0X", "0x")], TokenLedger(), OWNER)

    def test_new_pool_is_empty(self, empty_three_pool):
        """A created pool has zero reserves and zero supply."""
        assert empty_three_pool.get_reserves() == (0, 0, 0)
        assert empty_three_pool.total_supply == 0
        assert not empty_three_pool.is_seeded
        assert empty_three_pool.anchor == TOKEN_A

    def test_index_of_unknown_token(self, empty_three_pool):
        with pytest.raises(InvalidPair):
            empty_three_pool.index_of(TOKEN_D)


class TestInitialDeposit:
    """Tests for the first deposit into an empty pool."""

    def test_seeds_at_default_ratios(self, empty_three_pool, ledger):
        """Anchor 100 with ratios 2x/3x gives reserves (100, 200, 300) and supply 100."""
        fund(ledger, ALICE, {TOKEN_A: 100, TOKEN_B: 200, TOKEN_C: 300})

        event = empty_three_pool.add_liquidity(ALICE, {TOKEN_A: 100})

        assert empty_three_pool.get_reserves() == (100, 200, 300)
        assert empty_three_pool.total_supply == 100
        assert empty_three_pool.balance_of(ALICE) == 100
        assert event == LiquidityAdded(
            pool=empty_three_pool.address,
            provider=ALICE,
            lp_minted=100,
            amounts={TOKEN_A: 100, TOKEN_B: 200, TOKEN_C: 300},
        )
        assert empty_three_pool.events == [event]

    def test_pulls_tokens_from_provider(self, empty_three_pool, ledger):
        fund(ledger, ALICE, {TOKEN_A: 150, TOKEN_B: 250, TOKEN_C: 350})

        empty_three_pool.add_liquidity(ALICE, {TOKEN_A: 100})

        assert ledger.balance_of(ALICE, TOKEN_A) == 50
        assert ledger.balance_of(ALICE, TOKEN_B) == 50
        assert ledger.balance_of(ALICE, TOKEN_C) == 50
        assert ledger.balance_of(empty_three_pool.address, TOKEN_C) == 300

    def test_supplied_amounts_used_as_is(self, empty_three_pool, ledger):
        """Explicit non-anchor amounts set the initial price."""
        fund(ledger, ALICE, {TOKEN_A: 100, TOKEN_B: 50, TOKEN_C: 300})

        empty_three_pool.add_liquidity(ALICE, {TOKEN_A: 100, TOKEN_B: 50})

        assert empty_three_pool.get_reserves() == (100, 50, 300)
        assert empty_three_pool.total_supply == 100

    def test_required_amounts_for_empty_pool(self, empty_three_pool):
        assert empty_three_pool.get_required_amounts(100) == {TOKEN_B: 200, TOKEN_C: 300}

    def test_missing_anchor_rejected(self, empty_three_pool, ledger):
        fund(ledger, ALICE, {TOKEN_B: 200})
        with pytest.raises(InvalidAmount):
            empty_three_pool.add_liquidity(ALICE, {TOKEN_B: 200})

    def test_zero_anchor_rejected(self, empty_three_pool):
        with pytest.raises(InvalidAmount):
            empty_three_pool.add_liquidity(ALICE, {TOKEN_A: 0})

    def test_negative_amount_rejected(self, empty_three_pool):
        with pytest.raises(InvalidAmount):
            empty_three_pool.add_liquidity(ALICE, {TOKEN_A: 100, TOKEN_B: -1})

    def test_zero_non_anchor_rejected(self, empty_three_pool, ledger):
        """A supplied zero would leave a dead reserve."""
        fund(ledger, ALICE, {TOKEN_A: 100, TOKEN_C: 300})
        with pytest.raises(InvalidAmount):
            empty_three_pool.add_liquidity(ALICE, {TOKEN_A: 100, TOKEN_B: 0})

    def test_foreign_token_rejected(self, empty_three_pool):
        with pytest.raises(InvalidPair):
            empty_three_pool.add_liquidity(ALICE, {TOKEN_A: 100, TOKEN_D: 100})

    def test_unfunded_provider_changes_nothing(self, empty_three_pool, ledger):
        """A deposit the provider cannot pay leaves pool and ledger untouched."""
        fund(ledger, ALICE, {TOKEN_A: 100, TOKEN_B: 200, TOKEN_C: 299})

        with pytest.raises(InsufficientBalance):
            empty_three_pool.add_liquidity(ALICE, {TOKEN_A: 100})

        assert empty_three_pool.get_reserves() == (0, 0, 0)
        assert empty_three_pool.total_supply == 0
        assert ledger.balance_of(ALICE, TOKEN_A) == 100
        assert empty_three_pool.events == []


class TestProportionalDeposit:
    """Tests for deposits into a seeded pool."""

    def test_keeps_reserve_ratios(self, seeded_three_pool, ledger):
        """Adding 50 anchor to (100, 200, 300) pulls (50, 100, 150) and mints 50."""
        fund(ledger, BOB, {TOKEN_A: 50, TOKEN_B: 100, TOKEN_C: 150})

        event = seeded_three_pool.add_liquidity(BOB, {TOKEN_A: 50})

        assert event.lp_minted == 50
        assert event.amounts == {TOKEN_A: 50, TOKEN_B: 100, TOKEN_C: 150}
        assert seeded_three_pool.get_reserves() == (150, 300, 450)
        assert seeded_three_pool.total_supply == 150
        assert seeded_three_pool.balance_of(BOB) == 50

    def test_supplied_amount_is_a_cap(self, seeded_three_pool, ledger):
        """Only the required amount is pulled when more is offered."""
        fund(ledger, BOB, {TOKEN_A: 50, TOKEN_B: 500, TOKEN_C: 150})

        event = seeded_three_pool.add_liquidity(BOB, {TOKEN_A: 50, TOKEN_B: 500})

        assert event.amounts[TOKEN_B] == 100
        assert ledger.balance_of(BOB, TOKEN_B) == 400

    def test_offer_below_requirement_rejected(self, seeded_three_pool, ledger):
        fund(ledger, BOB, {TOKEN_A: 50, TOKEN_B: 100, TOKEN_C: 150})

        with pytest.raises(InvalidAmount):
            seeded_three_pool.add_liquidity(BOB, {TOKEN_A: 50, TOKEN_B: 99})

        assert seeded_three_pool.get_reserves() == (100, 200, 300)

    def test_required_amounts_follow_reserves(self, seeded_three_pool):
        assert seeded_three_pool.get_required_amounts(10) == {TOKEN_B: 20, TOKEN_C: 30}

    def test_deposit_minting_nothing_rejected(self, registry, ledger):
        """Rounding a deposit down to zero shares is refused."""
        pool = registry.create_pool([TOKEN_A, TOKEN_B])
        fund(ledger, ALICE, {TOKEN_A: 10, TOKEN_B: 10})
        pool.add_liquidity(ALICE, {TOKEN_A: 10, TOKEN_B: 10})
        # Inflate the anchor reserve relative to supply with a swap
        fund(ledger, BOB, {TOKEN_A: 10**6})
        pool.swap(BOB, TOKEN_A, 10**6, TOKEN_B)
        fund(ledger, BOB, {TOKEN_A: 1, TOKEN_B: 1})

        with pytest.raises(InvalidAmount):
            pool.add_liquidity(BOB, {TOKEN_A: 1})

    def test_lp_balances_sum_to_supply(self, seeded_three_pool, ledger):
        fund(ledger, BOB, {TOKEN_A: 30, TOKEN_B: 60, TOKEN_C: 90})
        seeded_three_pool.add_liquidity(BOB, {TOKEN_A: 30})

        total = seeded_three_pool.balance_of(ALICE) + seeded_three_pool.balance_of(BOB)
        assert total == seeded_three_pool.total_supply


class TestWithdrawLiquidity:
    """Tests for Pool.withdraw_liquidity."""

    def test_half_withdrawal(self, seeded_three_pool, ledger):
        """Burning 50 of 100 from (100, 200, 300) redeems (50, 100, 150)."""
        event = seeded_three_pool.withdraw_liquidity(ALICE, 50)

        assert event == LiquidityWithdrawn(
            pool=seeded_three_pool.address,
            provider=ALICE,
            lp_burned=50,
            amounts={TOKEN_A: 50, TOKEN_B: 100, TOKEN_C: 150},
        )
        assert seeded_three_pool.get_reserves() == (50, 100, 150)
        assert seeded_three_pool.total_supply == 50
        assert ledger.balance_of(ALICE, TOKEN_C) == 150

    def test_full_withdrawal_empties_pool(self, seeded_three_pool):
        seeded_three_pool.withdraw_liquidity(ALICE, 100)

        assert seeded_three_pool.get_reserves() == (0, 0, 0)
        assert seeded_three_pool.total_supply == 0
        assert seeded_three_pool.balance_of(ALICE) == 0
        assert not seeded_three_pool.is_seeded

    def test_reseed_after_full_withdrawal(self, seeded_three_pool, ledger):
        """An emptied pool takes a fresh initial deposit."""
        seeded_three_pool.withdraw_liquidity(ALICE, 100)
        fund(ledger, BOB, {TOKEN_A: 10, TOKEN_B: 20, TOKEN_C: 30})

        event = seeded_three_pool.add_liquidity(BOB, {TOKEN_A: 10})

        assert event.lp_minted == 10
        assert seeded_three_pool.get_reserves() == (10, 20, 30)

    def test_round_trip_never_profits(self, seeded_three_pool, ledger):
        """Depositing then withdrawing the minted shares returns at most the deposit."""
        fund(ledger, BOB, {TOKEN_A: 33, TOKEN_B: 66, TOKEN_C: 99})
        minted = seeded_three_pool.add_liquidity(BOB, {TOKEN_A: 33}).lp_minted

        seeded_three_pool.withdraw_liquidity(BOB, minted)

        assert ledger.balance_of(BOB, TOKEN_A) <= 33
        assert ledger.balance_of(BOB, TOKEN_B) <= 66
        assert ledger.balance_of(BOB, TOKEN_C) <= 99

    def test_more_than_held_rejected(self, seeded_three_pool):
        with pytest.raises(InsufficientBalance):
            seeded_three_pool.withdraw_liquidity(ALICE, 101)

    def test_non_holder_rejected(self, seeded_three_pool):
        with pytest.raises(InsufficientBalance):
            seeded_three_pool.withdraw_liquidity(BOB, 1)

    def test_zero_amount_rejected(self, seeded_three_pool):
        with pytest.raises(ZeroAmount):
            seeded_three_pool.withdraw_liquidity(ALICE, 0)

    def test_minimums_enforced(self, seeded_three_pool, ledger):
        """A payout below its minimum aborts the withdrawal."""
        with pytest.raises(SlippageExceeded):
            seeded_three_pool.withdraw_liquidity(ALICE, 50, min_amounts={TOKEN_B: 101})

        assert seeded_three_pool.get_reserves() == (100, 200, 300)
        assert seeded_three_pool.balance_of(ALICE) == 100
        assert ledger.balance_of(ALICE, TOKEN_B) == 0

    def test_minimums_met(self, seeded_three_pool):
        event = seeded_three_pool.withdraw_liquidity(
            ALICE, 50, min_amounts={TOKEN_A: 50, TOKEN_B: 100, TOKEN_C: 150}
        )
        assert event.amounts[TOKEN_C] == 150
