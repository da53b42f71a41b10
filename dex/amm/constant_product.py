"""Constant product math for multi-token pools.

A pool holds two or three reserves, but every swap only touches the traded
pair: the pricing curve is x * y = k restricted to (reserve_in, reserve_out),
and the other reserves are untouched.

The trading fee is carved out of the input before the curve runs. The fee
portion is kept aside as LP incentive and never becomes tradable reserve:

    fee        = amount_in * fee_bps // fee_denominator
    net_in     = amount_in - fee
    amount_out = reserve_out * net_in // (reserve_in + net_in)

All functions are pure and use floor division on integers.
"""

from __future__ import annotations

from dex.constants import FEE_DENOMINATOR
from dex.safe_int import S


class ConstantProduct:
    """Pricing and share math shared by pools and the router."""

    def split_fee(
        self,
        amount_in: int,
        fee_bps: int,
        fee_denominator: int = FEE_DENOMINATOR,
    ) -> tuple[int, int]:
        """Split an input amount into (fee, net_in).

        Args:
            amount_in: Gross input amount
            fee_bps: Trading fee in basis points
            fee_denominator: Fee denominator (default 10,000)

        Returns:
            Tuple of (fee, net_in) with fee + net_in == amount_in
        """
        fee = S(amount_in) * fee_bps // fee_denominator
        net_in = S(amount_in) - fee
        return fee.value, net_in.value

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_bps: int = 0,
        fee_denominator: int = FEE_DENOMINATOR,
    ) -> int:
        """Calculate output amount for a gross input.

        Formula: amount_out = res_out * net_in / (res_in + net_in)

        Args:
            amount_in: Gross input amount (fee included)
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool
            fee_bps: Trading fee in basis points (default 0)
            fee_denominator: Fee denominator (default 10,000)

        Returns:
            Output token amount, 0 for non-positive input or empty reserves
        """
        if amount_in <= 0:
            return 0
        if reserve_in <= 0 or reserve_out <= 0:
            return 0

        _, net_in = self.split_fee(amount_in, fee_bps, fee_denominator)
        numerator = S(reserve_out) * net_in
        denominator = S(reserve_in) + net_in

        return (numerator // denominator).value

    def required_amount(self, anchor_amount: int, reserve: int, reserve_anchor: int) -> int:
        """Amount of a non-anchor token that matches an anchor deposit.

        Keeps reserve / reserve_anchor constant: reserve * anchor / reserve_anchor.
        """
        return (S(reserve) * anchor_amount // reserve_anchor).value

    def lp_to_mint(self, anchor_amount: int, lp_supply: int, reserve_anchor: int) -> int:
        """LP shares minted for a deposit into a seeded pool."""
        return (S(lp_supply) * anchor_amount // reserve_anchor).value

    def redeem_amount(self, reserve: int, lp_amount: int, lp_supply: int) -> int:
        """Reserve paid out for burning lp_amount of lp_supply shares."""
        return (S(reserve) * lp_amount // lp_supply).value

    def pro_rata_share(self, accumulated: int, lp_balance: int, lp_supply: int) -> int:
        """An LP's share of an accumulated fee bucket at current supply."""
        if lp_supply <= 0:
            return 0
        return (S(accumulated) * lp_balance // lp_supply).value


# Singleton instance
constant_product = ConstantProduct()
