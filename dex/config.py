"""Pool configuration."""

from dataclasses import dataclass

from dex.constants import (
    DEFAULT_TRADING_FEE_BPS,
    FEE_DENOMINATOR,
    INITIAL_RATIOS,
    MAX_POOL_TOKENS,
    MAX_TRADING_FEE_BPS,
)


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for pool creation.

    The registry hands the same config to every pool it creates, which keeps
    fee parameters consistent across the exchange and makes it easy to test
    with different settings.

    Attributes:
        fee_denominator: Denominator for basis-point fees (default: 10,000)
        default_trading_fee_bps: Fee charged by new pools (default: 30 = 0.3%)
        max_trading_fee_bps: Highest fee accepted by set_trading_fee (default: 100)
        initial_ratios: Seeding ratio of each non-anchor token relative to the
            anchor token for the first deposit into an empty pool
    """

    fee_denominator: int = FEE_DENOMINATOR
    default_trading_fee_bps: int = DEFAULT_TRADING_FEE_BPS
    max_trading_fee_bps: int = MAX_TRADING_FEE_BPS
    initial_ratios: tuple[int, ...] = INITIAL_RATIOS

    def __post_init__(self) -> None:
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be positive, got {self.fee_denominator}")
        if not 0 <= self.max_trading_fee_bps < self.fee_denominator:
            raise ValueError(
                f"max_trading_fee_bps must be in [0, {self.fee_denominator}), "
                f"got {self.max_trading_fee_bps}"
            )
        if not 0 <= self.default_trading_fee_bps <= self.max_trading_fee_bps:
            raise ValueError(
                f"default_trading_fee_bps must be in [0, {self.max_trading_fee_bps}], "
                f"got {self.default_trading_fee_bps}"
            )
        if len(self.initial_ratios) < MAX_POOL_TOKENS - 1:
            raise ValueError(
                f"initial_ratios needs {MAX_POOL_TOKENS - 1} entries, "
                f"got {len(self.initial_ratios)}"
            )
        if any(ratio <= 0 for ratio in self.initial_ratios):
            raise ValueError(f"initial_ratios must be positive, got {self.initial_ratios}")

    def initial_ratio(self, position: int) -> int:
        """Seeding ratio for the token at `position` in a pool (anchor is 0)."""
        if position == 0:
            return 1
        return self.initial_ratios[position - 1]


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
