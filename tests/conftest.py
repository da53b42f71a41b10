"""Pytest configuration and fixtures."""

import pytest

from dex.ledger import TokenLedger
from dex.pools import Pool, PoolRegistry
from dex.routing import Router
from tests.helpers import (
    ALICE,
    E18,
    NOW,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    ZERO_FEE_CONFIG,
    FixedClock,
    make_registry,
    seed_pool,
)


@pytest.fixture
def registry() -> PoolRegistry:
    """An empty registry with the default 30 bps fee."""
    return make_registry()


@pytest.fixture
def zero_fee_registry() -> PoolRegistry:
    """An empty registry whose pools charge no fee."""
    return make_registry(ZERO_FEE_CONFIG)


@pytest.fixture
def ledger(registry: PoolRegistry) -> TokenLedger:
    """The ledger shared by every pool of `registry`."""
    return registry.ledger


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def router(registry: PoolRegistry, clock: FixedClock) -> Router:
    """A router over `registry` with a fixed clock."""
    return Router(registry, clock=clock)


@pytest.fixture
def empty_three_pool(registry: PoolRegistry) -> Pool:
    """An unseeded A/B/C pool (anchor A)."""
    return registry.create_pool([TOKEN_A, TOKEN_B, TOKEN_C])


@pytest.fixture
def seeded_three_pool(registry: PoolRegistry) -> Pool:
    """A/B/C pool seeded by ALICE with 100 A at the default ratios: (100, 200, 300)."""
    return seed_pool(registry, [TOKEN_A, TOKEN_B, TOKEN_C], {TOKEN_A: 100}, provider=ALICE)


@pytest.fixture
def deep_pair_pool(registry: PoolRegistry) -> Pool:
    """A/B pool with 1000 A and 1000 B (18 decimals), 30 bps fee."""
    return seed_pool(registry, [TOKEN_A, TOKEN_B], {TOKEN_A: 1000 * E18, TOKEN_B: 1000 * E18})
