"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token and account addresses, common amounts
- factories: Registry, funding and pool-seeding helpers
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    E18,
    NOW,
    OWNER,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    TOKEN_D,
)
from tests.helpers.factories import (
    ZERO_FEE_CONFIG,
    FixedClock,
    fund,
    make_registry,
    seed_pool,
)

__all__ = [
    # Constants
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "TOKEN_D",
    "ALICE",
    "BOB",
    "CAROL",
    "OWNER",
    "E18",
    "NOW",
    # Factories
    "ZERO_FEE_CONFIG",
    "FixedClock",
    "fund",
    "make_registry",
    "seed_pool",
]
