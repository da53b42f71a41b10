"""Protocol constants for the multi-token exchange.

Centralizes the fee and sizing parameters shared by pools, the registry
and the router. Token amounts are integers in 18-decimal fixed point.
"""

# Fees are expressed in basis points over this denominator (30 / 10_000 = 0.3%)
FEE_DENOMINATOR = 10_000

# Fee charged by newly created pools
DEFAULT_TRADING_FEE_BPS = 30

# Ceiling accepted by Pool.set_trading_fee (1%)
MAX_TRADING_FEE_BPS = 100

# Seeding ratios for the non-anchor tokens of an empty pool, relative to the
# anchor (first) token. A 3-token pool seeded with 100 anchor gets (100, 200, 300).
INITIAL_RATIOS = (2, 3)

# Pools hold between two and three tokens
MIN_POOL_TOKENS = 2
MAX_POOL_TOKENS = 3

# Router search depth (direct and single-intermediate paths only)
MAX_ROUTE_HOPS = 2

# Ledger account that holds intermediate amounts between router hops
ROUTER_ACCOUNT = "0x" + "00" * 19 + "01"
