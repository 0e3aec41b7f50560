"""Protocol constants shared by the pool archetypes."""

from quoter.math.fixed_point import ONE_18

# Stable pool amplification parameters carry three extra decimals on chain
AMP_PRECISION = 1000

# Balances are stored as uint112 by the vault
MAX_UINT112 = 2**112 - 1

# BPT minted to composable stable pools at creation and held as a reserve
PREMINTED_STABLE_BPT = 2**111

# Linear pools premint the full uint112 range (minus one) of BPT
LINEAR_MAX_TOKEN_BALANCE = MAX_UINT112 - 1

# Weighted pool ratio limits (30% of the balance per swap)
MAX_IN_RATIO = 3 * 10**17
MAX_OUT_RATIO = 3 * 10**17

# Newton-Raphson budget for stable invariant and balance solving
STABLE_MAX_ITERATIONS = 255

# Pool ids are 32 bytes; the first 20 are the pool address
POOL_ID_LENGTH = 66

__all__ = [
    "ONE_18",
    "AMP_PRECISION",
    "MAX_UINT112",
    "PREMINTED_STABLE_BPT",
    "LINEAR_MAX_TOKEN_BALANCE",
    "MAX_IN_RATIO",
    "MAX_OUT_RATIO",
    "STABLE_MAX_ITERATIONS",
    "POOL_ID_LENGTH",
]
