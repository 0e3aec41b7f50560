"""Test helpers module for shared test utilities.

- constants: Token addresses, Token objects and pool addresses
- factories: Raw pool records and snapshot factories
"""

from tests.helpers.constants import (
    BAL,
    BAL_TOKEN,
    DAI,
    DAI_TOKEN,
    FRAX,
    FRAX_TOKEN,
    LINEAR_POOL,
    LUSD,
    LUSD_TOKEN,
    STABLE_POOL,
    TOKEN_DECIMALS,
    USDC,
    USDC_TOKEN,
    USDT,
    USDT_TOKEN,
    WADAI,
    WADAI_TOKEN,
    WEIGHTED_POOL,
    WETH,
    WETH_TOKEN,
)
from tests.helpers.factories import (
    human,
    make_linear_pool,
    make_linear_record,
    make_pool_id,
    make_stable_pool,
    make_stable_record,
    make_weighted_pool,
    make_weighted_record,
    to_wei,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "BAL",
    "LUSD",
    "FRAX",
    "WADAI",
    "TOKEN_DECIMALS",
    "WETH_TOKEN",
    "USDC_TOKEN",
    "DAI_TOKEN",
    "USDT_TOKEN",
    "BAL_TOKEN",
    "LUSD_TOKEN",
    "FRAX_TOKEN",
    "WADAI_TOKEN",
    "WEIGHTED_POOL",
    "STABLE_POOL",
    "LINEAR_POOL",
    # Factories
    "human",
    "to_wei",
    "make_pool_id",
    "make_weighted_record",
    "make_weighted_pool",
    "make_stable_record",
    "make_stable_pool",
    "make_linear_record",
    "make_linear_pool",
]
