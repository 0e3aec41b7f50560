"""Pool snapshots and their math.

Pool types supported:
- Weighted (v0 and v3Plus power functions)
- Composable stable (StableSwap, BPT as a member)
- Linear (main / wrapped / BPT with a target band)
"""

# Shared interface
from .base import Pool, SwapKind

# Linear pools
from .linear import LinearPool, LinearPoolToken, LinearTokenRole
from .linear_math import LinearParams

# Proportional joins and exits
from .liquidity import (
    bpt_token,
    proportional_amounts_for_reference,
    proportional_amounts_in,
    proportional_amounts_out,
)

# Dispatch
from .registry import AnyPool, pool_from_raw, pools_from_raw, supported_pool_types

# Stable pools
from .stable import StablePool, StablePoolToken
from .stable_math import (
    calc_bpt_in_given_exact_tokens_out,
    calc_bpt_out_given_exact_tokens_in,
    calc_token_in_given_exact_bpt_out,
    calc_token_out_given_exact_bpt_in,
    calculate_invariant,
    get_token_balance_given_invariant_and_all_other_balances,
    stable_calc_in_given_out,
    stable_calc_out_given_in,
)

# Weighted pools
from .weighted import WeightedPool, WeightedPoolToken
from .weighted_math import calc_in_given_out, calc_out_given_in

__all__ = [
    # Interface
    "Pool",
    "SwapKind",
    "AnyPool",
    "pool_from_raw",
    "pools_from_raw",
    "supported_pool_types",
    # Weighted
    "WeightedPool",
    "WeightedPoolToken",
    "calc_out_given_in",
    "calc_in_given_out",
    # Stable
    "StablePool",
    "StablePoolToken",
    "calculate_invariant",
    "get_token_balance_given_invariant_and_all_other_balances",
    "stable_calc_out_given_in",
    "stable_calc_in_given_out",
    "calc_bpt_out_given_exact_tokens_in",
    "calc_token_in_given_exact_bpt_out",
    "calc_bpt_in_given_exact_tokens_out",
    "calc_token_out_given_exact_bpt_in",
    # Linear
    "LinearPool",
    "LinearPoolToken",
    "LinearTokenRole",
    "LinearParams",
    # Liquidity
    "bpt_token",
    "proportional_amounts_in",
    "proportional_amounts_out",
    "proportional_amounts_for_reference",
]
