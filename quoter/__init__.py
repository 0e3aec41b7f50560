"""Off-chain quoting engine for Balancer-style vault pools."""

from quoter.config import DEFAULT_QUOTE_CONFIG, QuoteConfig, configure_logging
from quoter.models import ScaledAmount, Token
from quoter.pools import LinearPool, StablePool, SwapKind, WeightedPool, pool_from_raw

__version__ = "0.1.0"
__all__ = [
    "Token",
    "ScaledAmount",
    "SwapKind",
    "WeightedPool",
    "StablePool",
    "LinearPool",
    "pool_from_raw",
    "QuoteConfig",
    "DEFAULT_QUOTE_CONFIG",
    "configure_logging",
    "__version__",
]
