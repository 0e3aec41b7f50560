"""Shared token and pool constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import DAI, USDC
    # or
    from tests.helpers.constants import DAI_TOKEN, USDC_TOKEN
"""

from quoter.models.token import Token

# =============================================================================
# Mainnet tokens
# =============================================================================

WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"  # Wrapped Ether (18 decimals)
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"  # USD Coin (6 decimals)
DAI = "0x6b175474e89094c44da98b954eedeac495271d0f"  # Dai Stablecoin (18 decimals)
USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"  # Tether USD (6 decimals)
BAL = "0xba100000625a3754423978a60c9317c58a424e3d"  # Balancer (18 decimals)
LUSD = "0x5f98805a4e8be255a32880fdec7f6728c6568ba0"  # Liquity USD (18 decimals)
FRAX = "0x853d955acef822db058eb8365a65a7bed6ac7b25"  # Frax (18 decimals)
WADAI = "0x02d60b84491589974263d922d9cc7a3152618ef6"  # Static aDAI (18 decimals)

TOKEN_DECIMALS = {
    WETH: 18,
    USDC: 6,
    DAI: 18,
    USDT: 6,
    BAL: 18,
    LUSD: 18,
    FRAX: 18,
    WADAI: 18,
}

TOKEN_SYMBOLS = {
    WETH: "WETH",
    USDC: "USDC",
    DAI: "DAI",
    USDT: "USDT",
    BAL: "BAL",
    LUSD: "LUSD",
    FRAX: "FRAX",
    WADAI: "waDAI",
}

# =============================================================================
# Token objects (chain 1)
# =============================================================================

WETH_TOKEN = Token(1, WETH, 18, "WETH")
USDC_TOKEN = Token(1, USDC, 6, "USDC")
DAI_TOKEN = Token(1, DAI, 18, "DAI")
USDT_TOKEN = Token(1, USDT, 6, "USDT")
BAL_TOKEN = Token(1, BAL, 18, "BAL")
LUSD_TOKEN = Token(1, LUSD, 18, "LUSD")
FRAX_TOKEN = Token(1, FRAX, 18, "FRAX")
WADAI_TOKEN = Token(1, WADAI, 18, "waDAI")

# =============================================================================
# Pool addresses (the BPT of each pool lives at the pool address)
# =============================================================================

WEIGHTED_POOL = "0x5c6ee304399dbdb9c8ef030ab642b10820db8f56"
STABLE_POOL = "0x79c58f70905f734641735bc61e45c19dd9ad60bc"
LINEAR_POOL = "0x804cdb9116a10bb78768d3252355a1b18067bf8f"

__all__ = [
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "BAL",
    "LUSD",
    "FRAX",
    "WADAI",
    "TOKEN_DECIMALS",
    "TOKEN_SYMBOLS",
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
]
