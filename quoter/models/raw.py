"""Pydantic models for raw pool records.

These mirror the pool-state provider's JSON (camelCase keys, human-readable
decimal strings for balances, fees and rates). Snapshots are built from them
by the ``from_raw`` factories in ``quoter.pools``.
"""

from pydantic import BaseModel, Field
from typing_extensions import NotRequired, TypedDict

from quoter.models.token import Token
from quoter.models.types import Address, DecimalString, PoolId


class RawPoolTokenDict(TypedDict):
    """Token entry of a raw pool record as plain JSON."""

    address: str
    index: int
    decimals: int
    balance: str
    symbol: NotRequired[str]
    name: NotRequired[str]
    priceRate: NotRequired[str]
    weight: NotRequired[str]


class RawPoolDict(TypedDict):
    """Raw pool record as plain JSON; archetype fields ride along as extras."""

    id: str
    poolType: str
    swapFee: str
    totalShares: str
    tokens: list[RawPoolTokenDict]
    address: NotRequired[str]
    poolTypeVersion: NotRequired[int]
    chainId: NotRequired[int]


class RawPoolToken(BaseModel):
    """One pool member as reported by the pool-state provider."""

    address: Address
    index: int = Field(ge=0, description="On-chain position in the pool's token list.")
    decimals: int = Field(ge=0, le=18)
    symbol: str | None = None
    name: str | None = None
    balance: DecimalString = Field(description="Pool balance in human units.")
    price_rate: DecimalString | None = Field(
        default=None,
        alias="priceRate",
        description="Rate provider value, 1.0 for plain tokens.",
    )
    weight: DecimalString | None = Field(
        default=None,
        description="Normalized weight (weighted pools only).",
    )

    model_config = {"populate_by_name": True}

    def to_token(self, chain_id: int) -> Token:
        return Token(chain_id, self.address, self.decimals, self.symbol, self.name)


class RawPool(BaseModel):
    """Fields common to every pool archetype."""

    id: PoolId
    address: Address
    pool_type: str = Field(alias="poolType")
    pool_type_version: int = Field(default=1, alias="poolTypeVersion")
    chain_id: int = Field(default=1, alias="chainId")
    swap_fee: DecimalString = Field(alias="swapFee")
    total_shares: DecimalString = Field(alias="totalShares")
    tokens: list[RawPoolToken]

    model_config = {"extra": "allow", "populate_by_name": True}

    def sorted_tokens(self) -> list[RawPoolToken]:
        """Tokens in ascending on-chain index order."""
        return sorted(self.tokens, key=lambda t: t.index)


class RawWeightedPool(RawPool):
    """Weighted pool record. Every token must carry a weight."""

    pass


class RawComposableStablePool(RawPool):
    """Composable stable pool record; the pool's BPT is one of the tokens."""

    amp: DecimalString = Field(description="Amplification parameter without precision.")


class RawLinearPool(RawPool):
    """Linear pool record (main, wrapped and BPT tokens)."""

    main_index: int = Field(ge=0, alias="mainIndex")
    wrapped_index: int = Field(ge=0, alias="wrappedIndex")
    lower_target: DecimalString = Field(alias="lowerTarget")
    upper_target: DecimalString = Field(alias="upperTarget")
