"""Weighted pool snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

import structlog

from quoter.config import DEFAULT_QUOTE_CONFIG, QuoteConfig
from quoter.constants import MAX_IN_RATIO, MAX_OUT_RATIO
from quoter.errors import ZeroWeightError
from quoter.math.fixed_point import Bfp, mul_down
from quoter.models.amounts import ScaledAmount
from quoter.models.raw import RawWeightedPool
from quoter.models.token import Token

from .base import (
    SwapKind,
    add_swap_fee_amount,
    as_pool_amount,
    check_pool_limit,
    find_token_index,
    parse_wad,
    subtract_swap_fee_amount,
    validate_swap_fee,
)
from .weighted_math import WeightedVersion, calc_in_given_out, calc_out_given_in

logger = structlog.get_logger()


@dataclass(frozen=True)
class WeightedPoolToken:
    """Balance and weight of one weighted pool member.

    Attributes:
        balance: Pool balance of the token
        weight: Normalized weight as 18-decimal fixed point (sum over pool = 1e18)
        index: On-chain position in the pool
    """

    balance: ScaledAmount
    weight: int
    index: int

    @property
    def token(self) -> Token:
        return self.balance.token


@dataclass(frozen=True)
class WeightedPool:
    """Immutable weighted pool state.

    Attributes:
        id: 32-byte pool id
        address: Pool contract address
        swap_fee: Swap fee as 18-decimal fixed point
        pool_tokens: Members sorted by on-chain index
        total_shares: BPT supply (18 decimals)
        version: Pool version, selects the power function variant
    """

    pool_type: ClassVar[str] = "Weighted"

    id: str
    address: str
    swap_fee: int
    pool_tokens: tuple[WeightedPoolToken, ...]
    total_shares: int
    version: WeightedVersion = "v0"

    def __post_init__(self) -> None:
        validate_swap_fee(self.swap_fee)
        for pool_token in self.pool_tokens:
            if pool_token.weight <= 0:
                raise ZeroWeightError(f"Token {pool_token.token} has non-positive weight")

    @classmethod
    def from_raw(cls, raw: RawWeightedPool | dict[str, Any]) -> WeightedPool:
        """Build a snapshot from a pool-state provider record.

        Raises:
            pydantic.ValidationError: If the record is malformed
            ValueError: If a token has no weight
        """
        if not isinstance(raw, RawWeightedPool):
            raw = RawWeightedPool.model_validate(raw)

        pool_tokens = []
        for raw_token in raw.sorted_tokens():
            if raw_token.weight is None:
                raise ValueError(f"Weighted pool {raw.id} token {raw_token.address} has no weight")
            token = raw_token.to_token(raw.chain_id)
            pool_tokens.append(
                WeightedPoolToken(
                    balance=ScaledAmount.from_human(token, raw_token.balance),
                    weight=parse_wad(raw_token.weight, "weight"),
                    index=raw_token.index,
                )
            )

        pool = cls(
            id=raw.id,
            address=raw.address.lower(),
            swap_fee=parse_wad(raw.swap_fee, "swapFee"),
            pool_tokens=tuple(pool_tokens),
            total_shares=parse_wad(raw.total_shares, "totalShares"),
            version="v3Plus" if raw.pool_type_version >= 3 else "v0",
        )
        logger.debug("weighted_pool_loaded", pool_id=pool.id, tokens=len(pool_tokens))
        return pool

    @property
    def tokens(self) -> tuple[Token, ...]:
        return tuple(t.token for t in self.pool_tokens)

    def _pair(
        self, token_in: Token, token_out: Token
    ) -> tuple[WeightedPoolToken, WeightedPoolToken]:
        index_in, index_out = find_token_index(self.tokens, token_in, token_out, self.id)
        return self.pool_tokens[index_in], self.pool_tokens[index_out]

    def normalized_liquidity(self, token_in: Token, token_out: Token) -> int:
        t_in, t_out = self._pair(token_in, token_out)
        return t_in.balance.normalized * t_out.weight // (t_in.weight + t_out.weight)

    def swap_given_in(
        self, token_in: Token, token_out: Token, amount_in: ScaledAmount
    ) -> ScaledAmount:
        """Quote an exact-input swap.

        Raises:
            UnknownToken: If either token is not in the pool
            ExceedsPoolLimit: If the input breaks the 30% ratio or the output
                exceeds the pool balance
        """
        t_in, t_out = self._pair(token_in, token_out)
        amount = as_pool_amount(amount_in, t_in.balance)
        amount_after_fee = subtract_swap_fee_amount(amount, self.swap_fee)

        out_scaled = calc_out_given_in(
            Bfp(t_in.balance.normalized),
            Bfp(t_in.weight),
            Bfp(t_out.balance.normalized),
            Bfp(t_out.weight),
            Bfp(amount_after_fee.normalized),
            version=self.version,
        )
        amount_out = ScaledAmount.from_normalized(t_out.token, out_scaled.value)
        check_pool_limit(amount_out, t_out.balance, self.id)
        return amount_out

    def swap_given_out(
        self, token_in: Token, token_out: Token, amount_out: ScaledAmount
    ) -> ScaledAmount:
        """Quote an exact-output swap.

        Raises:
            UnknownToken: If either token is not in the pool
            ExceedsPoolLimit: If amount_out exceeds the pool balance or the 30% ratio
        """
        t_in, t_out = self._pair(token_in, token_out)
        amount = as_pool_amount(amount_out, t_out.balance)
        check_pool_limit(amount, t_out.balance, self.id)

        in_scaled = calc_in_given_out(
            Bfp(t_in.balance.normalized),
            Bfp(t_in.weight),
            Bfp(t_out.balance.normalized),
            Bfp(t_out.weight),
            Bfp(amount.normalized),
            version=self.version,
        )
        amount_in = ScaledAmount.from_normalized(t_in.token, in_scaled.value, round_up=True)
        return add_swap_fee_amount(amount_in, self.swap_fee)

    def limit_amount(
        self,
        token_in: Token,
        token_out: Token,
        kind: SwapKind,
        config: QuoteConfig = DEFAULT_QUOTE_CONFIG,
    ) -> int:
        """Maximum raw amount accepted by the 30% ratio limits.

        For GIVEN_IN this is the input needed to take 30% of the output
        balance, capped at 30% of the input balance.
        """
        t_in, t_out = self._pair(token_in, token_out)
        max_out = mul_down(t_out.balance.raw, MAX_OUT_RATIO)
        if kind is SwapKind.GIVEN_OUT:
            return max_out

        max_in = mul_down(t_in.balance.raw, MAX_IN_RATIO)
        required_in = self.swap_given_out(
            token_in, token_out, ScaledAmount(t_out.token, max_out)
        ).raw
        return min(max_in, required_in)
