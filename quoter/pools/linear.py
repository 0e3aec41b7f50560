"""Linear pool snapshot.

Three members: the main token, its wrapped rate-bearing version and the
pool's BPT. Each (token_in, token_out) pair maps to one closed-form function
in ``linear_math``; the swap fee is already part of the nominal balance
mapping, so no flat fee is charged here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

import structlog

from quoter.config import DEFAULT_QUOTE_CONFIG, QuoteConfig
from quoter.constants import LINEAR_MAX_TOKEN_BALANCE
from quoter.errors import OutOfBounds
from quoter.math.fixed_point import ONE_18, mul_down
from quoter.models.amounts import ScaledAmount
from quoter.models.raw import RawLinearPool
from quoter.models.token import Token

from . import linear_math
from .base import (
    SwapKind,
    as_pool_amount,
    check_pool_limit,
    find_token_index,
    parse_wad,
    validate_swap_fee,
)
from .linear_math import LinearParams

logger = structlog.get_logger()


class LinearTokenRole(str, Enum):
    MAIN = "main"
    WRAPPED = "wrapped"
    BPT = "bpt"


_MAIN, _WRAPPED, _BPT = LinearTokenRole.MAIN, LinearTokenRole.WRAPPED, LinearTokenRole.BPT


@dataclass(frozen=True)
class LinearPoolToken:
    """One linear pool member.

    Attributes:
        balance: Pool balance (the wrapped token carries its rate)
        index: On-chain position in the pool
        role: Main, wrapped or BPT
    """

    balance: ScaledAmount
    index: int
    role: LinearTokenRole

    @property
    def token(self) -> Token:
        return self.balance.token

    @property
    def rate(self) -> int:
        return self.balance.rate

    @property
    def virtual_balance(self) -> int:
        """Circulating BPT for the BPT entry, the plain balance otherwise."""
        if self.role is LinearTokenRole.BPT:
            return LINEAR_MAX_TOKEN_BALANCE - self.balance.raw
        return self.balance.raw


@dataclass(frozen=True)
class LinearPool:
    """Immutable linear pool state.

    Attributes:
        id: 32-byte pool id
        address: Pool contract address (also the BPT address)
        swap_fee: Fee charged outside the target band, 18-decimal fixed point
        main: Main token entry
        wrapped: Wrapped token entry
        bpt: BPT entry
        lower_target: Lower main balance target (normalized, 18 decimals)
        upper_target: Upper main balance target (normalized, 18 decimals)
        pool_type_version: Factory version of the pool
    """

    pool_type: ClassVar[str] = "Linear"

    id: str
    address: str
    swap_fee: int
    main: LinearPoolToken
    wrapped: LinearPoolToken
    bpt: LinearPoolToken
    lower_target: int
    upper_target: int
    pool_type_version: int = 1

    def __post_init__(self) -> None:
        validate_swap_fee(self.swap_fee)
        if self.lower_target < 0 or self.upper_target < self.lower_target:
            raise ValueError(
                f"Invalid linear targets: lower={self.lower_target} upper={self.upper_target}"
            )

    @classmethod
    def from_raw(cls, raw: RawLinearPool | dict[str, Any]) -> LinearPool:
        """Build a snapshot from a pool-state provider record.

        Targets are given in main token units. A wrapped token without a
        price rate gets a rate of 1.

        Raises:
            pydantic.ValidationError: If the record is malformed
            ValueError: If the indices or the BPT entry are inconsistent
        """
        if not isinstance(raw, RawLinearPool):
            raw = RawLinearPool.model_validate(raw)

        ordered = raw.sorted_tokens()
        pool_address = raw.address.lower()
        bpt_position = next(
            (i for i, t in enumerate(ordered) if t.address.lower() == pool_address), -1
        )
        positions = {raw.main_index, raw.wrapped_index, bpt_position}
        if bpt_position < 0 or len(positions) != 3 or max(positions) >= len(ordered):
            raise ValueError(
                f"Linear pool {raw.id} needs distinct main, wrapped and BPT entries"
            )

        def build(position: int, role: LinearTokenRole, rate: int) -> LinearPoolToken:
            raw_token = ordered[position]
            token = raw_token.to_token(raw.chain_id)
            balance = ScaledAmount.from_human(token, raw_token.balance, rate=rate)
            return LinearPoolToken(balance, raw_token.index, role)

        wrapped_rate = parse_wad(ordered[raw.wrapped_index].price_rate or "1.0", "priceRate")
        main = build(raw.main_index, LinearTokenRole.MAIN, ONE_18)
        pool = cls(
            id=raw.id,
            address=pool_address,
            swap_fee=parse_wad(raw.swap_fee, "swapFee"),
            main=main,
            wrapped=build(raw.wrapped_index, LinearTokenRole.WRAPPED, wrapped_rate),
            bpt=build(bpt_position, LinearTokenRole.BPT, ONE_18),
            lower_target=ScaledAmount.from_human(main.token, raw.lower_target).normalized,
            upper_target=ScaledAmount.from_human(main.token, raw.upper_target).normalized,
            pool_type_version=raw.pool_type_version,
        )
        logger.debug(
            "linear_pool_loaded",
            pool_id=pool.id,
            lower_target=pool.lower_target,
            upper_target=pool.upper_target,
            wrapped_rate=wrapped_rate,
        )
        return pool

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def params(self) -> LinearParams:
        return LinearParams(self.swap_fee, self.lower_target, self.upper_target)

    @property
    def pool_tokens(self) -> tuple[LinearPoolToken, ...]:
        return tuple(sorted((self.main, self.wrapped, self.bpt), key=lambda t: t.index))

    @property
    def tokens(self) -> tuple[Token, ...]:
        return tuple(t.token for t in self.pool_tokens)

    def _pair(self, token_in: Token, token_out: Token) -> tuple[LinearPoolToken, LinearPoolToken]:
        members = self.pool_tokens
        index_in, index_out = find_token_index(self.tokens, token_in, token_out, self.id)
        return members[index_in], members[index_out]

    def normalized_liquidity(self, token_in: Token, token_out: Token) -> int:
        _, t_out = self._pair(token_in, token_out)
        return t_out.balance.normalized

    # -------------------------------------------------------------------------
    # Swaps
    # -------------------------------------------------------------------------

    def _calc_given_in(
        self, role_in: LinearTokenRole, role_out: LinearTokenRole, amount: int
    ) -> int:
        main = self.main.balance.normalized
        wrapped = self.wrapped.balance.normalized
        supply = self.bpt.virtual_balance
        params = self.params
        if (role_in, role_out) == (_MAIN, _WRAPPED):
            return linear_math.calc_wrapped_out_per_main_in(amount, main, params)
        if (role_in, role_out) == (_MAIN, _BPT):
            return linear_math.calc_bpt_out_per_main_in(amount, main, wrapped, supply, params)
        if (role_in, role_out) == (_WRAPPED, _MAIN):
            return linear_math.calc_main_out_per_wrapped_in(amount, main, params)
        if (role_in, role_out) == (_WRAPPED, _BPT):
            return linear_math.calc_bpt_out_per_wrapped_in(amount, main, wrapped, supply, params)
        if (role_in, role_out) == (_BPT, _MAIN):
            return linear_math.calc_main_out_per_bpt_in(amount, main, wrapped, supply, params)
        return linear_math.calc_wrapped_out_per_bpt_in(amount, main, wrapped, supply, params)

    def _calc_given_out(
        self, role_in: LinearTokenRole, role_out: LinearTokenRole, amount: int
    ) -> int:
        main = self.main.balance.normalized
        wrapped = self.wrapped.balance.normalized
        supply = self.bpt.virtual_balance
        params = self.params
        if (role_in, role_out) == (_MAIN, _WRAPPED):
            return linear_math.calc_main_in_per_wrapped_out(amount, main, params)
        if (role_in, role_out) == (_MAIN, _BPT):
            return linear_math.calc_main_in_per_bpt_out(amount, main, wrapped, supply, params)
        if (role_in, role_out) == (_WRAPPED, _MAIN):
            return linear_math.calc_wrapped_in_per_main_out(amount, main, params)
        if (role_in, role_out) == (_WRAPPED, _BPT):
            return linear_math.calc_wrapped_in_per_bpt_out(amount, main, wrapped, supply, params)
        if (role_in, role_out) == (_BPT, _MAIN):
            return linear_math.calc_bpt_in_per_main_out(amount, main, wrapped, supply, params)
        return linear_math.calc_bpt_in_per_wrapped_out(amount, main, wrapped, supply, params)

    def swap_given_in(
        self, token_in: Token, token_out: Token, amount_in: ScaledAmount
    ) -> ScaledAmount:
        """Quote an exact-input swap.

        Raises:
            UnknownToken: If either token is not in the pool
            ExceedsPoolLimit: If the output exceeds the pool balance
            OutOfBounds: If the main balance would jump across the target band
        """
        t_in, t_out = self._pair(token_in, token_out)
        amount = as_pool_amount(amount_in, t_in.balance)
        out_scaled = self._calc_given_in(t_in.role, t_out.role, amount.normalized)
        amount_out = ScaledAmount.from_normalized(t_out.token, out_scaled, rate=t_out.rate)
        check_pool_limit(amount_out, t_out.balance, self.id)
        return amount_out

    def swap_given_out(
        self, token_in: Token, token_out: Token, amount_out: ScaledAmount
    ) -> ScaledAmount:
        """Quote an exact-output swap.

        Raises:
            UnknownToken: If either token is not in the pool
            ExceedsPoolLimit: If amount_out exceeds the pool balance
            OutOfBounds: If the main balance would jump across the target band
        """
        t_in, t_out = self._pair(token_in, token_out)
        amount = as_pool_amount(amount_out, t_out.balance)
        check_pool_limit(amount, t_out.balance, self.id)
        in_scaled = self._calc_given_out(t_in.role, t_out.role, amount.normalized)
        return ScaledAmount.from_normalized(t_in.token, in_scaled, round_up=True, rate=t_in.rate)

    def limit_amount(
        self,
        token_in: Token,
        token_out: Token,
        kind: SwapKind,
        config: QuoteConfig = DEFAULT_QUOTE_CONFIG,
    ) -> int:
        """Conservative maximum raw amount for a swap on this pool.

        Minting BPT is only bounded by the preminted supply, which is used as
        the exact-in estimate; exact-out BPT is bounded by a multiple of the
        pool's BPT balance. When taking almost all of the output would carry
        the main balance across the whole target band, the bound stops at the
        far target instead.
        """
        t_in, t_out = self._pair(token_in, token_out)
        is_bpt_out = t_out.role is LinearTokenRole.BPT

        if kind is SwapKind.GIVEN_OUT:
            ratio = config.bpt_max_ratio if is_bpt_out else config.almost_one
            return mul_down(t_out.balance.raw, ratio)

        if is_bpt_out:
            return LINEAR_MAX_TOKEN_BALANCE
        max_out = ScaledAmount(
            t_out.token, mul_down(t_out.balance.raw, config.almost_one), t_out.rate
        )
        try:
            return self.swap_given_out(token_in, token_out, max_out).raw
        except OutOfBounds:
            logger.debug("linear_limit_at_band_edge", pool_id=self.id, token=token_out.address)
        return self._band_edge_limit(token_in, token_out)

    def _band_edge_limit(self, token_in: Token, token_out: Token) -> int:
        """Exact-in bound that moves the main balance only as far as the opposite target."""
        main = self.main.balance.normalized
        if token_out == self.main.token:
            main_out = ScaledAmount.from_normalized(token_out, main - self.lower_target)
            return self.swap_given_out(token_in, token_out, main_out).raw
        return ScaledAmount.from_normalized(token_in, self.upper_target - main).raw
