"""Composable stable pool snapshot.

The pool's own BPT is one of its tokens. A swap with BPT on one side is a
single-token join or exit, which charges the fee on its taxable part; every
swap also pays the flat swap fee on the input. Stable math always runs on the
balances without the BPT entry.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

import structlog

from quoter.config import DEFAULT_QUOTE_CONFIG, QuoteConfig
from quoter.constants import AMP_PRECISION, PREMINTED_STABLE_BPT
from quoter.errors import ExceedsPoolLimit, InvalidAmount, UnknownToken
from quoter.math.fixed_point import mul_down
from quoter.models.amounts import ScaledAmount
from quoter.models.raw import RawComposableStablePool
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
from .stable_math import (
    calc_bpt_in_given_exact_tokens_out,
    calc_bpt_out_given_exact_tokens_in,
    calc_token_in_given_exact_bpt_out,
    calc_token_out_given_exact_bpt_in,
    stable_calc_in_given_out,
    stable_calc_out_given_in,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class StablePoolToken:
    """One stable pool member.

    Attributes:
        balance: Pool balance, normalized with the token's price rate
        index: On-chain position in the pool
        is_bpt: Whether this entry is the pool's own BPT
    """

    balance: ScaledAmount
    index: int
    is_bpt: bool = False

    @property
    def token(self) -> Token:
        return self.balance.token

    @property
    def rate(self) -> int:
        return self.balance.rate

    @property
    def virtual_balance(self) -> int:
        """Unminted BPT reserve for the BPT entry, the plain balance otherwise."""
        if self.is_bpt:
            return PREMINTED_STABLE_BPT - self.balance.raw
        return self.balance.raw


@dataclass(frozen=True)
class StablePool:
    """Immutable composable stable pool state.

    Attributes:
        id: 32-byte pool id
        address: Pool contract address (also the BPT address)
        amp: Amplification parameter including AMP_PRECISION
        swap_fee: Swap fee as 18-decimal fixed point
        pool_tokens: Members sorted by on-chain index, BPT included
        total_shares: Circulating BPT supply (18 decimals)
    """

    pool_type: ClassVar[str] = "ComposableStable"

    id: str
    address: str
    amp: int
    swap_fee: int
    pool_tokens: tuple[StablePoolToken, ...]
    total_shares: int

    def __post_init__(self) -> None:
        validate_swap_fee(self.swap_fee)
        if self.amp <= 0:
            raise ValueError(f"Amplification must be positive, got {self.amp}")
        bpt_entries = sum(1 for t in self.pool_tokens if t.is_bpt)
        if bpt_entries != 1:
            raise ValueError(f"Stable pool {self.id} must hold exactly one BPT entry")

    @classmethod
    def from_raw(cls, raw: RawComposableStablePool | dict[str, Any]) -> StablePool:
        """Build a snapshot from a pool-state provider record.

        The amp in the record carries no precision; it is scaled by
        AMP_PRECISION here.

        Raises:
            pydantic.ValidationError: If the record is malformed
            ValueError: If a non-BPT token has no price rate
        """
        if not isinstance(raw, RawComposableStablePool):
            raw = RawComposableStablePool.model_validate(raw)

        pool_address = raw.address.lower()
        pool_tokens = []
        for raw_token in raw.sorted_tokens():
            token = raw_token.to_token(raw.chain_id)
            if token.address == pool_address:
                balance = ScaledAmount.from_human(token, raw_token.balance)
                pool_tokens.append(StablePoolToken(balance, raw_token.index, is_bpt=True))
                continue
            if raw_token.price_rate is None:
                raise ValueError(
                    f"Stable pool {raw.id} token {raw_token.address} has no price rate"
                )
            rate = parse_wad(raw_token.price_rate, "priceRate")
            balance = ScaledAmount.from_human(token, raw_token.balance, rate=rate)
            pool_tokens.append(StablePoolToken(balance, raw_token.index))

        pool = cls(
            id=raw.id,
            address=pool_address,
            amp=parse_wad(raw.amp, "amp") // 10**18 * AMP_PRECISION,
            swap_fee=parse_wad(raw.swap_fee, "swapFee"),
            pool_tokens=tuple(pool_tokens),
            total_shares=parse_wad(raw.total_shares, "totalShares"),
        )
        logger.debug("stable_pool_loaded", pool_id=pool.id, tokens=len(pool_tokens), amp=pool.amp)
        return pool

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def tokens(self) -> tuple[Token, ...]:
        return tuple(t.token for t in self.pool_tokens)

    @property
    def bpt_index(self) -> int:
        return next(i for i, t in enumerate(self.pool_tokens) if t.is_bpt)

    @property
    def tokens_no_bpt(self) -> tuple[StablePoolToken, ...]:
        return tuple(t for t in self.pool_tokens if not t.is_bpt)

    def balances_no_bpt(self) -> list[int]:
        """Fresh list of normalized balances, BPT excluded."""
        return [t.balance.normalized for t in self.tokens_no_bpt]

    def _index_no_bpt(self, index: int) -> int:
        return index if index < self.bpt_index else index - 1

    def _pair(self, token_in: Token, token_out: Token) -> tuple[int, int]:
        return find_token_index(self.tokens, token_in, token_out, self.id)

    def normalized_liquidity(self, token_in: Token, token_out: Token) -> int:
        _, index_out = self._pair(token_in, token_out)
        return self.pool_tokens[index_out].balance.normalized * self.amp

    # -------------------------------------------------------------------------
    # Swaps
    # -------------------------------------------------------------------------

    def swap_given_in(
        self, token_in: Token, token_out: Token, amount_in: ScaledAmount
    ) -> ScaledAmount:
        """Quote an exact-input swap, joining or exiting when BPT is involved.

        Raises:
            UnknownToken: If either token is not in the pool
            ExceedsPoolLimit: If the output exceeds the pool balance
            InvariantDidNotConverge: If the stable invariant cannot be solved
        """
        index_in, index_out = self._pair(token_in, token_out)
        t_in, t_out = self.pool_tokens[index_in], self.pool_tokens[index_out]
        amount = subtract_swap_fee_amount(as_pool_amount(amount_in, t_in.balance), self.swap_fee)
        balances = self.balances_no_bpt()

        if t_in.is_bpt:
            out_scaled = calc_token_out_given_exact_bpt_in(
                self.amp,
                balances,
                self._index_no_bpt(index_out),
                amount.normalized,
                self.total_shares,
                self.swap_fee,
            )
        elif t_out.is_bpt:
            amounts_in = [0] * len(balances)
            amounts_in[self._index_no_bpt(index_in)] = amount.normalized
            out_scaled = calc_bpt_out_given_exact_tokens_in(
                self.amp, balances, amounts_in, self.total_shares, self.swap_fee
            )
        else:
            out_scaled = stable_calc_out_given_in(
                self.amp,
                balances,
                self._index_no_bpt(index_in),
                self._index_no_bpt(index_out),
                amount.normalized,
            )

        amount_out = ScaledAmount.from_normalized(t_out.token, out_scaled, rate=t_out.rate)
        check_pool_limit(amount_out, t_out.balance, self.id)
        return amount_out

    def swap_given_out(
        self, token_in: Token, token_out: Token, amount_out: ScaledAmount
    ) -> ScaledAmount:
        """Quote an exact-output swap, joining or exiting when BPT is involved.

        Raises:
            UnknownToken: If either token is not in the pool
            ExceedsPoolLimit: If amount_out exceeds the pool balance
            InvariantDidNotConverge: If the stable invariant cannot be solved
        """
        index_in, index_out = self._pair(token_in, token_out)
        t_in, t_out = self.pool_tokens[index_in], self.pool_tokens[index_out]
        amount = as_pool_amount(amount_out, t_out.balance)
        check_pool_limit(amount, t_out.balance, self.id)
        balances = self.balances_no_bpt()

        if t_in.is_bpt:
            amounts_out = [0] * len(balances)
            amounts_out[self._index_no_bpt(index_out)] = amount.normalized
            in_scaled = calc_bpt_in_given_exact_tokens_out(
                self.amp, balances, amounts_out, self.total_shares, self.swap_fee
            )
        elif t_out.is_bpt:
            in_scaled = calc_token_in_given_exact_bpt_out(
                self.amp,
                balances,
                self._index_no_bpt(index_in),
                amount.normalized,
                self.total_shares,
                self.swap_fee,
            )
        else:
            in_scaled = stable_calc_in_given_out(
                self.amp,
                balances,
                self._index_no_bpt(index_in),
                self._index_no_bpt(index_out),
                amount.normalized,
            )

        amount_in = ScaledAmount.from_normalized(
            t_in.token, in_scaled, round_up=True, rate=t_in.rate
        )
        return add_swap_fee_amount(amount_in, self.swap_fee)

    def limit_amount(
        self,
        token_in: Token,
        token_out: Token,
        kind: SwapKind,
        config: QuoteConfig = DEFAULT_QUOTE_CONFIG,
    ) -> int:
        """Conservative maximum raw amount for a swap on this pool.

        Exact-in limits are derived from the input needed to take almost all
        of the output balance. Minting BPT has no such bound, so almost all of
        the input balance is used instead; buying an exact amount of BPT is
        bounded by a multiple of the circulating supply. When the exit fee makes
        almost all of the output unreachable, the BPT worth that much at the
        pool's average price is used.
        """
        index_in, index_out = self._pair(token_in, token_out)
        t_in, t_out = self.pool_tokens[index_in], self.pool_tokens[index_out]

        if kind is SwapKind.GIVEN_OUT:
            if t_out.is_bpt:
                return mul_down(self.total_shares, config.bpt_max_ratio)
            return mul_down(t_out.balance.raw, config.almost_one)

        if t_out.is_bpt:
            return mul_down(t_in.balance.raw, config.almost_one)
        max_out = ScaledAmount(
            t_out.token, mul_down(t_out.balance.raw, config.almost_one), t_out.rate
        )
        try:
            return self.swap_given_out(token_in, token_out, max_out).raw
        except ExceedsPoolLimit:
            if not t_in.is_bpt:
                raise
        logger.debug("stable_limit_from_bpt_share", pool_id=self.id, token=token_out.address)
        share = t_out.balance.normalized * self.total_shares // sum(self.balances_no_bpt())
        bpt_in = ScaledAmount.from_normalized(t_in.token, mul_down(share, config.almost_one))
        return bpt_in.raw

    # -------------------------------------------------------------------------
    # Multi-token joins and exits
    # -------------------------------------------------------------------------

    def _amounts_by_index(self, amounts: Sequence[ScaledAmount]) -> list[ScaledAmount | None]:
        members = self.tokens_no_bpt
        by_index: list[ScaledAmount | None] = [None] * len(members)
        for amount in amounts:
            index = next((i for i, t in enumerate(members) if t.token == amount.token), -1)
            if index < 0:
                logger.debug(
                    "stable_pool_token_not_found", pool_id=self.id, token=amount.token.address
                )
                raise UnknownToken(f"Pool {self.id} does not contain token {amount.token.address}")
            if by_index[index] is not None:
                raise InvalidAmount(f"Duplicate amount for {amount.token}")
            by_index[index] = as_pool_amount(amount, members[index].balance)
        return by_index

    def join_given_in(self, amounts_in: Sequence[ScaledAmount]) -> ScaledAmount:
        """BPT minted for an exact (possibly unbalanced) deposit.

        Tokens left out of amounts_in contribute nothing.

        Raises:
            UnknownToken: If an amount is in a token that is not a pool member
            InvalidAmount: If a token appears twice
        """
        by_index = self._amounts_by_index(amounts_in)
        bpt_out = calc_bpt_out_given_exact_tokens_in(
            self.amp,
            self.balances_no_bpt(),
            [a.normalized if a is not None else 0 for a in by_index],
            self.total_shares,
            self.swap_fee,
        )
        bpt = self.pool_tokens[self.bpt_index]
        return ScaledAmount.from_normalized(bpt.token, bpt_out)

    def exit_given_out(self, amounts_out: Sequence[ScaledAmount]) -> ScaledAmount:
        """BPT burned for an exact (possibly unbalanced) withdrawal.

        Raises:
            UnknownToken: If an amount is in a token that is not a pool member
            InvalidAmount: If a token appears twice
            ExceedsPoolLimit: If an amount would empty its balance
        """
        by_index = self._amounts_by_index(amounts_out)
        for amount, member in zip(by_index, self.tokens_no_bpt):
            if amount is not None:
                check_pool_limit(amount, member.balance, self.id)
        bpt_in = calc_bpt_in_given_exact_tokens_out(
            self.amp,
            self.balances_no_bpt(),
            [a.normalized if a is not None else 0 for a in by_index],
            self.total_shares,
            self.swap_fee,
        )
        bpt = self.pool_tokens[self.bpt_index]
        return ScaledAmount.from_normalized(bpt.token, bpt_in, round_up=True)
