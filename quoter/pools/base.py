"""Pool abstraction shared by every archetype.

Each archetype is a frozen dataclass implementing the ``Pool`` protocol, so
callers can quote any snapshot the same way. The helpers below carry the
behaviour that is identical across archetypes: token lookup, swap fee
application and balance limit checks.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Protocol, runtime_checkable

import structlog

from quoter.config import DEFAULT_QUOTE_CONFIG, QuoteConfig
from quoter.errors import (
    ExceedsPoolLimit,
    InvalidAmount,
    InvalidFeeError,
    SameTokenSwap,
    UnknownToken,
)
from quoter.math.fixed_point import ONE_18, complement
from quoter.models.amounts import ScaledAmount
from quoter.models.token import Token

logger = structlog.get_logger()


class SwapKind(str, Enum):
    """Which side of the swap the caller fixes."""

    GIVEN_IN = "givenIn"
    GIVEN_OUT = "givenOut"


@runtime_checkable
class Pool(Protocol):
    """Quoting interface implemented by every pool snapshot.

    All methods are pure functions of the snapshot and their arguments.
    """

    id: str
    address: str

    @property
    def tokens(self) -> tuple[Token, ...]:
        """Pool members in on-chain index order."""
        ...

    def normalized_liquidity(self, token_in: Token, token_out: Token) -> int:
        """Liquidity estimate for ranking pools on a pair (18 decimals)."""
        ...

    def swap_given_in(
        self, token_in: Token, token_out: Token, amount_in: ScaledAmount
    ) -> ScaledAmount:
        """Amount of token_out received for exactly amount_in of token_in."""
        ...

    def swap_given_out(
        self, token_in: Token, token_out: Token, amount_out: ScaledAmount
    ) -> ScaledAmount:
        """Amount of token_in required to receive exactly amount_out of token_out."""
        ...

    def limit_amount(
        self,
        token_in: Token,
        token_out: Token,
        kind: SwapKind,
        config: QuoteConfig = DEFAULT_QUOTE_CONFIG,
    ) -> int:
        """Conservative maximum raw amount tradeable for the given swap kind."""
        ...


# =============================================================================
# Helpers
# =============================================================================


def parse_wad(value: str | Decimal, field: str = "value") -> int:
    """Parse a human decimal ("0.003") into an 18-decimal integer, rounding down.

    Raises:
        ValueError: If value is not a finite decimal
    """
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as err:
        raise ValueError(f"Invalid {field}: '{value}'") from err
    if not parsed.is_finite():
        raise ValueError(f"Invalid {field}: '{value}'")
    with localcontext() as ctx:
        ctx.prec = 100
        return int(parsed.scaleb(18))


def validate_swap_fee(swap_fee: int) -> int:
    """Check the fee is a WAD value in [0, 1).

    Raises:
        InvalidFeeError: If swap_fee is out of range
    """
    if swap_fee < 0 or swap_fee >= ONE_18:
        raise InvalidFeeError(f"Swap fee must be in range [0, 1), got {swap_fee}")
    return swap_fee


def find_token_index(
    tokens: Sequence[Token],
    token_in: Token,
    token_out: Token,
    pool_id: str,
) -> tuple[int, int]:
    """Locate both swap tokens in a pool.

    Returns:
        Tuple of (index_in, index_out)

    Raises:
        SameTokenSwap: If token_in == token_out
        UnknownToken: If either token is not in the pool
    """
    if token_in == token_out:
        logger.debug("pool_self_swap", pool_id=pool_id, token=token_in.address)
        raise SameTokenSwap(f"Cannot swap {token_in} with itself")

    index_in = index_out = -1
    for i, token in enumerate(tokens):
        if token == token_in:
            index_in = i
        elif token == token_out:
            index_out = i

    for index, token, role in ((index_in, token_in, "input"), (index_out, token_out, "output")):
        if index < 0:
            logger.debug("pool_token_not_found", pool_id=pool_id, token=token.address, role=role)
            raise UnknownToken(f"Pool {pool_id} does not contain token {token.address}")

    return index_in, index_out


def subtract_swap_fee_amount(amount: ScaledAmount, swap_fee: int) -> ScaledAmount:
    """Subtract the swap fee from an exact input amount.

    The fee is rounded up, so the amount entering the math rounds down.
    """
    fee_amount = amount.mul_up_fixed(swap_fee)
    return amount.sub(fee_amount)


def add_swap_fee_amount(amount: ScaledAmount, swap_fee: int) -> ScaledAmount:
    """Gross up a computed input amount by the swap fee: amount / (1 - fee), rounded up."""
    return amount.div_up_fixed(complement(swap_fee))


def check_pool_limit(amount: ScaledAmount, balance: ScaledAmount, pool_id: str) -> None:
    """Raise if amount takes more than the pool's held balance of the token.

    Raises:
        ExceedsPoolLimit: If amount.raw > balance.raw
    """
    if amount.raw > balance.raw:
        logger.debug(
            "pool_limit_exceeded",
            pool_id=pool_id,
            token=amount.token.address,
            amount=amount.raw,
            balance=balance.raw,
        )
        raise ExceedsPoolLimit(
            f"Amount {amount.raw} exceeds pool {pool_id} balance {balance.raw} of {amount.token}"
        )


def as_pool_amount(amount: ScaledAmount, balance: ScaledAmount) -> ScaledAmount:
    """Re-express a caller amount with the rate the pool applies to that token.

    Raises:
        InvalidAmount: If amount is denominated in a different token
    """
    if amount.token != balance.token:
        raise InvalidAmount(f"Amount is in {amount.token}, expected {balance.token}")
    if amount.rate == balance.rate:
        return amount
    return amount.with_rate(balance.rate)
