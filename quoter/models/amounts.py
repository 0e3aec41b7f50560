"""Token amounts in native and 18-decimal normalized space.

A ScaledAmount keeps the raw on-chain integer and derives the normalized value
the pool math runs on:

    normalized = raw * 10^(18 - decimals) * rate // 10^18

``rate`` is 1e18 for plain tokens and the exchange rate for rate-bearing ones
(wrapped yield assets, nested pool tokens). Going back from normalized to raw
truncates, so the caller must say which way to round: amounts the pool pays
out round down, amounts the pool receives round up.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from quoter.errors import InsufficientAmount, InvalidAmount
from quoter.math.fixed_point import ONE_18, div_down, div_up, mul_down, mul_up
from quoter.models.token import Token


@dataclass(frozen=True)
class ScaledAmount:
    """Immutable amount of a token.

    Attributes:
        token: The token this amount is denominated in
        raw: Amount in the token's native decimals
        rate: 18-decimal exchange rate applied on normalization
    """

    token: Token
    raw: int
    rate: int = ONE_18

    def __post_init__(self) -> None:
        if isinstance(self.raw, bool) or not isinstance(self.raw, int):
            raise InvalidAmount(f"Raw amount must be an int, got {type(self.raw).__name__}")
        if self.raw < 0:
            raise InvalidAmount(f"Raw amount cannot be negative: {self.raw}")
        if self.rate <= 0:
            raise InvalidAmount(f"Rate must be positive, got {self.rate}")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_raw(cls, token: Token, raw: int, rate: int = ONE_18) -> ScaledAmount:
        return cls(token, raw, rate)

    @classmethod
    def from_human(
        cls, token: Token, amount: str | int | Decimal, rate: int = ONE_18
    ) -> ScaledAmount:
        """Parse a human-readable amount ("1.5") into raw units.

        Digits beyond the token's precision are rounded half up.

        Raises:
            InvalidAmount: If the string is not a finite non-negative decimal
        """
        try:
            parsed = Decimal(str(amount).strip())
        except InvalidOperation as err:
            raise InvalidAmount(f"Not a decimal amount: '{amount}'") from err
        if not parsed.is_finite() or parsed < 0:
            raise InvalidAmount(f"Amount must be finite and non-negative: '{amount}'")

        with localcontext() as ctx:
            ctx.prec = 100
            raw = parsed.scaleb(token.decimals).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return cls(token, int(raw), rate)

    @classmethod
    def from_normalized(
        cls,
        token: Token,
        normalized: int,
        round_up: bool = False,
        rate: int = ONE_18,
    ) -> ScaledAmount:
        """Convert an 18-decimal normalized amount back to raw units.

        Args:
            token: Token to denominate the result in
            normalized: Normalized amount (rate applied)
            round_up: Round the raw amount up instead of down
            rate: Rate the normalized amount was computed with

        Raises:
            InvalidAmount: If normalized is negative or rate is not positive
        """
        if normalized < 0:
            raise InvalidAmount(f"Normalized amount cannot be negative: {normalized}")
        if rate <= 0:
            raise InvalidAmount(f"Rate must be positive, got {rate}")

        numerator = normalized * ONE_18
        denominator = 10 ** (18 - token.decimals) * rate
        if round_up and numerator > 0:
            raw = (numerator - 1) // denominator + 1
        else:
            raw = numerator // denominator
        return cls(token, raw, rate)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def scalar(self) -> int:
        """Factor lifting native decimals to 18 decimals."""
        return 10 ** (18 - self.token.decimals)

    @property
    def normalized(self) -> int:
        """Amount in 18-decimal space with the rate applied (rounded down)."""
        return self.raw * self.scalar * self.rate // ONE_18

    def to_raw(self) -> int:
        return self.raw

    def to_human(self) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = 100
            return Decimal(self.raw).scaleb(-self.token.decimals)

    def with_rate(self, rate: int) -> ScaledAmount:
        """Same raw amount normalized with a different rate."""
        return ScaledAmount(self.token, self.raw, rate)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def _check_same_token(self, other: ScaledAmount) -> None:
        if other.token != self.token:
            raise InvalidAmount(f"Cannot combine {other.token} with {self.token}")
        if other.rate != self.rate:
            raise InvalidAmount(f"Cannot combine amounts with rates {other.rate} and {self.rate}")

    def add(self, other: ScaledAmount) -> ScaledAmount:
        # Exact: normalization is linear in raw for a fixed rate
        self._check_same_token(other)
        return ScaledAmount(self.token, self.raw + other.raw, self.rate)

    def sub(self, other: ScaledAmount) -> ScaledAmount:
        """Subtract other from self.

        Raises:
            InsufficientAmount: If other is larger than self
        """
        self._check_same_token(other)
        if other.raw > self.raw:
            raise InsufficientAmount(f"Cannot subtract {other.raw} from {self.raw}")
        return ScaledAmount(self.token, self.raw - other.raw, self.rate)

    def mul_up_fixed(self, value: int) -> ScaledAmount:
        return self.from_normalized(
            self.token, mul_up(self.normalized, value), round_up=True, rate=self.rate
        )

    def mul_down_fixed(self, value: int) -> ScaledAmount:
        return self.from_normalized(self.token, mul_down(self.normalized, value), rate=self.rate)

    def div_up_fixed(self, value: int) -> ScaledAmount:
        return self.from_normalized(
            self.token, div_up(self.normalized, value), round_up=True, rate=self.rate
        )

    def div_down_fixed(self, value: int) -> ScaledAmount:
        return self.from_normalized(self.token, div_down(self.normalized, value), rate=self.rate)

    def __str__(self) -> str:
        return f"{self.to_human()} {self.token}"
