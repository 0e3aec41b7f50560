"""WAD (18-decimal) fixed-point arithmetic.

Integer-only helpers matching the vault contracts' ``FixedPoint.sol`` and
``LogExpMath.sol``. Every value is an ``int`` scaled by 10^18; there is no
floating point anywhere in this module.

The power function is the contract's own ``exp(y * ln(x))`` approximation
(36-decimal ``ln`` near 1, truncated series), reproduced step for step. ``pow_down``
and ``pow_up`` widen the raw result by ``MAX_POW_RELATIVE_ERROR`` (1e-14
relative) plus one wei in the direction that favours the pool.
"""

from __future__ import annotations

from functools import total_ordering

__all__ = [
    "Bfp",
    "LogExpMathError",
    "XOutOfBounds",
    "YOutOfBounds",
    "ProductOutOfBounds",
    "InvalidExponent",
    "mul_down",
    "mul_up",
    "div_down",
    "div_up",
    "complement",
    "pow_down",
    "pow_up",
    "pow_raw",
    "pow_up_v3",
    "exp",
    "ONE_18",
    "ONE_20",
    "ONE_36",
    "MAX_POW_RELATIVE_ERROR",
]

ONE_18 = 10**18
ONE_20 = 10**20
ONE_36 = 10**36

# 10^-14 relative error bound applied around pow_raw
MAX_POW_RELATIVE_ERROR = 10000

# exp() accepts arguments in [-41, 130]
MAX_NATURAL_EXPONENT = 130 * ONE_18
MIN_NATURAL_EXPONENT = -41 * ONE_18

# Bases in (0.9, 1.1) take the 36-decimal logarithm
LN_36_LOWER_BOUND = ONE_18 - 10**17
LN_36_UPPER_BOUND = ONE_18 + 10**17

# y * ln(x) must fit in a signed 256-bit word
MILD_EXPONENT_BOUND = (1 << 254) // ONE_20

# (x, e^x) pairs used to peel powers of e off a value. The first table is in
# 18 decimals (e^x has no decimals at all), the second in 20 decimals.
_E_POWERS_18 = (
    (128 * ONE_18, 38877084059945950922200000000000000000000000000000000000),
    (64 * ONE_18, 6235149080811616882910000000),
)
_E_POWERS_20 = (
    (32 * ONE_20, 7896296018268069516100000000000000),
    (16 * ONE_20, 888611052050787263676000000),
    (8 * ONE_20, 298095798704172827474000),
    (4 * ONE_20, 5459815003314423907810),
    (2 * ONE_20, 738905609893065022723),
    (ONE_20, 271828182845904523536),
    (ONE_20 // 2, 164872127070012814685),
    (ONE_20 // 4, 128402541668774148407),
    (ONE_20 // 8, 113314845306682631683),
    (ONE_20 // 16, 106449445891785942956),
)

# exp() stops peeling at e^0.25; ln() uses every entry
_EXP_POWERS_20 = _E_POWERS_20[:8]


class LogExpMathError(ArithmeticError):
    """Input outside the domain the on-chain LogExpMath library accepts."""

    pass


class XOutOfBounds(LogExpMathError):
    """Base does not fit in a signed 256-bit integer (BAL#006)."""

    pass


class YOutOfBounds(LogExpMathError):
    """Exponent is not below MILD_EXPONENT_BOUND (BAL#007)."""

    pass


class ProductOutOfBounds(LogExpMathError):
    """y * ln(x) falls outside the range exp() accepts (BAL#008)."""

    pass


class InvalidExponent(LogExpMathError):
    """exp() argument outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT] (BAL#009)."""

    pass


# =============================================================================
# WAD arithmetic
# =============================================================================


def mul_down(a: int, b: int) -> int:
    """Product of two WAD values, rounded toward zero."""
    return (a * b) // ONE_18


def mul_up(a: int, b: int) -> int:
    """Product of two WAD values, rounded up."""
    product = a * b
    if product == 0:
        return 0
    return (product - 1) // ONE_18 + 1


def div_down(a: int, b: int) -> int:
    """Quotient of two WAD values, rounded toward zero.

    Raises:
        ZeroDivisionError: If b is zero
    """
    if b == 0:
        raise ZeroDivisionError("WAD division by zero")
    return (a * ONE_18) // b


def div_up(a: int, b: int) -> int:
    """Quotient of two WAD values, rounded up.

    Raises:
        ZeroDivisionError: If b is zero
    """
    if b == 0:
        raise ZeroDivisionError("WAD division by zero")
    if a == 0:
        return 0
    return (a * ONE_18 - 1) // b + 1


def complement(x: int) -> int:
    """ONE - x, saturating at zero when x > ONE."""
    return ONE_18 - x if x < ONE_18 else 0


# =============================================================================
# LogExpMath
# =============================================================================


def _sdiv(a: int, b: int) -> int:
    """Signed division truncating toward zero (EVM ``sdiv``), unlike Python's //."""
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _odd_series(z: int, one: int, last_power: int) -> int:
    """z + z^3/3 + z^5/5 + ... + z^last_power/last_power at the given scale."""
    z_squared = _sdiv(z * z, one)
    term = total = z
    for power in range(3, last_power + 1, 2):
        term = _sdiv(term * z_squared, one)
        total += _sdiv(term, power)
    return total


def _ln(a: int) -> int:
    """ln(a) for a positive 18-decimal value.

    Powers of e are divided out first; the remainder r goes through
    ln(r) = 2 * arctanh((r - 1) / (r + 1)) with six series terms.
    """
    if a < ONE_18:
        return -_ln(ONE_36 // a)

    total = 0
    for x_n, e_x_n in _E_POWERS_18:
        if a >= e_x_n * ONE_18:
            a //= e_x_n
            total += x_n

    # Switch to 20 decimals for the smaller powers and the series
    total *= 100
    a *= 100
    for x_n, e_x_n in _E_POWERS_20:
        if a >= e_x_n:
            a = (a * ONE_20) // e_x_n
            total += x_n

    z = ((a - ONE_20) * ONE_20) // (a + ONE_20)
    return (total + 2 * _odd_series(z, ONE_20, 11)) // 100


def _ln_36(x: int) -> int:
    """ln(x) in 36 decimals for x close to one (eight series terms)."""
    x *= ONE_18
    z = _sdiv((x - ONE_36) * ONE_36, x + ONE_36)
    return 2 * _odd_series(z, ONE_36, 15)


def exp(x: int) -> int:
    """e^x for an 18-decimal exponent, which may be negative.

    Raises:
        InvalidExponent: If x is outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT]
    """
    if not MIN_NATURAL_EXPONENT <= x <= MAX_NATURAL_EXPONENT:
        raise InvalidExponent(f"Exponent {x} outside valid range")
    if x < 0:
        return ONE_36 // exp(-x)

    # At most one of the two large powers fits under MAX_NATURAL_EXPONENT
    first_factor = 1
    for x_n, e_x_n in _E_POWERS_18:
        if x >= x_n:
            x -= x_n
            first_factor = e_x_n
            break

    x *= 100
    product = ONE_20
    for x_n, e_x_n in _EXP_POWERS_20:
        if x >= x_n:
            x -= x_n
            product = (product * e_x_n) // ONE_20

    # Taylor series up to x^12 / 12!
    term = x
    series = ONE_20 + x
    for n in range(2, 13):
        term = (term * x // ONE_20) // n
        series += term

    return (product * series // ONE_20) * first_factor // 100


def pow_raw(x: int, y: int) -> int:
    """x^y for non-negative 18-decimal values, exactly as LogExpMath.pow computes it.

    Raises:
        XOutOfBounds: If x does not fit in a signed 256-bit integer
        YOutOfBounds: If y is not below MILD_EXPONENT_BOUND
        ProductOutOfBounds: If y * ln(x) is outside the range of exp()
    """
    if y == 0:
        return ONE_18
    if x == 0:
        return 0
    if x >= 1 << 255:
        raise XOutOfBounds(f"Base {x} too large")
    if y >= MILD_EXPONENT_BOUND:
        raise YOutOfBounds(f"Exponent {y} exceeds bound")

    if LN_36_LOWER_BOUND < x < LN_36_UPPER_BOUND:
        # Split the 36-decimal log so the product with y keeps its precision
        ln_x = _ln_36(x)
        whole = _sdiv(ln_x, ONE_18)
        fraction = ln_x - whole * ONE_18
        y_ln_x = whole * y + _sdiv(fraction * y, ONE_18)
    else:
        y_ln_x = _ln(x) * y
    y_ln_x = _sdiv(y_ln_x, ONE_18)

    if not MIN_NATURAL_EXPONENT <= y_ln_x <= MAX_NATURAL_EXPONENT:
        raise ProductOutOfBounds(f"Product {y_ln_x} outside valid range")
    return exp(y_ln_x)


def _pow_error(raw: int) -> int:
    return mul_up(raw, MAX_POW_RELATIVE_ERROR) + 1


def pow_down(x: int, y: int) -> int:
    """x^y less the error bound, floored at zero."""
    raw = pow_raw(x, y)
    return max(0, raw - _pow_error(raw))


def pow_up(x: int, y: int) -> int:
    """x^y plus the error bound."""
    raw = pow_raw(x, y)
    return raw + _pow_error(raw)


def pow_up_v3(x: int, y: int) -> int:
    """pow_up with the exact shortcuts newer weighted pools use for y in {1, 2, 4}."""
    if y == ONE_18:
        return x
    if y == 2 * ONE_18:
        return mul_up(x, x)
    if y == 4 * ONE_18:
        square = mul_up(x, x)
        return mul_up(square, square)
    return pow_up(x, y)


# =============================================================================
# Bfp value wrapper
# =============================================================================


@total_ordering
class Bfp:
    """An 18-decimal fixed-point value (1.5 is ``Bfp(1_500_000_000_000_000_000)``).

    Method-chain front end to the module helpers, used where formulas read
    better that way (weighted math). Compared by value and unhashable.
    """

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, value: int) -> None:
        self.value = value

    @classmethod
    def from_wei(cls, wei: int) -> Bfp:
        return cls(wei)

    def mul_down(self, other: Bfp) -> Bfp:
        return Bfp(mul_down(self.value, other.value))

    def mul_up(self, other: Bfp) -> Bfp:
        return Bfp(mul_up(self.value, other.value))

    def div_down(self, other: Bfp) -> Bfp:
        return Bfp(div_down(self.value, other.value))

    def div_up(self, other: Bfp) -> Bfp:
        return Bfp(div_up(self.value, other.value))

    def complement(self) -> Bfp:
        return Bfp(complement(self.value))

    def add(self, other: Bfp) -> Bfp:
        return Bfp(self.value + other.value)

    def sub(self, other: Bfp) -> Bfp:
        # Clamped at zero
        return Bfp(max(0, self.value - other.value))

    def pow_up(self, exponent: Bfp) -> Bfp:
        return Bfp(pow_up(self.value, exponent.value))

    def pow_up_v3(self, exponent: Bfp) -> Bfp:
        return Bfp(pow_up_v3(self.value, exponent.value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value < other.value

    def __repr__(self) -> str:
        return f"Bfp({self.value})"
