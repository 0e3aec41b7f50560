"""Weighted pool math.

Constant weighted product invariant: prod(balance_i ^ weight_i) stays fixed
across a swap. For a pair of tokens that gives

    out = B_out * (1 - (B_in / (B_in + in)) ^ (w_in / w_out))
    in  = B_in * ((B_out / (B_out - out)) ^ (w_out / w_in) - 1)

All values are normalized 18-decimal Bfp. Outputs round down and required
inputs round up, so rounding error always stays in the pool. The swap fee is
not handled here: callers take it off the input before calc_out_given_in and
gross the result of calc_in_given_out up afterwards.
"""

from typing import Literal

from quoter.constants import MAX_IN_RATIO, MAX_OUT_RATIO
from quoter.errors import MaxInRatioError, MaxOutRatioError, ZeroBalanceError, ZeroWeightError
from quoter.math.fixed_point import ONE_18, Bfp

WeightedVersion = Literal["v0", "v3Plus"]


def _check_pair(balance_in: Bfp, weight_in: Bfp, balance_out: Bfp, weight_out: Bfp) -> None:
    for side, weight in (("in", weight_in), ("out", weight_out)):
        if weight.value <= 0:
            raise ZeroWeightError(f"Weight of token {side} is {weight.value}")
    for side, balance in (("in", balance_in), ("out", balance_out)):
        if balance.value <= 0:
            raise ZeroBalanceError(f"Balance of token {side} is {balance.value}")


def _pow_up(base: Bfp, exponent: Bfp, version: WeightedVersion) -> Bfp:
    return base.pow_up_v3(exponent) if version == "v3Plus" else base.pow_up(exponent)


def calc_out_given_in(
    balance_in: Bfp,
    weight_in: Bfp,
    balance_out: Bfp,
    weight_out: Bfp,
    amount_in: Bfp,
    *,
    version: WeightedVersion = "v0",
) -> Bfp:
    """Amount of token out for an exact amount in (rounded down).

    ``version`` picks ``pow_up`` (v0) or ``pow_up_v3`` (v3Plus) for the power.

    Raises:
        MaxInRatioError: If amount_in is more than 30% of balance_in
        ZeroWeightError: If either weight is zero
        ZeroBalanceError: If either balance is zero
    """
    _check_pair(balance_in, weight_in, balance_out, weight_out)

    max_in = balance_in.mul_down(Bfp(MAX_IN_RATIO))
    if amount_in > max_in:
        raise MaxInRatioError(f"Amount in {amount_in.value} above limit {max_in.value}")

    # The invariant ratio is rounded up so the complement, and the output, round down
    ratio = balance_in.div_up(balance_in.add(amount_in))
    power = _pow_up(ratio, weight_in.div_down(weight_out), version)
    return balance_out.mul_down(power.complement())


def calc_in_given_out(
    balance_in: Bfp,
    weight_in: Bfp,
    balance_out: Bfp,
    weight_out: Bfp,
    amount_out: Bfp,
    *,
    version: WeightedVersion = "v0",
) -> Bfp:
    """Amount of token in needed for an exact amount out (rounded up).

    Raises:
        MaxOutRatioError: If amount_out is more than 30% of balance_out
        ZeroWeightError: If either weight is zero
        ZeroBalanceError: If a balance is zero or amount_out >= balance_out
    """
    _check_pair(balance_in, weight_in, balance_out, weight_out)

    max_out = balance_out.mul_down(Bfp(MAX_OUT_RATIO))
    if amount_out > max_out:
        raise MaxOutRatioError(f"Amount out {amount_out.value} above limit {max_out.value}")
    if amount_out >= balance_out:
        raise ZeroBalanceError("Amount out would drain the pool")

    ratio = balance_out.div_up(balance_out.sub(amount_out))
    power = _pow_up(ratio, weight_out.div_up(weight_in), version)
    return balance_in.mul_up(power.sub(Bfp(ONE_18)))
