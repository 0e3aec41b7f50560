"""Linear pool math.

A linear pool holds a main token, a wrapped (rate-bearing) version of it and
its own BPT. Prices are flat: one nominal main unit is worth one wrapped unit
once the wrapped rate is applied. The pool charges the swap fee only on the
part of the main balance that sits outside [lower_target, upper_target], which
is modelled by mapping real main balances to "nominal" ones:

    real < lower_target:    nominal = real - fee * (lower_target - real)
    in band:                nominal = real
    real > upper_target:    nominal = real - fee * (real - upper_target)

The invariant is nominal main + wrapped. Every function below is a closed
form over 18-decimal balances that already include the wrapped rate; the pool
layer applies the rate when converting to and from raw amounts.

Amounts out round down, amounts in round up.
"""

from __future__ import annotations

from dataclasses import dataclass

from quoter.errors import ExceedsPoolLimit, OutOfBounds
from quoter.math.fixed_point import ONE_18, div_down, div_up, mul_down, mul_up


@dataclass(frozen=True)
class LinearParams:
    """Fee and target band of a linear pool.

    Attributes:
        fee: Swap fee as 18-decimal fixed point
        lower_target: Lower bound of the main balance band (18 decimals)
        upper_target: Upper bound of the main balance band (18 decimals)
    """

    fee: int
    lower_target: int
    upper_target: int

    def __post_init__(self) -> None:
        if self.lower_target < 0 or self.upper_target < self.lower_target:
            raise ValueError(
                f"Invalid linear targets: lower={self.lower_target} upper={self.upper_target}"
            )


def _sub(a: int, b: int) -> int:
    if b > a:
        raise ExceedsPoolLimit(f"Linear pool balance would go negative: {a} - {b}")
    return a - b


def _check_band(main_before: int, main_after: int, params: LinearParams) -> None:
    """Reject trades that move the main balance across the whole band at once."""
    below_to_above = main_before < params.lower_target and main_after > params.upper_target
    above_to_below = main_before > params.upper_target and main_after < params.lower_target
    if below_to_above or above_to_below:
        raise OutOfBounds(
            f"Main balance would move from {main_before} to {main_after} across "
            f"[{params.lower_target}, {params.upper_target}]"
        )


def to_nominal(real: int, params: LinearParams) -> int:
    # Fees round down in both directions
    if real < params.lower_target:
        fees = mul_down(params.lower_target - real, params.fee)
        return _sub(real, fees)
    if real <= params.upper_target:
        return real
    fees = mul_down(real - params.upper_target, params.fee)
    return _sub(real, fees)


def from_nominal(nominal: int, params: LinearParams) -> int:
    """Inverse of to_nominal, rounding down."""
    if nominal < params.lower_target:
        return div_down(nominal + mul_down(params.fee, params.lower_target), ONE_18 + params.fee)
    if nominal <= params.upper_target:
        return nominal
    return div_down(
        _sub(nominal, mul_down(params.fee, params.upper_target)), ONE_18 - params.fee
    )


def calc_invariant(nominal_main_balance: int, wrapped_balance: int) -> int:
    return nominal_main_balance + wrapped_balance


def _check_supply(bpt_in: int, bpt_supply: int) -> None:
    if bpt_supply == 0 or bpt_in > bpt_supply:
        raise ExceedsPoolLimit(f"BPT in {bpt_in} exceeds supply {bpt_supply}")


# =============================================================================
# Main <-> BPT
# =============================================================================


def calc_bpt_out_per_main_in(
    main_in: int,
    main_balance: int,
    wrapped_balance: int,
    bpt_supply: int,
    params: LinearParams,
) -> int:
    # Amount out, so we round down overall
    if bpt_supply == 0:
        # Initial BPT matches the nominal value of the first deposit
        return to_nominal(main_in, params)

    new_main_balance = main_balance + main_in
    _check_band(main_balance, new_main_balance, params)
    previous_nominal_main = to_nominal(main_balance, params)
    after_nominal_main = to_nominal(new_main_balance, params)
    delta_nominal_main = after_nominal_main - previous_nominal_main
    invariant = calc_invariant(previous_nominal_main, wrapped_balance)
    return div_down(mul_down(bpt_supply, delta_nominal_main), invariant)


def calc_bpt_in_per_main_out(
    main_out: int,
    main_balance: int,
    wrapped_balance: int,
    bpt_supply: int,
    params: LinearParams,
) -> int:
    # Amount in, so we round up overall
    new_main_balance = _sub(main_balance, main_out)
    _check_band(main_balance, new_main_balance, params)
    previous_nominal_main = to_nominal(main_balance, params)
    after_nominal_main = to_nominal(new_main_balance, params)
    delta_nominal_main = previous_nominal_main - after_nominal_main
    invariant = calc_invariant(previous_nominal_main, wrapped_balance)
    return div_up(mul_up(bpt_supply, delta_nominal_main), invariant)


def calc_main_in_per_bpt_out(
    bpt_out: int,
    main_balance: int,
    wrapped_balance: int,
    bpt_supply: int,
    params: LinearParams,
) -> int:
    # Amount in, so we round up overall
    if bpt_supply == 0:
        return from_nominal(bpt_out, params)

    previous_nominal_main = to_nominal(main_balance, params)
    invariant = calc_invariant(previous_nominal_main, wrapped_balance)
    delta_nominal_main = div_up(mul_up(invariant, bpt_out), bpt_supply)
    after_nominal_main = previous_nominal_main + delta_nominal_main
    new_main_balance = from_nominal(after_nominal_main, params)
    _check_band(main_balance, new_main_balance, params)
    return _sub(new_main_balance, main_balance)


def calc_main_out_per_bpt_in(
    bpt_in: int,
    main_balance: int,
    wrapped_balance: int,
    bpt_supply: int,
    params: LinearParams,
) -> int:
    # Amount out, so we round down overall
    _check_supply(bpt_in, bpt_supply)
    previous_nominal_main = to_nominal(main_balance, params)
    invariant = calc_invariant(previous_nominal_main, wrapped_balance)
    delta_nominal_main = div_down(mul_down(invariant, bpt_in), bpt_supply)
    after_nominal_main = _sub(previous_nominal_main, delta_nominal_main)
    new_main_balance = from_nominal(after_nominal_main, params)
    _check_band(main_balance, new_main_balance, params)
    return _sub(main_balance, new_main_balance)


# =============================================================================
# Main <-> Wrapped
# =============================================================================


def calc_wrapped_out_per_main_in(main_in: int, main_balance: int, params: LinearParams) -> int:
    # Amount out, so we round down overall
    new_main_balance = main_balance + main_in
    _check_band(main_balance, new_main_balance, params)
    previous_nominal_main = to_nominal(main_balance, params)
    after_nominal_main = to_nominal(new_main_balance, params)
    return after_nominal_main - previous_nominal_main


def calc_wrapped_in_per_main_out(main_out: int, main_balance: int, params: LinearParams) -> int:
    # Amount in, so we round up overall
    new_main_balance = _sub(main_balance, main_out)
    _check_band(main_balance, new_main_balance, params)
    previous_nominal_main = to_nominal(main_balance, params)
    after_nominal_main = to_nominal(new_main_balance, params)
    return previous_nominal_main - after_nominal_main


def calc_main_in_per_wrapped_out(
    wrapped_out: int, main_balance: int, params: LinearParams
) -> int:
    # Amount in, so we round up overall
    previous_nominal_main = to_nominal(main_balance, params)
    after_nominal_main = previous_nominal_main + wrapped_out
    new_main_balance = from_nominal(after_nominal_main, params)
    _check_band(main_balance, new_main_balance, params)
    return _sub(new_main_balance, main_balance)


def calc_main_out_per_wrapped_in(wrapped_in: int, main_balance: int, params: LinearParams) -> int:
    # Amount out, so we round down overall
    previous_nominal_main = to_nominal(main_balance, params)
    after_nominal_main = _sub(previous_nominal_main, wrapped_in)
    new_main_balance = from_nominal(after_nominal_main, params)
    _check_band(main_balance, new_main_balance, params)
    return _sub(main_balance, new_main_balance)


# =============================================================================
# Wrapped <-> BPT
# =============================================================================


def calc_bpt_out_per_wrapped_in(
    wrapped_in: int,
    main_balance: int,
    wrapped_balance: int,
    bpt_supply: int,
    params: LinearParams,
) -> int:
    # Amount out, so we round down overall
    if bpt_supply == 0:
        # Initial BPT matches the value of the first deposit
        return wrapped_in

    nominal_main = to_nominal(main_balance, params)
    previous_invariant = calc_invariant(nominal_main, wrapped_balance)
    new_wrapped_balance = wrapped_balance + wrapped_in
    new_invariant = calc_invariant(nominal_main, new_wrapped_balance)
    new_bpt_balance = div_down(mul_down(bpt_supply, new_invariant), previous_invariant)
    return _sub(new_bpt_balance, bpt_supply)


def calc_bpt_in_per_wrapped_out(
    wrapped_out: int,
    main_balance: int,
    wrapped_balance: int,
    bpt_supply: int,
    params: LinearParams,
) -> int:
    # Amount in, so we round up overall
    nominal_main = to_nominal(main_balance, params)
    previous_invariant = calc_invariant(nominal_main, wrapped_balance)
    new_wrapped_balance = _sub(wrapped_balance, wrapped_out)
    new_invariant = calc_invariant(nominal_main, new_wrapped_balance)
    new_bpt_balance = div_down(mul_down(bpt_supply, new_invariant), previous_invariant)
    return _sub(bpt_supply, new_bpt_balance)


def calc_wrapped_in_per_bpt_out(
    bpt_out: int,
    main_balance: int,
    wrapped_balance: int,
    bpt_supply: int,
    params: LinearParams,
) -> int:
    # Amount in, so we round up overall
    if bpt_supply == 0:
        return bpt_out

    nominal_main = to_nominal(main_balance, params)
    previous_invariant = calc_invariant(nominal_main, wrapped_balance)
    new_bpt_balance = bpt_supply + bpt_out
    new_wrapped_balance = _sub(
        div_up(mul_up(new_bpt_balance, previous_invariant), bpt_supply), nominal_main
    )
    return _sub(new_wrapped_balance, wrapped_balance)


def calc_wrapped_out_per_bpt_in(
    bpt_in: int,
    main_balance: int,
    wrapped_balance: int,
    bpt_supply: int,
    params: LinearParams,
) -> int:
    # Amount out, so we round down overall
    _check_supply(bpt_in, bpt_supply)
    nominal_main = to_nominal(main_balance, params)
    previous_invariant = calc_invariant(nominal_main, wrapped_balance)
    new_bpt_balance = _sub(bpt_supply, bpt_in)
    new_wrapped_balance = _sub(
        div_up(mul_up(new_bpt_balance, previous_invariant), bpt_supply), nominal_main
    )
    return _sub(wrapped_balance, new_wrapped_balance)
