"""Stable pool math.

StableSwap invariant (Curve-style) with the vault's parameterization:
``amp`` already carries AMP_PRECISION and the Newton step uses A*n rather
than A*n^n. The invariant has no closed form, so both D and a single
balance at fixed D are solved by bounded Newton-Raphson iteration; running
out of iterations raises instead of returning a best effort.

Balances and amounts are 18-decimal normalized integers that exclude the
pool's own BPT. Amounts out round down, amounts in round up.
"""

from collections.abc import Sequence

from quoter.constants import AMP_PRECISION, STABLE_MAX_ITERATIONS
from quoter.errors import (
    ExceedsPoolLimit,
    InvariantDidNotConverge,
    StableGetBalanceDidNotConverge,
    ZeroBalanceError,
)
from quoter.math.fixed_point import (
    ONE_18,
    complement,
    div_down,
    div_up,
    mul_down,
    mul_up,
)


def calculate_invariant(
    amp: int,
    balances: Sequence[int],
    max_iterations: int = STABLE_MAX_ITERATIONS,
) -> int:
    """Solve the StableSwap invariant D for ``balances``.

    Newton iteration starting from the plain sum; it stops once two
    successive estimates are within 1 wei. An empty pool has D = 0.

    Raises:
        InvariantDidNotConverge: If max_iterations steps are not enough
        ZeroBalanceError: If any balance is zero
    """
    n = len(balances)
    if not n:
        return 0
    for position, balance in enumerate(balances):
        if balance <= 0:
            raise ZeroBalanceError(f"Balance at index {position} must be positive")

    total = sum(balances)
    amp_n = amp * n
    d = total
    for _ in range(max_iterations):
        # D^(n+1) / (n^n * prod(balances)), one balance at a time
        d_p = d
        for balance in balances:
            d_p = d_p * d // (n * balance)

        previous = d
        numerator = (amp_n * total // AMP_PRECISION + n * d_p) * d
        denominator = (amp_n - AMP_PRECISION) * d // AMP_PRECISION + (n + 1) * d_p
        d = numerator // denominator
        if abs(d - previous) <= 1:
            return d

    raise InvariantDidNotConverge(f"No stable invariant within {max_iterations} iterations")


def get_token_balance_given_invariant_and_all_other_balances(
    amp: int,
    balances: Sequence[int],
    invariant: int,
    token_index: int,
    max_iterations: int = STABLE_MAX_ITERATIONS,
) -> int:
    """Balance of ``token_index`` that keeps the invariant at ``invariant``.

    Solves y^2 + (b - D) y = c by Newton steps that all round up. The
    current value at ``token_index`` only enters through c.

    Raises:
        StableGetBalanceDidNotConverge: If max_iterations steps are not enough
        IndexError: If token_index is out of range
    """
    n = len(balances)
    _check_indices(n, token_index)

    amp_total = amp * n
    p_d = balances[0] * n
    for balance in balances[1:]:
        p_d = p_d * balance * n // invariant
    others = sum(balances) - balances[token_index]

    d_squared = invariant * invariant
    if amp_total * p_d == 0:
        raise StableGetBalanceDidNotConverge("Degenerate pool: amp * P_D is zero")

    c = _ceil_div(d_squared, amp_total * p_d) * AMP_PRECISION * balances[token_index]
    b = others + invariant // amp_total * AMP_PRECISION

    y = _ceil_div(d_squared + c, invariant + b)
    for _ in range(max_iterations):
        previous = y
        slope = 2 * y + b - invariant
        if slope <= 0:
            raise StableGetBalanceDidNotConverge("Newton step has a non-positive slope")
        y = _ceil_div(y * y + c, slope)
        if abs(y - previous) <= 1:
            return y

    raise StableGetBalanceDidNotConverge(f"No stable balance within {max_iterations} iterations")


def _ceil_div(a: int, b: int) -> int:
    return (a + b - 1) // b


def _check_indices(n_tokens: int, *indices: int) -> None:
    for index in indices:
        if not 0 <= index < n_tokens:
            raise IndexError(f"token index {index} out of range for {n_tokens} tokens")


def _check_pair(balances: Sequence[int], index_in: int, index_out: int) -> None:
    _check_indices(len(balances), index_in, index_out)
    if index_in == index_out:
        raise ValueError(f"Token index {index_in} given for both sides of the swap")


# Token for token


def stable_calc_out_given_in(
    amp: int,
    balances: Sequence[int],
    token_index_in: int,
    token_index_out: int,
    amount_in: int,
) -> int:
    """Tokens out for an exact ``amount_in`` that already has the fee taken off.

    The pool keeps one extra wei of the output.

    Raises:
        ExceedsPoolLimit: If the output would come out negative
        InvariantDidNotConverge: If either Newton solve fails
        ValueError: If both indices name the same token
    """
    _check_pair(balances, token_index_in, token_index_out)

    d = calculate_invariant(amp, balances)
    after = list(balances)
    after[token_index_in] += amount_in
    balance_out = get_token_balance_given_invariant_and_all_other_balances(
        amp, after, d, token_index_out
    )
    if balance_out + 1 > balances[token_index_out]:
        raise ExceedsPoolLimit(
            f"Swap would not lower balance {balances[token_index_out]} (solved {balance_out})"
        )
    return balances[token_index_out] - balance_out - 1


def stable_calc_in_given_out(
    amp: int,
    balances: Sequence[int],
    token_index_in: int,
    token_index_out: int,
    amount_out: int,
) -> int:
    """Tokens in, before fees, for an exact ``amount_out``.

    The pool charges one extra wei of input.

    Raises:
        ExceedsPoolLimit: If amount_out would empty the output balance
        InvariantDidNotConverge: If either Newton solve fails
        ValueError: If both indices name the same token
    """
    _check_pair(balances, token_index_in, token_index_out)
    if amount_out >= balances[token_index_out]:
        raise ExceedsPoolLimit(
            f"Amount out {amount_out} not below balance {balances[token_index_out]}"
        )

    d = calculate_invariant(amp, balances)
    after = list(balances)
    after[token_index_out] -= amount_out
    balance_in = get_token_balance_given_invariant_and_all_other_balances(
        amp, after, d, token_index_in
    )
    return balance_in - balances[token_index_in] + 1


# Joins and exits, with BPT as a pool member


def _amounts_in_without_fee(
    balances: Sequence[int], amounts_in: Sequence[int], swap_fee: int
) -> list[int]:
    """Join amounts after the fee on the part above a proportional join."""
    sum_balances = sum(balances)
    ratios = [div_down(balance + amount, balance) for balance, amount in zip(balances, amounts_in)]
    invariant_ratio_with_fees = sum(
        mul_down(ratio, div_down(balance, sum_balances))
        for balance, ratio in zip(balances, ratios)
    )
    # Rounded-down weights can leave the ratio just under one
    proportional_growth = max(invariant_ratio_with_fees - ONE_18, 0)

    net = []
    for balance, amount, ratio in zip(balances, amounts_in, ratios):
        if ratio > invariant_ratio_with_fees:
            non_taxable = mul_down(balance, proportional_growth)
            amount = non_taxable + mul_down(amount - non_taxable, complement(swap_fee))
        net.append(amount)
    return net


def calc_bpt_out_given_exact_tokens_in(
    amp: int,
    balances: Sequence[int],
    amounts_in: Sequence[int],
    bpt_total_supply: int,
    swap_fee: int,
) -> int:
    """BPT minted for adding amounts_in (BPT out, rounds down).

    Only the part of each amount above the proportional join pays the swap
    fee, since that part amounts to a swap against the other tokens.
    """
    if len(amounts_in) != len(balances):
        raise ValueError("amounts_in must match balances length")

    current_invariant = calculate_invariant(amp, balances)
    net_in = _amounts_in_without_fee(balances, amounts_in, swap_fee)
    new_balances = [balance + amount for balance, amount in zip(balances, net_in)]
    new_invariant = calculate_invariant(amp, new_balances)
    invariant_ratio = div_down(new_invariant, current_invariant)

    # No mint if the invariant did not grow
    if invariant_ratio > ONE_18:
        return mul_down(bpt_total_supply, invariant_ratio - ONE_18)
    return 0


def calc_token_in_given_exact_bpt_out(
    amp: int,
    balances: Sequence[int],
    token_index: int,
    bpt_amount_out: int,
    bpt_total_supply: int,
    swap_fee: int,
) -> int:
    """Single token needed to mint exactly bpt_amount_out (token in, rounds up)."""
    _check_indices(len(balances), token_index)

    current_invariant = calculate_invariant(amp, balances)
    new_invariant = mul_up(
        div_up(bpt_total_supply + bpt_amount_out, bpt_total_supply), current_invariant
    )

    new_balance = get_token_balance_given_invariant_and_all_other_balances(
        amp, balances, new_invariant, token_index
    )
    amount_in_without_fee = new_balance - balances[token_index]

    # Everything beyond the token's current share of the pool is a virtual swap
    current_weight = div_down(balances[token_index], sum(balances))
    taxable_percentage = complement(current_weight)
    taxable_amount = mul_up(amount_in_without_fee, taxable_percentage)
    non_taxable_amount = amount_in_without_fee - taxable_amount

    return non_taxable_amount + div_up(taxable_amount, complement(swap_fee))


def calc_bpt_in_given_exact_tokens_out(
    amp: int,
    balances: Sequence[int],
    amounts_out: Sequence[int],
    bpt_total_supply: int,
    swap_fee: int,
) -> int:
    """BPT burned to withdraw exactly amounts_out (BPT in, rounds up).

    Raises:
        ExceedsPoolLimit: If an amount out would empty its balance
    """
    if len(amounts_out) != len(balances):
        raise ValueError("amounts_out must match balances length")
    for balance, amount_out in zip(balances, amounts_out):
        if amount_out >= balance:
            raise ExceedsPoolLimit(f"Amount out {amount_out} exceeds balance {balance}")

    current_invariant = calculate_invariant(amp, balances)
    sum_balances = sum(balances)

    balance_ratios_without_fee = []
    invariant_ratio_without_fees = 0
    for balance, amount_out in zip(balances, amounts_out):
        current_weight = div_up(balance, sum_balances)
        ratio = div_up(balance - amount_out, balance)
        balance_ratios_without_fee.append(ratio)
        invariant_ratio_without_fees += mul_up(ratio, current_weight)

    new_balances = []
    for balance, amount_out, ratio in zip(balances, amounts_out, balance_ratios_without_fee):
        # No token in here, so the fee is charged on the excess token out
        if invariant_ratio_without_fees > ratio:
            non_taxable_amount = mul_down(balance, complement(invariant_ratio_without_fees))
            taxable_amount = amount_out - non_taxable_amount
            amount_out_with_fee = non_taxable_amount + div_up(
                taxable_amount, complement(swap_fee)
            )
        else:
            amount_out_with_fee = amount_out
        if amount_out_with_fee >= balance:
            raise ExceedsPoolLimit(f"Amount out with fee {amount_out_with_fee} exceeds balance")
        new_balances.append(balance - amount_out_with_fee)

    new_invariant = calculate_invariant(amp, new_balances)
    invariant_ratio = div_down(new_invariant, current_invariant)

    return mul_up(bpt_total_supply, complement(invariant_ratio))


def calc_token_out_given_exact_bpt_in(
    amp: int,
    balances: Sequence[int],
    token_index: int,
    bpt_amount_in: int,
    bpt_total_supply: int,
    swap_fee: int,
) -> int:
    """Single token paid out for burning exactly bpt_amount_in (token out, rounds down).

    Raises:
        ExceedsPoolLimit: If bpt_amount_in is not below the BPT supply
    """
    _check_indices(len(balances), token_index)
    if bpt_amount_in >= bpt_total_supply:
        raise ExceedsPoolLimit(f"BPT in {bpt_amount_in} exceeds supply {bpt_total_supply}")

    current_invariant = calculate_invariant(amp, balances)
    new_invariant = mul_up(
        div_up(bpt_total_supply - bpt_amount_in, bpt_total_supply), current_invariant
    )

    new_balance = get_token_balance_given_invariant_and_all_other_balances(
        amp, balances, new_invariant, token_index
    )
    amount_out_without_fee = balances[token_index] - new_balance

    current_weight = div_down(balances[token_index], sum(balances))
    taxable_percentage = complement(current_weight)
    # Fee rounded up, charged on the token out
    taxable_amount = mul_up(amount_out_without_fee, taxable_percentage)
    non_taxable_amount = amount_out_without_fee - taxable_amount

    return non_taxable_amount + mul_down(taxable_amount, complement(swap_fee))
