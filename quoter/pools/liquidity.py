"""Proportional join and exit amounts.

A proportional join or exit keeps every balance ratio intact, so it needs no
invariant math and pays no swap fee: each token moves by the same fraction of
its balance as the BPT supply. Amounts run on raw balances, the way the
vault's recovery-mode exit does.
"""

from __future__ import annotations

from collections.abc import Sequence

from quoter.errors import ExceedsPoolLimit, InvalidAmount, UnknownToken
from quoter.math.fixed_point import div_down, div_up, mul_down, mul_up
from quoter.models.amounts import ScaledAmount
from quoter.models.token import Token

from .stable import StablePool
from .weighted import WeightedPool


def _members(pool: WeightedPool | StablePool) -> Sequence[ScaledAmount]:
    if isinstance(pool, StablePool):
        return [t.balance for t in pool.tokens_no_bpt]
    return [t.balance for t in pool.pool_tokens]


def bpt_token(pool: WeightedPool | StablePool) -> Token:
    """The pool's liquidity token (18 decimals, at the pool address)."""
    if isinstance(pool, StablePool):
        return pool.pool_tokens[pool.bpt_index].token
    chain_id = pool.pool_tokens[0].token.chain_id
    return Token(chain_id, pool.address, 18)


def proportional_amounts_out(
    pool: WeightedPool | StablePool, bpt_in: ScaledAmount
) -> list[ScaledAmount]:
    """Tokens received for burning bpt_in in a proportional exit (rounded down).

    Raises:
        ExceedsPoolLimit: If bpt_in is larger than the BPT supply
    """
    if bpt_in.raw > pool.total_shares:
        raise ExceedsPoolLimit(f"BPT in {bpt_in.raw} exceeds supply {pool.total_shares}")
    bpt_ratio = div_down(bpt_in.raw, pool.total_shares)
    return [ScaledAmount(b.token, mul_down(b.raw, bpt_ratio), b.rate) for b in _members(pool)]


def proportional_amounts_in(
    pool: WeightedPool | StablePool, bpt_out: ScaledAmount
) -> list[ScaledAmount]:
    """Tokens required to mint bpt_out in a proportional join (rounded up)."""
    bpt_ratio = div_up(bpt_out.raw, pool.total_shares)
    return [ScaledAmount(b.token, mul_up(b.raw, bpt_ratio), b.rate) for b in _members(pool)]


def proportional_amounts_for_reference(
    pool: WeightedPool | StablePool, reference: ScaledAmount
) -> tuple[ScaledAmount, list[ScaledAmount]]:
    """Scale a single known amount up to a full proportional set.

    The reference may be the BPT itself or any pool token; the other amounts
    and the matching BPT amount follow from the reference's share of its
    balance.

    Returns:
        Tuple of (bpt_amount, token_amounts)

    Raises:
        UnknownToken: If the reference token is not part of the pool
        InvalidAmount: If the reference token's balance is zero
    """
    members = _members(pool)
    bpt = bpt_token(pool)

    if reference.token == bpt:
        reference_balance = pool.total_shares
    else:
        matching = [b for b in members if b.token == reference.token]
        if not matching:
            raise UnknownToken(f"Pool {pool.id} does not contain token {reference.token.address}")
        reference_balance = matching[0].raw
    if reference_balance == 0:
        raise InvalidAmount(f"Reference token {reference.token} has zero balance")

    amounts = [
        ScaledAmount(b.token, reference.raw * b.raw // reference_balance, b.rate) for b in members
    ]
    bpt_amount = ScaledAmount(bpt, reference.raw * pool.total_shares // reference_balance)
    return bpt_amount, amounts
