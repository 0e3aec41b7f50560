"""Tests for the linear pool snapshot."""

import pytest

from quoter.constants import LINEAR_MAX_TOKEN_BALANCE
from quoter.errors import ExceedsPoolLimit, OutOfBounds, SameTokenSwap, UnknownToken
from quoter.math.fixed_point import ONE_18
from quoter.models.amounts import ScaledAmount
from quoter.models.token import Token
from quoter.pools import LinearPool, LinearTokenRole, Pool, SwapKind
from tests.helpers import (
    DAI_TOKEN,
    LINEAR_POOL,
    WADAI_TOKEN,
    WETH_TOKEN,
    make_linear_pool,
    make_linear_record,
)

BPT_TOKEN = Token(1, LINEAR_POOL, 18, "BPT")
RATE = 105 * 10**16


def amount(token: Token, units: int) -> ScaledAmount:
    return ScaledAmount(token, units * ONE_18)


class TestFromRaw:
    def test_basic_fields(self, linear_pool: LinearPool) -> None:
        assert linear_pool.main.token == DAI_TOKEN
        assert linear_pool.wrapped.token == WADAI_TOKEN
        assert linear_pool.wrapped.rate == RATE
        assert linear_pool.main.role is LinearTokenRole.MAIN
        assert linear_pool.swap_fee == 10**16
        assert linear_pool.lower_target == 100 * ONE_18
        assert linear_pool.upper_target == 1000 * ONE_18
        assert linear_pool.tokens == (BPT_TOKEN, DAI_TOKEN, WADAI_TOKEN)

    def test_bpt_virtual_balance_is_supply(self, linear_pool: LinearPool) -> None:
        assert linear_pool.bpt.virtual_balance == 1025 * ONE_18

    def test_wrapped_balance_includes_rate(self, linear_pool: LinearPool) -> None:
        assert linear_pool.wrapped.balance.raw == 500 * ONE_18
        assert linear_pool.wrapped.balance.normalized == 525 * ONE_18

    def test_implements_pool_protocol(self, linear_pool: LinearPool) -> None:
        assert isinstance(linear_pool, Pool)

    def test_missing_wrapped_rate_defaults_to_one(self) -> None:
        record = make_linear_record()
        del record["tokens"][2]["priceRate"]
        pool = LinearPool.from_raw(record)
        assert pool.wrapped.rate == ONE_18

    def test_inconsistent_indices_rejected(self) -> None:
        record = make_linear_record()
        record["wrappedIndex"] = 1
        with pytest.raises(ValueError, match="distinct main, wrapped and BPT"):
            LinearPool.from_raw(record)

    def test_inverted_targets_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid linear targets"):
            make_linear_pool(lower_target="1000", upper_target="100")


class TestMainWrappedSwaps:
    def test_in_band_given_in(self, linear_pool: LinearPool) -> None:
        """100 DAI in band buys 100 nominal units of waDAI at rate 1.05."""
        out = linear_pool.swap_given_in(DAI_TOKEN, WADAI_TOKEN, amount(DAI_TOKEN, 100))
        assert out.token == WADAI_TOKEN
        assert out.raw == 100 * 10**36 // RATE

    def test_in_band_given_out(self, linear_pool: LinearPool) -> None:
        amount_in = linear_pool.swap_given_out(WADAI_TOKEN, DAI_TOKEN, amount(DAI_TOKEN, 100))
        assert amount_in.raw == -(-100 * 10**36 // RATE)

    def test_below_band_given_in(self) -> None:
        pool = make_linear_pool(main_balance="50")
        out = pool.swap_given_in(DAI_TOKEN, WADAI_TOKEN, amount(DAI_TOKEN, 10))
        assert out.raw == 101 * 10**35 // RATE

    def test_crossing_band_raises(self) -> None:
        pool = make_linear_pool(main_balance="50")
        with pytest.raises(OutOfBounds):
            pool.swap_given_in(DAI_TOKEN, WADAI_TOKEN, amount(DAI_TOKEN, 1000))

    def test_given_out_inverts_given_in(self, linear_pool: LinearPool) -> None:
        amount_in = amount(DAI_TOKEN, 100)
        out = linear_pool.swap_given_in(DAI_TOKEN, WADAI_TOKEN, amount_in)
        back = linear_pool.swap_given_out(DAI_TOKEN, WADAI_TOKEN, out)
        assert abs(back.raw - amount_in.raw) <= 2

    def test_main_out_over_balance_raises(self, linear_pool: LinearPool) -> None:
        with pytest.raises(ExceedsPoolLimit):
            linear_pool.swap_given_out(WADAI_TOKEN, DAI_TOKEN, amount(DAI_TOKEN, 600))


class TestBptSwaps:
    def test_main_in_bpt_out(self, linear_pool: LinearPool) -> None:
        out = linear_pool.swap_given_in(DAI_TOKEN, BPT_TOKEN, amount(DAI_TOKEN, 100))
        assert out.token == BPT_TOKEN
        assert out.raw == 100 * ONE_18

    def test_bpt_in_wrapped_out(self, linear_pool: LinearPool) -> None:
        out = linear_pool.swap_given_in(BPT_TOKEN, WADAI_TOKEN, amount(BPT_TOKEN, 105))
        assert out.raw == 100 * ONE_18

    def test_wrapped_in_for_bpt_out(self, linear_pool: LinearPool) -> None:
        amount_in = linear_pool.swap_given_out(WADAI_TOKEN, BPT_TOKEN, amount(BPT_TOKEN, 105))
        assert amount_in.raw == 100 * ONE_18

    def test_bpt_in_for_main_out(self, linear_pool: LinearPool) -> None:
        amount_in = linear_pool.swap_given_out(BPT_TOKEN, DAI_TOKEN, amount(DAI_TOKEN, 100))
        assert amount_in.raw == 100 * ONE_18

    def test_bootstrap_deposit(self) -> None:
        pool = make_linear_pool(main_balance="0", wrapped_balance="0", bpt_supply="0")
        out = pool.swap_given_in(DAI_TOKEN, BPT_TOKEN, amount(DAI_TOKEN, 100))
        assert out.raw == 100 * ONE_18

    def test_exit_from_empty_pool_raises(self) -> None:
        pool = make_linear_pool(main_balance="0", wrapped_balance="0", bpt_supply="0")
        with pytest.raises(ExceedsPoolLimit):
            pool.swap_given_in(BPT_TOKEN, DAI_TOKEN, amount(BPT_TOKEN, 1))

    def test_unknown_token(self, linear_pool: LinearPool) -> None:
        with pytest.raises(UnknownToken):
            linear_pool.swap_given_in(WETH_TOKEN, DAI_TOKEN, amount(WETH_TOKEN, 1))

    def test_same_token(self, linear_pool: LinearPool) -> None:
        with pytest.raises(SameTokenSwap):
            linear_pool.swap_given_in(BPT_TOKEN, BPT_TOKEN, amount(BPT_TOKEN, 1))


class TestLimitsAndLiquidity:
    def test_given_out_limit(self, linear_pool: LinearPool) -> None:
        limit = linear_pool.limit_amount(DAI_TOKEN, WADAI_TOKEN, SwapKind.GIVEN_OUT)
        assert limit == 495 * ONE_18

    def test_given_out_bpt_limit(self, linear_pool: LinearPool) -> None:
        limit = linear_pool.limit_amount(DAI_TOKEN, BPT_TOKEN, SwapKind.GIVEN_OUT)
        assert limit == linear_pool.bpt.balance.raw * 10

    def test_given_in_bpt_limit(self, linear_pool: LinearPool) -> None:
        limit = linear_pool.limit_amount(WADAI_TOKEN, BPT_TOKEN, SwapKind.GIVEN_IN)
        assert limit == LINEAR_MAX_TOKEN_BALANCE

    def test_given_in_limit(self, linear_pool: LinearPool) -> None:
        limit = linear_pool.limit_amount(DAI_TOKEN, WADAI_TOKEN, SwapKind.GIVEN_IN)
        max_out = ScaledAmount(WADAI_TOKEN, 495 * ONE_18, RATE)
        assert limit == linear_pool.swap_given_out(DAI_TOKEN, WADAI_TOKEN, max_out).raw

    def test_given_in_limit_stops_at_lower_target(self) -> None:
        """Taking 99% of 2000 DAI would drop main from above the band to below it."""
        pool = make_linear_pool(main_balance="2000")
        limit = pool.limit_amount(WADAI_TOKEN, DAI_TOKEN, SwapKind.GIVEN_IN)

        to_lower = pool.swap_given_out(WADAI_TOKEN, DAI_TOKEN, amount(DAI_TOKEN, 1900))
        assert limit == to_lower.raw
        # 1890 nominal main at 1.05 per wrapped
        assert 1799 * ONE_18 < limit < 1801 * ONE_18

    def test_given_in_limit_stops_at_upper_target(self) -> None:
        pool = make_linear_pool(main_balance="50", wrapped_balance="1000")
        limit = pool.limit_amount(DAI_TOKEN, WADAI_TOKEN, SwapKind.GIVEN_IN)
        assert limit == 950 * ONE_18

    def test_normalized_liquidity(self, linear_pool: LinearPool) -> None:
        assert linear_pool.normalized_liquidity(DAI_TOKEN, WADAI_TOKEN) == 525 * ONE_18
        assert linear_pool.normalized_liquidity(WADAI_TOKEN, DAI_TOKEN) == 500 * ONE_18
