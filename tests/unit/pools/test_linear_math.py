"""Tests for linear pool math over normalized balances."""

import pytest

from quoter.errors import ExceedsPoolLimit, OutOfBounds
from quoter.math.fixed_point import ONE_18
from quoter.pools import linear_math
from quoter.pools.linear_math import LinearParams, from_nominal, to_nominal

PARAMS = LinearParams(fee=10**16, lower_target=100 * ONE_18, upper_target=1000 * ONE_18)

MAIN = 500 * ONE_18
WRAPPED = 525 * ONE_18
SUPPLY = 1025 * ONE_18


class TestParams:
    def test_lower_above_upper_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid linear targets"):
            LinearParams(fee=0, lower_target=2 * ONE_18, upper_target=ONE_18)

    def test_negative_lower_rejected(self) -> None:
        with pytest.raises(ValueError):
            LinearParams(fee=0, lower_target=-1, upper_target=ONE_18)


class TestNominal:
    def test_in_band_is_identity(self) -> None:
        assert to_nominal(MAIN, PARAMS) == MAIN
        assert to_nominal(100 * ONE_18, PARAMS) == 100 * ONE_18
        assert to_nominal(1000 * ONE_18, PARAMS) == 1000 * ONE_18

    def test_below_lower_target(self) -> None:
        assert to_nominal(50 * ONE_18, PARAMS) == 495 * 10**17

    def test_above_upper_target(self) -> None:
        assert to_nominal(1100 * ONE_18, PARAMS) == 1099 * ONE_18

    def test_from_nominal_inverts(self) -> None:
        for real in (50 * ONE_18, 600 * ONE_18, 1100 * ONE_18):
            assert from_nominal(to_nominal(real, PARAMS), PARAMS) == real

    def test_monotonic(self, rng) -> None:
        reals = sorted(rng.randrange(0, 2000 * ONE_18) for _ in range(100))
        nominals = [to_nominal(r, PARAMS) for r in reals]
        assert nominals == sorted(nominals)


class TestMainWrapped:
    def test_in_band_is_one_to_one(self) -> None:
        assert linear_math.calc_wrapped_out_per_main_in(100 * ONE_18, MAIN, PARAMS) == 100 * ONE_18
        assert linear_math.calc_main_out_per_wrapped_in(100 * ONE_18, MAIN, PARAMS) == 100 * ONE_18

    def test_below_band_rebates_fee(self) -> None:
        """Adding main while under the lower target earns back part of the fee."""
        out = linear_math.calc_wrapped_out_per_main_in(10 * ONE_18, 50 * ONE_18, PARAMS)
        assert out == 101 * 10**17

    def test_above_band_charges_fee(self) -> None:
        out = linear_math.calc_wrapped_out_per_main_in(100 * ONE_18, 1000 * ONE_18, PARAMS)
        assert out == 99 * ONE_18

    def test_crossing_whole_band_raises(self) -> None:
        with pytest.raises(OutOfBounds):
            linear_math.calc_wrapped_out_per_main_in(1000 * ONE_18, 50 * ONE_18, PARAMS)
        with pytest.raises(OutOfBounds):
            linear_math.calc_wrapped_in_per_main_out(1050 * ONE_18, 1100 * ONE_18, PARAMS)

    def test_leaving_band_on_one_side_is_allowed(self) -> None:
        out = linear_math.calc_wrapped_out_per_main_in(600 * ONE_18, MAIN, PARAMS)
        assert out == to_nominal(1100 * ONE_18, PARAMS) - MAIN

    def test_main_out_over_balance_raises(self) -> None:
        with pytest.raises(ExceedsPoolLimit):
            linear_math.calc_wrapped_in_per_main_out(600 * ONE_18, MAIN, PARAMS)

    def test_given_out_inverts_given_in(self) -> None:
        out = linear_math.calc_wrapped_out_per_main_in(10 * ONE_18, 50 * ONE_18, PARAMS)
        main_in = linear_math.calc_main_in_per_wrapped_out(out, 50 * ONE_18, PARAMS)
        assert abs(main_in - 10 * ONE_18) <= 2


class TestBpt:
    def test_main_in_mints_proportionally(self) -> None:
        bpt = linear_math.calc_bpt_out_per_main_in(100 * ONE_18, MAIN, WRAPPED, SUPPLY, PARAMS)
        assert bpt == 100 * ONE_18

    def test_main_in_per_bpt_out_inverts(self) -> None:
        main_in = linear_math.calc_main_in_per_bpt_out(100 * ONE_18, MAIN, WRAPPED, SUPPLY, PARAMS)
        assert main_in == 100 * ONE_18

    def test_main_out_per_bpt_in(self) -> None:
        out = linear_math.calc_main_out_per_bpt_in(100 * ONE_18, MAIN, WRAPPED, SUPPLY, PARAMS)
        assert out == 100 * ONE_18

    def test_bpt_in_per_main_out(self) -> None:
        bpt = linear_math.calc_bpt_in_per_main_out(100 * ONE_18, MAIN, WRAPPED, SUPPLY, PARAMS)
        assert bpt == 100 * ONE_18

    def test_wrapped_legs(self) -> None:
        assert (
            linear_math.calc_bpt_out_per_wrapped_in(105 * ONE_18, MAIN, WRAPPED, SUPPLY, PARAMS)
            == 105 * ONE_18
        )
        assert (
            linear_math.calc_wrapped_out_per_bpt_in(105 * ONE_18, MAIN, WRAPPED, SUPPLY, PARAMS)
            == 105 * ONE_18
        )
        assert (
            linear_math.calc_bpt_in_per_wrapped_out(105 * ONE_18, MAIN, WRAPPED, SUPPLY, PARAMS)
            == 105 * ONE_18
        )
        assert (
            linear_math.calc_wrapped_in_per_bpt_out(105 * ONE_18, MAIN, WRAPPED, SUPPLY, PARAMS)
            == 105 * ONE_18
        )

    def test_bpt_in_over_supply_raises(self) -> None:
        with pytest.raises(ExceedsPoolLimit):
            linear_math.calc_main_out_per_bpt_in(SUPPLY + 1, MAIN, WRAPPED, SUPPLY, PARAMS)
        with pytest.raises(ExceedsPoolLimit):
            linear_math.calc_wrapped_out_per_bpt_in(SUPPLY + 1, MAIN, WRAPPED, SUPPLY, PARAMS)

    def test_wrapped_out_over_balance_raises(self) -> None:
        with pytest.raises(ExceedsPoolLimit):
            linear_math.calc_bpt_in_per_wrapped_out(WRAPPED + 1, MAIN, WRAPPED, SUPPLY, PARAMS)


class TestBootstrap:
    """An empty pool (no BPT in circulation) prices the first deposit at nominal value."""

    def test_first_main_deposit(self) -> None:
        assert linear_math.calc_bpt_out_per_main_in(50 * ONE_18, 0, 0, 0, PARAMS) == 495 * 10**17

    def test_main_needed_for_first_bpt(self) -> None:
        assert linear_math.calc_main_in_per_bpt_out(495 * 10**17, 0, 0, 0, PARAMS) == 50 * ONE_18

    def test_first_wrapped_deposit(self) -> None:
        assert linear_math.calc_bpt_out_per_wrapped_in(7 * ONE_18, 0, 0, 0, PARAMS) == 7 * ONE_18
        assert linear_math.calc_wrapped_in_per_bpt_out(7 * ONE_18, 0, 0, 0, PARAMS) == 7 * ONE_18

    def test_exit_from_empty_pool_raises(self) -> None:
        with pytest.raises(ExceedsPoolLimit):
            linear_math.calc_main_out_per_bpt_in(ONE_18, 0, 0, 0, PARAMS)
        with pytest.raises(ExceedsPoolLimit):
            linear_math.calc_wrapped_out_per_bpt_in(ONE_18, 0, 0, 0, PARAMS)
