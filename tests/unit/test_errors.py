"""Tests for the quote error hierarchy."""

import pytest

from quoter import errors
from quoter.errors import (
    ExceedsPoolLimit,
    InvariantDidNotConverge,
    MaxInRatioError,
    MaxOutRatioError,
    QuoteError,
    StableGetBalanceDidNotConverge,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "name",
        [
            "InvalidAmount",
            "InsufficientAmount",
            "UnknownToken",
            "SameTokenSwap",
            "ExceedsPoolLimit",
            "OutOfBounds",
            "InvariantDidNotConverge",
            "UnsupportedPoolType",
            "ZeroBalanceError",
            "ZeroWeightError",
            "InvalidFeeError",
        ],
    )
    def test_all_errors_are_quote_errors(self, name: str) -> None:
        assert issubclass(getattr(errors, name), QuoteError)

    def test_ratio_errors_are_pool_limits(self) -> None:
        """Callers catching ExceedsPoolLimit also see the 30% ratio breaches."""
        assert issubclass(MaxInRatioError, ExceedsPoolLimit)
        assert issubclass(MaxOutRatioError, ExceedsPoolLimit)

    def test_balance_solve_is_convergence_error(self) -> None:
        with pytest.raises(InvariantDidNotConverge):
            raise StableGetBalanceDidNotConverge("no root")
