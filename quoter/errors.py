"""Quote engine error classes.

Every failure the engine reports is a local, synchronous exception. Nothing
here is retried or suppressed internally: the caller decides whether to adjust
the trade, skip the pool, or surface the error.
"""


class QuoteError(Exception):
    """Base error for pool quoting."""

    pass


class InvalidAmount(QuoteError):
    """Amount is malformed: negative raw value, bad rate, or unparseable string."""

    pass


class InsufficientAmount(QuoteError):
    """Subtraction would take an amount below zero."""

    pass


class UnknownToken(QuoteError):
    """Token is not a member of the pool."""

    pass


class SameTokenSwap(QuoteError):
    """Token in and token out are the same."""

    pass


class ExceedsPoolLimit(QuoteError):
    """Trade would take more of a token than the pool holds or allows."""

    pass


class MaxInRatioError(ExceedsPoolLimit):
    """Error 304: Input amount exceeds 30% of balance_in."""

    pass


class MaxOutRatioError(ExceedsPoolLimit):
    """Error 305: Output amount exceeds 30% of balance_out."""

    pass


class OutOfBounds(QuoteError):
    """Linear pool trade would jump across the whole target band in one step."""

    pass


class InvariantDidNotConverge(QuoteError):
    """Newton-Raphson iteration for the stable invariant D did not converge.

    Fatal for the quote: swap math is only valid at a converged invariant.
    """

    pass


class StableGetBalanceDidNotConverge(InvariantDidNotConverge):
    """Newton-Raphson iteration for a stable balance at fixed D did not converge."""

    pass


class UnsupportedPoolType(QuoteError):
    """Raw pool record carries a pool type tag with no implementation."""

    pass


class InvalidFeeError(QuoteError):
    """Swap fee must be in range [0, 1)."""

    pass


class ZeroWeightError(QuoteError):
    """Token weight must be positive."""

    pass


class ZeroBalanceError(QuoteError):
    """Token balance must be positive for swaps."""

    pass
