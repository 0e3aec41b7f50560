"""Token, amount and raw pool record models."""

from quoter.models.amounts import ScaledAmount
from quoter.models.raw import (
    RawComposableStablePool,
    RawLinearPool,
    RawPool,
    RawPoolDict,
    RawPoolToken,
    RawPoolTokenDict,
    RawWeightedPool,
)
from quoter.models.token import Token
from quoter.models.types import normalize_address, pool_address_from_id

__all__ = [
    "Token",
    "ScaledAmount",
    "RawPoolToken",
    "RawPool",
    "RawWeightedPool",
    "RawComposableStablePool",
    "RawLinearPool",
    "RawPoolDict",
    "RawPoolTokenDict",
    "normalize_address",
    "pool_address_from_id",
]
