"""Shared type definitions for pool records.

Annotated pydantic types for addresses, pool ids and decimal strings, plus
address normalization helpers.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from quoter.constants import POOL_ID_LENGTH


def validate_decimal_string(value: Any) -> str:
    """Validate a non-negative human-readable decimal amount.

    Accepts strings, ints and Decimals ("1000.5", 3, Decimal("0.04")).

    Returns:
        The value as a decimal string

    Raises:
        ValueError: If the value is not a finite non-negative decimal
    """
    if isinstance(value, bool) or not isinstance(value, (str, int, Decimal)):
        raise ValueError(f"Decimal amount must be string or int, got {type(value).__name__}")
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation as err:
        raise ValueError(f"Not a decimal amount: '{value}'") from err
    if not parsed.is_finite():
        raise ValueError(f"Decimal amount must be finite: '{value}'")
    if parsed < 0:
        raise ValueError(f"Decimal amount cannot be negative: {value}")
    return str(value).strip()


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# Vault pool id (32 bytes: pool address, specialization, nonce)
PoolId = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{64}$")]

# Human-readable decimal amount ("1000.25")
DecimalString = Annotated[
    str,
    BeforeValidator(validate_decimal_string),
    Field(description="Non-negative decimal amount as string"),
]


_ADDRESS_RE = re.compile(r"0x[0-9a-f]{40}")


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Lowercase an address and make sure it carries the 0x prefix.

    With ``validate=True`` anything that is not 20 hex bytes raises ValueError.
    """
    normalized = address.lower()
    if normalized[:2] != "0x":
        normalized = f"0x{normalized}"
    if validate and not is_valid_address(normalized):
        raise ValueError(f"Invalid address: {address}")
    return normalized


def is_valid_address(address: str) -> bool:
    """True for a 0x-prefixed, 40 hex digit string (either case)."""
    return isinstance(address, str) and _ADDRESS_RE.fullmatch(address.lower()) is not None


def pool_address_from_id(pool_id: str) -> str:
    """Extract the pool contract address from a 32-byte pool id.

    Raises:
        ValueError: If the pool id is not 66 characters long
    """
    if len(pool_id) != POOL_ID_LENGTH:
        raise ValueError(f"Invalid pool id length: {pool_id}")
    return normalize_address(pool_id[:42])
