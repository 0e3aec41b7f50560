"""Token identity."""

from __future__ import annotations

from dataclasses import dataclass, field

from quoter.models.types import normalize_address


@dataclass(frozen=True)
class Token:
    """An ERC20 token on a given chain.

    Equality and hashing use (chain_id, address) only; decimals and display
    metadata ride along. Addresses are stored lowercase.

    Attributes:
        chain_id: EVM chain id
        address: Token contract address
        decimals: Native decimal precision (0..18)
        symbol: Optional display symbol
        name: Optional display name
    """

    chain_id: int
    address: str
    decimals: int = field(compare=False)
    symbol: str | None = field(default=None, compare=False)
    name: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address))
        if not 0 <= self.decimals <= 18:
            raise ValueError(f"Token decimals must be in [0, 18], got {self.decimals}")

    def __str__(self) -> str:
        return self.symbol or self.address
