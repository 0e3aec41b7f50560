"""Fixed-point primitives for pool math.

- WAD helpers (mul/div with explicit rounding, complement, pow)
- Bfp: value wrapper over the same helpers
"""

from quoter.math.fixed_point import (
    ONE_18,
    Bfp,
    complement,
    div_down,
    div_up,
    mul_down,
    mul_up,
    pow_down,
    pow_up,
)

__all__ = [
    "Bfp",
    "ONE_18",
    "mul_down",
    "mul_up",
    "div_down",
    "div_up",
    "complement",
    "pow_down",
    "pow_up",
]
