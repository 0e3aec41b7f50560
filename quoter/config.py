"""Quote engine configuration.

Limit fractions used by ``limit_amount`` live in a frozen dataclass so tests
and callers can swap in a different configuration without touching module
state. Logging is configured explicitly by the application; importing the
library never does it.
"""

import logging
import os
from dataclasses import dataclass

import structlog

from quoter.math.fixed_point import ONE_18

# Log level used by configure_logging() when none is passed
LOG_LEVEL = os.environ.get("QUOTER_LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class QuoteConfig:
    """Limits applied when estimating the maximum tradeable amount.

    Attributes:
        almost_one: Fraction of a pool balance treated as tradeable (0.99)
        bpt_max_ratio: Multiple of the BPT balance accepted as an exact-out
            limit when the pool's own BPT is bought (10x)
    """

    almost_one: int = 99 * 10**16
    bpt_max_ratio: int = 10 * ONE_18


# Default configuration instance
DEFAULT_QUOTE_CONFIG = QuoteConfig()


def configure_logging(level: str | int | None = None) -> None:
    """Configure structlog for console output.

    Args:
        level: Log level name or number. Defaults to QUOTER_LOG_LEVEL (INFO).
    """
    if level is None:
        level = LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
