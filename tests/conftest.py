"""Pytest configuration and fixtures."""

import random

import pytest
import structlog

from quoter.pools import LinearPool, StablePool, WeightedPool
from tests.helpers.factories import make_linear_pool, make_stable_pool, make_weighted_pool


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for property tests."""
    return random.Random(20240611)


@pytest.fixture
def weighted_pool() -> WeightedPool:
    """50/50 DAI/WETH pool, 1000 of each, no fee."""
    return make_weighted_pool()


@pytest.fixture
def stable_pool() -> StablePool:
    """DAI/LUSD/FRAX composable stable pool, 1M each, amp 1000, 0.04% fee."""
    return make_stable_pool()


@pytest.fixture
def linear_pool() -> LinearPool:
    """DAI/waDAI linear pool, 500/500 at rate 1.05, targets [100, 1000], 1% fee."""
    return make_linear_pool()
