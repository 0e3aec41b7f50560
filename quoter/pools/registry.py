"""Pool archetype dispatch.

Raw records from the pool-state provider carry a ``poolType`` tag. Each
supported tag maps to one snapshot factory; everything else is rejected with
UnsupportedPoolType rather than quoted with the wrong math.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

import structlog
from pydantic import BaseModel

from quoter.errors import UnsupportedPoolType
from quoter.models.raw import RawPoolDict
from quoter.models.types import pool_address_from_id

from .linear import LinearPool
from .stable import StablePool
from .weighted import WeightedPool

logger = structlog.get_logger()

# Union type for all pool snapshots
AnyPool: TypeAlias = WeightedPool | StablePool | LinearPool

PoolFactory: TypeAlias = Callable[[dict[str, Any]], AnyPool]

# Tags used by the pool-state provider API
POOL_FACTORIES: dict[str, PoolFactory] = {
    "WEIGHTED": WeightedPool.from_raw,
    "PHANTOM_STABLE": StablePool.from_raw,
    "COMPOSABLE_STABLE": StablePool.from_raw,
    "LINEAR": LinearPool.from_raw,
    "AAVE_LINEAR": LinearPool.from_raw,
    "ERC4626_LINEAR": LinearPool.from_raw,
}


# CamelCase names used by the on-chain pool type enum
POOL_TYPE_ALIASES: dict[str, str] = {
    "Weighted": "WEIGHTED",
    "PhantomStable": "PHANTOM_STABLE",
    "ComposableStable": "COMPOSABLE_STABLE",
    "Linear": "LINEAR",
    "AaveLinear": "AAVE_LINEAR",
    "ERC4626Linear": "ERC4626_LINEAR",
}


def _tag_key(pool_type: str) -> str:
    return POOL_TYPE_ALIASES.get(pool_type, pool_type.upper())


def supported_pool_types() -> list[str]:
    return sorted(POOL_FACTORIES)


def pool_from_raw(record: RawPoolDict | Mapping[str, Any] | BaseModel) -> AnyPool:
    """Build the snapshot matching a raw record's pool type.

    A record without an ``address`` gets the one encoded in its pool id.

    Raises:
        UnsupportedPoolType: If the pool type tag has no implementation
        pydantic.ValidationError: If the record is malformed for its type
    """
    data = record.model_dump(by_alias=True) if isinstance(record, BaseModel) else dict(record)

    pool_type = data.get("poolType", data.get("pool_type"))
    if not isinstance(pool_type, str):
        raise UnsupportedPoolType(f"Pool record {data.get('id')} has no pool type")

    factory = POOL_FACTORIES.get(_tag_key(pool_type))
    if factory is None:
        logger.debug("pool_type_unsupported", pool_id=data.get("id"), pool_type=pool_type)
        raise UnsupportedPoolType(f"Unsupported pool type: {pool_type}")

    if not data.get("address") and isinstance(data.get("id"), str):
        data["address"] = pool_address_from_id(data["id"])

    logger.debug("pool_dispatch", pool_id=data.get("id"), pool_type=pool_type)
    return factory(data)


def pools_from_raw(records: list[RawPoolDict]) -> list[AnyPool]:
    """Build snapshots for a batch of records, skipping unsupported pool types."""
    pools: list[AnyPool] = []
    for record in records:
        try:
            pools.append(pool_from_raw(record))
        except UnsupportedPoolType:
            logger.info("pool_skipped_unsupported", pool_id=record.get("id"))
    return pools
