"""
Vantage-point registry and multi-subnet (ECS) fan-out.

Public entrypoints: SubnetFanout, load_registry
"""

from .fanout import (
    AggregationError,
    MultiSubnetQueryResult,
    SubnetFanout,
    SubnetQueryFailure,
    SubnetQueryOutcome,
    SubnetQuerySuccess,
)
from .registry import DEFAULT_SUBNETS, RegistryError, SubnetInfo, load_registry

__all__ = [
    "AggregationError",
    "DEFAULT_SUBNETS",
    "MultiSubnetQueryResult",
    "RegistryError",
    "SubnetFanout",
    "SubnetInfo",
    "SubnetQueryFailure",
    "SubnetQueryOutcome",
    "SubnetQuerySuccess",
    "load_registry",
]
