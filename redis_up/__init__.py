"""
redis-up: local Redis deployments on Docker

Stands up, inspects and tears down basic, stack, cluster, sentinel and
enterprise Redis deployments. Every instance the tool creates is recorded in a
persisted registry so that later commands can find and destroy it.
"""

__version__ = "0.3.0"

# Core exports
from .core.enums import InstanceKind, DeploymentState
from .core.types import (
    ConnectionInfo,
    InstanceDescriptor,
    RegistryState,
    RedisUpConfig,
)

__all__ = [
    "__version__",
    "InstanceKind",
    "DeploymentState",
    "ConnectionInfo",
    "InstanceDescriptor",
    "RegistryState",
    "RedisUpConfig",
]
