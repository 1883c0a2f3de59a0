"""Core enumerations for redis-up.

Separated from types.py to break circular dependencies. This module contains
only enum definitions with no dependencies on other core modules.
"""

from enum import Enum


class InstanceKind(Enum):
    """Deployment topology of a registered instance."""

    BASIC = "basic"
    STACK = "stack"
    CLUSTER = "cluster"
    SENTINEL = "sentinel"
    ENTERPRISE = "enterprise"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    InstanceKind.BASIC: "Redis",
    InstanceKind.STACK: "Redis Stack",
    InstanceKind.CLUSTER: "Redis Cluster",
    InstanceKind.SENTINEL: "Redis Sentinel",
    InstanceKind.ENTERPRISE: "Redis Enterprise",
}


class DeploymentState(Enum):
    """Lifecycle state of a single start attempt."""

    IDLE = "idle"
    ALLOCATING = "allocating"
    REALIZING = "realizing"
    COMMITTED = "committed"
    ROLLING_BACK = "rolling_back"
    FAILED = "failed"


class OutputFormat(Enum):
    """Rendering format for instance details."""

    TABLE = "table"
    JSON = "json"
