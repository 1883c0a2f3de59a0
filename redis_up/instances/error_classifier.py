"""Mapping of raw runtime failures onto user-facing deployment errors."""

from typing import List, Optional

from ..core.enums import InstanceKind
from ..core.errors import (
    ContainerRuntimeError,
    DeploymentError,
    NameConflictError,
    PortConflictError,
    RuntimeFailureError,
)
from .topology import Topology

NAME_CONFLICT_MARKERS = (
    "is already in use by container",
    "Conflict",
    "already exists",
)

PORT_CONFLICT_MARKERS = (
    "port is already allocated",
    "bind",
    "Bind for",
    "failed to set up container networking",
    "address already in use",
    "driver failed programming external connectivity",
)

PORT_OPTIONS = {
    InstanceKind.BASIC: "--port",
    InstanceKind.STACK: "--port",
    InstanceKind.CLUSTER: "--port-base",
    InstanceKind.SENTINEL: "--redis-port-base",
    InstanceKind.ENTERPRISE: "--port-base",
}


def is_name_conflict(message: str) -> bool:
    return any(marker in message for marker in NAME_CONFLICT_MARKERS)


def is_port_conflict(message: str) -> bool:
    return any(marker in message for marker in PORT_CONFLICT_MARKERS)


def classify_runtime_error(
    error: BaseException,
    topology: Topology,
    cleanup_errors: Optional[List[str]] = None,
) -> DeploymentError:
    """Classify a failure raised while realizing a topology.

    Only container runtime errors are inspected for name and port conflicts;
    everything else (bootstrap, filesystem) is a plain runtime failure.

    Args:
        error: The primary failure
        topology: Topology that was being realized
        cleanup_errors: Failures collected while compensating

    Returns:
        The error to raise in place of the primary failure
    """
    context = {
        "instance": topology.name,
        "kind": topology.kind.value,
        "cleanup_errors": cleanup_errors,
        "details": {"cause": str(error)},
    }

    if isinstance(error, ContainerRuntimeError):
        # message is prefixed with the container name, so match the daemon text
        message = error.runtime_message
        if is_name_conflict(message):
            return NameConflictError(
                f"Container name already exists for '{topology.name}'. Use --name to "
                f"specify a different name or run 'redis-up cleanup' to clean up old instances.",
                **context,
            )
        if is_port_conflict(message):
            port = topology.ports[0] if topology.ports else None
            option = PORT_OPTIONS[topology.kind]
            if len(topology.ports) > 1:
                text = (
                    f"Port range starting at {port} is already in use. Stop the services "
                    f"using these ports or choose another range with {option}."
                )
            else:
                text = (
                    f"Port {port} is already in use. Stop the service using it or "
                    f"choose another port with {option}."
                )
            return PortConflictError(text, port=port, **context)

    return RuntimeFailureError(
        f"Failed to start {topology.kind.value} instance '{topology.name}': {error}",
        **context,
    )
