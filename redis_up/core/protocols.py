"""Protocol definitions for framework interfaces.

Protocols define the "what" (interfaces) without depending on "how" (implementations).
The orchestrator only ever talks to the container runtime through
ContainerRuntime, so tests can substitute an in-memory fake.
"""

from typing import Iterator, List, Optional, Protocol

from .types import ContainerSpec


class ContainerRuntime(Protocol):
    """Protocol for the container runtime collaborator.

    Every method raises ContainerRuntimeError on failure, and
    ContainerNotFoundError when the addressed object does not exist.
    """

    def create_and_start_container(self, spec: ContainerSpec) -> str:
        """Create and start a container, returning its id."""

    def stop_container(self, name: str) -> None:
        """Stop a running container."""

    def remove_container(self, name: str, force: bool = True, volumes: bool = False) -> None:
        """Remove a container, optionally with its anonymous volumes."""

    def create_network(self, name: str, labels: Optional[dict] = None) -> None:
        """Create a bridge network."""

    def remove_network(self, name: str) -> None:
        """Remove a network."""

    def remove_volume(self, name: str) -> None:
        """Remove a named volume."""

    def exec_in_container(self, name: str, command: List[str]) -> str:
        """Run a command inside a container and return its output."""

    def stream_logs(
        self, name: str, follow: bool = False, tail: Optional[int] = None,
        timestamps: bool = False,
    ) -> Iterator[bytes]:
        """Yield log output chunks of a container."""
