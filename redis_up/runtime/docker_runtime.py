"""ContainerRuntime implementation on top of the Docker SDK."""

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

import docker
import requests
from docker.errors import DockerException, ImageNotFound, NotFound

from ..core.errors import (
    ContainerNotFoundError,
    ContainerRuntimeError,
    RuntimeUnavailableError,
)
from ..core.log import Logger, get_logger
from ..core.types import ContainerSpec


@contextmanager
def _translate_errors(operation: str, target: str) -> Iterator[None]:
    """Re-raise Docker SDK errors as ContainerRuntimeError subclasses."""
    try:
        yield
    except NotFound as e:
        raise ContainerNotFoundError(
            f"{target} not found: {e}", operation=operation, target=target,
            runtime_message=str(e),
        ) from e
    except (DockerException, requests.RequestException) as e:
        raise ContainerRuntimeError(
            f"Failed to {operation} {target}: {e}", operation=operation, target=target,
            runtime_message=str(e),
        ) from e


class DockerRuntime:
    """Talks to the local Docker daemon.

    The client is created on first use, so commands that only read the
    registry never need a running daemon.
    """

    def __init__(
        self,
        client: Optional[docker.DockerClient] = None,
        logger: Optional[Logger] = None,
        stop_timeout: int = 10,
    ) -> None:
        self._client = client
        self._logger = logger or get_logger(__name__)
        self._stop_timeout = stop_timeout

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except DockerException as e:
                raise RuntimeUnavailableError(
                    f"Docker is not available. Is the Docker daemon running? ({e})",
                    operation="connect",
                ) from e
        return self._client

    def create_and_start_container(self, spec: ContainerSpec) -> str:
        """Create and start a container, pulling the image when missing.

        A container that was created but failed to start is removed again,
        so a failed call leaves nothing behind under spec.name.
        """
        kwargs = self._create_kwargs(spec)
        with _translate_errors("create container", spec.name):
            try:
                container = self.client.containers.create(spec.image, **kwargs)
            except ImageNotFound:
                self._logger.info("Pulling image %s", spec.image)
                self.client.images.pull(spec.image)
                container = self.client.containers.create(spec.image, **kwargs)

        try:
            with _translate_errors("start container", spec.name):
                container.start()
        except ContainerRuntimeError:
            try:
                with _translate_errors("remove unstarted container", spec.name):
                    container.remove(force=True)
            except ContainerRuntimeError as cleanup_error:
                self._logger.warning(
                    "Could not remove unstarted container %s: %s", spec.name, cleanup_error
                )
            raise

        self._logger.debug("Started container %s (%s)", spec.name, container.short_id)
        return container.id

    def stop_container(self, name: str) -> None:
        with _translate_errors("stop container", name):
            self.client.containers.get(name).stop(timeout=self._stop_timeout)

    def remove_container(self, name: str, force: bool = True, volumes: bool = False) -> None:
        with _translate_errors("remove container", name):
            self.client.containers.get(name).remove(force=force, v=volumes)

    def create_network(self, name: str, labels: Optional[dict] = None) -> None:
        with _translate_errors("create network", name):
            self.client.networks.create(name, driver="bridge", labels=labels or {})

    def remove_network(self, name: str) -> None:
        with _translate_errors("remove network", name):
            self.client.networks.get(name).remove()

    def remove_volume(self, name: str) -> None:
        with _translate_errors("remove volume", name):
            self.client.volumes.get(name).remove(force=True)

    def exec_in_container(self, name: str, command: List[str]) -> str:
        """Run a command inside a running container.

        Raises:
            ContainerRuntimeError: If the command exits non-zero
        """
        with _translate_errors("exec in container", name):
            result = self.client.containers.get(name).exec_run(command)
        output = (result.output or b"").decode("utf-8", errors="replace")
        if result.exit_code != 0:
            raise ContainerRuntimeError(
                f"Command {command[0]} in {name} exited with {result.exit_code}: {output.strip()}",
                operation="exec",
                target=name,
                runtime_message=output.strip(),
            )
        return output

    def stream_logs(
        self,
        name: str,
        follow: bool = False,
        tail: Optional[int] = None,
        timestamps: bool = False,
    ) -> Iterator[bytes]:
        with _translate_errors("read logs of", name):
            container = self.client.containers.get(name)
            stream = container.logs(
                stream=True,
                follow=follow,
                tail=tail if tail is not None else "all",
                timestamps=timestamps,
            )
        with _translate_errors("read logs of", name):
            yield from stream

    @staticmethod
    def _create_kwargs(spec: ContainerSpec) -> Dict:
        kwargs: Dict = {
            "name": spec.name,
            "command": spec.command,
            "environment": spec.environment or None,
            "ports": {f"{port}/tcp": host_port for port, host_port in spec.ports.items()},
            "volumes": {
                source: {"bind": target, "mode": "rw"}
                for source, target in spec.volumes.items()
            },
            "labels": spec.labels,
        }
        if spec.network:
            kwargs["network"] = spec.network
        if spec.mem_limit:
            kwargs["mem_limit"] = spec.mem_limit
        if spec.cap_add:
            kwargs["cap_add"] = spec.cap_add
        return kwargs
