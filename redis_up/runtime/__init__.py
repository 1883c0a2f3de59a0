"""Container runtime adapters."""

from .docker_runtime import DockerRuntime

__all__ = ["DockerRuntime"]
