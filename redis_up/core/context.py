"""Application context for explicit dependency management.

ApplicationContext is the single immutable container for everything a
command needs: the resolved configuration, a logger and the container
runtime. It is built once at process start and passed explicitly.

Usage:
    config = initialize_config(load_config(config_file))
    app_context = ApplicationContext.create(config)

    registry = app_context.load_registry()
    orchestrator = app_context.create_orchestrator(registry)
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .types import RedisUpConfig
from .log import Logger
from .protocols import ContainerRuntime

if TYPE_CHECKING:
    from ..instances.instance_registry import InstanceRegistry
    from ..instances.orchestrator import DeploymentOrchestrator


@dataclass(frozen=True)
class ApplicationContext:
    """Immutable application-wide context containing all dependencies.

    Attributes:
        config: Resolved tool configuration
        logger: Logging instance
        runtime: Container runtime collaborator
    """

    config: RedisUpConfig
    logger: Logger
    runtime: ContainerRuntime

    @classmethod
    def create(
        cls,
        config: RedisUpConfig,
        *,
        logger: Optional[Logger] = None,
        runtime: Optional[ContainerRuntime] = None,
    ) -> "ApplicationContext":
        """Create application context with default implementations.

        Args:
            config: Resolved configuration (required)
            logger: Optional custom logger
            runtime: Optional container runtime (Docker by default)
        """
        # Import here to avoid circular dependencies at module level
        from .log import get_logger
        from ..runtime.docker_runtime import DockerRuntime

        if logger is None:
            logger = get_logger("redis_up")

        if runtime is None:
            runtime = DockerRuntime(
                logger=logger, stop_timeout=config.timeouts.container_stop
            )

        return cls(config=config, logger=logger, runtime=runtime)

    def load_registry(self) -> "InstanceRegistry":
        from ..instances.instance_registry import InstanceRegistry

        return InstanceRegistry.load(self.config.state_path)

    def create_orchestrator(self, registry: "InstanceRegistry") -> "DeploymentOrchestrator":
        """Wire an orchestrator around a loaded registry."""
        from ..instances.bootstrap import ClusterBootstrapper, EnterpriseBootstrapper
        from ..instances.orchestrator import DeploymentOrchestrator
        from ..instances.topology_builder import TopologyBuilder

        return DeploymentOrchestrator(
            registry=registry,
            runtime=self.runtime,
            builder=TopologyBuilder(self.config),
            logger=self.logger,
            name_prefix=self.config.name_prefix,
            cluster_bootstrapper=ClusterBootstrapper(
                self.runtime, self.logger, self.config.timeouts
            ),
            enterprise_bootstrapper=EnterpriseBootstrapper(self.logger, self.config.timeouts),
        )
