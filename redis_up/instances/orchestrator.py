"""Start, stop and bulk teardown of registered instances."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

import requests

from ..core.enums import DeploymentState, InstanceKind
from ..core.errors import (
    ConfigurationError,
    ContainerNotFoundError,
    ContainerRuntimeError,
    NameConflictError,
    RedisUpError,
)
from ..core.log import Logger, log_container_event, log_context, log_instance_event
from ..core.protocols import ContainerRuntime
from ..core.types import (
    OPTIONS_BY_KIND,
    BasicAttributes,
    EnterpriseAttributes,
    InstanceDescriptor,
    SentinelAttributes,
    StartOptions,
)
from ..core.value_objects import InstanceName
from ..utils.crypto import generate_password
from ..utils.filesystem import atomic_write, safe_remove
from .bootstrap import ClusterBootstrapper, EnterpriseBootstrapper
from .error_classifier import classify_runtime_error
from .instance_registry import InstanceRegistry
from .name_allocator import NameAllocator
from .topology import ClusterTopology, EnterpriseTopology, Topology
from .topology_builder import INSTANCE_LABEL, KIND_LABEL, TopologyBuilder

# Failures tolerated while undoing a start; they are reported, never raised
_COMPENSATION_ERRORS = (ContainerRuntimeError, OSError, requests.RequestException)


@dataclass
class TeardownReport:
    """Outcome of tearing down one instance."""

    instance: str
    removed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class CleanupReport:
    """Aggregate outcome of a bulk teardown."""

    instances: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def cleaned(self) -> int:
        return len(self.instances)

    @property
    def error_count(self) -> int:
        return len(self.errors)


@dataclass
class _Realized:
    """Runtime objects created by the current start attempt."""

    containers: List[str] = field(default_factory=list)
    network: Optional[str] = None
    wrote_files: bool = False


class DeploymentOrchestrator:
    """Drives a start attempt through allocation, realization and commit.

    A start either commits a descriptor to the registry or compensates every
    container and network it created, gives back the allocated name and
    raises a single classified DeploymentError.
    """

    def __init__(
        self,
        registry: InstanceRegistry,
        runtime: ContainerRuntime,
        builder: TopologyBuilder,
        logger: Logger,
        name_prefix: str = "redis",
        cluster_bootstrapper: Optional[ClusterBootstrapper] = None,
        enterprise_bootstrapper: Optional[EnterpriseBootstrapper] = None,
        password_factory: Callable[[], str] = generate_password,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._registry = registry
        self._runtime = runtime
        self._builder = builder
        self._logger = logger
        self._allocator = NameAllocator(registry.counters, prefix=name_prefix)
        self._cluster_bootstrapper = cluster_bootstrapper or ClusterBootstrapper(runtime, logger)
        self._enterprise_bootstrapper = enterprise_bootstrapper or EnterpriseBootstrapper(logger)
        self._password_factory = password_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.state = DeploymentState.IDLE

    @property
    def registry(self) -> InstanceRegistry:
        return self._registry

    def start(
        self, kind: InstanceKind, options: Optional[StartOptions] = None
    ) -> InstanceDescriptor:
        """Deploy a new instance of the given kind.

        Raises:
            NameConflictError: Name taken in the registry or by the runtime
            PortConflictError: A host port is already bound
            RuntimeFailureError: Any other realization failure
            ConfigurationError: Options do not fit the kind or the name is invalid
        """
        options = options if options is not None else OPTIONS_BY_KIND[kind]()
        if not isinstance(options, OPTIONS_BY_KIND[kind]):
            raise ConfigurationError(
                f"{type(options).__name__} cannot start a {kind.value} instance"
            )

        self._transition(DeploymentState.ALLOCATING)
        name, allocated = self._allocate_name(kind, options)

        with log_context(instance=name, kind=kind.value):
            password = options.password
            if password is None and not getattr(options, "manual", False):
                password = self._password_factory()
            topology = self._builder.build(kind, name, options, password)

            self._transition(DeploymentState.REALIZING)
            log_instance_event(self._logger, "starting", name, kind.value)
            realized = _Realized()
            try:
                self._realize(topology, realized)
                self._bootstrap(topology)
                auxiliary = self._start_auxiliary(topology, realized)
                descriptor = topology.describe(self._clock(), auxiliary)
                self._registry.add(descriptor)
                self._registry.save()
            except KeyboardInterrupt:
                self._transition(DeploymentState.ROLLING_BACK)
                self._roll_back(kind, topology, realized, allocated)
                self._transition(DeploymentState.FAILED)
                raise
            except (RedisUpError, OSError, requests.RequestException) as e:
                self._transition(DeploymentState.ROLLING_BACK)
                cleanup_errors = self._roll_back(kind, topology, realized, allocated)
                error = classify_runtime_error(e, topology, cleanup_errors)
                self._transition(DeploymentState.FAILED)
                self._logger.info("Deployment of %s failed: %s", name, error.message)
                raise error from e

            self._transition(DeploymentState.COMMITTED)
            log_instance_event(self._logger, "started", name, kind.value)
            return descriptor

    def info(self, kind: InstanceKind, name: Optional[str] = None) -> InstanceDescriptor:
        return self._registry.resolve(kind, name)

    def stop(self, kind: InstanceKind, name: Optional[str] = None) -> TeardownReport:
        """Tear down one instance and drop it from the registry.

        Individual removal failures are counted in the report and never
        abort the stop.

        Raises:
            InstanceNotFoundError: Nothing to stop
            KindMismatchError: Name belongs to another kind
        """
        descriptor = self._registry.resolve(kind, name)
        report = self.teardown(descriptor)
        self._registry.remove(descriptor.name)
        self._registry.save()
        log_instance_event(
            self._logger, "stopped", descriptor.name, kind.value, errors=len(report.errors)
        )
        return report

    def cleanup(self, kind: Optional[InstanceKind] = None) -> CleanupReport:
        """Tear down every instance (of a kind), accumulating failures."""
        targets = (
            self._registry.list_by_kind(kind) if kind else self._registry.list_all()
        )
        report = CleanupReport()
        if not targets:
            return report

        for descriptor in targets:
            teardown = self.teardown(descriptor)
            report.errors.extend(teardown.errors)
            self._registry.remove(descriptor.name)
            report.instances.append(descriptor.name)

        self._registry.save()
        self._logger.info(
            "Cleaned up %d instances with %d errors", report.cleaned, report.error_count
        )
        return report

    def teardown(self, descriptor: InstanceDescriptor) -> TeardownReport:
        """Remove every runtime object a descriptor owns, best-effort."""
        report = TeardownReport(descriptor.name)
        for container in descriptor.containers:
            self._stop_and_remove(container, report)

        attributes = descriptor.attributes
        if isinstance(attributes, BasicAttributes) and attributes.insight_container:
            self._stop_and_remove(attributes.insight_container, report)

        if descriptor.network:
            self._remove_network(descriptor.network, report)

        if isinstance(attributes, EnterpriseAttributes):
            for volume in attributes.volumes:
                try:
                    self._runtime.remove_volume(volume)
                    report.removed.append(volume)
                except ContainerNotFoundError:
                    pass
                except ContainerRuntimeError as e:
                    report.errors.append(f"volume {volume}: {e.message}")

        if isinstance(attributes, SentinelAttributes) and attributes.conf_dir:
            safe_remove(Path(attributes.conf_dir))

        for error in report.errors:
            self._logger.warning("Teardown of %s: %s", descriptor.name, error)
        return report

    def _allocate_name(self, kind: InstanceKind, options: StartOptions):
        if options.name is None:
            name = self._allocator.allocate(kind)
            # Skip names a user registered by hand
            while name in self._registry:
                name = self._allocator.allocate(kind)
            return name, True

        try:
            name = str(InstanceName(options.name))
        except ValueError as e:
            self._transition(DeploymentState.FAILED)
            raise ConfigurationError(str(e)) from e
        if name in self._registry:
            self._transition(DeploymentState.FAILED)
            raise NameConflictError(
                f"Instance '{name}' already exists. Use --name to specify a different "
                f"name or run 'redis-up cleanup' to clean up old instances.",
                instance=name,
                kind=kind.value,
            )
        return name, False

    def _realize(self, topology: Topology, realized: _Realized) -> None:
        for path, text in topology.config_files.items():
            realized.wrote_files = True
            atomic_write(path, text)

        if topology.network:
            self._runtime.create_network(topology.network, labels=self._labels(topology))
            realized.network = topology.network
            self._logger.debug("Created network %s", topology.network)

        for spec in topology.containers:
            self._runtime.create_and_start_container(spec)
            realized.containers.append(spec.name)
            log_container_event(self._logger, "started", spec.name, image=spec.image)

    def _bootstrap(self, topology: Topology) -> None:
        if isinstance(topology, ClusterTopology):
            self._cluster_bootstrapper.bootstrap(topology)
        elif isinstance(topology, EnterpriseTopology) and not topology.manual:
            self._enterprise_bootstrapper.bootstrap(topology)

    def _start_auxiliary(self, topology: Topology, realized: _Realized) -> List[str]:
        started = []
        for spec in topology.auxiliary:
            try:
                self._runtime.create_and_start_container(spec)
            except ContainerRuntimeError as e:
                self._logger.warning(
                    "Could not start %s, continuing without it: %s", spec.name, e.message
                )
                continue
            realized.containers.append(spec.name)
            started.append(spec.name)
            log_container_event(self._logger, "started", spec.name, image=spec.image)
        return started

    def _roll_back(
        self, kind: InstanceKind, topology: Topology, realized: _Realized, allocated: bool
    ) -> List[str]:
        """Compensate a failed start and give back the allocated name."""
        self._registry.remove(topology.name)
        errors = self._compensate(topology, realized)
        if allocated:
            self._allocator.rollback(kind)
            try:
                self._registry.save()
            except RedisUpError as e:
                errors.append(f"registry: {e.message}")
        for error in errors:
            self._logger.warning("Cleanup after failed start of %s: %s", topology.name, error)
        return errors

    def _compensate(self, topology: Topology, realized: _Realized) -> List[str]:
        errors = []
        for container in reversed(realized.containers):
            try:
                self._runtime.remove_container(container, force=True, volumes=True)
                log_container_event(self._logger, "removed", container)
            except ContainerNotFoundError:
                pass
            except _COMPENSATION_ERRORS as e:
                errors.append(f"container {container}: {e}")

        if realized.network:
            try:
                self._runtime.remove_network(realized.network)
            except ContainerNotFoundError:
                pass
            except _COMPENSATION_ERRORS as e:
                errors.append(f"network {realized.network}: {e}")

        if realized.wrote_files and topology.conf_dir:
            safe_remove(topology.conf_dir)
        return errors

    def _stop_and_remove(self, container: str, report: TeardownReport) -> None:
        try:
            self._runtime.stop_container(container)
        except ContainerNotFoundError:
            self._logger.debug("Container %s already gone", container)
            return
        except ContainerRuntimeError as e:
            report.errors.append(f"stop {container}: {e.message}")

        try:
            self._runtime.remove_container(container, force=True, volumes=True)
            report.removed.append(container)
            log_container_event(self._logger, "removed", container)
        except ContainerNotFoundError:
            pass
        except ContainerRuntimeError as e:
            report.errors.append(f"remove {container}: {e.message}")

    def _remove_network(self, network: str, report: TeardownReport) -> None:
        try:
            self._runtime.remove_network(network)
            report.removed.append(network)
        except ContainerNotFoundError:
            pass
        except ContainerRuntimeError as e:
            report.errors.append(f"network {network}: {e.message}")

    def _transition(self, state: DeploymentState) -> None:
        self._logger.debug("Deployment state: %s -> %s", self.state.value, state.value)
        self.state = state

    @staticmethod
    def _labels(topology: Topology) -> dict:
        return {INSTANCE_LABEL: topology.name, KIND_LABEL: topology.kind.value}
