"""Topology planning for every supported instance kind.

All methods are pure: given a name, start options and a password they return
the same layout every time and never touch the runtime or the filesystem.
"""

from typing import Dict, List, Optional, Tuple

from ..core.enums import InstanceKind
from ..core.types import (
    BasicOptions,
    ClusterOptions,
    ContainerSpec,
    EnterpriseOptions,
    RedisUpConfig,
    SentinelOptions,
    StackOptions,
    StartOptions,
)
from .topology import (
    BasicTopology,
    ClusterTopology,
    EnterpriseTopology,
    SentinelTopology,
    StackTopology,
    Topology,
)

REDIS_PORT = 6379
REDIS_DATA_DIR = "/data"
ENTERPRISE_UI_PORT = 8443
ENTERPRISE_API_PORT = 9443
ENTERPRISE_API_OFFSET = 1000
ENTERPRISE_DB_PORT_COUNT = 10
ENTERPRISE_USERNAME = "admin@redis.local"
SENTINEL_CONF_MOUNT = "/etc/redis-sentinel"
SENTINEL_CONF_NAME = "sentinel.conf"
INSTANCE_LABEL = "redis-up.instance"
KIND_LABEL = "redis-up.kind"


def sentinel_quorum(sentinels: int) -> int:
    """Majority of the sentinel group."""
    return sentinels // 2 + 1


def render_sentinel_config(
    port: int, masters: List[Tuple[str, int]], quorum: int, password: Optional[str]
) -> str:
    """Render a sentinel.conf monitoring every master.

    Args:
        port: Port the sentinel listens on
        masters: (container name, port) of each master, in order
        quorum: Agreeing sentinels needed to declare a master down
        password: Master password, if any
    """
    lines = [
        f"port {port}",
        "sentinel announce-hostnames yes",
        "sentinel resolve-hostnames yes",
    ]
    for index, (container, master_port) in enumerate(masters, start=1):
        group = f"master-{index}"
        lines.append(f"sentinel monitor {group} {container} {master_port} {quorum}")
        if password:
            lines.append(f"sentinel auth-pass {group} {password}")
        lines.append(f"sentinel down-after-milliseconds {group} 5000")
        lines.append(f"sentinel failover-timeout {group} 10000")
        lines.append(f"sentinel parallel-syncs {group} 1")
    return "\n".join(lines) + "\n"


class TopologyBuilder:
    """Computes container names, ports, networks and config for each kind."""

    def __init__(self, config: RedisUpConfig) -> None:
        self._config = config

    def build(
        self, kind: InstanceKind, name: str, options: StartOptions, password: Optional[str]
    ) -> Topology:
        builders = {
            InstanceKind.BASIC: self.build_basic,
            InstanceKind.STACK: self.build_stack,
            InstanceKind.CLUSTER: self.build_cluster,
            InstanceKind.SENTINEL: self.build_sentinel,
            InstanceKind.ENTERPRISE: self.build_enterprise,
        }
        return builders[kind](name, options, password)

    def build_basic(self, name: str, options: BasicOptions, password: Optional[str]) -> BasicTopology:
        topology = BasicTopology(
            name=name,
            kind=InstanceKind.BASIC,
            host=self._config.host,
            password=password,
            persist=options.persist,
            memory=options.memory,
            ports=[options.port],
        )
        topology.containers.append(
            self._redis_container(
                name, name, InstanceKind.BASIC, options.port, REDIS_PORT, password,
                options.persist, options.memory, self._config.images.redis,
            )
        )
        if options.with_insight:
            topology.auxiliary.append(
                self._insight_container(name, InstanceKind.BASIC, options.insight_port, None)
            )
        return topology

    def build_stack(self, name: str, options: StackOptions, password: Optional[str]) -> StackTopology:
        network = f"{name}-network" if options.with_insight else None
        topology = StackTopology(
            name=name,
            kind=InstanceKind.STACK,
            host=self._config.host,
            password=password,
            persist=options.persist,
            memory=options.memory,
            network=network,
            ports=[options.port],
            modules=list(options.modules),
        )
        topology.containers.append(
            self._redis_container(
                name, name, InstanceKind.STACK, options.port, REDIS_PORT, password,
                options.persist, options.memory, self._config.images.stack,
                network=network, stack=True,
            )
        )
        if options.with_insight:
            topology.auxiliary.append(
                self._insight_container(name, InstanceKind.STACK, options.insight_port, network)
            )
        return topology

    def build_cluster(
        self, name: str, options: ClusterOptions, password: Optional[str]
    ) -> ClusterTopology:
        network = f"{name}-network"
        topology = ClusterTopology(
            name=name,
            kind=InstanceKind.CLUSTER,
            host=self._config.host,
            password=password,
            persist=options.persist,
            memory=options.memory,
            network=network,
            masters=options.masters,
            replicas=options.replicas,
            port_base=options.port_base,
            stack=options.stack,
        )
        image = self._config.images.stack if options.stack else self._config.images.redis
        cluster_args = [
            "--cluster-enabled", "yes",
            "--cluster-config-file", "nodes.conf",
            "--cluster-node-timeout", "5000",
        ]
        for index in range(topology.total_nodes):
            port = options.port_base + index
            topology.ports.append(port)
            topology.containers.append(
                self._redis_container(
                    name, f"{name}-node-{index}", InstanceKind.CLUSTER, port, port,
                    password, options.persist, options.memory, image,
                    network=network, stack=options.stack, extra_args=cluster_args,
                )
            )
        if options.with_insight:
            topology.auxiliary.append(
                self._insight_container(name, InstanceKind.CLUSTER, options.insight_port, network)
            )
        return topology

    def build_sentinel(
        self, name: str, options: SentinelOptions, password: Optional[str]
    ) -> SentinelTopology:
        masters = max(options.masters, 1)
        sentinels = max(options.sentinels, 1)
        quorum = sentinel_quorum(sentinels)
        network = f"{name}-network"
        conf_dir = self._config.sentinel_conf_root / name
        topology = SentinelTopology(
            name=name,
            kind=InstanceKind.SENTINEL,
            host=self._config.host,
            password=password,
            persist=options.persist,
            memory=options.memory,
            network=network,
            conf_dir=conf_dir,
            masters=masters,
            sentinels=sentinels,
            quorum=quorum,
            sentinel_port_base=options.sentinel_port_base,
        )

        monitored = []
        for index in range(masters):
            container = f"{name}-master-{index + 1}"
            port = options.redis_port_base + index
            monitored.append((container, port))
            topology.master_containers.append(container)
            topology.ports.append(port)
            topology.containers.append(
                self._redis_container(
                    name, container, InstanceKind.SENTINEL, port, port, password,
                    options.persist, options.memory, self._config.images.redis,
                    network=network,
                )
            )

        for index in range(sentinels):
            container = f"{name}-sentinel-{index + 1}"
            port = options.sentinel_port_base + index
            container_conf_dir = conf_dir / container
            topology.config_files[container_conf_dir / SENTINEL_CONF_NAME] = render_sentinel_config(
                port, monitored, quorum, password
            )
            topology.sentinel_containers.append(container)
            topology.ports.append(port)
            topology.containers.append(
                ContainerSpec(
                    name=container,
                    image=self._config.images.redis,
                    command=["redis-sentinel", f"{SENTINEL_CONF_MOUNT}/{SENTINEL_CONF_NAME}"],
                    ports={port: port},
                    network=network,
                    volumes={str(container_conf_dir): SENTINEL_CONF_MOUNT},
                    labels=self._labels(name, InstanceKind.SENTINEL),
                )
            )

        if options.with_insight:
            topology.auxiliary.append(
                self._insight_container(name, InstanceKind.SENTINEL, options.insight_port, network)
            )
        return topology

    def build_enterprise(
        self, name: str, options: EnterpriseOptions, password: Optional[str]
    ) -> EnterpriseTopology:
        ui_port = options.port_base
        api_port = options.port_base + ENTERPRISE_API_OFFSET
        volumes = [f"{name}-persistent", f"{name}-ephemeral"] if options.persist else []
        database_name = options.create_db
        topology = EnterpriseTopology(
            name=name,
            kind=InstanceKind.ENTERPRISE,
            host=self._config.host,
            password=password,
            persist=options.persist,
            memory=options.memory,
            ports=[ui_port, api_port, options.db_port],
            nodes=options.nodes,
            ui_port=ui_port,
            api_port=api_port,
            db_port=options.db_port,
            cluster_name=f"{name}-cluster",
            username=ENTERPRISE_USERNAME,
            database_name=database_name,
            manual=options.manual,
            volumes=volumes,
        )

        ports: Dict[int, int] = {ENTERPRISE_UI_PORT: ui_port, ENTERPRISE_API_PORT: api_port}
        for offset in range(ENTERPRISE_DB_PORT_COUNT):
            port = options.db_port + offset
            ports[port] = port
        mounts = {}
        if options.persist:
            mounts = {
                volumes[0]: "/var/opt/redislabs/persist",
                volumes[1]: "/var/opt/redislabs/tmp",
            }
        topology.containers.append(
            ContainerSpec(
                name=f"{name}-enterprise",
                image=self._config.images.enterprise,
                ports=ports,
                volumes=mounts,
                mem_limit=options.memory,
                cap_add=["SYS_RESOURCE"],
                labels=self._labels(name, InstanceKind.ENTERPRISE),
            )
        )
        return topology

    def _redis_container(
        self,
        instance: str,
        container: str,
        kind: InstanceKind,
        host_port: int,
        container_port: int,
        password: Optional[str],
        persist: bool,
        memory: Optional[str],
        image: str,
        network: Optional[str] = None,
        stack: bool = False,
        extra_args: Optional[List[str]] = None,
    ) -> ContainerSpec:
        args = []
        if container_port != REDIS_PORT:
            args += ["--port", str(container_port)]
        if password:
            args += ["--requirepass", password, "--masterauth", password]
        if persist:
            args += ["--appendonly", "yes"]
        args += extra_args or []

        # redis-stack-server reads server arguments from REDIS_ARGS
        command = None if stack else ["redis-server"] + args
        environment = {"REDIS_ARGS": " ".join(args)} if stack and args else {}
        return ContainerSpec(
            name=container,
            image=image,
            command=command,
            environment=environment,
            ports={container_port: host_port},
            network=network,
            volumes={f"{container}-data": REDIS_DATA_DIR} if persist else {},
            mem_limit=memory,
            labels=self._labels(instance, kind),
        )

    def _insight_container(
        self, instance: str, kind: InstanceKind, port: int, network: Optional[str]
    ) -> ContainerSpec:
        internal_port = self._config.insight_internal_port
        return ContainerSpec(
            name=f"{instance}-insight",
            image=self._config.images.insight,
            ports={internal_port: port},
            network=network,
            environment={
                "REDISINSIGHT_PORT": str(internal_port),
                "REDISINSIGHT_HOST": "0.0.0.0",
                "REDISINSIGHT_LOG_LEVEL": "warning",
            },
            labels=self._labels(instance, kind),
        )

    @staticmethod
    def _labels(instance: str, kind: InstanceKind) -> Dict[str, str]:
        return {INSTANCE_LABEL: instance, KIND_LABEL: kind.value}
