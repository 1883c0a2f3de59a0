"""Realizable layouts of each instance kind.

A topology is the complete, precomputed answer to "what has to exist for
this instance": containers in startup order, the network, generated config
files and the descriptor that gets registered once everything is running.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..core.enums import InstanceKind
from ..core.types import (
    PENDING_URL,
    BasicAttributes,
    ClusterAttributes,
    ConnectionInfo,
    ContainerSpec,
    EnterpriseAttributes,
    InstanceDescriptor,
    SentinelAttributes,
    StackAttributes,
)

INSIGHT_PORT_KEY = "redisinsight"


@dataclass
class Topology(ABC):
    """Common layout shared by every kind."""

    name: str
    kind: InstanceKind
    host: str
    password: Optional[str]
    persist: bool = False
    memory: Optional[str] = None
    # Started in order; any failure aborts the deployment
    containers: List[ContainerSpec] = field(default_factory=list)
    # Started after the required containers; failures only warn
    auxiliary: List[ContainerSpec] = field(default_factory=list)
    network: Optional[str] = None
    ports: List[int] = field(default_factory=list)
    config_files: Dict[Path, str] = field(default_factory=dict)
    conf_dir: Optional[Path] = None

    @property
    def container_names(self) -> List[str]:
        return [spec.name for spec in self.containers]

    @property
    def primary_port(self) -> int:
        return self.ports[0]

    def describe(self, created_at: datetime, auxiliary: List[str]) -> InstanceDescriptor:
        """Descriptor for the realized topology.

        Args:
            created_at: Commit timestamp
            auxiliary: Names of auxiliary containers that actually started
        """
        return InstanceDescriptor(
            name=self.name,
            kind=self.kind,
            created_at=created_at,
            ports=list(self.ports),
            containers=self._registered_containers(auxiliary),
            connection=self._connection(auxiliary),
            attributes=self._attributes(auxiliary),
        )

    def _registered_containers(self, auxiliary: List[str]) -> List[str]:
        return self.container_names + list(auxiliary)

    def _additional_ports(self, auxiliary: List[str]) -> Dict[str, int]:
        ports = {}
        for spec in self.auxiliary:
            if spec.name in auxiliary:
                ports[INSIGHT_PORT_KEY] = next(iter(spec.ports.values()))
        return ports

    def _url(self) -> str:
        return f"redis://default:{self.password}@{self.host}:{self.primary_port}"

    def _connection(self, auxiliary: List[str]) -> ConnectionInfo:
        return ConnectionInfo(
            host=self.host,
            port=self.primary_port,
            password=self.password,
            url=self._url(),
            additional_ports=self._additional_ports(auxiliary),
        )

    @abstractmethod
    def _attributes(self, auxiliary: List[str]):
        """Kind-specific descriptor attributes."""


@dataclass
class BasicTopology(Topology):
    """One Redis container; RedisInsight is attached, not owned."""

    def _registered_containers(self, auxiliary: List[str]) -> List[str]:
        return self.container_names

    def _attributes(self, auxiliary: List[str]) -> BasicAttributes:
        insight = [spec for spec in self.auxiliary if spec.name in auxiliary]
        return BasicAttributes(
            persist=self.persist,
            memory=self.memory,
            insight_container=insight[0].name if insight else None,
            insight_port=next(iter(insight[0].ports.values())) if insight else None,
        )


@dataclass
class StackTopology(Topology):
    modules: List[str] = field(default_factory=list)

    def _attributes(self, auxiliary: List[str]) -> StackAttributes:
        return StackAttributes(
            persist=self.persist,
            memory=self.memory,
            modules=list(self.modules),
            insight=bool(auxiliary),
            network=self.network,
        )


@dataclass
class ClusterTopology(Topology):
    masters: int = 3
    replicas: int = 0
    port_base: int = 7000
    stack: bool = False

    @property
    def total_nodes(self) -> int:
        return self.masters + self.masters * self.replicas

    def _url(self) -> str:
        nodes = ",".join(f"{self.host}:{port}" for port in self.ports)
        return f"redis://default:{self.password}@{nodes}"

    def _attributes(self, auxiliary: List[str]) -> ClusterAttributes:
        return ClusterAttributes(
            masters=self.masters,
            replicas=self.replicas,
            total_nodes=self.total_nodes,
            port_base=self.port_base,
            persist=self.persist,
            memory=self.memory,
            stack=self.stack,
            insight=bool(auxiliary),
            network=self.network,
        )


@dataclass
class SentinelTopology(Topology):
    masters: int = 1
    sentinels: int = 3
    quorum: int = 2
    sentinel_port_base: int = 26379
    master_containers: List[str] = field(default_factory=list)
    sentinel_containers: List[str] = field(default_factory=list)

    def _url(self) -> str:
        return f"redis://:{self.password}@{self.host}:{self.primary_port}"

    def _additional_ports(self, auxiliary: List[str]) -> Dict[str, int]:
        ports = super()._additional_ports(auxiliary)
        ports["sentinel_base"] = self.sentinel_port_base
        return ports

    def _attributes(self, auxiliary: List[str]) -> SentinelAttributes:
        return SentinelAttributes(
            masters=self.masters,
            sentinels=self.sentinels,
            quorum=self.quorum,
            network=self.network,
            master_containers=list(self.master_containers),
            sentinel_containers=list(self.sentinel_containers),
            conf_dir=str(self.conf_dir) if self.conf_dir else None,
            persist=self.persist,
            memory=self.memory,
        )


@dataclass
class EnterpriseTopology(Topology):
    nodes: int = 1
    ui_port: int = 8443
    api_port: int = 9443
    db_port: int = 12000
    cluster_name: str = ""
    username: str = ""
    database_name: Optional[str] = None
    manual: bool = False
    volumes: List[str] = field(default_factory=list)

    @property
    def container_name(self) -> str:
        return self.containers[0].name

    @property
    def primary_port(self) -> int:
        return self.db_port

    @property
    def creates_database(self) -> bool:
        return not self.manual and self.database_name is not None

    def _url(self) -> str:
        if not self.creates_database:
            return PENDING_URL
        return super()._url()

    def _connection(self, auxiliary: List[str]) -> ConnectionInfo:
        connection = super()._connection(auxiliary)
        connection.additional_ports.update({"ui": self.ui_port, "api": self.api_port})
        if self.manual:
            connection.password = None
        return connection

    def _attributes(self, auxiliary: List[str]) -> EnterpriseAttributes:
        return EnterpriseAttributes(
            nodes=self.nodes,
            ui_port=self.ui_port,
            api_port=self.api_port,
            cluster_name=self.cluster_name,
            container_name=self.container_name,
            username=None if self.manual else self.username,
            database_name=self.database_name if self.creates_database else None,
            database_port=self.db_port if self.creates_database else None,
            manual=self.manual,
            persist=self.persist,
            memory=self.memory,
            volumes=list(self.volumes),
        )
