"""Core type definitions for redis-up."""

from datetime import datetime
from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .enums import InstanceKind

STACK_MODULES = ["JSON", "Search", "Graph", "TimeSeries", "Bloom"]
PENDING_URL = "<pending database creation>"

Port = Annotated[int, Field(ge=1, le=65535)]


class ConnectionInfo(BaseModel):
    """How a client reaches a deployed instance."""

    host: str = "localhost"
    port: int
    password: Optional[str] = None
    url: str
    additional_ports: Dict[str, int] = Field(default_factory=dict)


# Per-kind descriptor attributes, discriminated by ``kind``
class BasicAttributes(BaseModel):
    """Attributes of a single Redis container."""

    kind: Literal["basic"] = "basic"
    persist: bool = False
    memory: Optional[str] = None
    insight_container: Optional[str] = None
    insight_port: Optional[int] = None


class StackAttributes(BaseModel):
    """Attributes of a Redis Stack container."""

    kind: Literal["stack"] = "stack"
    persist: bool = False
    memory: Optional[str] = None
    modules: List[str] = Field(default_factory=lambda: list(STACK_MODULES))
    insight: bool = False
    network: Optional[str] = None


class ClusterAttributes(BaseModel):
    """Attributes of a Redis Cluster deployment."""

    kind: Literal["cluster"] = "cluster"
    masters: int
    replicas: int
    total_nodes: int
    port_base: int
    persist: bool = False
    memory: Optional[str] = None
    stack: bool = False
    insight: bool = False
    network: Optional[str] = None


class SentinelAttributes(BaseModel):
    """Attributes of a Sentinel monitor group."""

    kind: Literal["sentinel"] = "sentinel"
    masters: int
    sentinels: int
    quorum: int
    network: Optional[str] = None
    master_containers: List[str] = Field(default_factory=list)
    sentinel_containers: List[str] = Field(default_factory=list)
    conf_dir: Optional[str] = None
    persist: bool = False
    memory: Optional[str] = None


class EnterpriseAttributes(BaseModel):
    """Attributes of a Redis Enterprise admin container."""

    kind: Literal["enterprise"] = "enterprise"
    nodes: int = 1
    ui_port: int
    api_port: int
    cluster_name: str
    container_name: str
    username: Optional[str] = None
    database_name: Optional[str] = None
    database_port: Optional[int] = None
    manual: bool = False
    persist: bool = False
    memory: Optional[str] = None
    volumes: List[str] = Field(default_factory=list)


InstanceAttributes = Annotated[
    Union[
        BasicAttributes,
        StackAttributes,
        ClusterAttributes,
        SentinelAttributes,
        EnterpriseAttributes,
    ],
    Field(discriminator="kind"),
]


class InstanceDescriptor(BaseModel):
    """Persisted record of one deployed instance."""

    name: str
    kind: InstanceKind
    created_at: datetime
    ports: List[int] = Field(default_factory=list)
    containers: List[str] = Field(default_factory=list)
    connection: ConnectionInfo
    attributes: InstanceAttributes

    @model_validator(mode="after")
    def validate_descriptor(self) -> "InstanceDescriptor":
        if self.attributes.kind != self.kind.value:
            raise ValueError(
                f"Attributes of kind '{self.attributes.kind}' do not match "
                f"instance kind '{self.kind.value}'"
            )
        pending = isinstance(self.attributes, EnterpriseAttributes) and self.attributes.manual
        if not self.containers and not pending:
            raise ValueError(f"Instance '{self.name}' has no containers")
        return self

    @property
    def network(self) -> Optional[str]:
        """Dedicated network of the instance, if any."""
        return getattr(self.attributes, "network", None)


class RegistryState(BaseModel):
    """Full persisted registry document."""

    instances: Dict[str, InstanceDescriptor] = Field(default_factory=dict)
    counters: Dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_keys(self) -> "RegistryState":
        for key, descriptor in self.instances.items():
            if key != descriptor.name:
                raise ValueError(
                    f"Registry key '{key}' does not match instance name '{descriptor.name}'"
                )
        for kind, counter in self.counters.items():
            if counter < 0:
                raise ValueError(f"Counter for '{kind}' must not be negative")
        return self


class ContainerSpec(BaseModel):
    """Everything the runtime needs to create and start one container."""

    name: str
    image: str
    command: Optional[List[str]] = None
    environment: Dict[str, str] = Field(default_factory=dict)
    ports: Dict[int, int] = Field(default_factory=dict)  # container port -> host port
    network: Optional[str] = None
    volumes: Dict[str, str] = Field(default_factory=dict)  # volume or host path -> mount point
    mem_limit: Optional[str] = None
    cap_add: List[str] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)


# Start options, one model per kind
class StartOptions(BaseModel):
    """Options shared by every kind."""

    name: Optional[str] = None
    password: Optional[str] = None
    persist: bool = False
    memory: Optional[str] = None


class InsightOptions(StartOptions):
    """Options of kinds that can attach a RedisInsight container."""

    with_insight: bool = False
    insight_port: Port = 8001


class BasicOptions(InsightOptions):
    port: Port = 6379


class StackOptions(InsightOptions):
    port: Port = 6379
    modules: List[str] = Field(default_factory=lambda: list(STACK_MODULES))

    @field_validator("modules")
    @classmethod
    def validate_modules(cls, value: List[str]) -> List[str]:
        unknown = [module for module in value if module not in STACK_MODULES]
        if unknown:
            raise ValueError(f"Unknown stack modules: {', '.join(unknown)}")
        return value or list(STACK_MODULES)


class ClusterOptions(InsightOptions):
    masters: int = Field(default=3, ge=1)
    replicas: int = Field(default=0, ge=0)
    port_base: Port = 7000
    stack: bool = False


class SentinelOptions(InsightOptions):
    masters: int = Field(default=1, ge=0)
    sentinels: int = Field(default=3, ge=0)
    redis_port_base: Port = 6379
    sentinel_port_base: Port = 26379


class EnterpriseOptions(StartOptions):
    nodes: int = Field(default=3, ge=1)
    port_base: Port = 8443
    create_db: Optional[str] = None
    db_port: Port = 12000
    manual: bool = False


OPTIONS_BY_KIND = {
    InstanceKind.BASIC: BasicOptions,
    InstanceKind.STACK: StackOptions,
    InstanceKind.CLUSTER: ClusterOptions,
    InstanceKind.SENTINEL: SentinelOptions,
    InstanceKind.ENTERPRISE: EnterpriseOptions,
}


class ImageConfig(BaseModel):
    """Container images used per role."""

    redis: str = "redis:7-alpine"
    stack: str = "redis/redis-stack-server:latest"
    insight: str = "redis/redisinsight:latest"
    enterprise: str = "redislabs/redis:latest"


class TimeoutConfig(BaseModel):
    """Centralized timeout configuration to eliminate magical constants."""

    container_stop: int = 10
    node_ready: float = 30.0
    cluster_create: float = 60.0
    enterprise_ready: float = 300.0
    enterprise_bootstrap: float = 300.0
    enterprise_request: float = 30.0
    poll_interval: float = 2.0


class RedisUpConfig(BaseModel):
    """Main tool configuration."""

    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config" / "redis-up")
    state_file: str = "instances.json"
    name_prefix: str = "redis"
    host: str = "localhost"
    log_level: str = "WARNING"
    insight_internal_port: int = 5540
    images: ImageConfig = Field(default_factory=ImageConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)

    @model_validator(mode="after")
    def validate_config(self) -> "RedisUpConfig":
        """Validate configuration - NO SIDE EFFECTS.

        Directory creation happens in initialize_config().
        """
        from .errors import ConfigurationError

        if not self.name_prefix:
            raise ConfigurationError("Name prefix must not be empty")
        if "/" in self.state_file or "\\" in self.state_file:
            raise ConfigurationError(
                f"State file must be a file name, not a path: {self.state_file}"
            )
        if self.timeouts.poll_interval <= 0:  # pylint: disable=no-member
            raise ConfigurationError("Poll interval must be positive")
        return self

    @property
    def state_path(self) -> Path:
        return self.config_dir / self.state_file

    @property
    def sentinel_conf_root(self) -> Path:
        return self.config_dir / "sentinel"
