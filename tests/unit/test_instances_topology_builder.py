"""Tests for per-kind topology planning."""

from datetime import datetime, timezone

import pytest

from redis_up.core.enums import InstanceKind
from redis_up.core.types import (
    PENDING_URL,
    BasicOptions,
    ClusterOptions,
    EnterpriseOptions,
    RedisUpConfig,
    SentinelOptions,
    StackOptions,
)
from redis_up.instances.topology import Topology
from redis_up.instances.topology_builder import (
    INSTANCE_LABEL,
    TopologyBuilder,
    render_sentinel_config,
    sentinel_quorum,
)

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


class TestBasicTopology:
    """Test single container layouts."""

    def setup_method(self):
        self.builder = TopologyBuilder(RedisUpConfig(config_dir="/tmp/redis-up-test"))

    def test_single_container(self):
        topology = self.builder.build_basic("cache", BasicOptions(port=6380), "pw")
        spec = topology.containers[0]

        assert topology.container_names == ["cache"]
        assert topology.network is None
        assert spec.image == "redis:7-alpine"
        assert spec.ports == {6379: 6380}
        assert spec.command == ["redis-server", "--requirepass", "pw", "--masterauth", "pw"]
        assert spec.labels[INSTANCE_LABEL] == "cache"

    def test_persist_and_memory(self):
        topology = self.builder.build_basic(
            "cache", BasicOptions(persist=True, memory="256m"), None
        )
        spec = topology.containers[0]

        assert spec.volumes == {"cache-data": "/data"}
        assert spec.mem_limit == "256m"
        assert spec.command == ["redis-server", "--appendonly", "yes"]

    def test_insight_is_attached_not_owned(self):
        """Test the insight container is recorded in attributes, not containers."""
        topology = self.builder.build_basic(
            "cache", BasicOptions(with_insight=True, insight_port=8005), "pw"
        )

        assert [spec.name for spec in topology.auxiliary] == ["cache-insight"]
        assert topology.auxiliary[0].network is None

        descriptor = topology.describe(NOW, ["cache-insight"])
        assert descriptor.containers == ["cache"]
        assert descriptor.attributes.insight_container == "cache-insight"
        assert descriptor.attributes.insight_port == 8005
        assert descriptor.connection.additional_ports == {"redisinsight": 8005}
        assert descriptor.connection.url == "redis://default:pw@localhost:6379"

    def test_insight_that_failed_is_not_recorded(self):
        topology = self.builder.build_basic("cache", BasicOptions(with_insight=True), "pw")

        descriptor = topology.describe(NOW, [])

        assert descriptor.attributes.insight_container is None
        assert descriptor.connection.additional_ports == {}


class TestStackTopology:
    """Test Redis Stack layouts."""

    def setup_method(self):
        self.builder = TopologyBuilder(RedisUpConfig(config_dir="/tmp/redis-up-test"))

    def test_server_args_go_through_environment(self):
        topology = self.builder.build_stack("s", StackOptions(), "pw")
        spec = topology.containers[0]

        assert spec.image == "redis/redis-stack-server:latest"
        assert spec.command is None
        assert spec.environment == {"REDIS_ARGS": "--requirepass pw --masterauth pw"}

    def test_network_only_with_insight(self):
        without = self.builder.build_stack("s", StackOptions(), "pw")
        with_insight = self.builder.build_stack("s", StackOptions(with_insight=True), "pw")

        assert without.network is None
        assert with_insight.network == "s-network"
        assert with_insight.containers[0].network == "s-network"
        assert with_insight.auxiliary[0].network == "s-network"

    def test_insight_is_registered_container(self):
        topology = self.builder.build_stack("s", StackOptions(with_insight=True), "pw")

        descriptor = topology.describe(NOW, ["s-insight"])

        assert descriptor.containers == ["s", "s-insight"]
        assert descriptor.attributes.insight is True


class TestClusterTopology:
    """Test cluster node layouts."""

    def setup_method(self):
        self.builder = TopologyBuilder(RedisUpConfig(config_dir="/tmp/redis-up-test"))

    def test_three_masters_one_replica(self):
        """Test masters=3, replicas=1 gives six nodes on consecutive ports."""
        topology = self.builder.build_cluster(
            "c", ClusterOptions(masters=3, replicas=1, port_base=7000), "pw"
        )

        assert topology.total_nodes == 6
        assert topology.container_names == [f"c-node-{i}" for i in range(6)]
        assert topology.ports == [7000, 7001, 7002, 7003, 7004, 7005]
        assert all(spec.network == "c-network" for spec in topology.containers)

    def test_node_ports_match_inside_and_out(self):
        topology = self.builder.build_cluster("c", ClusterOptions(port_base=7100), None)
        spec = topology.containers[1]

        assert spec.ports == {7101: 7101}
        assert spec.command[:3] == ["redis-server", "--port", "7101"]
        assert "--cluster-enabled" in spec.command

    def test_url_lists_every_node(self):
        topology = self.builder.build_cluster("c", ClusterOptions(masters=3), "pw")

        descriptor = topology.describe(NOW, [])

        assert descriptor.connection.url == (
            "redis://default:pw@localhost:7000,localhost:7001,localhost:7002"
        )
        assert descriptor.attributes.total_nodes == 3

    def test_stack_nodes(self):
        topology = self.builder.build_cluster("c", ClusterOptions(stack=True), None)

        assert topology.containers[0].image == "redis/redis-stack-server:latest"
        assert "--cluster-enabled" in topology.containers[0].environment["REDIS_ARGS"]


class TestSentinelTopology:
    """Test sentinel layouts and generated configuration."""

    def setup_method(self):
        self.builder = TopologyBuilder(RedisUpConfig(config_dir="/tmp/redis-up-test"))

    @pytest.mark.parametrize("sentinels,quorum", [(1, 1), (2, 2), (3, 2), (4, 3), (5, 3)])
    def test_quorum_is_majority(self, sentinels, quorum):
        assert sentinel_quorum(sentinels) == quorum

    def test_layout(self):
        topology = self.builder.build_sentinel(
            "s", SentinelOptions(masters=2, sentinels=3), "pw"
        )

        assert topology.master_containers == ["s-master-1", "s-master-2"]
        assert topology.sentinel_containers == ["s-sentinel-1", "s-sentinel-2", "s-sentinel-3"]
        assert topology.ports == [6379, 6380, 26379, 26380, 26381]
        assert topology.quorum == 2
        assert topology.network == "s-network"
        assert len(topology.config_files) == 3

    def test_zero_masters_clamped(self):
        topology = self.builder.build_sentinel("s", SentinelOptions(masters=0), None)

        assert topology.masters == 1
        assert topology.master_containers == ["s-master-1"]

    def test_sentinel_config_mounted(self):
        topology = self.builder.build_sentinel("s", SentinelOptions(sentinels=1), None)
        spec = topology.containers[-1]
        conf_dir = topology.conf_dir / "s-sentinel-1"

        assert spec.command == ["redis-sentinel", "/etc/redis-sentinel/sentinel.conf"]
        assert spec.volumes == {str(conf_dir): "/etc/redis-sentinel"}
        assert conf_dir / "sentinel.conf" in topology.config_files

    def test_render_config(self):
        text = render_sentinel_config(26379, [("s-master-1", 6379)], 2, "pw")

        assert text == (
            "port 26379\n"
            "sentinel announce-hostnames yes\n"
            "sentinel resolve-hostnames yes\n"
            "sentinel monitor master-1 s-master-1 6379 2\n"
            "sentinel auth-pass master-1 pw\n"
            "sentinel down-after-milliseconds master-1 5000\n"
            "sentinel failover-timeout master-1 10000\n"
            "sentinel parallel-syncs master-1 1\n"
        )

    def test_render_config_without_password(self):
        text = render_sentinel_config(26379, [("m", 6379)], 1, None)

        assert "auth-pass" not in text

    def test_descriptor(self):
        topology = self.builder.build_sentinel("s", SentinelOptions(), "pw")

        descriptor = topology.describe(NOW, [])

        assert descriptor.connection.url == "redis://:pw@localhost:6379"
        assert descriptor.connection.additional_ports == {"sentinel_base": 26379}
        assert descriptor.attributes.conf_dir == str(topology.conf_dir)


class TestEnterpriseTopology:
    """Test enterprise layouts."""

    def setup_method(self):
        self.builder = TopologyBuilder(RedisUpConfig(config_dir="/tmp/redis-up-test"))

    def test_ports(self):
        topology = self.builder.build_enterprise(
            "e", EnterpriseOptions(port_base=8443, db_port=12000), "pw"
        )
        spec = topology.containers[0]

        assert spec.name == "e-enterprise"
        assert spec.ports[8443] == 8443
        assert spec.ports[9443] == 9443
        assert [port for port in spec.ports if port >= 12000] == list(range(12000, 12010))
        assert spec.cap_add == ["SYS_RESOURCE"]

    def test_shifted_port_base(self):
        topology = self.builder.build_enterprise("e", EnterpriseOptions(port_base=9000), "pw")

        assert topology.ui_port == 9000
        assert topology.api_port == 10000

    def test_manual_is_pending(self):
        topology = self.builder.build_enterprise(
            "e", EnterpriseOptions(manual=True, create_db="db"), None
        )

        descriptor = topology.describe(NOW, [])

        assert descriptor.connection.url == PENDING_URL
        assert descriptor.connection.password is None
        assert descriptor.attributes.manual is True
        assert descriptor.attributes.database_name is None

    def test_created_database(self):
        topology = self.builder.build_enterprise("e", EnterpriseOptions(create_db="db"), "pw")

        descriptor = topology.describe(NOW, [])

        assert descriptor.connection.url == "redis://default:pw@localhost:12000"
        assert descriptor.attributes.database_name == "db"
        assert descriptor.connection.additional_ports == {"ui": 8443, "api": 9443}

    def test_persist_volumes(self):
        topology = self.builder.build_enterprise("e", EnterpriseOptions(persist=True), "pw")

        assert topology.volumes == ["e-persistent", "e-ephemeral"]
        assert set(topology.containers[0].volumes) == {"e-persistent", "e-ephemeral"}


class TestBuildDispatch:
    def test_build_dispatches_on_kind(self):
        builder = TopologyBuilder(RedisUpConfig(config_dir="/tmp/redis-up-test"))

        topology = builder.build(InstanceKind.CLUSTER, "c", ClusterOptions(), None)

        assert topology.kind == InstanceKind.CLUSTER

    def test_base_topology_is_abstract(self):
        with pytest.raises(TypeError):
            Topology(name="t", kind=InstanceKind.BASIC, host="localhost", password=None)
