"""Tests for YAML batch deployment."""

from unittest.mock import Mock

import pytest

from redis_up.core.enums import InstanceKind
from redis_up.core.errors import ConfigFormatError, PortConflictError
from redis_up.core.types import ClusterOptions, EnterpriseOptions, SentinelOptions
from redis_up.instances.batch_deployer import BatchDeployer, load_document, parse_document
from redis_up.instances.batch_examples import EXAMPLES, write_examples


class TestParseDocument:
    """Test document validation."""

    def test_defaults(self):
        document = parse_document(
            """
api-version: v1
deployments:
  - name: c
    type: cluster
  - name: s
    type: sentinel
  - name: e
    type: enterprise
"""
        )
        cluster, sentinel, enterprise = document.deployments

        assert cluster.kind == InstanceKind.CLUSTER
        assert (cluster.masters, cluster.replicas, cluster.port_base) == (3, 1, 7000)
        assert (sentinel.masters, sentinel.sentinels) == (1, 3)
        assert (sentinel.redis_port_base, sentinel.sentinel_port_base) == (6379, 26379)
        assert (enterprise.nodes, enterprise.port_base, enterprise.db_port) == (3, 8443, 12000)
        assert enterprise.create_db == "mydb"

    def test_kebab_case_fields(self):
        document = parse_document(
            """
api-version: v1
deployments:
  - name: b
    type: basic
    with-insight: true
    insight-port: 8010
"""
        )
        entry = document.deployments[0]

        assert entry.with_insight is True
        assert entry.insight_port == 8010

    def test_to_options(self):
        document = parse_document(
            "deployments:\n  - {name: c, type: cluster, masters: 4, port-base: 7100}\n"
        )

        options = document.deployments[0].to_options()

        assert type(options) is ClusterOptions
        assert options.name == "c"
        assert options.masters == 4
        assert options.port_base == 7100
        assert options.replicas == 1

    def test_enterprise_to_options(self):
        document = parse_document("deployments:\n  - {name: e, type: enterprise}\n")

        options = document.deployments[0].to_options()

        assert type(options) is EnterpriseOptions
        assert options.create_db == "mydb"

    @pytest.mark.parametrize("field", ["with-insight: true", "insight-port: 8010"])
    def test_enterprise_rejects_insight(self, field):
        with pytest.raises(ConfigFormatError) as exc_info:
            parse_document(f"deployments:\n  - {{name: e, type: enterprise, {field}}}\n")

        assert field.split(":")[0] in exc_info.value.message

    def test_unsupported_version(self):
        with pytest.raises(ConfigFormatError, match="api-version 'v2'"):
            parse_document("api-version: v2\ndeployments:\n  - {name: a, type: bogus}\n")

    def test_quorum_rejected(self):
        with pytest.raises(ConfigFormatError):
            parse_document(
                "deployments:\n  - {name: s, type: sentinel, quorum: 2}\n"
            )

    def test_unknown_type(self):
        with pytest.raises(ConfigFormatError):
            parse_document("deployments:\n  - {name: x, type: memcached}\n")

    def test_missing_name(self):
        with pytest.raises(ConfigFormatError):
            parse_document("deployments:\n  - {type: basic}\n")

    def test_invalid_yaml(self):
        with pytest.raises(ConfigFormatError, match="not valid YAML"):
            parse_document("deployments: [unclosed")

    def test_non_mapping(self):
        with pytest.raises(ConfigFormatError, match="mapping"):
            parse_document("- a\n- b\n")

    def test_empty_document(self):
        assert parse_document("").deployments == []

    @pytest.mark.parametrize("filename", sorted(EXAMPLES))
    def test_examples_are_valid(self, filename):
        """Test every shipped example parses."""
        assert parse_document(EXAMPLES[filename], filename).deployments


class TestBatchDeployer:
    """Test ordered deployment with failure accumulation."""

    def _document(self):
        return parse_document(
            """
api-version: v1
deployments:
  - {name: one, type: basic}
  - {name: two, type: basic, port: 6380}
  - {name: three, type: sentinel}
"""
        )

    def test_failure_does_not_stop_the_batch(self, mock_logger):
        """Test a failing second entry leaves the first and third deployed."""
        orchestrator = Mock()
        orchestrator.start.side_effect = [
            Mock(name="descriptor-one"),
            PortConflictError("Port 6380 is already in use", port=6380),
            Mock(name="descriptor-three"),
        ]
        outcomes = []

        report = BatchDeployer(orchestrator, mock_logger).deploy(
            self._document(), on_outcome=outcomes.append
        )

        assert report.succeeded == 2
        assert report.failed == 1
        assert [o.name for o in report.outcomes] == ["one", "two", "three"]
        assert isinstance(report.outcomes[1].error, PortConflictError)
        assert outcomes == report.outcomes
        kinds = [call.args[0] for call in orchestrator.start.call_args_list]
        assert kinds == [InstanceKind.BASIC, InstanceKind.BASIC, InstanceKind.SENTINEL]
        assert isinstance(orchestrator.start.call_args_list[2].args[1], SentinelOptions)

    def test_deploy_file(self, temp_dir, mock_logger):
        path = temp_dir / "deploy.yaml"
        path.write_text("deployments:\n  - {name: a, type: basic}\n")
        orchestrator = Mock()

        report = BatchDeployer(orchestrator, mock_logger).deploy_file(path)

        assert report.succeeded == 1

    def test_bad_document_deploys_nothing(self, temp_dir, mock_logger):
        path = temp_dir / "deploy.yaml"
        path.write_text("api-version: v9\ndeployments: []\n")
        orchestrator = Mock()

        with pytest.raises(ConfigFormatError):
            BatchDeployer(orchestrator, mock_logger).deploy_file(path)

        orchestrator.start.assert_not_called()


class TestExamples:
    def test_write_examples(self, temp_dir):
        written = write_examples(temp_dir / "examples")

        assert sorted(path.name for path in written) == sorted(EXAMPLES)
        assert load_document(written[0]).deployments
