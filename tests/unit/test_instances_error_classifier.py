"""Tests for runtime failure classification."""

import pytest

from redis_up.core.enums import InstanceKind
from redis_up.core.errors import (
    BootstrapError,
    ContainerRuntimeError,
    NameConflictError,
    PortConflictError,
    RuntimeFailureError,
)
from redis_up.instances.error_classifier import (
    classify_runtime_error,
    is_name_conflict,
    is_port_conflict,
)
from redis_up.instances.topology import BasicTopology, SentinelTopology


def _topology(kind=InstanceKind.BASIC, ports=(6379,)):
    return BasicTopology(name="x", kind=kind, host="localhost", password=None, ports=list(ports))


class TestMarkers:
    """Test substring detection."""

    @pytest.mark.parametrize(
        "message",
        [
            'The container name "/x" is already in use by container "1"',
            "Conflict. Something",
            "network x already exists",
        ],
    )
    def test_name_conflicts(self, message):
        assert is_name_conflict(message)

    @pytest.mark.parametrize(
        "message",
        [
            "Bind for 0.0.0.0:6379 failed: port is already allocated",
            "listen tcp 0.0.0.0:6379: bind: address already in use",
            "failed to set up container networking",
            "driver failed programming external connectivity on endpoint x",
        ],
    )
    def test_port_conflicts(self, message):
        assert is_port_conflict(message)

    def test_unrelated_message(self):
        assert not is_name_conflict("no such image")
        assert not is_port_conflict("no such image")


class TestClassifyRuntimeError:
    """Test the mapping onto deployment errors."""

    def test_name_wins_over_port(self):
        error = ContainerRuntimeError("Conflict: bind")

        assert isinstance(classify_runtime_error(error, _topology()), NameConflictError)

    def test_sentinel_port_hint(self):
        topology = SentinelTopology(
            name="x", kind=InstanceKind.SENTINEL, host="localhost", password=None,
            ports=[6379, 26379],
        )

        result = classify_runtime_error(
            ContainerRuntimeError("port is already allocated"), topology
        )

        assert isinstance(result, PortConflictError)
        assert "--redis-port-base" in result.message
        assert result.port == 6379

    def test_non_runtime_errors_are_plain_failures(self):
        """Test bootstrap errors are not scanned for conflict markers."""
        result = classify_runtime_error(BootstrapError("node already exists"), _topology())

        assert isinstance(result, RuntimeFailureError)

    def test_context_is_carried(self):
        result = classify_runtime_error(
            ContainerRuntimeError("boom"), _topology(), ["network x: busy"]
        )

        assert result.instance == "x"
        assert result.kind == "basic"
        assert result.cleanup_errors == ["network x: busy"]
        assert result.details == {"cause": "boom"}

    def test_only_daemon_text_is_scanned(self):
        """Test conflict words in the container name do not classify the error."""
        error = ContainerRuntimeError(
            "Failed to create container rebind-cache: invalid reference format",
            operation="create container",
            target="rebind-cache",
            runtime_message="invalid reference format",
        )

        result = classify_runtime_error(error, _topology())

        assert isinstance(result, RuntimeFailureError)
        assert "rebind-cache" in result.message

    def test_foreign_errors_are_plain_failures(self):
        result = classify_runtime_error(OSError("connection reset by peer"), _topology())

        assert isinstance(result, RuntimeFailureError)
        assert "connection reset by peer" in result.message
