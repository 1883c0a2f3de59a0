"""Post-start initialization of cluster and enterprise deployments."""

import time
from typing import Any, Callable, Dict, List, Optional

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from ..core.errors import BootstrapError, ContainerRuntimeError
from ..core.log import Logger
from ..core.protocols import ContainerRuntime
from ..core.types import TimeoutConfig
from .topology import ClusterTopology, EnterpriseTopology

DATABASE_MEMORY_BYTES = 100 * 1024 * 1024


class ClusterBootstrapper:
    """Joins the started nodes of a ClusterTopology into a Redis Cluster.

    Runs redis-cli inside the first node, addressing every node by its
    address on the instance network.
    """

    def __init__(
        self,
        runtime: ContainerRuntime,
        logger: Logger,
        timeouts: Optional[TimeoutConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._runtime = runtime
        self._logger = logger
        self._timeouts = timeouts or TimeoutConfig()
        self._sleep = sleep

    def bootstrap(self, topology: ClusterTopology) -> None:
        """Wait for every node, then create the cluster.

        Raises:
            BootstrapError: If a node never answers or cluster creation fails
        """
        nodes = topology.container_names
        for node, port in zip(nodes, topology.ports):
            self.wait_for_node(node, port, topology.password)

        addresses = [
            f"{self.node_address(node)}:{port}" for node, port in zip(nodes, topology.ports)
        ]
        command = self.create_command(addresses, topology.replicas, topology.password)
        self._logger.info(
            "Creating cluster %s: %d masters, %d replicas per master",
            topology.name,
            topology.masters,
            topology.replicas,
        )
        try:
            output = self._runtime.exec_in_container(nodes[0], command)
        except ContainerRuntimeError as e:
            raise BootstrapError(f"Cluster creation failed for {topology.name}: {e}") from e
        self._logger.debug("redis-cli --cluster create output:\n%s", output)

    @staticmethod
    def create_command(addresses: List[str], replicas: int, password: Optional[str]) -> List[str]:
        command = ["redis-cli"]
        if password:
            command += ["-a", password, "--no-auth-warning"]
        command += ["--cluster", "create", *addresses]
        command += ["--cluster-replicas", str(replicas), "--cluster-yes"]
        return command

    def node_address(self, node: str) -> str:
        """IP address of a node on the instance network."""
        try:
            output = self._runtime.exec_in_container(node, ["hostname", "-i"])
        except ContainerRuntimeError as e:
            raise BootstrapError(f"Could not resolve address of {node}: {e}") from e
        addresses = output.split()
        if not addresses:
            raise BootstrapError(f"Node {node} reported no address")
        return addresses[0]

    def wait_for_node(self, node: str, port: int, password: Optional[str]) -> None:
        """Poll redis-cli PING until the node answers."""
        command = ["redis-cli", "-p", str(port)]
        if password:
            command += ["-a", password, "--no-auth-warning"]
        command.append("ping")

        timeout = self._timeouts.node_ready
        start_time = time.time()
        last_error: Optional[str] = None
        while time.time() - start_time < timeout:
            try:
                if "PONG" in self._runtime.exec_in_container(node, command):
                    self._logger.debug("Node %s is ready", node)
                    return
            except ContainerRuntimeError as e:
                last_error = str(e)
            self._sleep(self._timeouts.poll_interval)

        raise BootstrapError(
            f"Node {node} did not become ready within {timeout}s"
            + (f": {last_error}" if last_error else "")
        )


class EnterpriseBootstrapper:
    """Drives the Redis Enterprise REST API to create a cluster and database."""

    def __init__(
        self,
        logger: Logger,
        timeouts: Optional[TimeoutConfig] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._logger = logger
        self._timeouts = timeouts or TimeoutConfig()
        self._session = session or requests.Session()
        # The admin API serves a self-signed certificate
        self._session.verify = False
        urllib3.disable_warnings(InsecureRequestWarning)
        self._sleep = sleep

    def bootstrap(self, topology: EnterpriseTopology) -> None:
        """Bootstrap the cluster and optionally create the database.

        Raises:
            BootstrapError: If the API never becomes ready or rejects a request
        """
        base_url = f"https://{topology.host}:{topology.api_port}"
        if topology.nodes > 1:
            self._logger.warning(
                "Requested %d nodes; starting a single-node cluster", topology.nodes
            )

        self.wait_for_api(base_url)
        self.create_cluster(base_url, topology)
        self.wait_for_bootstrap(base_url)
        if topology.creates_database:
            self.create_database(base_url, topology)

    def wait_for_api(self, base_url: str) -> None:
        timeout = self._timeouts.enterprise_ready
        start_time = time.time()
        while time.time() - start_time < timeout:
            try:
                response = self._session.get(
                    f"{base_url}/v1/bootstrap", timeout=self._timeouts.enterprise_request
                )
                if response.status_code == 200:
                    self._logger.debug("Enterprise API at %s is up", base_url)
                    return
            except requests.RequestException as e:
                self._logger.debug("Enterprise API not reachable yet: %s", e)
            self._sleep(self._timeouts.poll_interval)

        raise BootstrapError(f"Enterprise API at {base_url} not ready within {timeout}s")

    def create_cluster(self, base_url: str, topology: EnterpriseTopology) -> None:
        payload = {
            "action": "create_cluster",
            "cluster": {"name": topology.cluster_name},
            "node": {
                "paths": {
                    "persistent_path": "/var/opt/redislabs/persist",
                    "ephemeral_path": "/var/opt/redislabs/tmp",
                }
            },
            "credentials": {"username": topology.username, "password": topology.password},
        }
        self._logger.info("Bootstrapping enterprise cluster %s", topology.cluster_name)
        self._post(f"{base_url}/v1/bootstrap/create_cluster", payload)

    def wait_for_bootstrap(self, base_url: str) -> None:
        timeout = self._timeouts.enterprise_bootstrap
        start_time = time.time()
        state = None
        while time.time() - start_time < timeout:
            try:
                response = self._session.get(
                    f"{base_url}/v1/bootstrap", timeout=self._timeouts.enterprise_request
                )
                state = _bootstrap_state(response.json())
            except (requests.RequestException, ValueError) as e:
                self._logger.debug("Bootstrap status unavailable: %s", e)
            if state == "completed":
                return
            if state == "error":
                raise BootstrapError("Enterprise cluster bootstrap reported an error")
            self._sleep(self._timeouts.poll_interval)

        raise BootstrapError(
            f"Enterprise cluster bootstrap not completed within {timeout}s (state: {state})"
        )

    def create_database(self, base_url: str, topology: EnterpriseTopology) -> None:
        """Create the database, retrying while the fresh cluster settles."""
        payload = {
            "name": topology.database_name,
            "port": topology.db_port,
            "memory_size": DATABASE_MEMORY_BYTES,
        }
        if topology.password:
            payload["authentication_redis_pass"] = topology.password

        timeout = self._timeouts.enterprise_ready
        start_time = time.time()
        last_error = ""
        while time.time() - start_time < timeout:
            try:
                self._post(
                    f"{base_url}/v1/bdbs",
                    payload,
                    auth=(topology.username, topology.password),
                )
                self._logger.info(
                    "Created database %s on port %d", topology.database_name, topology.db_port
                )
                return
            except BootstrapError as e:
                last_error = e.message
            self._sleep(self._timeouts.poll_interval)

        raise BootstrapError(
            f"Could not create database {topology.database_name}: {last_error}"
        )

    def _post(self, url: str, payload: Dict[str, Any], auth: Optional[tuple] = None) -> None:
        try:
            response = self._session.post(
                url, json=payload, auth=auth, timeout=self._timeouts.enterprise_request
            )
        except requests.RequestException as e:
            raise BootstrapError(f"Request to {url} failed: {e}") from e
        if response.status_code >= 400:
            raise BootstrapError(
                f"Request to {url} failed with HTTP {response.status_code}: {response.text}"
            )


def _bootstrap_state(body: Any) -> Optional[str]:
    """State of a /v1/bootstrap response body, or None when it is malformed."""
    if not isinstance(body, dict):
        return None
    status = body.get("bootstrap_status")
    if not isinstance(status, dict):
        return None
    return status.get("state")
