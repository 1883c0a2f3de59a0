"""Sample batch documents written by `redis-up examples`."""

from pathlib import Path
from typing import Dict, List

from ..utils.filesystem import atomic_write, ensure_dir

EXAMPLES: Dict[str, str] = {
    "basic.yaml": """\
api-version: v1
deployments:
  - name: my-redis
    type: basic
    port: 6379
    persist: true
    memory: "512m"
    with-insight: true
""",
    "stack.yaml": """\
api-version: v1
deployments:
  - name: my-stack
    type: stack
    port: 6380
    persist: true
    memory: "1g"
    with-insight: true
    insight-port: 8002
""",
    "cluster.yaml": """\
api-version: v1
deployments:
  - name: my-cluster
    type: cluster
    masters: 3
    replicas: 1
    port-base: 7000
    persist: true
    memory: "256m"
    stack: false
    with-insight: true
""",
    "sentinel.yaml": """\
api-version: v1
deployments:
  - name: my-sentinel
    type: sentinel
    sentinels: 3
    redis-port-base: 6379
    sentinel-port-base: 26379
    persist: true
    memory: "512m"
""",
    "enterprise.yaml": """\
api-version: v1
deployments:
  - name: my-enterprise
    type: enterprise
    nodes: 1
    port-base: 8443
    create-db: "mydb"
    db-port: 12000
    memory: "4g"
    persist: false
""",
    "multi-deployment.yaml": """\
api-version: v1
deployments:
  - name: cache-redis
    type: basic
    port: 6379
    memory: "256m"

  - name: analytics-stack
    type: stack
    port: 6380
    persist: true
    memory: "1g"
    with-insight: true

  - name: session-cluster
    type: cluster
    masters: 3
    replicas: 1
    port-base: 7000
    memory: "512m"
""",
}


def write_examples(directory: Path) -> List[Path]:
    """Write every example document into directory, overwriting existing files."""
    directory = ensure_dir(Path(directory))
    written = []
    for filename, content in EXAMPLES.items():
        path = directory / filename
        atomic_write(path, content)
        written.append(path)
    return written
