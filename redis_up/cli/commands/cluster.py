"""Redis Cluster commands."""

from typing import Optional

import typer

from ...core.enums import InstanceKind
from .common import _HELP, show_info, start_instance, stop_instance

cluster_app = typer.Typer(help="Manage Redis Cluster deployments", no_args_is_help=True)


@cluster_app.command()
def start(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["name"]),
    masters: int = typer.Option(3, "--masters", help="Number of master nodes"),
    replicas: int = typer.Option(0, "--replicas", help="Replicas per master"),
    port_base: int = typer.Option(7000, "--port-base", help="Port of the first node"),
    password: Optional[str] = typer.Option(None, "--password", help=_HELP["password"]),
    persist: bool = typer.Option(False, "--persist", help=_HELP["persist"]),
    memory: Optional[str] = typer.Option(None, "--memory", help=_HELP["memory"]),
    stack: bool = typer.Option(False, "--stack", help="Use Redis Stack nodes"),
    with_insight: bool = typer.Option(False, "--with-insight", help=_HELP["with_insight"]),
    insight_port: int = typer.Option(8001, "--insight-port", help=_HELP["insight_port"]),
) -> None:
    """Start a Redis Cluster, one container per node."""
    start_instance(
        ctx,
        InstanceKind.CLUSTER,
        name=name,
        masters=masters,
        replicas=replicas,
        port_base=port_base,
        password=password,
        persist=persist,
        memory=memory,
        stack=stack,
        with_insight=with_insight,
        insight_port=insight_port,
    )


@cluster_app.command()
def stop(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["stop_name"]),
) -> None:
    """Stop and remove every node of a cluster."""
    stop_instance(ctx, InstanceKind.CLUSTER, name)


@cluster_app.command()
def info(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["info_name"]),
    output_format: str = typer.Option("table", "--format", "-f", help=_HELP["format"]),
) -> None:
    """Show connection details of a cluster."""
    show_info(ctx, InstanceKind.CLUSTER, name, output_format)
