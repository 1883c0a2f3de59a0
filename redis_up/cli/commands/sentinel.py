"""Redis Sentinel commands."""

from typing import Optional

import typer

from ...core.enums import InstanceKind
from .common import _HELP, show_info, start_instance, stop_instance

sentinel_app = typer.Typer(help="Manage Redis Sentinel deployments", no_args_is_help=True)


@sentinel_app.command()
def start(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["name"]),
    masters: int = typer.Option(1, "--masters", help="Number of monitored masters"),
    sentinels: int = typer.Option(3, "--sentinels", help="Number of sentinels"),
    redis_port_base: int = typer.Option(
        6379, "--redis-port-base", help="Port of the first master"
    ),
    sentinel_port_base: int = typer.Option(
        26379, "--sentinel-port-base", help="Port of the first sentinel"
    ),
    password: Optional[str] = typer.Option(None, "--password", help=_HELP["password"]),
    persist: bool = typer.Option(False, "--persist", help=_HELP["persist"]),
    memory: Optional[str] = typer.Option(None, "--memory", help=_HELP["memory"]),
    with_insight: bool = typer.Option(False, "--with-insight", help=_HELP["with_insight"]),
    insight_port: int = typer.Option(8001, "--insight-port", help=_HELP["insight_port"]),
) -> None:
    """Start masters and a sentinel group monitoring them."""
    start_instance(
        ctx,
        InstanceKind.SENTINEL,
        name=name,
        masters=masters,
        sentinels=sentinels,
        redis_port_base=redis_port_base,
        sentinel_port_base=sentinel_port_base,
        password=password,
        persist=persist,
        memory=memory,
        with_insight=with_insight,
        insight_port=insight_port,
    )


@sentinel_app.command()
def stop(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["stop_name"]),
) -> None:
    """Stop and remove masters and sentinels."""
    stop_instance(ctx, InstanceKind.SENTINEL, name)


@sentinel_app.command()
def info(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["info_name"]),
    output_format: str = typer.Option("table", "--format", "-f", help=_HELP["format"]),
) -> None:
    """Show connection details of a sentinel deployment."""
    show_info(ctx, InstanceKind.SENTINEL, name, output_format)
