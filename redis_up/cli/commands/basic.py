"""Basic Redis instance commands."""

from typing import Optional

import typer

from ...core.enums import InstanceKind
from .common import _HELP, show_info, start_instance, stop_instance

basic_app = typer.Typer(help="Manage single Redis containers", no_args_is_help=True)


@basic_app.command()
def start(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["name"]),
    port: int = typer.Option(6379, "--port", "-p", help="Host port for Redis"),
    password: Optional[str] = typer.Option(None, "--password", help=_HELP["password"]),
    persist: bool = typer.Option(False, "--persist", help=_HELP["persist"]),
    memory: Optional[str] = typer.Option(None, "--memory", help=_HELP["memory"]),
    with_insight: bool = typer.Option(False, "--with-insight", help=_HELP["with_insight"]),
    insight_port: int = typer.Option(8001, "--insight-port", help=_HELP["insight_port"]),
) -> None:
    """Start a single Redis container."""
    start_instance(
        ctx,
        InstanceKind.BASIC,
        name=name,
        port=port,
        password=password,
        persist=persist,
        memory=memory,
        with_insight=with_insight,
        insight_port=insight_port,
    )


@basic_app.command()
def stop(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["stop_name"]),
) -> None:
    """Stop and remove a Redis instance."""
    stop_instance(ctx, InstanceKind.BASIC, name)


@basic_app.command()
def info(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["info_name"]),
    output_format: str = typer.Option("table", "--format", "-f", help=_HELP["format"]),
) -> None:
    """Show connection details of a Redis instance."""
    show_info(ctx, InstanceKind.BASIC, name, output_format)
