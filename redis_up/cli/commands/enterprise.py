"""Redis Enterprise commands."""

from typing import Optional

import typer

from ...core.enums import InstanceKind
from .common import _HELP, console, show_info, start_instance, stop_instance

enterprise_app = typer.Typer(help="Manage Redis Enterprise containers", no_args_is_help=True)


@enterprise_app.command()
def start(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["name"]),
    nodes: int = typer.Option(3, "--nodes", help="Requested cluster nodes"),
    port_base: int = typer.Option(
        8443, "--port-base", help="Host port of the admin UI (API is port-base + 1000)"
    ),
    create_db: Optional[str] = typer.Option(
        None, "--create-db", help="Create a database with this name"
    ),
    db_port: int = typer.Option(12000, "--db-port", help="Port of the created database"),
    password: Optional[str] = typer.Option(None, "--password", help=_HELP["password"]),
    persist: bool = typer.Option(False, "--persist", help=_HELP["persist"]),
    memory: Optional[str] = typer.Option(None, "--memory", help=_HELP["memory"]),
    manual: bool = typer.Option(
        False, "--manual", help="Skip bootstrap and set the cluster up in the admin UI"
    ),
) -> None:
    """Start a Redis Enterprise admin container."""
    descriptor = start_instance(
        ctx,
        InstanceKind.ENTERPRISE,
        name=name,
        nodes=nodes,
        port_base=port_base,
        create_db=create_db,
        db_port=db_port,
        password=password,
        persist=persist,
        memory=memory,
        manual=manual,
    )
    if manual:
        console.print(
            f"Finish the setup at https://{descriptor.connection.host}:{port_base}"
        )


@enterprise_app.command()
def stop(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["stop_name"]),
) -> None:
    """Stop and remove an enterprise container and its volumes."""
    stop_instance(ctx, InstanceKind.ENTERPRISE, name)


@enterprise_app.command()
def info(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["info_name"]),
    output_format: str = typer.Option("table", "--format", "-f", help=_HELP["format"]),
) -> None:
    """Show connection details of an enterprise deployment."""
    show_info(ctx, InstanceKind.ENTERPRISE, name, output_format)
