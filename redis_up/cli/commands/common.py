"""Helpers shared by the per-kind start/stop/info commands."""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...core.context import ApplicationContext
from ...core.enums import InstanceKind, OutputFormat
from ...core.errors import RedisUpError
from ...core.log import get_logger
from ...core.types import OPTIONS_BY_KIND, InstanceDescriptor
from ...instances.orchestrator import DeploymentOrchestrator
from ...utils.codec import to_json_string
from ...utils.output import write_stdout

# Centralized descriptions shared by every kind's start command
_HELP = {
    "name": "Instance name (generated when omitted)",
    "password": "Redis password (generated when omitted)",
    "persist": "Keep data in a named volume across restarts",
    "memory": "Container memory limit, e.g. 256m",
    "with_insight": "Also start RedisInsight",
    "insight_port": "Host port for RedisInsight",
    "stop_name": "Instance to stop (defaults to the most recent one)",
    "info_name": "Instance to show (defaults to the most recent one)",
    "format": "Output format: table, json",
}

console = Console()
logger = get_logger(__name__)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Print domain errors in red and exit with status 1."""
    try:
        yield
    except RedisUpError as e:
        logger.debug("Command failed: %s", e, exc_info=True)
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        raise typer.Exit(1)


def get_app_context(ctx: typer.Context) -> ApplicationContext:
    return ctx.find_root().obj["app_context"]


def create_orchestrator(ctx: typer.Context) -> DeploymentOrchestrator:
    app_context = get_app_context(ctx)
    return app_context.create_orchestrator(app_context.load_registry())


def start_instance(ctx: typer.Context, kind: InstanceKind, **fields: Any) -> InstanceDescriptor:
    """Validate start options for kind, deploy and print the result."""
    try:
        options = OPTIONS_BY_KIND[kind](**fields)
    except ValidationError as e:
        console.print(f"[red]Error: Invalid options for {kind.value}: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    with cli_errors():
        orchestrator = create_orchestrator(ctx)
        with console.status(f"Starting {kind.display_name}..."):
            descriptor = orchestrator.start(kind, options)

    console.print(
        f"[green]{kind.display_name} instance '{descriptor.name}' started successfully![/green]"
    )
    print_descriptor(descriptor)
    return descriptor


def stop_instance(ctx: typer.Context, kind: InstanceKind, name: Optional[str]) -> None:
    with cli_errors():
        orchestrator = create_orchestrator(ctx)
        report = orchestrator.stop(kind, name)

    if report.ok:
        console.print(f"[green]Instance '{report.instance}' stopped and removed[/green]")
    else:
        console.print(
            f"[yellow]Instance '{report.instance}' removed with "
            f"{len(report.errors)} errors:[/yellow]"
        )
        for error in report.errors:
            console.print(f"  [yellow]- {escape(error)}[/yellow]")


def show_info(
    ctx: typer.Context, kind: InstanceKind, name: Optional[str], output_format: str
) -> None:
    try:
        fmt = OutputFormat(output_format.lower())
    except ValueError:
        console.print(f"[red]Unknown format: {output_format}[/red]")
        raise typer.Exit(1)

    with cli_errors():
        descriptor = get_app_context(ctx).load_registry().resolve(kind, name)

    if fmt == OutputFormat.JSON:
        write_stdout(to_json_string(descriptor.model_dump(mode="json")))
    else:
        print_descriptor(descriptor)


def print_descriptor(descriptor: InstanceDescriptor) -> None:
    """Render connection details and attributes as a table."""
    connection = descriptor.connection
    table = Table(title=f"{descriptor.kind.display_name}: {descriptor.name}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Name", descriptor.name)
    table.add_row("Type", descriptor.kind.value)
    table.add_row("Created", descriptor.created_at.isoformat())
    table.add_row("Host", connection.host)
    table.add_row("Port", str(connection.port))
    if connection.password:
        table.add_row("Password", connection.password)
    table.add_row("URL", connection.url)
    for label, port in connection.additional_ports.items():
        table.add_row(f"Port ({label})", str(port))
    table.add_row("Containers", "\n".join(descriptor.containers) or "-")
    for key, value in _attribute_rows(descriptor).items():
        table.add_row(key, value)
    console.print(table)


def _attribute_rows(descriptor: InstanceDescriptor) -> Dict[str, str]:
    rows = {}
    for key, value in descriptor.attributes.model_dump(exclude={"kind"}).items():
        if value is None or value == [] or key in ("master_containers", "sentinel_containers"):
            continue
        if isinstance(value, list):
            value = ", ".join(str(item) for item in value)
        rows[key.replace("_", " ").capitalize()] = str(value)
    return rows
