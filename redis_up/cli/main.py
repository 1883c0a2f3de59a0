"""Main CLI entry point for redis-up."""

import sys
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.config import load_config
from ..core.config_initializer import initialize_config
from ..core.context import ApplicationContext
from ..core.enums import InstanceKind
from ..core.errors import InstanceNotFoundError, RedisUpError
from ..core.log import add_file_logging, configure_logging, get_logger, shutdown_logging
from ..core.types import InstanceDescriptor
from ..instances.batch_deployer import BatchDeployer, DeploymentOutcome, load_document
from ..instances.batch_examples import write_examples
from ..utils.output import write_stdout_bytes
from .commands.basic import basic_app
from .commands.cluster import cluster_app
from .commands.common import cli_errors, create_orchestrator, get_app_context
from .commands.enterprise import enterprise_app
from .commands.sentinel import sentinel_app
from .commands.stack import stack_app

TYPE_ICONS = {
    InstanceKind.BASIC: "[B]",
    InstanceKind.STACK: "[S]",
    InstanceKind.CLUSTER: "[C]",
    InstanceKind.SENTINEL: "[N]",
    InstanceKind.ENTERPRISE: "[E]",
}

TYPE_STYLES = {
    InstanceKind.BASIC: "cyan",
    InstanceKind.STACK: "magenta",
    InstanceKind.CLUSTER: "yellow",
    InstanceKind.SENTINEL: "blue",
    InstanceKind.ENTERPRISE: "red",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class GlobalCliOptions(BaseModel):
    """Global CLI options that can be used across all commands."""

    verbose: int = Field(0, description="Increase verbosity level")
    config_file: Optional[Path] = Field(None, description="Configuration file path")
    log_level: str = Field(
        "WARNING", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_file: Optional[Path] = Field(None, description="JSON-lines log file")

    model_config = ConfigDict(use_enum_values=True)


app = typer.Typer(
    name="redis-up",
    help="Local Redis deployments on Docker",
    no_args_is_help=True,
    rich_markup_mode="markdown",
)
app.add_typer(basic_app, name="basic", help="Single Redis containers")
app.add_typer(stack_app, name="stack", help="Redis Stack with modules")
app.add_typer(cluster_app, name="cluster", help="Redis Cluster deployments")
app.add_typer(sentinel_app, name="sentinel", help="Redis Sentinel deployments")
app.add_typer(enterprise_app, name="enterprise", help="Redis Enterprise")
console = Console()
logger = get_logger(__name__)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Increase verbosity level"
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR) - explicit level",
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write JSON-lines logs to this file"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
) -> None:
    """redis-up: start, inspect and tear down local Redis deployments."""
    if verbose > 0 and log_level is not None:
        console.print("[red]Error: Cannot specify both --verbose and --log-level[/red]")
        raise typer.Exit(1)
    if log_level is not None and log_level.upper() not in LOG_LEVELS:
        console.print(f"[red]Error: Invalid log level '{escape(log_level)}'[/red]")
        raise typer.Exit(1)

    ctx.ensure_object(dict)
    try:
        config = initialize_config(
            load_config(config_file, log_level=log_level.upper() if log_level else None)
        )
    except RedisUpError as e:
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        raise typer.Exit(1)

    if log_level is None and verbose > 0:
        resolved_log_level = "DEBUG" if verbose >= 2 else "INFO"
    else:
        resolved_log_level = config.log_level.upper()

    cli_options = GlobalCliOptions(
        verbose=verbose,
        config_file=config_file,
        log_level=resolved_log_level,
        log_file=log_file,
    )
    ctx.obj["cli_options"] = cli_options

    configure_logging(level=cli_options.log_level, enable_console=True)
    if cli_options.log_file is not None:
        add_file_logging(cli_options.log_file)

    # Tests hand in a runtime through ctx.obj
    ctx.obj["app_context"] = ApplicationContext.create(
        config, runtime=ctx.obj.get("runtime")
    )


@app.command()
def version() -> None:
    """Show version information."""
    from importlib.metadata import PackageNotFoundError, version as package_version

    from .. import __version__

    table = Table(title="redis-up Version Information")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    table.add_row("redis-up", __version__)
    for package in ("docker", "typer", "pydantic"):
        try:
            table.add_row(package, package_version(package))
        except PackageNotFoundError:
            table.add_row(package, "[red]Not installed[/red]")
    console.print(table)


@app.command()
def config(ctx: typer.Context) -> None:
    """Show current configuration."""
    current_config = get_app_context(ctx).config
    table = Table(title="redis-up Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Config Directory", str(current_config.config_dir))
    table.add_row("State File", str(current_config.state_path))
    table.add_row("Name Prefix", current_config.name_prefix)
    table.add_row("Host", current_config.host)
    table.add_row("Log Level", current_config.log_level)
    table.add_row("Redis Image", current_config.images.redis)
    table.add_row("Stack Image", current_config.images.stack)
    table.add_row("Insight Image", current_config.images.insight)
    table.add_row("Enterprise Image", current_config.images.enterprise)
    table.add_row("Container Stop Timeout", f"{current_config.timeouts.container_stop}s")
    table.add_row("Node Ready Timeout", f"{current_config.timeouts.node_ready}s")
    table.add_row("Enterprise Ready Timeout", f"{current_config.timeouts.enterprise_ready}s")
    console.print(table)


def _parse_type_filter(type_filter: Optional[str]) -> Optional[InstanceKind]:
    """Kind named by --type; warns and exits cleanly on an unknown value."""
    if type_filter is None:
        return None
    try:
        return InstanceKind(type_filter.lower())
    except ValueError:
        valid = ", ".join(kind.value for kind in InstanceKind)
        console.print(
            f"[yellow]Warning:[/yellow] Invalid type filter: [red]{escape(type_filter)}[/red]. "
            f"Valid types: {valid}"
        )
        raise typer.Exit(0)


def _instance_line(descriptor: InstanceDescriptor) -> str:
    kind = descriptor.kind
    return (
        f"{escape(TYPE_ICONS[kind])} [bold green]{descriptor.name}[/bold green] "
        f"([{TYPE_STYLES[kind]}]{kind.value}[/{TYPE_STYLES[kind]}])"
    )


@app.command(name="list")
def list_instances(
    ctx: typer.Context,
    type_filter: Optional[str] = typer.Option(
        None, "--type", "-t", help="Only list instances of this type"
    ),
) -> None:
    """List registered instances, newest first."""
    kind = _parse_type_filter(type_filter)
    with cli_errors():
        registry = get_app_context(ctx).load_registry()
    instances = registry.list_by_kind(kind) if kind else registry.list_all()

    if not instances:
        console.print("[blue]Info:[/blue] No Redis instances found")
        console.print("  Start one with: [green]redis-up basic start[/green]")
        return

    verbose = ctx.find_root().obj["cli_options"].verbose > 0
    console.print("[bold cyan]Redis Instances[/bold cyan]\n")
    for descriptor in instances:
        connection = descriptor.connection
        console.print(f"  {_instance_line(descriptor)}")
        console.print(f"    [dim]Address[/dim]: [cyan]{connection.host}:{connection.port}[/cyan]")
        if verbose:
            console.print(f"    [dim]Created[/dim]: {descriptor.created_at.isoformat()}")
            console.print(f"    [dim]Containers[/dim]: {', '.join(descriptor.containers)}")
            if connection.additional_ports:
                ports = ", ".join(f"{k}={v}" for k, v in connection.additional_ports.items())
                console.print(f"    [dim]Additional Ports[/dim]: {ports}")
        console.print()
    console.print(f"Total: [bold]{len(instances)}[/bold] instances")


@app.command()
def cleanup(
    ctx: typer.Context,
    type_filter: Optional[str] = typer.Option(
        None, "--type", "-t", help="Only clean up instances of this type"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Skip the confirmation prompt"),
) -> None:
    """Stop and remove every registered instance (of a type)."""
    kind = _parse_type_filter(type_filter)
    with cli_errors():
        orchestrator = create_orchestrator(ctx)
    registry = orchestrator.registry
    targets = registry.list_by_kind(kind) if kind else registry.list_all()

    if not targets:
        suffix = f" of type '{kind.value}'" if kind else ""
        console.print(f"[blue]Info:[/blue] No Redis instances found{suffix}")
        return

    noun = "instance" if len(targets) == 1 else "instances"
    console.print(f"[bold yellow]Cleanup:[/bold yellow] {len(targets)} {noun} to clean up:\n")
    for descriptor in targets:
        console.print(f"  {_instance_line(descriptor)}")
    console.print()

    if not force and not typer.confirm("Are you sure?", default=False):
        console.print("Cleanup cancelled.")
        return

    with cli_errors():
        report = orchestrator.cleanup(kind)

    for name in report.instances:
        console.print(f"[green]Success:[/green] Cleaned up: [bold green]{name}[/bold green]")
    console.print()
    if report.error_count:
        console.print(
            f"[yellow]Warning:[/yellow] Cleanup completed with [red]{report.error_count}[/red] "
            f"errors. [green]{report.cleaned}[/green] instances cleaned up."
        )
        for error in report.errors:
            console.print(f"  [yellow]- {escape(error)}[/yellow]")
    else:
        console.print(
            f"[bold green]Success:[/bold green] All {report.cleaned} instances "
            f"cleaned up successfully!"
        )


@app.command()
def logs(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(
        None, help="Instance name (defaults to the most recently created one)"
    ),
    follow: bool = typer.Option(False, "--follow", "-f", help="Stream new log output"),
    tail: int = typer.Option(20, "--tail", "-n", help="Number of lines to show"),
    timestamps: bool = typer.Option(False, "--timestamps", "-t", help="Show timestamps"),
) -> None:
    """Show the logs of an instance's first container."""
    app_context = get_app_context(ctx)
    with cli_errors():
        registry = app_context.load_registry()
        if name is None:
            descriptor = registry.latest()
            if descriptor is None:
                raise InstanceNotFoundError(
                    "No Redis instances found. Use 'redis-up basic start' or similar "
                    "to create an instance."
                )
        else:
            descriptor = registry.get(name)
            if descriptor is None:
                raise InstanceNotFoundError(
                    f"Instance '{name}' not found. Use 'redis-up list' to see "
                    f"available instances.",
                    instance=name,
                )
        if not descriptor.containers:
            raise InstanceNotFoundError(
                f"Instance '{descriptor.name}' has no containers yet", instance=descriptor.name
            )

        container = descriptor.containers[0]
        if follow:
            console.print(
                f"[bold blue]Logs:[/bold blue] Following logs for '{descriptor.name}' "
                f"(press Ctrl+C to exit):"
            )
        else:
            console.print(
                f"[bold blue]Logs:[/bold blue] Last {tail} lines for '{descriptor.name}':"
            )
        for chunk in app_context.runtime.stream_logs(
            container, follow=follow, tail=tail, timestamps=timestamps
        ):
            write_stdout_bytes(chunk)


def _print_outcome(outcome: DeploymentOutcome) -> None:
    if outcome.succeeded:
        console.print(
            f"  [green]✓[/green] {outcome.name} ({outcome.kind.value}): "
            f"{escape(outcome.descriptor.connection.url)}"
        )
    else:
        console.print(
            f"  [red]✗[/red] {outcome.name} ({outcome.kind.value}): "
            f"{escape(outcome.error.message)}"
        )


@app.command()
def deploy(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="YAML deployment document"),
) -> None:
    """Deploy every instance listed in a YAML document."""
    app_context = get_app_context(ctx)
    with cli_errors():
        document = load_document(file)
        orchestrator = create_orchestrator(ctx)

    console.print(
        f"[bold cyan]Deploying[/bold cyan] {len(document.deployments)} instances from {file}\n"
    )
    deployer = BatchDeployer(orchestrator, app_context.logger)
    report = deployer.deploy(document, on_outcome=_print_outcome)

    console.print()
    if report.failed:
        console.print(
            f"[yellow]Warning:[/yellow] {report.succeeded} deployments succeeded, "
            f"[red]{report.failed}[/red] failed"
        )
    else:
        console.print("[bold green]Done:[/bold green] All deployments complete")


@app.command()
def examples(
    directory: Path = typer.Argument(
        Path("examples"), help="Directory to write the example documents to"
    ),
) -> None:
    """Write example deployment documents."""
    with cli_errors():
        written: List[Path] = write_examples(directory)
    for path in written:
        console.print(f"  [green]✓[/green] Created: {path}")
    console.print()
    console.print(f"Deploy one with: [green]redis-up deploy {written[0]}[/green]")


def cli_main() -> None:
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except (RuntimeError, OSError, ValueError) as e:
        logger.error("Unexpected error: %s", e)
        console.print(f"[red]Unexpected error: {escape(str(e))}[/red]")
        sys.exit(1)
    finally:
        shutdown_logging()


if __name__ == "__main__":
    cli_main()
