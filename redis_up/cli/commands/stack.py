"""Redis Stack commands."""

from typing import List, Optional

import typer

from ...core.enums import InstanceKind
from ...core.types import STACK_MODULES
from .common import _HELP, show_info, start_instance, stop_instance

stack_app = typer.Typer(help="Manage Redis Stack containers", no_args_is_help=True)


def selected_modules(
    with_json: bool, with_search: bool, with_timeseries: bool, with_graph: bool,
    with_bloom: bool, demo_bundle: bool,
) -> List[str]:
    """Modules picked by the --with-* flags; none picked means all of them."""
    if demo_bundle:
        return list(STACK_MODULES)
    flags = {
        "JSON": with_json,
        "Search": with_search,
        "Graph": with_graph,
        "TimeSeries": with_timeseries,
        "Bloom": with_bloom,
    }
    return [module for module in STACK_MODULES if flags[module]] or list(STACK_MODULES)


@stack_app.command()
def start(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["name"]),
    port: int = typer.Option(6379, "--port", "-p", help="Host port for Redis"),
    password: Optional[str] = typer.Option(None, "--password", help=_HELP["password"]),
    persist: bool = typer.Option(False, "--persist", help=_HELP["persist"]),
    memory: Optional[str] = typer.Option(None, "--memory", help=_HELP["memory"]),
    with_insight: bool = typer.Option(False, "--with-insight", help=_HELP["with_insight"]),
    insight_port: int = typer.Option(8001, "--insight-port", help=_HELP["insight_port"]),
    with_json: bool = typer.Option(False, "--with-json", help="Enable RedisJSON"),
    with_search: bool = typer.Option(False, "--with-search", help="Enable RediSearch"),
    with_timeseries: bool = typer.Option(
        False, "--with-timeseries", help="Enable RedisTimeSeries"
    ),
    with_graph: bool = typer.Option(False, "--with-graph", help="Enable RedisGraph"),
    with_bloom: bool = typer.Option(False, "--with-bloom", help="Enable RedisBloom"),
    demo_bundle: bool = typer.Option(False, "--demo-bundle", help="Enable every module"),
) -> None:
    """Start a Redis Stack container."""
    start_instance(
        ctx,
        InstanceKind.STACK,
        name=name,
        port=port,
        password=password,
        persist=persist,
        memory=memory,
        with_insight=with_insight,
        insight_port=insight_port,
        modules=selected_modules(
            with_json, with_search, with_timeseries, with_graph, with_bloom, demo_bundle
        ),
    )


@stack_app.command()
def stop(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["stop_name"]),
) -> None:
    """Stop and remove a Redis Stack instance."""
    stop_instance(ctx, InstanceKind.STACK, name)


@stack_app.command()
def info(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help=_HELP["info_name"]),
    output_format: str = typer.Option("table", "--format", "-f", help=_HELP["format"]),
) -> None:
    """Show connection details of a Redis Stack instance."""
    show_info(ctx, InstanceKind.STACK, name, output_format)
