"""
CLI module - Command line interface for Sequence Runner

Entry point for the `seqr` command using Typer.
"""

import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import AppConfig, ConfigError, load_config
from .delegates import ConsoleDelegate
from .logs import setup_logging
from .runners import RunnerEvents, RunnerResult, UnknownImplementationError, create_runner, default_registry
from .work import ItemsFileError, WorkItem, load_items

console = Console()
app = typer.Typer(
    name="seqr",
    help="Sequence Runner - run work items one at a time with pluggable presentation.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    if value:
        console.print(f"seqr version {__version__}")
        raise typer.Exit()


ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to config file", exists=True, dir_okay=False),
]


def get_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration, exiting with a message when it is malformed."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] Invalid config: {e}")
        raise typer.Exit(1) from e


@app.callback()
def main(
    version: Annotated[
        bool, typer.Option("--version", "-v", callback=version_callback, is_eager=True, help="Show version")
    ] = False,
):
    """Sequence Runner - run work items one at a time with pluggable presentation."""
    pass


def print_summary(result: RunnerResult, items: list[WorkItem]) -> None:
    """Print the per-item table and the run totals."""
    table = Table(title="Run Summary")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Item", style="cyan")
    table.add_column("Priority", justify="right")
    table.add_column("Status")
    table.add_column("Time", justify="right", style="dim")

    for idx, item in enumerate(items, 1):
        if item.is_processed:
            status_str = "[green]Completed[/green]"
        elif item.is_skipped:
            status_str = "[yellow]Skipped[/yellow]"
        else:
            status_str = "[red]Not run[/red]"
        if item.processing_start_time is not None and item.processing_end_time is not None:
            time_str = f"{(item.processing_end_time - item.processing_start_time) * 1000:.0f}ms"
        else:
            time_str = "-"
        table.add_row(str(idx), escape(item.label), str(item.effective_priority), status_str, time_str)

    console.print(table)
    console.print(
        f"[bold]{result.items_completed}/{result.total}[/bold] completed, "
        f"{result.items_skipped} skipped in {result.elapsed:.2f}s"
    )

    if result.warnings:
        console.print("\n[yellow]Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  {warning}")

    if result.errors:
        console.print("\n[yellow]Errors:[/yellow]")
        for err in result.errors:
            console.print(f"  {err}")


@app.command()
def run(
    items_file: Annotated[Path, typer.Argument(help="YAML file with the items to run", exists=True, dir_okay=False)],
    feature: Annotated[str, typer.Option("--feature", "-f", help="Named runner from the config (see features)")] = None,
    priority: Annotated[bool, typer.Option("--priority", "-p", help="Run items by priority, highest first")] = False,
    delay: Annotated[float, typer.Option("--delay", help="Milliseconds before the first item starts")] = None,
    speed: Annotated[float, typer.Option("--speed", help="Console playback speed factor")] = 1.0,
    no_delegate: Annotated[
        bool, typer.Option("--no-delegate", help="Run without presentation (items advance on their duration)")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log every transition")] = False,
    config: ConfigOption = None,
):
    """
    Run the items in a file through a runner.

    Each item is shown on the console for its duration; items are run in
    file order unless --priority is given.

    [bold]Examples:[/bold]

        seqr run items.yaml

        seqr run items.yaml --priority --delay 500

        seqr run items.yaml --feature bigWin -c config.yaml
    """
    cfg = get_config(config)
    setup_logging(cfg.logging, level="DEBUG" if verbose else None)

    try:
        items = load_items(items_file)
    except ItemsFileError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    try:
        factory = cfg.feature_config(feature)
    except KeyError as e:
        console.print(f"[red]Error:[/red] Unknown feature: {feature}")
        console.print(f"Available: {', '.join(cfg.features) or 'none'}")
        console.print("\nRun [cyan]seqr features[/cyan] to see all options")
        raise typer.Exit(1) from e

    if priority:
        factory.options = replace(factory.options, priority_based=True)
    if delay is not None:
        factory.options = replace(factory.options, auto_start_delay=delay)

    if no_delegate:
        factory.delegate = None
        stalled = [escape(item.label) for item in items if not item.duration]
        if stalled:
            console.print("[red]Error:[/red] Without a delegate every item needs a duration")
            console.print(f"Missing: {', '.join(stalled)}")
            raise typer.Exit(1)
    elif factory.delegate == "console":
        factory.delegate = lambda: ConsoleDelegate(console, speed=speed)

    def on_interaction(kind: str, data) -> None:
        if verbose:
            label = data.label if isinstance(data, WorkItem) else str(data)
            console.print(f"[dim]{escape(kind)}: {escape(label)}[/dim]")

    factory.events = RunnerEvents(on_interaction=on_interaction)

    try:
        runner = create_runner(factory)
    except UnknownImplementationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(f"\n[bold]Running:[/bold] {items_file.name} ({len(items)} items)\n")
    result = asyncio.run(runner.run(items))
    console.print()
    print_summary(result, items)


@app.command()
def features(config: ConfigOption = None):
    """List the named runners declared in the config."""
    cfg = get_config(config)

    if not cfg.features:
        console.print("No features configured")
        return

    table = Table(title="Features")
    table.add_column("Name", style="cyan")
    table.add_column("Runner")
    table.add_column("Delegate")
    table.add_column("Options", style="dim")

    for name, feature in sorted(cfg.features.items()):
        options = ", ".join(f"{k}={v}" for k, v in feature.options.items()) or "-"
        table.add_row(name, feature.implementation, feature.delegate or "-", options)

    console.print(table)


@app.command()
def implementations():
    """List registered runner and delegate names."""
    registry = default_registry()

    table = Table(title="Registered Implementations")
    table.add_column("Kind", style="cyan")
    table.add_column("Name")

    for name in registry.runner_names:
        table.add_row("runner", name)
    for name in registry.delegate_names:
        table.add_row("delegate", name)

    console.print(table)


if __name__ == "__main__":
    app()
