"""
CLI for buildfiles.

Provides commands for listing file sets, checking whether outputs are
stale and watching directories for changes.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from buildfiles.core import (
    Composite,
    Directory,
    FileList,
    Glob,
    Paths,
    State,
    configure_logging,
    load_config,
)
from buildfiles.core import Path as BuildPath
from buildfiles.infrastructure.watch_drivers import WatchDriverError, create_watch_driver
from buildfiles.services.monitor import Monitor

logger = logging.getLogger(__name__)

# Initialize Rich Console
console = Console()

app = typer.Typer(
    name="buildfiles",
    help="Build file lists - enumerate, check staleness and watch for changes",
    add_completion=False,
)


def _build_list(root: Path, pattern: str | None, excludes: list[str]) -> FileList:
    """Create the list for a root, pattern and exclusion patterns."""
    root_path = os.path.abspath(root)

    files: FileList = Glob(root_path, pattern) if pattern else Directory(root_path)
    for exclude in excludes:
        files = files - Glob(root_path, exclude)

    return files


def _validate_directory(path: Path) -> None:
    if not path.is_dir():
        console.print(f"[bold red]Error:[/bold red] Not a directory: {path}")
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Build file lists - enumerate, check staleness and watch for changes."""
    try:
        cfg = load_config()
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if verbose:
        cfg.logging.level = "DEBUG"

    configure_logging(cfg.logging)


@app.command()
def ls(
    root: Path = typer.Argument(..., help="Root directory to list"),
    pattern: Optional[str] = typer.Option(
        None, "--pattern", "-p", help="Glob pattern relative to the root, e.g. '**/*.c'"
    ),
    exclude: list[str] = typer.Option(
        [], "--exclude", "-x", help="Glob pattern to exclude (repeatable)"
    ),
):
    """List the files under a root."""
    _validate_directory(root)

    files = _build_list(root, pattern, exclude)
    paths = sorted(files)

    table = Table(title=f"{len(paths)} path(s)")
    table.add_column("Path", style="cyan")
    table.add_column("Type")

    for path in paths:
        kind = "dir" if os.path.isdir(path) else "file"
        table.add_row(path.relative_path, kind)

    console.print(table)


@app.command()
def dirty(
    inputs: list[str] = typer.Option(
        ..., "--input", "-i", help="Input glob pattern relative to the root (repeatable)"
    ),
    outputs: list[str] = typer.Option(
        ..., "--output", "-o", help="Output path relative to the root (repeatable)"
    ),
    root: Path = typer.Option(Path("."), "--root", "-r", help="Root directory"),
):
    """Check whether outputs are out of date with respect to inputs."""
    _validate_directory(root)
    root_path = os.path.abspath(root)

    input_list = Composite([Glob(root_path, pattern) for pattern in inputs])

    output_list = Paths([BuildPath.expand(output, root_path) for output in outputs])

    input_state = State(input_list)
    output_state = State(output_list)

    summary = Table.grid(padding=1)
    summary.add_column(style="bold")
    summary.add_column()
    summary.add_row("Inputs:", str(len(input_state.times)))
    summary.add_row("Outputs:", str(len(output_state.times)))

    if output_state.missing:
        missing = ", ".join(path.relative_path for path in output_state.missing)
        summary.add_row("Missing:", f"[red]{missing}[/red]")

    if output_state.is_dirty(input_state):
        console.print(
            Panel(summary, title="[bold yellow]Dirty[/bold yellow]", border_style="yellow", expand=False)
        )
        raise typer.Exit(1)

    console.print(
        Panel(summary, title="[bold green]Clean[/bold green]", border_style="green", expand=False)
    )


@app.command()
def watch(
    root: Path = typer.Argument(..., help="Root directory to watch"),
    pattern: Optional[str] = typer.Option(
        None, "--pattern", "-p", help="Glob pattern relative to the root"
    ),
    exclude: list[str] = typer.Option(
        [], "--exclude", "-x", help="Glob pattern to exclude (repeatable)"
    ),
    driver: Optional[str] = typer.Option(
        None, "--driver", "-d", help="Watch driver: auto, native or polling"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (.yaml, .yml or .json)"
    ),
):
    """Watch a root and report changes until interrupted."""
    _validate_directory(root)

    try:
        cfg = load_config(config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if config is not None:
        configure_logging(cfg.logging)

    files = _build_list(root, pattern, exclude)

    def report(state: State) -> None:
        for label, paths, style in (
            ("added", state.added, "green"),
            ("changed", state.changed, "yellow"),
            ("removed", state.removed, "red"),
        ):
            for path in paths:
                console.print(f"[{style}]{label:>8}[/{style}] {path.relative_path}")

    monitor = Monitor()
    handle = monitor.track_changes(files, report)

    try:
        watch_driver = create_watch_driver(driver, cfg.monitor)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(
        f"[bold blue]Watching[/bold blue] {len(handle.state.times)} path(s) under {root} "
        f"[dim](Ctrl-C to stop)[/dim]"
    )

    try:
        try:
            monitor.run(lambda: None, driver=watch_driver, config=cfg.monitor)
        except WatchDriverError as e:
            logger.warning(f"Native watching unavailable, falling back to polling: {e}")
            monitor.run(lambda: None, driver="polling", config=cfg.monitor)
    except KeyboardInterrupt:
        console.print("\n[cyan]Stopped watching.[/cyan]")


if __name__ == "__main__":
    app()
