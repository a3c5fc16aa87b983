"""Command-line interface for the usage tracker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .config import TrackerSettings
from .errors import ConfigError, PersistenceError
from .paths import get_stats_path
from .reporting import SummaryPrinter, summarize
from .store import CsvSessionStore

app = typer.Typer(help="Track foreground application usage and summarize it.")


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@app.command()
def track(
    stats_file: Optional[Path] = typer.Option(
        None,
        "--file",
        path_type=Path,
        help="Location of the usage history CSV. Defaults to the desktop.",
    ),
    sample_seconds: float = typer.Option(
        2.0,
        "--interval",
        min=0.5,
        help="Sampling interval in seconds.",
    ),
    probe_timeout: float = typer.Option(
        5.0,
        "--probe-timeout",
        min=0.5,
        help="Seconds to wait for the platform probe before giving up on a tick.",
    ),
    categories: Optional[list[str]] = typer.Option(
        None,
        "--category",
        help="Extra ID=CATEGORY mapping; may be repeated.",
    ),
) -> None:
    """Track the active application until interrupted, then print a summary."""
    from .categories import CategoryMap
    from .collector import UsageCollector
    from .probes import default_source
    from .resolver import EntitySnapshotResolver

    try:
        settings = TrackerSettings.from_options(
            sample_seconds=sample_seconds,
            probe_timeout_seconds=probe_timeout,
            categories=categories,
        )
        source = default_source(timeout=settings.probe_timeout.total_seconds())
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    path = stats_file or get_stats_path(settings.stats_filename)
    resolver = EntitySnapshotResolver(source, CategoryMap(settings.category_overrides))
    collector = UsageCollector(resolver, CsvSessionStore(path), settings=settings)

    typer.echo("Starting app tracker... Press Ctrl+C to stop and show summary.")
    stats = collector.run_forever()
    SummaryPrinter().print_summary(summarize(stats.sessions, stats.total_duration), path)


@app.command()
def summary(
    stats_file: Optional[Path] = typer.Option(
        None,
        "--file",
        path_type=Path,
        help="Location of the usage history CSV. Defaults to the desktop.",
    ),
) -> None:
    """Print the summary of previously recorded usage."""
    path = stats_file or get_stats_path()
    try:
        stats = CsvSessionStore(path).load()
    except PersistenceError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Reading usage from {path}")
    SummaryPrinter(typer.echo).print_summary(summarize(stats.sessions, stats.total_duration))
