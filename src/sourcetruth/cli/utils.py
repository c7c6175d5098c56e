"""CLI utilities."""

import json
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from sourcetruth.analysis.engine import AnalysisEngine
from sourcetruth.core.errors import SourceTruthError
from sourcetruth.core.logging import get_logger


def get_engine(ctx: click.Context) -> AnalysisEngine:
    """Engine for the workspace selected on the command group."""
    engine: AnalysisEngine | None = ctx.obj.get("engine")
    if engine is None:
        engine = AnalysisEngine(ctx.obj["workspace"], ctx.obj["config"])
        ctx.obj["engine"] = engine
    return engine


@contextmanager
def cli_errors() -> Iterator[None]:
    """Turn analysis and config failures into a clean non-zero exit."""
    try:
        yield
    except SourceTruthError as e:
        raise click.ClickException(str(e)) from e


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def print_table(
    title: str, columns: Sequence[str], rows: Sequence[Sequence[Any]], *, empty: str
) -> None:
    """Print rows as a rich table, or the empty message when there are none."""
    console = Console()
    if not rows:
        console.print(f"[dim]{empty}[/dim]", highlight=False)
        return
    table = Table(title=title, title_justify="left", padding=(0, 1), pad_edge=False)
    for column in columns:
        table.add_column(column, overflow="fold")
    for row in rows:
        table.add_row(*("" if cell is None else str(cell) for cell in row))
    console.print(table)


def status(message: str, *, ok: bool) -> None:
    """Print a one-line verdict with a check or cross marker."""
    get_logger("cli").debug("status", message=message, ok=ok)
    marker = "[green]✓[/green]" if ok else "[red]✗[/red]"
    Console().print(f"{marker} {message}", highlight=False)
