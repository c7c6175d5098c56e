"""sourcetruth resolve / graph / importers commands - module resolution."""

from pathlib import Path

import click

from sourcetruth.cli.utils import cli_errors, echo_json, get_engine, print_table, status


@click.command()
@click.argument("specifier")
@click.argument("from_file", type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def resolve_command(ctx: click.Context, specifier: str, from_file: Path, as_json: bool) -> None:
    """Resolve SPECIFIER as imported from FROM_FILE.

    An unresolvable specifier is a normal result, not an error.
    """
    engine = get_engine(ctx)
    result = engine.resolve(specifier, from_file.resolve())

    if as_json:
        echo_json({"specifier": specifier, "from_file": str(from_file), **result.to_dict()})
        return
    if result.exists:
        status(f"{specifier} -> {result.resolved_path}", ok=True)
        return
    status(result.error or f"{specifier} could not be resolved", ok=False)
    for alternative in result.alternatives or ():
        click.echo(f"  did you mean: {engine.workspace.relative(alternative)}")


@click.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def graph_command(ctx: click.Context, files: tuple[Path, ...], as_json: bool) -> None:
    """Print the dependency graph of FILES (default: the whole workspace)."""
    engine = get_engine(ctx)
    with cli_errors():
        graph = engine.build_graph([f.resolve() for f in files] if files else None)

    if as_json:
        echo_json({path: sorted(deps) for path, deps in graph.items()})
        return
    rel = engine.workspace.relative
    rows = [
        (rel(path), "\n".join(rel(d) for d in sorted(deps)))
        for path, deps in sorted(graph.items())
    ]
    print_table("Dependencies", ["File", "Imports"], rows, empty="No source files")


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def importers_command(ctx: click.Context, file: Path, as_json: bool) -> None:
    """List workspace files that import FILE."""
    engine = get_engine(ctx)
    with cli_errors():
        importers = engine.find_importers(file.resolve())

    if as_json:
        echo_json(importers)
        return
    print_table(
        f"Importers of {file}",
        ["File"],
        [(engine.workspace.relative(p),) for p in importers],
        empty="No importers found",
    )
