"""sourcetruth symbols / imports / exports commands - per-file extraction."""

from pathlib import Path

import click

from sourcetruth.cli.utils import cli_errors, echo_json, get_engine, print_table

_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.command()
@click.argument("file", type=_FILE)
@click.option("--exported", "exported_only", is_flag=True, help="Only exported symbols")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def symbols_command(ctx: click.Context, file: Path, exported_only: bool, as_json: bool) -> None:
    """List symbols declared in FILE."""
    engine = get_engine(ctx)
    with cli_errors():
        found = engine.extract_symbols(file.resolve())
    if exported_only:
        found = [s for s in found if s.exported]

    if as_json:
        echo_json([s.to_dict() for s in found])
        return
    print_table(
        str(file),
        ["Line", "Kind", "Name", "Exported", "Signature"],
        [(s.line, s.kind, s.name, "yes" if s.exported else "", s.signature) for s in found],
        empty="No symbols found",
    )


@click.command()
@click.argument("file", type=_FILE)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def imports_command(ctx: click.Context, file: Path, as_json: bool) -> None:
    """List imports of FILE with their resolution."""
    engine = get_engine(ctx)
    path = file.resolve()
    with cli_errors():
        records = engine.extract_imports(path)
    resolutions = [engine.resolve(r.specifier, path) for r in records]

    if as_json:
        echo_json(
            [
                {**record.to_dict(), "resolution": result.to_dict()}
                for record, result in zip(records, resolutions, strict=True)
            ]
        )
        return
    rows = []
    for record, result in zip(records, resolutions, strict=True):
        target = result.resolved_path if result.exists else "[red]unresolved[/red]"
        rows.append((record.line, record.specifier, ", ".join(record.specifiers), target))
    print_table(
        str(file), ["Line", "Specifier", "Bindings", "Resolves to"], rows, empty="No imports found"
    )


@click.command()
@click.argument("file", type=_FILE)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def exports_command(ctx: click.Context, file: Path, as_json: bool) -> None:
    """List exports of FILE."""
    engine = get_engine(ctx)
    with cli_errors():
        records = engine.extract_exports(file.resolve())

    if as_json:
        echo_json([r.to_dict() for r in records])
        return
    print_table(
        str(file),
        ["Line", "Kind", "Name", "From", "Signature"],
        [(r.line, r.kind, r.name, r.source, r.signature) for r in records],
        empty="No exports found",
    )
