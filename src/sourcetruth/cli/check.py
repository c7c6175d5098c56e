"""sourcetruth check-call / verify commands - claim checking."""

from pathlib import Path

import click

from sourcetruth.cli.utils import cli_errors, echo_json, get_engine, status

_KINDS = click.Choice(["function", "class", "variable", "type", "interface"])


@click.command()
@click.argument("name")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("args", nargs=-1)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def check_call_command(
    ctx: click.Context, name: str, file: Path, args: tuple[str, ...], as_json: bool
) -> None:
    """Check a call NAME(ARGS...) against its declaration in FILE.

    A mismatch is a finding and exits 0. Only a FILE that cannot be read or
    parsed exits non-zero.
    """
    engine = get_engine(ctx)
    path = file.resolve()
    with cli_errors():
        engine.extract_signatures(path)
    result = engine.validate_call(name, list(args), path)

    if as_json:
        echo_json(result.to_dict())
    elif result.valid:
        status(f"{result.actual_signature} matches {result.expected_signature}", ok=True)
    else:
        status(f"{result.actual_signature}: {result.error}", ok=False)
        if result.expected_signature:
            click.echo(f"  expected: {result.expected_signature}")


@click.command()
@click.argument("symbol")
@click.option(
    "--file",
    "file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Only look in this file",
)
@click.option("--kind", type=_KINDS, help="Only match this symbol kind")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def verify_command(
    ctx: click.Context, symbol: str, file: Path | None, kind: str | None, as_json: bool
) -> None:
    """Check that SYMBOL is declared somewhere in the workspace."""
    engine = get_engine(ctx)
    with cli_errors():
        lookup = engine.verify_symbol(
            symbol,
            file.resolve() if file else None,
            kind,  # type: ignore[arg-type]
        )

    if as_json:
        echo_json(lookup.to_dict())
        return
    match = lookup.best_match
    if lookup.exists and match is not None:
        where = f"{engine.workspace.relative(match.file_path)}:{match.line or 0}"
        exported = "exported " if match.exported else ""
        status(f"{symbol}: {exported}{match.kind} at {where}", ok=True)
        if lookup.other_matches:
            click.echo(f"  {lookup.other_matches} other declaration(s)")
        return
    status(f"{symbol}: not found", ok=False)
    for suggestion in lookup.suggestions:
        click.echo(f"  did you mean: {suggestion}")
