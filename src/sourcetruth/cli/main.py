"""sourcetruth CLI - ground-truth queries over a JavaScript/TypeScript workspace."""

from pathlib import Path

import click

from sourcetruth.cli.check import check_call_command, verify_command
from sourcetruth.cli.extract import exports_command, imports_command, symbols_command
from sourcetruth.cli.resolve import graph_command, importers_command, resolve_command
from sourcetruth.cli.utils import cli_errors
from sourcetruth.config.loader import load_config
from sourcetruth.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="sourcetruth")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--workspace",
    "workspace",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Workspace root (default: current directory)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, workspace: Path) -> None:
    """sourcetruth - check claims about code against what the source declares."""
    root = workspace.resolve()
    with cli_errors():
        config = load_config(root)

    logging_config = config.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["workspace"] = root
    ctx.obj["config"] = config


cli.add_command(symbols_command, name="symbols")
cli.add_command(imports_command, name="imports")
cli.add_command(exports_command, name="exports")
cli.add_command(resolve_command, name="resolve")
cli.add_command(graph_command, name="graph")
cli.add_command(importers_command, name="importers")
cli.add_command(check_call_command, name="check-call")
cli.add_command(verify_command, name="verify")


if __name__ == "__main__":
    cli()
