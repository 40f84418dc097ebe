from __future__ import annotations

from pathlib import Path

import typer

from mgf import __version__
from mgf.cli.commands.branch import checkout, start
from mgf.cli.commands.check import check
from mgf.cli.commands.repo import branches, init_config, last_tag
from mgf.cli.context import GlobalOptions


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(checkout)
app.command()(start)
app.command()(check)
app.command("init-config")(init_config)
app.command("last-tag")(last_tag)
app.command()(branches)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    root: Path | None = typer.Option(
        None, "--root", help="Project root (defaults to the current directory)."
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to mgf.toml."),
    arg_line: str | None = typer.Option(
        None, "--arg-line", help="Arguments appended to every Maven invocation."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Echo commands and their output."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    ctx.obj = GlobalOptions(root=root, config_path=config, arg_line=arg_line, verbose=verbose)


def main() -> None:
    app()
