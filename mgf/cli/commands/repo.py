"""Repository commands: git-flow config and tag lookup."""

from __future__ import annotations

import typer

from mgf.cli.commands._helpers import exit_on_error, global_options
from mgf.cli.context import build_context
from mgf.core.result import Err


def init_config(ctx: typer.Context) -> None:
    """Write the branch model into the repository's gitflow.* git config."""
    cli = build_context(global_options(ctx))
    cli.workflow.init_gitflow_config()
    cli.console.success("gitflow config written")


def last_tag(ctx: typer.Context) -> None:
    """Print the highest version tag."""
    cli = build_context(global_options(ctx))
    tag = cli.workflow.repo.find_last_tag()
    exit_on_error(tag, cli)
    if not isinstance(tag, Err):
        typer.echo(tag.value)


def branches(
    ctx: typer.Context,
    prefix: str = typer.Argument(..., help="Branch name prefix, e.g. feature/."),
) -> None:
    """List local branches starting with a prefix."""
    cli = build_context(global_options(ctx))
    found = cli.workflow.repo.find_branches(prefix)
    exit_on_error(found, cli)
    if not isinstance(found, Err) and found.value:
        typer.echo(found.value)
