"""Branch commands: check out or create a branch and apply its branch-type config."""

from __future__ import annotations

import typer

from mgf.cli.commands._helpers import exit_on_error, global_options
from mgf.cli.context import build_context
from mgf.core.branch import BranchType
from mgf.core.errors import ErrorCode, FlowError
from mgf.core.result import Err

_TYPES = ", ".join(str(t) for t in BranchType)


def _parse_type(name: str) -> BranchType:
    branch_type = BranchType.parse(name)
    if branch_type is None:
        typer.echo(f"error: unknown branch type '{name}' (expected one of: {_TYPES})", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
    return branch_type


def checkout(
    ctx: typer.Context,
    branch_type: str = typer.Argument(..., help=f"Branch type ({_TYPES})."),
    branch: str = typer.Argument(..., help="Branch to check out."),
) -> None:
    """Check out a branch and set the changelist value for its type."""
    kind = _parse_type(branch_type)
    cli = build_context(global_options(ctx))
    workflow = cli.workflow

    exit_on_error(workflow.validate_configuration(branch), cli)
    exit_on_error(workflow.checkout_with_config(kind, branch), cli)
    cli.console.success(f"on '{branch}' ({kind})")
    if workflow.state.arg_line:
        cli.console.info(f"argLine: {workflow.state.arg_line}")


def start(
    ctx: typer.Context,
    branch_type: str = typer.Argument(..., help=f"Branch type ({_TYPES})."),
    branch: str = typer.Argument(..., help="Name of the branch to create."),
    from_branch: str | None = typer.Option(
        None, "--from", help="Start point (defaults to the development branch)."
    ),
) -> None:
    """Create a branch, check it out and set the changelist value for its type."""
    kind = _parse_type(branch_type)
    cli = build_context(global_options(ctx))
    workflow = cli.workflow
    base = from_branch or cli.config.gitflow.development_branch

    exit_on_error(workflow.validate_configuration(branch, base), cli)
    if not workflow.repo.is_valid_branch_name(branch):
        exit_on_error(
            Err(FlowError(kind="configuration", message=f"The name '{branch}' is not a valid branch name.")),
            cli,
        )
    if workflow.repo.branch_exists(branch):
        exit_on_error(
            Err(FlowError(kind="configuration", message=f"Branch '{branch}' already exists.")),
            cli,
        )

    exit_on_error(workflow.check_uncommitted_changes(), cli)
    exit_on_error(workflow.fetch_and_compare(base), cli)
    exit_on_error(workflow.create_and_checkout_with_config(kind, branch, base), cli)
    cli.console.success(f"created '{branch}' from '{base}' ({kind})")
