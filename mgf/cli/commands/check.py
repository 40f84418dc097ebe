"""Pre-release checks: clean working tree, remote in sync, no SNAPSHOT dependencies."""

from __future__ import annotations

import typer

from mgf.cli.commands._helpers import exit_on_error, global_options
from mgf.cli.context import build_context
from mgf.core.result import Err


def check(
    ctx: typer.Context,
    allow_snapshots: bool = typer.Option(
        False, "--allow-snapshots", help="Skip the SNAPSHOT dependency scan."
    ),
) -> None:
    """Run the checks a release start performs, without changing anything."""
    cli = build_context(global_options(ctx))
    workflow = cli.workflow

    exit_on_error(workflow.validate_configuration(), cli)
    exit_on_error(workflow.check_uncommitted_changes(), cli)

    branch = workflow.repo.current_branch()
    exit_on_error(branch, cli)
    if not isinstance(branch, Err):
        exit_on_error(workflow.fetch_and_compare(branch.value), cli)

    if not allow_snapshots:
        exit_on_error(workflow.check_snapshot_dependencies(), cli)

    version = workflow.current_project_version()
    exit_on_error(version, cli)
    if not isinstance(version, Err):
        cli.console.success(f"ready to release {version.value}")
