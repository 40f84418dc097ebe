"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from mgf.core.errors import FlowError
from mgf.core.result import Err, Result
from mgf.output.errors import flow_error_exit_code, print_flow_error

if TYPE_CHECKING:
    from mgf.cli.context import CLIContext, GlobalOptions


T = TypeVar("T")


def exit_on_error(result: Result[T, FlowError], ctx: CLIContext) -> None:
    """Print the error and exit with its code if result is Err.

    This helper reduces boilerplate for the common pattern:
        match result:
            case Err(e):
                print_flow_error(e, ctx.console)
                raise typer.Exit(code=flow_error_exit_code(e))
            case Ok(_):
                pass
    """
    if isinstance(result, Err):
        print_flow_error(result.error, ctx.console)
        raise typer.Exit(code=flow_error_exit_code(result.error))


def global_options(ctx: typer.Context) -> GlobalOptions | None:
    from mgf.cli.context import GlobalOptions

    obj = ctx.obj
    return obj if isinstance(obj, GlobalOptions) else None
