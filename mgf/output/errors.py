"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mgf.core.errors import FlowError
from mgf.output.console import Style

if TYPE_CHECKING:
    from mgf.output.console import ConsoleProtocol

__all__ = ["flow_error_exit_code", "print_flow_error"]


def print_flow_error(error: FlowError, console: ConsoleProtocol) -> None:
    """Print a workflow error with its hint."""
    match error:
        case FlowError(kind="unreleased_dependency", message=message):
            # Violations were already printed as warnings by the scan.
            console.error(message)
        case FlowError(kind="command_failed", message=message, hint=hint):
            console.error(message.strip() or "command failed")
            if hint:
                console.print(hint, Style.DIM)
        case FlowError(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)


def flow_error_exit_code(error: FlowError) -> int:
    return int(error.exit_code)
