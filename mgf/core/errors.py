"""Error payload and exit codes.

``FlowError`` is the single error value carried by ``Err`` across mgf.
Its ``kind`` selects the exit code the CLI terminates with.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal, TypeAlias

__all__ = ["ErrorCode", "ErrorKind", "FlowError"]

ErrorKind: TypeAlias = Literal[
    "configuration",
    "command_failed",
    "diverged_branch",
    "unreleased_dependency",
    "uncommitted_changes",
    "project_load",
    "internal",
]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable.
    """

    OK = 0
    CONFIG_ERROR = 1
    COMMAND_ERROR = 2
    REPO_STATE_ERROR = 3
    DEPENDENCY_ERROR = 4
    INTERNAL_ERROR = 70

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK


@dataclass(frozen=True, slots=True)
class FlowError:
    """Canonical error payload.

    Attributes:
        kind: Error category (see ``ErrorKind``).
        message: Human-readable message. For failed commands this is the
            tool's own diagnostic text, verbatim.
        hint: Optional remediation shown below the message.
    """

    kind: ErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message

    @property
    def exit_code(self) -> ErrorCode:
        match self.kind:
            case "configuration":
                return ErrorCode.CONFIG_ERROR
            case "command_failed" | "project_load":
                return ErrorCode.COMMAND_ERROR
            case "diverged_branch" | "uncommitted_changes":
                return ErrorCode.REPO_STATE_ERROR
            case "unreleased_dependency":
                return ErrorCode.DEPENDENCY_ERROR
            case "internal":
                return ErrorCode.INTERNAL_ERROR
        # Fallback for exhaustiveness
        return ErrorCode.INTERNAL_ERROR
