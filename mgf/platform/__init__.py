"""Process layer: the only place mgf starts external programs."""

from .process import (
    CommandResult,
    CommandRunner,
    Executable,
    MockCommandRunner,
    default_git_executable,
    default_mvn_executable,
)

__all__ = [
    "CommandResult",
    "CommandRunner",
    "Executable",
    "MockCommandRunner",
    "default_git_executable",
    "default_mvn_executable",
]
