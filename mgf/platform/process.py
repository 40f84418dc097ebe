"""Synchronous execution of git and Maven commands.

A ``CommandRunner`` wraps one external executable. It has two entry points
with different failure semantics:

- ``run_checked`` for steps that must succeed: a non-zero exit becomes
  ``Err(FlowError(kind="command_failed"))`` carrying the tool's diagnostic.
- ``run_probe`` for questions answered by the exit code (does the branch
  exist, is the ref name valid, is the tree clean): it never fails and the
  caller inspects the ``CommandResult``.

Usage:
    git = CommandRunner(Executable("git", override=None, default=default_git_executable),
                        cwd=Path("."), console=console)
    match git.run_checked(["symbolic-ref", "-q", "--short", "HEAD"]):
        case Ok(result):
            print(result.stdout.strip())
        case Err(error):
            print(f"git failed: {error.message}")
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from mgf.core.errors import FlowError
from mgf.core.result import Err, Ok, Result
from mgf.output.console import ConsoleProtocol, MockConsole, Style

__all__ = [
    "CommandResult",
    "CommandRunner",
    "Executable",
    "MAVEN_WRAPPER_MAIN",
    "MockCommandRunner",
    "default_git_executable",
    "default_mvn_executable",
]

SUCCESS_EXIT_CODE = 0

# Main class reported by the JVM when Maven was started through ./mvnw.
MAVEN_WRAPPER_MAIN = "org.apache.maven.wrapper.MavenWrapperMain"


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of one external command.

    Attributes:
        command: The argument vector that was executed.
        returncode: Exit code (-1 if the process could not be started).
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == SUCCESS_EXIT_CODE

    @property
    def failure_message(self) -> str:
        """Diagnostic text: stderr, or stdout when the tool only reports there."""
        if not self.stderr.strip() and self.stdout.strip():
            return self.stdout
        return self.stderr

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} (exit {self.returncode})"


def default_git_executable() -> str:
    return "git"


def default_mvn_executable(system_properties: Mapping[str, str]) -> str:
    """Prefer ./mvnw when the current build was launched through the wrapper."""
    java_command = system_properties.get("sun.java.command", "")
    if java_command.startswith(MAVEN_WRAPPER_MAIN):
        return "." + os.sep + "mvnw"
    return "mvn"


class Executable:
    """Executable path resolved lazily, exactly once.

    The first call to ``path`` wins: an explicit non-blank ``override`` is
    used as-is, otherwise ``default()`` is consulted.
    """

    def __init__(self, name: str, *, override: str | None, default: Callable[[], str]) -> None:
        self.name = name
        self._override = override
        self._default = default
        self._path: str | None = None

    @property
    def path(self) -> str:
        if self._path is None:
            if self._override and self._override.strip():
                self._path = self._override
            else:
                self._path = self._default()
        return self._path

    @property
    def resolved(self) -> bool:
        return self._path is not None


class CommandRunner:
    """Runs one executable synchronously, capturing stdout and stderr.

    There is no timeout: the caller blocks until the child exits.

    Attributes:
        executable: Lazily resolved executable.
        cwd: Working directory for every command.
    """

    def __init__(
        self,
        executable: Executable,
        *,
        cwd: Path,
        console: ConsoleProtocol,
        verbose: bool = False,
        env: dict[str, str] | None = None,
    ) -> None:
        self.executable = executable
        self.cwd = cwd
        self._console = console
        self._verbose = verbose
        self._env = env

    def run_checked(
        self, args: Sequence[str], arg_line: str | None = None
    ) -> Result[CommandResult, FlowError]:
        """Run and require exit code 0.

        Returns:
            Ok(CommandResult) on success, Err(FlowError) with the tool's
            stderr (or stdout if stderr is blank) on failure.
        """
        argv = self._argv(args, arg_line)
        if isinstance(argv, Err):
            return argv

        result = self._execute(argv.value)
        if not result.ok:
            return Err(
                FlowError(
                    kind="command_failed",
                    message=result.failure_message,
                    hint=f"{' '.join(result.command)} exited with {result.returncode}",
                )
            )
        return Ok(result)

    def run_probe(
        self, args: Sequence[str], arg_line: str | None = None, *, keep_empty: bool = False
    ) -> CommandResult:
        """Run and return the result whatever the exit code.

        ``keep_empty`` passes empty arguments through instead of dropping them.
        """
        argv = self._argv(args, arg_line, keep_empty=keep_empty)
        if isinstance(argv, Err):
            return CommandResult(
                command=(self.executable.path, *args),
                returncode=-1,
                stdout="",
                stderr=argv.error.message,
            )
        return self._execute(argv.value)

    def _argv(
        self, args: Sequence[str], arg_line: str | None, *, keep_empty: bool = False
    ) -> Result[list[str], FlowError]:
        argv = [self.executable.path, *(a for a in args if a or keep_empty)]
        if arg_line and arg_line.strip():
            try:
                argv.extend(shlex.split(arg_line))
            except ValueError as e:
                return Err(
                    FlowError(
                        kind="configuration",
                        message=f"Cannot parse argument line '{arg_line}': {e}",
                    )
                )
        return Ok(argv)

    def _execute(self, argv: list[str]) -> CommandResult:
        if self._verbose:
            self._console.print(" ".join(argv), Style.DIM)

        try:
            proc = subprocess.run(
                argv,
                cwd=str(self.cwd),
                env=self._env,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            return CommandResult(command=tuple(argv), returncode=-1, stdout="", stderr=str(e))

        if self._verbose and proc.stdout:
            self._console.print(proc.stdout.rstrip("\n"), Style.DIM)

        return CommandResult(
            command=tuple(argv),
            returncode=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )


class MockCommandRunner(CommandRunner):
    """Command runner for testing that never starts a process.

    Responses are matched on a prefix of the arguments (executable
    excluded); the most recently registered match wins. Unmatched commands
    succeed with empty output.

    Usage:
        git = MockCommandRunner("git")
        git.respond("show-ref", returncode=1)
        repo = Repository(git, ...)
        assert not repo.branch_exists("develop")
        assert git.commands == [["show-ref", "--verify", "--quiet", "refs/heads/develop"]]
    """

    def __init__(
        self,
        executable: str = "git",
        *,
        console: ConsoleProtocol | None = None,
        verbose: bool = False,
    ) -> None:
        super().__init__(
            Executable(executable, override=executable, default=lambda: executable),
            cwd=Path("."),
            console=console or MockConsole(),
            verbose=verbose,
        )
        self._responses: list[tuple[tuple[str, ...], int, str, str]] = []
        self.calls: list[tuple[str, ...]] = []

    def respond(
        self, *prefix: str, returncode: int = 0, stdout: str = "", stderr: str = ""
    ) -> None:
        """Set the result for commands whose arguments start with ``prefix``."""
        self._responses.append((prefix, returncode, stdout, stderr))

    @property
    def commands(self) -> list[list[str]]:
        """Arguments of every executed command, executable excluded."""
        return [list(call[1:]) for call in self.calls]

    def _execute(self, argv: list[str]) -> CommandResult:
        self.calls.append(tuple(argv))
        args = tuple(argv[1:])
        for prefix, returncode, stdout, stderr in reversed(self._responses):
            if args[: len(prefix)] == prefix:
                return CommandResult(tuple(argv), returncode, stdout, stderr)
        return CommandResult(tuple(argv), SUCCESS_EXIT_CODE, "", "")
