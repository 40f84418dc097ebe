from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

import typer

from mgf.core.config import CONFIG_FILENAME, Config, load_config
from mgf.core.errors import ErrorCode
from mgf.core.result import Err
from mgf.output.console import ConsoleProtocol, RichConsole
from mgf.services.workflow import Workflow


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    """Options given before the command name."""

    root: Path | None = None
    config_path: Path | None = None
    arg_line: str | None = None
    verbose: bool = False


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    console: ConsoleProtocol
    workflow: Workflow


def _system_properties() -> dict[str, str]:
    # The JVM command line is only known when mgf is launched from a Maven build.
    java_command = os.environ.get("MGF_JAVA_COMMAND")
    return {"sun.java.command": java_command} if java_command else {}


def build_context(options: GlobalOptions | None = None) -> CLIContext:
    options = options or GlobalOptions()
    root = (options.root or Path.cwd()).expanduser().resolve()
    if not root.is_dir():
        typer.echo(f"error: not a directory: {root}", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    config_path = options.config_path or root / CONFIG_FILENAME
    config = Config()
    if options.config_path is not None or config_path.exists():
        config_result = load_config(config_path)
        if isinstance(config_result, Err):
            typer.echo(f"error: {config_result.error.message}", err=True)
            raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
        config = config_result.value

    settings = config.settings
    if options.arg_line is not None:
        settings = replace(settings, arg_line=options.arg_line)
    if options.verbose:
        settings = replace(settings, verbose=True)
    config = replace(config, settings=settings)

    console = RichConsole()
    return CLIContext(
        root=root,
        config=config,
        console=console,
        workflow=Workflow.create(
            root=root,
            config=config,
            console=console,
            system_properties=_system_properties(),
        ),
    )
