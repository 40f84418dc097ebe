"""Workflow orchestration.

``Workflow`` wires git, Maven and the build state for one run and exposes
the composite steps the CLI commands are built from. It owns the run's
``BuildState``; nothing else mutates it.

Usage:
    workflow = Workflow.create(root=Path("."), config=config, console=console)
    result = workflow.create_and_checkout_with_config(
        BranchType.FEATURE, "feature/login", "develop"
    )
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from mgf.core.branch import BranchType
from mgf.core.config import Config
from mgf.core.errors import FlowError
from mgf.core.result import Err, Ok, Result
from mgf.core.validation import validate_configuration
from mgf.git.repository import Repository
from mgf.maven.operations import Maven
from mgf.maven.project import POM_FILENAME, PomProjectLoader, ProjectLoader
from mgf.maven.snapshots import check_snapshot_dependencies
from mgf.maven.state import BuildState
from mgf.output.console import ConsoleProtocol
from mgf.platform.process import (
    CommandRunner,
    Executable,
    default_git_executable,
    default_mvn_executable,
)
from mgf.services.changelist import apply_branch_config

__all__ = ["Workflow"]


def _missing_branch_type() -> Err[FlowError]:
    return Err(FlowError(kind="internal", message="INTERNAL: given BranchType is None"))


class Workflow:
    """One workflow run over a working tree."""

    def __init__(
        self,
        *,
        config: Config,
        repo: Repository,
        maven: Maven,
        state: BuildState,
        loader: ProjectLoader,
        console: ConsoleProtocol,
    ) -> None:
        self.config = config
        self.repo = repo
        self.maven = maven
        self.state = state
        self.loader = loader
        self._console = console

    @classmethod
    def create(
        cls,
        *,
        root: Path,
        config: Config,
        console: ConsoleProtocol,
        system_properties: Mapping[str, str] | None = None,
    ) -> Workflow:
        """Build a workflow running git and Maven in ``root``."""
        settings = config.settings
        state = BuildState.start(
            settings.arg_line,
            system_properties=dict(system_properties or {}),
        )

        git = CommandRunner(
            Executable("git", override=settings.git_executable, default=default_git_executable),
            cwd=root,
            console=console,
            verbose=settings.verbose,
        )
        mvn = CommandRunner(
            Executable(
                "mvn",
                override=settings.mvn_executable,
                default=lambda: default_mvn_executable(state.system_properties),
            ),
            cwd=root,
            console=console,
            verbose=settings.verbose,
        )

        loader = PomProjectLoader(user_properties=state.user_properties)
        repo = Repository(git, gitflow=config.gitflow, settings=settings, console=console)
        maven = Maven(
            mvn,
            settings=settings,
            state=state,
            loader=loader,
            project_file=root / POM_FILENAME,
            console=console,
        )
        return cls(
            config=config, repo=repo, maven=maven, state=state, loader=loader, console=console
        )

    def validate_configuration(self, *values: str | None) -> Result[None, FlowError]:
        """Reject shell metacharacters in the argument line and ``values``."""
        return validate_configuration(self.state.arg_line, *values)

    def checkout_with_config(
        self, branch_type: BranchType | None, branch: str
    ) -> Result[None, FlowError]:
        """Check out ``branch`` and apply the changelist value for its type."""
        if branch_type is None:
            return _missing_branch_type()

        result = self.repo.checkout(branch)
        if isinstance(result, Err):
            return result
        self.set_config_for_branch_type(branch_type)
        return Ok(None)

    def create_and_checkout_with_config(
        self, branch_type: BranchType | None, new_branch: str, from_branch: str
    ) -> Result[None, FlowError]:
        """Create ``new_branch`` from ``from_branch``, check it out, apply its config."""
        if branch_type is None:
            return _missing_branch_type()

        result = self.repo.create_and_checkout(new_branch, from_branch)
        if isinstance(result, Err):
            return result
        self.set_config_for_branch_type(branch_type)
        return Ok(None)

    def set_config_for_branch_type(self, branch_type: BranchType) -> bool:
        return apply_branch_config(self.state, self.config.settings.changelist, branch_type)

    def check_uncommitted_changes(self) -> Result[None, FlowError]:
        return self.repo.check_uncommitted_changes()

    def fetch_and_compare(self, branch: str) -> Result[None, FlowError]:
        """Compare ``branch`` with the remote unless remote fetching is disabled."""
        if not self.config.settings.fetch_remote:
            return Ok(None)
        return self.repo.fetch_and_compare(branch)

    def check_snapshot_dependencies(self) -> Result[None, FlowError]:
        """Scan the reactor rooted at the current project for SNAPSHOT dependencies."""
        projects = self.loader.reactor(self.maven.project_file)
        if isinstance(projects, Err):
            return projects
        return check_snapshot_dependencies(projects.value, self.loader, self._console)

    def current_project_version(self) -> Result[str, FlowError]:
        """Version of the current project, read fresh from disk."""
        project = self.loader.load(self.maven.project_file)
        if isinstance(project, Err):
            return project
        if project.value.version is None:
            return Err(
                FlowError(
                    kind="configuration",
                    message="Cannot get current project version.",
                    hint="This command should be executed from the parent project.",
                )
            )
        return Ok(project.value.version)

    def init_gitflow_config(self) -> None:
        self.repo.init_gitflow_config()
