"""Maven invocations used by the branching workflow.

Every call appends the run's current argument line (``BuildState.arg_line``)
so branch-type properties reach the build.
"""

from __future__ import annotations

import shlex
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from mgf.core.config import FlowSettings
from mgf.core.errors import FlowError
from mgf.core.result import Err, Ok, Result
from mgf.maven.project import ProjectLoader
from mgf.maven.state import BuildState
from mgf.output.console import ConsoleProtocol
from mgf.platform.process import CommandRunner

__all__ = [
    "Maven",
    "REPRODUCIBLE_BUILDS_PROPERTY",
    "TYCHO_VERSIONS_PLUGIN_SET_GOAL",
    "VERSIONS_MAVEN_PLUGIN_SET_GOAL",
    "VERSIONS_MAVEN_PLUGIN_SET_PROPERTY_GOAL",
]

VERSIONS_MAVEN_PLUGIN_SET_GOAL = "org.codehaus.mojo:versions-maven-plugin:set"
VERSIONS_MAVEN_PLUGIN_SET_PROPERTY_GOAL = "org.codehaus.mojo:versions-maven-plugin:set-property"
TYCHO_VERSIONS_PLUGIN_SET_GOAL = "org.eclipse.tycho:tycho-versions-plugin:set-version"
REPRODUCIBLE_BUILDS_PROPERTY = "project.build.outputTimestamp"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def refreshed_output_timestamp(current: str, now: datetime) -> str:
    """New ``project.build.outputTimestamp`` value in the current value's format.

    Numeric values are seconds since the epoch; anything else is written as
    ISO-8601 in UTC.
    """
    if current.isdigit():
        return str(int(now.timestamp()))
    return now.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class Maven:
    """Maven goals run against the current project.

    Attributes:
        project_file: Descriptor of the project the workflow runs in.
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        settings: FlowSettings,
        state: BuildState,
        loader: ProjectLoader,
        project_file: Path,
        console: ConsoleProtocol,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._mvn = runner
        self._settings = settings
        self._state = state
        self._loader = loader
        self.project_file = project_file
        self._console = console
        self._clock = clock

    def set_versions(self, version: str) -> Result[None, FlowError]:
        """Set the project version (and version property) to ``version``."""
        self._console.info(f"Updating version(s) to '{version}'.")

        settings = self._settings
        new_version = f"-DnewVersion={version}"

        if settings.tycho_build:
            prop = ""
            if settings.version_property:
                prop = f"-Dproperties={settings.version_property}"
                self._console.info(
                    f"Updating property '{settings.version_property}' to '{version}'."
                )
            return self._run([TYCHO_VERSIONS_PLUGIN_SET_GOAL, prop, new_version, "-Dtycho.mode=maven"])

        run_command = False
        args = ["-DgenerateBackupPoms=false", new_version]
        if not settings.skip_update_version:
            run_command = True
            args.append(VERSIONS_MAVEN_PLUGIN_SET_GOAL)
            if settings.versions_force_update:
                args += ["-DgroupId=", "-DartifactId="]

        if settings.version_property:
            run_command = True
            self._console.info(f"Updating property '{settings.version_property}' to '{version}'.")
            args += [VERSIONS_MAVEN_PLUGIN_SET_PROPERTY_GOAL, f"-Dproperty={settings.version_property}"]

        if not run_command:
            return Ok(None)

        result = self._run(args)
        if isinstance(result, Err):
            return result

        if settings.update_output_timestamp:
            return self._update_output_timestamp()
        return Ok(None)

    def clean_test(self) -> Result[None, FlowError]:
        self._console.info("Cleaning and testing the project.")
        if self._settings.tycho_build:
            return self._run(["clean", "verify"])
        return self._run(["clean", "test"])

    def clean_install(self) -> Result[None, FlowError]:
        self._console.info("Cleaning and installing the project.")
        return self._run(["clean", "install"])

    def run_goals(self, goals: str) -> Result[None, FlowError]:
        """Run a free-form goal string, tokenized like a shell would."""
        self._console.info(f"Running Maven goals: {goals}")
        try:
            args = shlex.split(goals)
        except ValueError as e:
            return Err(FlowError(kind="configuration", message=f"Cannot parse goals '{goals}': {e}"))
        return self._run(args)

    def current_output_timestamp(self) -> Result[str | None, FlowError]:
        project = self._loader.load(self.project_file)
        if isinstance(project, Err):
            return project
        return Ok(project.value.properties.get(REPRODUCIBLE_BUILDS_PROPERTY))

    def _update_output_timestamp(self) -> Result[None, FlowError]:
        current = self.current_output_timestamp()
        if isinstance(current, Err):
            return current

        timestamp = current.value
        if timestamp is None or len(timestamp) <= 1:
            return Ok(None)

        timestamp = refreshed_output_timestamp(timestamp, self._clock())
        self._console.info(f"Updating property '{REPRODUCIBLE_BUILDS_PROPERTY}' to '{timestamp}'.")
        return self._run(
            [
                VERSIONS_MAVEN_PLUGIN_SET_PROPERTY_GOAL,
                "-DgenerateBackupPoms=false",
                f"-Dproperty={REPRODUCIBLE_BUILDS_PROPERTY}",
                f"-DnewVersion={timestamp}",
            ]
        )

    def _run(self, args: list[str]) -> Result[None, FlowError]:
        result = self._mvn.run_checked(args, arg_line=self._state.arg_line)
        if isinstance(result, Err):
            return result
        return Ok(None)
