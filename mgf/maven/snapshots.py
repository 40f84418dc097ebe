"""Unreleased (SNAPSHOT) dependency scan run before a release.

A dependency on a SNAPSHOT is allowed only when that exact coordinate is
produced by the reactor itself: sibling modules are released together in
the same run.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from mgf.core.errors import FlowError
from mgf.core.result import Err, Ok, Result
from mgf.maven.project import Project, ProjectLoader
from mgf.output.console import ConsoleProtocol

__all__ = ["check_snapshot_dependencies", "find_snapshot_dependencies", "is_snapshot"]

SNAPSHOT_VERSION = "SNAPSHOT"

# Deployed snapshots resolve to e.g. 1.0-20240101.120000-3
_TIMESTAMPED_SNAPSHOT = re.compile(r"^(.*)-(\d{8}\.\d{6})-(\d+)$")


def is_snapshot(version: str | None) -> bool:
    if version is None:
        return False
    if version.upper().endswith(SNAPSHOT_VERSION):
        return True
    return _TIMESTAMPED_SNAPSHOT.match(version) is not None


def find_snapshot_dependencies(
    projects: Sequence[Project], loader: ProjectLoader
) -> Result[list[str], FlowError]:
    """Reload every reactor project and list offending dependencies.

    Returns:
        Ok(violations) as ``"<project> -> <dependency>"`` strings, possibly
        empty; Err(FlowError) if a descriptor cannot be reloaded.
    """
    reloaded: list[Project] = []
    built: set[str] = set()
    for project in projects:
        result = loader.load(project.file)
        if isinstance(result, Err):
            return result
        reloaded.append(result.value)
        built.add(result.value.coordinate)

    violations: list[str] = []
    for project in reloaded:
        for dependency in project.dependencies:
            if dependency.coordinate in built:
                continue
            if is_snapshot(dependency.version):
                violations.append(f"{project} -> {dependency}")
    return Ok(violations)


def check_snapshot_dependencies(
    projects: Sequence[Project], loader: ProjectLoader, console: ConsoleProtocol
) -> Result[None, FlowError]:
    """Fail once, listing every SNAPSHOT dependency not built by this reactor."""
    console.info("Checking for SNAPSHOT versions in dependencies.")

    result = find_snapshot_dependencies(projects, loader)
    if isinstance(result, Err):
        return result

    violations = result.value
    if not violations:
        return Ok(None)

    for violation in violations:
        console.warning(violation)
    return Err(
        FlowError(
            kind="unreleased_dependency",
            message=(
                "There are some SNAPSHOT dependencies in the project, see warnings above. "
                "Change them or ignore with `allowSnapshots` property."
            ),
            hint="\n".join(violations),
        )
    )
