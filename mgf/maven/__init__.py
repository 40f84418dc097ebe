"""Maven side of the workflow: build state, descriptors, goals and the SNAPSHOT scan."""

from mgf.maven.operations import Maven
from mgf.maven.project import DependencyRecord, PomProjectLoader, Project, ProjectLoader
from mgf.maven.snapshots import check_snapshot_dependencies, is_snapshot
from mgf.maven.state import BuildState

__all__ = [
    "BuildState",
    "DependencyRecord",
    "Maven",
    "PomProjectLoader",
    "Project",
    "ProjectLoader",
    "check_snapshot_dependencies",
    "is_snapshot",
]
