"""Maven project descriptors.

mgf does not resolve POMs the way Maven does. ``PomProjectLoader`` reads the
few things the workflow needs straight from ``pom.xml``: coordinates (with
``<parent>`` inheritance), declared dependencies (a missing version is taken
from ``<dependencyManagement>`` of the project or its parents),
``<properties>`` and the ``<modules>`` list. ``${...}`` expressions are
resolved against user properties, then POM properties (own, then parent's),
then ``project.*``.

The loader always reads from disk: earlier steps of a workflow rewrite
descriptors (``versions:set``) and a cached model would be stale.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from mgf.core.errors import FlowError
from mgf.core.result import Err, Ok, Result

__all__ = [
    "DependencyRecord",
    "POM_FILENAME",
    "PomProjectLoader",
    "Project",
    "ProjectLoader",
]

POM_FILENAME = "pom.xml"

_EXPRESSION = re.compile(r"\$\{([^}]+)\}")
_MAX_INTERPOLATION_PASSES = 10
_MAX_PARENT_DEPTH = 20


@dataclass(frozen=True, slots=True)
class DependencyRecord:
    """A ``group:artifact:version`` coordinate."""

    group_id: str | None
    artifact_id: str | None
    version: str | None

    @property
    def coordinate(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def __str__(self) -> str:
        return self.coordinate


def _empty_properties() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class Project:
    """One reactor module as read from its descriptor."""

    file: Path
    group_id: str | None
    artifact_id: str | None
    version: str | None
    dependencies: tuple[DependencyRecord, ...] = ()
    modules: tuple[str, ...] = ()
    properties: Mapping[str, str] = field(default_factory=_empty_properties)

    @property
    def record(self) -> DependencyRecord:
        return DependencyRecord(self.group_id, self.artifact_id, self.version)

    @property
    def coordinate(self) -> str:
        return self.record.coordinate

    def __str__(self) -> str:
        return f"{self.coordinate} @ {self.file}"


class ProjectLoader(Protocol):
    """Reads a project model from its descriptor on disk."""

    def load(self, pom: Path) -> Result[Project, FlowError]: ...

    def reactor(self, root_pom: Path) -> Result[list[Project], FlowError]: ...


def _local(tag: str) -> str:
    # "{http://maven.apache.org/POM/4.0.0}version" -> "version"
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element | None, name: str) -> ET.Element | None:
    if element is None:
        return None
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _text(element: ET.Element | None, name: str) -> str | None:
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def _load_error(pom: Path, reason: str) -> Err[FlowError]:
    return Err(
        FlowError(
            kind="project_load",
            message="Error re-loading project info",
            hint=f"{pom}: {reason}",
        )
    )


@dataclass(frozen=True, slots=True)
class _RawPom:
    root: ET.Element
    properties: dict[str, str]
    # "groupId:artifactId" -> version, from <dependencyManagement>
    managed: dict[str, str]
    parent_group_id: str | None
    parent_version: str | None
    parent_path: Path | None


class PomProjectLoader:
    """Loads ``pom.xml`` files with ``xml.etree``.

    Attributes:
        user_properties: Live mapping of user properties; takes precedence
            over POM properties when resolving expressions.
    """

    def __init__(self, user_properties: Mapping[str, str] | None = None) -> None:
        self.user_properties: Mapping[str, str] = (
            user_properties if user_properties is not None else {}
        )

    def load(self, pom: Path) -> Result[Project, FlowError]:
        raw = self._read(pom)
        if isinstance(raw, Err):
            return raw
        root = raw.value.root

        inherited, inherited_managed = self._inherited(raw.value, depth=0)
        properties = {**inherited, **raw.value.properties}
        managed_raw = {**inherited_managed, **raw.value.managed}

        group_id = _text(root, "groupId") or raw.value.parent_group_id
        artifact_id = _text(root, "artifactId")
        version = _text(root, "version") or raw.value.parent_version

        context = dict(properties)
        context.update(self.user_properties)
        for key, value in (
            ("project.groupId", group_id),
            ("project.artifactId", artifact_id),
            ("project.version", version),
            ("project.parent.version", raw.value.parent_version),
        ):
            if value is not None:
                context[key] = value
        for key in ("project.groupId", "project.version"):
            if key in context:
                context[key] = _interpolate(context[key], context) or ""

        # Managed versions are resolved in the context of the project using them.
        managed = {
            _interpolate(key, context) or key: _interpolate(value, context) or value
            for key, value in managed_raw.items()
        }

        dependencies: list[DependencyRecord] = []
        deps = _child(root, "dependencies")
        if deps is not None:
            for dep in deps:
                if _local(dep.tag) != "dependency":
                    continue
                dep_group = _interpolate(_text(dep, "groupId"), context)
                dep_artifact = _interpolate(_text(dep, "artifactId"), context)
                dep_version = _interpolate(_text(dep, "version"), context)
                if dep_version is None:
                    dep_version = managed.get(f"{dep_group}:{dep_artifact}")
                dependencies.append(DependencyRecord(dep_group, dep_artifact, dep_version))

        modules: list[str] = []
        mods = _child(root, "modules")
        if mods is not None:
            modules = [m.text.strip() for m in mods if _local(m.tag) == "module" and m.text]

        return Ok(
            Project(
                file=pom,
                group_id=_interpolate(group_id, context),
                artifact_id=_interpolate(artifact_id, context),
                version=_interpolate(version, context),
                dependencies=tuple(dependencies),
                modules=tuple(modules),
                properties=properties,
            )
        )

    def reactor(self, root_pom: Path) -> Result[list[Project], FlowError]:
        """The root project followed by all modules, depth-first."""
        projects: list[Project] = []
        seen: set[Path] = set()

        def visit(pom: Path) -> Result[None, FlowError]:
            key = pom.resolve()
            if key in seen:
                return Ok(None)
            seen.add(key)

            loaded = self.load(pom)
            if isinstance(loaded, Err):
                return loaded
            projects.append(loaded.value)

            for module in loaded.value.modules:
                module_path = pom.parent / module
                if module_path.is_dir():
                    module_path = module_path / POM_FILENAME
                result = visit(module_path)
                if isinstance(result, Err):
                    return result
            return Ok(None)

        result = visit(root_pom)
        if isinstance(result, Err):
            return result
        return Ok(projects)

    def _read(self, pom: Path) -> Result[_RawPom, FlowError]:
        try:
            root = ET.parse(pom).getroot()
        except FileNotFoundError:
            return _load_error(pom, "file not found")
        except PermissionError:
            return _load_error(pom, "permission denied")
        except ET.ParseError as e:
            return _load_error(pom, f"invalid XML: {e}")

        if _local(root.tag) != "project":
            return _load_error(pom, f"unexpected root element <{_local(root.tag)}>")

        properties: dict[str, str] = {}
        props = _child(root, "properties")
        if props is not None:
            for prop in props:
                properties[_local(prop.tag)] = (prop.text or "").strip()

        managed: dict[str, str] = {}
        management = _child(_child(root, "dependencyManagement"), "dependencies")
        if management is not None:
            for dep in management:
                if _local(dep.tag) != "dependency":
                    continue
                version = _text(dep, "version")
                if version is not None:
                    key = f"{_text(dep, 'groupId')}:{_text(dep, 'artifactId')}"
                    managed[key] = version

        parent = _child(root, "parent")
        parent_path: Path | None = None
        if parent is not None:
            relative = _text(parent, "relativePath")
            candidate = pom.parent / (relative if relative is not None else "..")
            if candidate.is_dir():
                candidate = candidate / POM_FILENAME
            if relative != "" and candidate.is_file():
                parent_path = candidate

        return Ok(
            _RawPom(
                root=root,
                properties=properties,
                managed=managed,
                parent_group_id=_text(parent, "groupId"),
                parent_version=_text(parent, "version"),
                parent_path=parent_path,
            )
        )

    def _inherited(
        self, raw: _RawPom, *, depth: int
    ) -> tuple[dict[str, str], dict[str, str]]:
        """Properties and managed versions from the parent chain, nearest last."""
        if raw.parent_path is None or depth >= _MAX_PARENT_DEPTH:
            return {}, {}
        parent = self._read(raw.parent_path)
        if isinstance(parent, Err):
            # A missing or unreadable parent only loses inherited values.
            return {}, {}
        properties, managed = self._inherited(parent.value, depth=depth + 1)
        return (
            {**properties, **parent.value.properties},
            {**managed, **parent.value.managed},
        )


def _interpolate(value: str | None, context: Mapping[str, str]) -> str | None:
    """Resolve ``${name}`` expressions; unknown names are left untouched."""
    if value is None:
        return None
    for _ in range(_MAX_INTERPOLATION_PASSES):
        resolved = _EXPRESSION.sub(lambda m: context.get(m.group(1), m.group(0)), value)
        if resolved == value:
            break
        value = resolved
    return value
