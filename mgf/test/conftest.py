"""Shared fixtures: minimal pom.xml trees on disk."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

_NS = 'xmlns="http://maven.apache.org/POM/4.0.0"'


def _dependency(coordinate: str) -> str:
    # "g:a" leaves the version to <dependencyManagement>.
    group_id, artifact_id, *version = coordinate.split(":")
    parts = [f"<groupId>{group_id}</groupId><artifactId>{artifact_id}</artifactId>"]
    if version:
        parts.append(f"<version>{version[0]}</version>")
    return "<dependency>" + "".join(parts) + "</dependency>"


def _write_pom(
    directory: Path,
    *,
    artifact_id: str,
    group_id: str | None = "com.example",
    version: str | None = "1.0-SNAPSHOT",
    parent: str | None = None,
    modules: tuple[str, ...] = (),
    dependencies: tuple[str, ...] = (),
    managed: tuple[str, ...] = (),
    properties: dict[str, str] | None = None,
) -> Path:
    """Write a minimal pom.xml; ``parent``, ``dependencies`` and ``managed`` are coordinates."""
    parts = [f"<project {_NS}>", "<modelVersion>4.0.0</modelVersion>"]
    if parent is not None:
        g, a, v = parent.split(":")
        parts.append(
            f"<parent><groupId>{g}</groupId><artifactId>{a}</artifactId><version>{v}</version></parent>"
        )
    if group_id is not None:
        parts.append(f"<groupId>{group_id}</groupId>")
    parts.append(f"<artifactId>{artifact_id}</artifactId>")
    if version is not None:
        parts.append(f"<version>{version}</version>")
    if properties:
        parts.append(
            "<properties>" + "".join(f"<{k}>{v}</{k}>" for k, v in properties.items()) + "</properties>"
        )
    if modules:
        parts.append("<modules>" + "".join(f"<module>{m}</module>" for m in modules) + "</modules>")
    if managed:
        parts.append(
            "<dependencyManagement><dependencies>"
            + "".join(_dependency(d) for d in managed)
            + "</dependencies></dependencyManagement>"
        )
    if dependencies:
        parts.append("<dependencies>" + "".join(_dependency(d) for d in dependencies) + "</dependencies>")
    parts.append("</project>")

    directory.mkdir(parents=True, exist_ok=True)
    pom = directory / "pom.xml"
    pom.write_text("\n".join(parts), encoding="utf-8")
    return pom


@pytest.fixture
def write_pom() -> Callable[..., Path]:
    return _write_pom


@pytest.fixture
def reactor(tmp_path: Path) -> Path:
    """Parent ``app`` with modules ``a`` (depends on ``b``) and ``b``."""
    root = _write_pom(
        tmp_path,
        artifact_id="app",
        modules=("a", "b"),
        properties={"lib.version": "2.0"},
    )
    _write_pom(
        tmp_path / "a",
        artifact_id="a",
        group_id=None,
        version=None,
        parent="com.example:app:1.0-SNAPSHOT",
        dependencies=("com.example:b:${project.version}", "org.lib:lib:${lib.version}"),
    )
    _write_pom(
        tmp_path / "b",
        artifact_id="b",
        group_id=None,
        version=None,
        parent="com.example:app:1.0-SNAPSHOT",
    )
    return root
