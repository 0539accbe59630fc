"""Data models for repograph."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

PropertyValue = str | int | float | bool | None
Metadata = dict[str, PropertyValue]


class NodeType(StrEnum):
    """Well-known node types. The graph accepts any string."""

    MODULE = "module"
    FUNCTION = "function"
    FILE = "file"
    REPO = "repo"
    DEPENDENCY = "dependency"
    EXTERNAL = "external"


class EdgeType(StrEnum):
    """Well-known edge types. The graph accepts any string."""

    CALLS = "calls"
    IMPORTS = "imports"
    USES = "uses"
    ALIAS = "alias"
    DEFINES = "defines"
    DEPENDS_ON = "depends_on"
    DEV_DEPENDS_ON = "dev_depends_on"


IMPORT_EDGE_TYPES = frozenset({EdgeType.IMPORTS, EdgeType.USES, EdgeType.ALIAS})
DEPENDENCY_EDGE_TYPES = frozenset({EdgeType.DEPENDS_ON, EdgeType.DEV_DEPENDS_ON})


@dataclass
class Node:
    """A graph node (module, function, file, repo, dependency, ...)."""

    id: str
    type: str
    name: str
    metadata: Metadata = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.type = str(self.type)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Node:
        """Create a Node from a facts mapping; `name` defaults to the id."""
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            name=str(data.get("name") or data["id"]),
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "name": self.name, "metadata": self.metadata}


@dataclass
class Edge:
    """A directed, typed relationship between two nodes."""

    source: str
    target: str
    type: str
    metadata: Metadata = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.type = str(self.type)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Edge:
        """Create an Edge from a facts mapping."""
        return cls(
            source=str(data["source"]),
            target=str(data["target"]),
            type=str(data["type"]),
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "type": self.type,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class DependencySpec:
    """A declared dependency, optionally with a version constraint."""

    name: str
    version: str | None = None

    @classmethod
    def parse(cls, value: str | Mapping[str, Any] | DependencySpec) -> DependencySpec:
        """Accept a plain name, a {name, version} mapping, or a DependencySpec."""
        if isinstance(value, DependencySpec):
            return value
        if isinstance(value, str):
            return cls(name=value)
        version = value.get("version")
        return cls(name=str(value["name"]), version=str(version) if version else None)


@dataclass
class RepoManifest:
    """Dependencies declared by one repository."""

    name: str
    dependencies: list[DependencySpec] = field(default_factory=list)
    dev_dependencies: list[DependencySpec] = field(default_factory=list)
    language: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RepoManifest:
        """Create a manifest from a mapping such as a portfolio JSON entry."""
        return cls(
            name=str(data["name"]),
            dependencies=[DependencySpec.parse(d) for d in data.get("dependencies") or []],
            dev_dependencies=[
                DependencySpec.parse(d) for d in data.get("dev_dependencies") or []
            ],
            language=data.get("language"),
        )

    def to_dict(self) -> dict[str, Any]:
        def dep(d: DependencySpec) -> str | dict[str, str]:
            return {"name": d.name, "version": d.version} if d.version else d.name

        return {
            "name": self.name,
            "language": self.language,
            "dependencies": [dep(d) for d in self.dependencies],
            "dev_dependencies": [dep(d) for d in self.dev_dependencies],
        }
