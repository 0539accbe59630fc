"""Result types for graph queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

CYCLE = "cycle"
"""Depth marker for nodes whose depth is undefined because they reach a cycle."""


class FailureKind(Enum):
    """Expected, recoverable query outcomes."""

    NODE_NOT_FOUND = "node_not_found"
    NO_PATH = "no_path"
    CYCLE_DETECTED = "cycle_detected"
    CYCLIC_DEPENDENCY = "cyclic_dependency"


@dataclass(frozen=True)
class Failure:
    """Failed query outcome. Queries return `T | Failure` instead of raising."""

    kind: FailureKind
    detail: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind.value, "detail": self.detail}


@dataclass(frozen=True)
class RankedNode:
    """A node ranked by call connectivity (in-degree + out-degree)."""

    id: str
    name: str
    connectivity: int


@dataclass(frozen=True)
class ModuleCallStats:
    """Internal vs. external call structure of one module."""

    module: str
    function_count: int
    internal_calls: int
    external_calls: int
    external_dependencies: int
    cohesion: float


@dataclass
class GraphStats:
    """Node/edge counts of a graph."""

    node_count: int = 0
    edge_count: int = 0
    nodes_by_type: dict[str, int] = field(default_factory=dict)
    edges_by_type: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_count": self.node_count,
            "edge_count": self.edge_count,
            "nodes_by_type": dict(self.nodes_by_type),
            "edges_by_type": dict(self.edges_by_type),
        }
