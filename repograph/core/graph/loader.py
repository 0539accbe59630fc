"""Load GraphFacts from a JSON facts file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from repograph.core.exceptions import FactsError
from repograph.core.graph.base import GraphStore
from repograph.core.graph.builder import GraphFacts, build_graph
from repograph.core.models import Edge, Node, RepoManifest


def facts_from_dict(data: dict[str, Any]) -> GraphFacts:
    """Create GraphFacts from the decoded facts format.

    Expected shape: {"nodes": [...], "edges": [...], "manifests": [...]};
    every key is optional.
    """
    try:
        return GraphFacts(
            nodes=[Node.from_dict(n) for n in data.get("nodes") or []],
            edges=[Edge.from_dict(e) for e in data.get("edges") or []],
            manifests=[RepoManifest.from_dict(m) for m in data.get("manifests") or []],
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise FactsError(f"Malformed facts: {e!r}") from e


def load_facts(path: Path) -> GraphFacts:
    """Read a facts file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise FactsError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise FactsError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise FactsError(f"Expected a JSON object in {path}")
    return facts_from_dict(data)


def load_graph(path: Path, skip_dangling: bool = False) -> GraphStore:
    """Read a facts file and build a graph from it. O(V + E)."""
    return build_graph(load_facts(path), skip_dangling=skip_dangling)


def get_default_facts_path(project_root: Path) -> Path:
    """Get the default facts path for a project."""
    return project_root / ".repograph" / "graph.json"
