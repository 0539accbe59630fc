"""Build a GraphStore from parser and manifest facts."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from repograph.core.graph.base import GraphStore
from repograph.core.models import (
    IMPORT_EDGE_TYPES,
    DependencySpec,
    Edge,
    EdgeType,
    Metadata,
    Node,
    NodeType,
    RepoManifest,
)

logger = logging.getLogger(__name__)


@dataclass
class GraphFacts:
    """Normalized facts handed over by parsers and manifest readers."""

    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    manifests: list[RepoManifest] = field(default_factory=list)


def build_graph(facts: GraphFacts, skip_dangling: bool = False) -> GraphStore:
    """Commit facts into a new GraphStore.

    Every call returns a fresh graph. All nodes are added before any edge, so
    edge order in the facts does not matter; duplicate nodes resolve to the
    last one seen. Import targets that were never declared become `external`
    nodes. Any other edge with a missing endpoint raises NodeNotFoundError,
    or is logged and dropped when `skip_dangling` is set.
    """
    graph = GraphStore.create()

    for node in facts.nodes:
        graph.add_node(node)
    for manifest in facts.manifests:
        graph.add_node(manifest_node(manifest))

    dropped = 0
    for edge in facts.edges:
        if edge.type in IMPORT_EDGE_TYPES and edge.target not in graph:
            graph.add_node(Node(edge.target, NodeType.EXTERNAL, edge.target))
        if skip_dangling and (edge.source not in graph or edge.target not in graph):
            logger.warning("Dropping %s edge %s -> %s", edge.type, edge.source, edge.target)
            dropped += 1
            continue
        graph.add_edge(edge)

    for manifest in facts.manifests:
        add_declared_dependencies(graph, manifest)

    logger.debug(
        "Built %r from %d manifests (%d edges dropped)", graph, len(facts.manifests), dropped
    )
    return graph


def manifest_node(manifest: RepoManifest) -> Node:
    """The `repo` node for a manifest."""
    metadata: Metadata = {"language": manifest.language} if manifest.language else {}
    return Node(manifest.name, NodeType.REPO, manifest.name, metadata)


def add_declared_dependencies(graph: GraphStore, manifest: RepoManifest) -> None:
    """Add `depends_on` / `dev_depends_on` edges from a repo node to its dependencies.

    Dependencies that are not yet nodes become `dependency` nodes; names that
    already exist (e.g. another repo) are linked as-is. Versions are kept on
    the edge metadata.
    """
    for spec, edge_type in declared_dependencies(manifest):
        if spec.name not in graph:
            graph.add_node(Node(spec.name, NodeType.DEPENDENCY, spec.name))
        metadata: Metadata = {"version": spec.version} if spec.version else {}
        graph.add_edge(Edge(manifest.name, spec.name, edge_type, metadata))


def declared_dependencies(manifest: RepoManifest) -> Iterator[tuple[DependencySpec, str]]:
    """Runtime then dev dependencies, each paired with its edge type."""
    for spec in manifest.dependencies:
        yield spec, EdgeType.DEPENDS_ON
    for spec in manifest.dev_dependencies:
        yield spec, EdgeType.DEV_DEPENDS_ON
