"""Cross-repository dependency analysis.

Works on a repo-level GraphStore: one `repo` node per repository, one
`dependency` node per external package, and `depends_on` / `dev_depends_on`
edges from repos to what they declare. A dependency whose name matches a
repo in the portfolio points at that repo's node, which forms the
intra-portfolio subgraph used for ordering, cycles and depth.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from repograph.core.graph import analysis
from repograph.core.graph.base import GraphStore
from repograph.core.graph.builder import add_declared_dependencies, manifest_node
from repograph.core.graph.models import CYCLE, Failure, FailureKind
from repograph.core.graph.traversal import transitive
from repograph.core.models import DEPENDENCY_EDGE_TYPES, EdgeType, NodeType, RepoManifest
from repograph.core.portfolio.models import (
    DependencyVersions,
    ImpactResult,
    RiskLevel,
    SharedDependency,
    VersionConflict,
    VersionDeclaration,
)
from repograph.core.portfolio.versions import parse_major

logger = logging.getLogger(__name__)

REPO_NODES: tuple[str, ...] = (NodeType.REPO,)
DEPENDENCY_EDGES: tuple[str, ...] = tuple(sorted(DEPENDENCY_EDGE_TYPES))

# Upper bounds (inclusive) of affected repos per risk level.
_RISK_THRESHOLDS = (
    (1, RiskLevel.LOW),
    (3, RiskLevel.MEDIUM),
    (6, RiskLevel.HIGH),
)


def build_cross_repo_graph(repos: Iterable[RepoManifest | Mapping[str, Any]]) -> GraphStore:
    """Build the repo-level dependency graph of a portfolio.

    Accepts RepoManifest objects or mappings with `name`, `dependencies` and
    `dev_dependencies`, where each dependency is a name or {name, version}.
    """
    manifests = [r if isinstance(r, RepoManifest) else RepoManifest.from_dict(r) for r in repos]
    graph = GraphStore.create()

    for manifest in manifests:
        graph.add_node(manifest_node(manifest))
    for manifest in manifests:
        add_declared_dependencies(graph, manifest)

    logger.debug("Built cross-repo %r for %d repos", graph, len(manifests))
    return graph


def _is_repo(graph: GraphStore, node_id: str) -> bool:
    node = graph.get_node(node_id)
    return node is not None and node.type == NodeType.REPO


def risk_level(affected: int) -> RiskLevel:
    """Bucket an affected-repo count: 0-1 low, 2-3 medium, 4-6 high, more critical."""
    for upper, level in _RISK_THRESHOLDS:
        if affected <= upper:
            return level
    return RiskLevel.CRITICAL


def impact_analysis(graph: GraphStore, repo: str) -> ImpactResult | Failure:
    """Repos that depend on `repo`, directly or through other repos."""
    if repo not in graph:
        return Failure(FailureKind.NODE_NOT_FOUND, repo)

    sources = graph.predecessors(repo, DEPENDENCY_EDGES)
    direct = list(dict.fromkeys(src for src in sources if _is_repo(graph, src)))
    dependents = transitive(graph, repo, DEPENDENCY_EDGES, "incoming")
    if isinstance(dependents, Failure):
        return dependents
    direct_set = set(direct)
    indirect = [n for n in dependents if n not in direct_set and _is_repo(graph, n)]

    return ImpactResult(
        repo=repo,
        directly_affected=direct,
        transitively_affected=indirect,
        risk_level=risk_level(len(direct) + len(indirect)),
    )


def find_shared_dependencies(graph: GraphStore, min_count: int = 1) -> list[SharedDependency]:
    """Repos using each external dependency, most used first.

    Callers pick their own threshold; `min_count=2` keeps only shared ones.
    """
    shared = []
    for node in graph.nodes_by_type(NodeType.DEPENDENCY):
        used_by = list(dict.fromkeys(graph.predecessors(node.id, DEPENDENCY_EDGES)))
        if len(used_by) >= min_count:
            shared.append(SharedDependency(dependency=node.id, used_by=used_by))
    shared.sort(key=lambda s: (-s.count, s.dependency))
    return shared


def find_dependency_versions(graph: GraphStore) -> list[DependencyVersions]:
    """Version constraints declared for each dependency, across all repos.

    Dependencies declared without any version are left out.
    """
    by_dependency: dict[str, DependencyVersions] = {}
    for repo in graph.nodes_by_type(NodeType.REPO):
        for edge in graph.outgoing(repo.id, DEPENDENCY_EDGES):
            version = edge.metadata.get("version")
            if not version:
                continue
            entry = by_dependency.setdefault(edge.target, DependencyVersions(edge.target))
            entry.declarations.append(
                VersionDeclaration(
                    repo=repo.id,
                    version=str(version),
                    dev=edge.type == EdgeType.DEV_DEPENDS_ON,
                )
            )
    return list(by_dependency.values())


def find_version_conflicts(graph: GraphStore) -> list[VersionConflict]:
    """Dependencies whose declarations disagree on the major version.

    Same major with a different minor or patch is compatible. Constraints
    without a parsable major are left out of the comparison.
    """
    conflicts = []
    for entry in find_dependency_versions(graph):
        parsed = [(d, parse_major(d.version)) for d in entry.declarations]
        comparable = [(d, major) for d, major in parsed if major is not None]
        majors = sorted({major for _, major in comparable})
        if len(majors) > 1:
            conflicts.append(
                VersionConflict(
                    dependency=entry.dependency,
                    declarations=[d for d, _ in comparable],
                    majors=majors,
                )
            )
    return conflicts


def suggest_upgrade_order(graph: GraphStore) -> list[str] | Failure:
    """Repos in topological order, dependencies before dependents.

    Only edges between two repos count. Returns CYCLIC_DEPENDENCY if those
    edges form a cycle.
    """
    order = analysis.topological_sort(graph, REPO_NODES, DEPENDENCY_EDGES, reverse=True)
    if order is None:
        return Failure(FailureKind.CYCLIC_DEPENDENCY, "portfolio repos depend on each other")
    return order


def find_cycles(graph: GraphStore, max_cycles: int | None = None) -> list[list[str]]:
    """Circular dependencies between repos."""
    return analysis.find_cycles(graph, max_cycles, REPO_NODES, DEPENDENCY_EDGES)


def dependency_depth(graph: GraphStore, repo: str) -> int | Failure:
    """Longest chain of repo-to-repo dependencies starting at `repo`."""
    if repo not in graph:
        return Failure(FailureKind.NODE_NOT_FOUND, repo)
    repos = {n.id for n in graph.nodes_by_type(NodeType.REPO)}
    depth = analysis.longest_chain(graph, repo, DEPENDENCY_EDGES, members=repos)
    if depth == CYCLE:
        return Failure(FailureKind.CYCLIC_DEPENDENCY, repo)
    return int(depth)


def get_all_dependents(
    graph: GraphStore, repo: str, include_dev: bool = False
) -> list[str] | Failure:
    """Every repo that depends on `repo`, transitively."""
    edge_types = DEPENDENCY_EDGES if include_dev else (EdgeType.DEPENDS_ON,)
    return transitive(graph, repo, edge_types, "incoming")
