"""
Cross-repository dependency analysis for a portfolio of repositories.

Builds a repo-level GraphStore from manifests and answers portfolio
questions on it: impact of a change, shared dependencies, major-version
conflicts, upgrade order, circular dependencies and dependency depth.
"""

from repograph.core.portfolio.analysis import (
    build_cross_repo_graph,
    dependency_depth,
    find_cycles,
    find_dependency_versions,
    find_shared_dependencies,
    find_version_conflicts,
    get_all_dependents,
    impact_analysis,
    risk_level,
    suggest_upgrade_order,
)
from repograph.core.portfolio.loader import load_portfolio
from repograph.core.portfolio.models import (
    DependencyVersions,
    ImpactResult,
    RiskLevel,
    SharedDependency,
    VersionConflict,
    VersionDeclaration,
)
from repograph.core.portfolio.versions import parse_major

__all__ = [
    "DependencyVersions",
    "ImpactResult",
    "RiskLevel",
    "SharedDependency",
    "VersionConflict",
    "VersionDeclaration",
    "build_cross_repo_graph",
    "dependency_depth",
    "find_cycles",
    "find_dependency_versions",
    "find_shared_dependencies",
    "find_version_conflicts",
    "get_all_dependents",
    "impact_analysis",
    "load_portfolio",
    "parse_major",
    "risk_level",
    "suggest_upgrade_order",
]
