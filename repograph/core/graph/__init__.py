"""
Graph store and algorithms.

This module provides the in-memory graph and the analyses that run on it:

Data Structures:
    - GraphStore: Typed adjacency lists in both directions, O(degree) lookups
    - Failure: Tagged outcome for expected query failures (no path, cycle, ...)

Algorithms:
    - traversal: bounded BFS (transitive_callees, transitive_callers)
    - pathfinding: bounded BFS shortest path (call_chain)
    - analysis: Tarjan SCCs, cycles, entry points, call depth, hot paths,
      module cohesion, topological sort

Building:
    - build_graph(): Commit parser/manifest facts into a fresh graph
    - load_graph(): Build from a JSON facts file
"""

from repograph.core.graph.base import GraphStore
from repograph.core.graph.builder import GraphFacts, build_graph
from repograph.core.graph.loader import get_default_facts_path, load_facts, load_graph
from repograph.core.graph.models import (
    CYCLE,
    Failure,
    FailureKind,
    GraphStats,
    ModuleCallStats,
    RankedNode,
)

__all__ = [
    "CYCLE",
    "Failure",
    "FailureKind",
    "GraphFacts",
    "GraphStats",
    "GraphStore",
    "ModuleCallStats",
    "RankedNode",
    "build_graph",
    "get_default_facts_path",
    "load_facts",
    "load_graph",
]
