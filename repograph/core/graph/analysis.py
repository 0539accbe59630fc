"""Graph analysis: SCCs, cycles, entry points, call depth, hot paths, topological sort.

Every function here is a pure query over a GraphStore. `node_types` selects
the nodes an analysis ranges over (None = all nodes) and `edge_types` the
edges it follows; edges leaving the selected nodes are ignored. The defaults
describe a call graph: function nodes joined by `calls` edges.
"""

from __future__ import annotations

import heapq
import logging
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from repograph.core.graph.models import (
    CYCLE,
    Failure,
    FailureKind,
    ModuleCallStats,
    RankedNode,
)
from repograph.core.models import EdgeType, NodeType

if TYPE_CHECKING:
    from repograph.core.graph.base import GraphStore
    from repograph.core.models import Node

logger = logging.getLogger(__name__)

CALL_EDGES: tuple[str, ...] = (EdgeType.CALLS,)
FUNCTION_NODES: tuple[str, ...] = (NodeType.FUNCTION,)
DEFAULT_HOT_PATH_LIMIT = 5

Depth = int | str


def _scope(graph: GraphStore, node_types: Iterable[str] | None) -> list[str]:
    """Node ids of the selected types, in insertion order."""
    if node_types is None:
        return list(graph.nodes)
    wanted = set(node_types)
    return [nid for nid, node in graph.nodes.items() if node.type in wanted]


def _successors(
    graph: GraphStore, node_id: str, edge_types: tuple[str, ...], members: set[str] | None
) -> list[str]:
    targets = graph.neighbors(node_id, edge_types)
    if members is None:
        return targets
    return [t for t in targets if t in members]


def strongly_connected_components(
    graph: GraphStore,
    node_types: Iterable[str] | None = FUNCTION_NODES,
    edge_types: Iterable[str] = CALL_EDGES,
) -> list[list[str]]:
    """Tarjan's algorithm with an explicit stack. O(V + E).

    Returns components with two or more members, plus single nodes with a
    self-loop, in the order Tarjan completes them.
    """
    scope = _scope(graph, node_types)
    members = set(scope)
    types = tuple(edge_types)

    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    components: list[list[str]] = []
    counter = 0

    def visit(node_id: str) -> Iterator[str]:
        nonlocal counter
        index[node_id] = lowlink[node_id] = counter
        counter += 1
        stack.append(node_id)
        on_stack.add(node_id)
        return iter(_successors(graph, node_id, types, members))

    for root in scope:
        if root in index:
            continue
        work: list[tuple[str, Iterator[str]]] = [(root, visit(root))]
        while work:
            node_id, successors = work[-1]
            for succ in successors:
                if succ not in index:
                    work.append((succ, visit(succ)))
                    break
                if succ in on_stack:
                    lowlink[node_id] = min(lowlink[node_id], index[succ])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node_id])
                if lowlink[node_id] == index[node_id]:
                    component: list[str] = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member == node_id:
                            break
                    component.reverse()
                    components.append(component)

    return [
        c
        for c in components
        if len(c) > 1 or c[0] in _successors(graph, c[0], types, members)
    ]


def find_cycles(
    graph: GraphStore,
    max_cycles: int | None = None,
    node_types: Iterable[str] | None = FUNCTION_NODES,
    edge_types: Iterable[str] = CALL_EDGES,
) -> list[list[str]]:
    """One representative elementary cycle per strongly connected component.

    Each cycle lists its nodes once, in edge order, starting from the
    component's first member. Stops after `max_cycles` cycles.
    """
    types = tuple(edge_types)
    members = set(_scope(graph, node_types))
    cycles: list[list[str]] = []

    for component in strongly_connected_components(graph, node_types, types):
        if max_cycles is not None and len(cycles) >= max_cycles:
            logger.debug("Cycle limit %d reached", max_cycles)
            break
        cycles.append(_representative_cycle(graph, component, types, members))

    return cycles


def _representative_cycle(
    graph: GraphStore, component: list[str], edge_types: tuple[str, ...], members: set[str]
) -> list[str]:
    """Shortest cycle through the component's first member, found by BFS."""
    start = component[0]
    inside = set(component) & members
    parent: dict[str, str] = {start: start}
    queue: deque[str] = deque([start])

    while queue:
        current = queue.popleft()
        for succ in _successors(graph, current, edge_types, inside):
            if succ == start:
                path = [current]
                while path[-1] != start:
                    path.append(parent[path[-1]])
                path.reverse()
                return path
            if succ not in parent:
                parent[succ] = current
                queue.append(succ)

    return list(component)


def has_cycle(
    graph: GraphStore,
    node_types: Iterable[str] | None = FUNCTION_NODES,
    edge_types: Iterable[str] = CALL_EDGES,
) -> bool:
    """Check whether any cycle exists. O(V + E)."""
    return bool(find_cycles(graph, 1, node_types, edge_types))


def entry_points(
    graph: GraphStore, node_types: Iterable[str] | None = FUNCTION_NODES
) -> list[Node]:
    """Nodes with no incoming call edges. O(V)."""
    return [
        graph.nodes[nid]
        for nid in _scope(graph, node_types)
        if not graph.in_degree(nid, CALL_EDGES)
    ]


def leaf_functions(
    graph: GraphStore, node_types: Iterable[str] | None = FUNCTION_NODES
) -> list[Node]:
    """Nodes with no outgoing call edges. O(V)."""
    return [
        graph.nodes[nid]
        for nid in _scope(graph, node_types)
        if not graph.out_degree(nid, CALL_EDGES)
    ]


@dataclass
class _Frame:
    node_id: str
    successors: Iterator[str]
    depth: int = 0
    cyclic: bool = False

    def absorb(self, child_depth: Depth) -> None:
        if child_depth == CYCLE:
            self.cyclic = True
        else:
            self.depth = max(self.depth, int(child_depth) + 1)


def longest_chain(
    graph: GraphStore,
    node_id: str,
    edge_types: Iterable[str] = CALL_EDGES,
    members: set[str] | None = None,
    memo: dict[str, Depth] | None = None,
) -> Depth:
    """Length of the longest edge chain starting at `node_id`.

    Nodes without successors have depth 0. DFS keeps the current path in an
    on-path set; reaching a node already on the path marks every node on the
    path as `CYCLE`, since none of them has a finite depth. `memo` may be
    shared across calls to evaluate many start nodes in O(V + E) total.
    """
    types = tuple(edge_types)
    memo = {} if memo is None else memo
    if node_id in memo:
        return memo[node_id]

    on_path: set[str] = {node_id}
    stack = [_Frame(node_id, iter(_successors(graph, node_id, types, members)))]

    while stack:
        frame = stack[-1]
        for succ in frame.successors:
            if succ in on_path:
                frame.cyclic = True
            elif succ in memo:
                frame.absorb(memo[succ])
            else:
                on_path.add(succ)
                stack.append(_Frame(succ, iter(_successors(graph, succ, types, members))))
                break
        else:
            stack.pop()
            on_path.discard(frame.node_id)
            result: Depth = CYCLE if frame.cyclic else frame.depth
            memo[frame.node_id] = result
            if stack:
                stack[-1].absorb(result)

    return memo[node_id]


def call_depth(graph: GraphStore, node_id: str) -> int | Failure:
    """Max distance from `node_id` to a leaf along call edges.

    A leaf has depth 0; any other node has 1 + the max depth of its callees.
    """
    if node_id not in graph:
        return Failure(FailureKind.NODE_NOT_FOUND, node_id)
    depth = longest_chain(graph, node_id, CALL_EDGES)
    if depth == CYCLE:
        return Failure(FailureKind.CYCLE_DETECTED, node_id)
    return int(depth)


def all_call_depths(
    graph: GraphStore, node_types: Iterable[str] | None = FUNCTION_NODES
) -> dict[str, Depth]:
    """Call depth of every node; nodes in or reaching a cycle map to `CYCLE`."""
    memo: dict[str, Depth] = {}
    return {
        nid: longest_chain(graph, nid, CALL_EDGES, memo=memo)
        for nid in _scope(graph, node_types)
    }


def hot_paths(
    graph: GraphStore,
    limit: int = DEFAULT_HOT_PATH_LIMIT,
    node_types: Iterable[str] | None = FUNCTION_NODES,
) -> list[RankedNode]:
    """Nodes with the highest call connectivity. O(V log V).

    Connectivity is in-degree + out-degree over call edges; ties are broken
    by id.
    """
    ranked = [
        RankedNode(
            id=nid,
            name=graph.nodes[nid].name,
            connectivity=graph.in_degree(nid, CALL_EDGES) + graph.out_degree(nid, CALL_EDGES),
        )
        for nid in _scope(graph, node_types)
    ]
    ranked.sort(key=lambda r: (-r.connectivity, r.id))
    return ranked[:limit]


def module_call_stats(graph: GraphStore, module_id: str) -> ModuleCallStats | Failure:
    """Internal vs. external calls of the functions a module defines.

    `internal_calls` counts call edges between two of the module's functions,
    `external_calls` call edges leaving the module, and
    `external_dependencies` the distinct functions those edges reach.
    """
    if module_id not in graph:
        return Failure(FailureKind.NODE_NOT_FOUND, module_id)

    functions = graph.functions_of(module_id)
    function_set = set(functions)
    internal = 0
    external = 0
    external_targets: set[str] = set()

    for func_id in function_set:
        for callee in graph.callees(func_id):
            if callee in function_set:
                internal += 1
            else:
                external += 1
                external_targets.add(callee)

    total = internal + external
    return ModuleCallStats(
        module=module_id,
        function_count=len(function_set),
        internal_calls=internal,
        external_calls=external,
        external_dependencies=len(external_targets),
        cohesion=internal / total if total else 0.0,
    )


def topological_sort(
    graph: GraphStore,
    node_types: Iterable[str] | None = None,
    edge_types: Iterable[str] | None = None,
    reverse: bool = False,
) -> list[str] | None:
    """Topological sort using Kahn's algorithm. O((V + E) log V).

    For every edge u -> v, u precedes v (v precedes u with `reverse`). Ready
    nodes are taken in id order. Returns None if the graph has cycles.
    """
    scope = _scope(graph, node_types)
    members = set(scope)
    types = tuple(edge_types) if edge_types is not None else None
    in_degree = dict.fromkeys(scope, 0)
    forward: dict[str, list[str]] = {nid: [] for nid in scope}

    for nid in scope:
        for target in graph.neighbors(nid, types):
            if target not in members:
                continue
            before, after = (target, nid) if reverse else (nid, target)
            forward[before].append(after)
            in_degree[after] += 1

    ready = [nid for nid, degree in in_degree.items() if degree == 0]
    heapq.heapify(ready)
    result: list[str] = []

    while ready:
        nid = heapq.heappop(ready)
        result.append(nid)
        for after in forward[nid]:
            in_degree[after] -= 1
            if in_degree[after] == 0:
                heapq.heappush(ready, after)

    return result if len(result) == len(scope) else None
