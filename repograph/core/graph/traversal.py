"""Bounded breadth-first traversal over typed edges."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import TYPE_CHECKING, Literal

from repograph.core.graph.models import Failure, FailureKind
from repograph.core.models import EdgeType

if TYPE_CHECKING:
    from repograph.core.graph.base import GraphStore

Direction = Literal["outgoing", "incoming"]


def transitive(
    graph: GraphStore,
    node_id: str,
    edge_types: Iterable[str] | None,
    direction: Direction = "outgoing",
    max_depth: int | None = None,
) -> list[str] | Failure:
    """Collect every node reachable from `node_id`. O(V + E) in the subgraph.

    Direct neighbours are always included; `max_depth` counts the extra hops
    expanded beyond them (0 = direct only, None = unbounded). The start node
    is excluded even when a cycle leads back to it. Order is BFS order.
    """
    if node_id not in graph:
        return Failure(FailureKind.NODE_NOT_FOUND, node_id)

    types = tuple(edge_types) if edge_types is not None else None
    step = graph.neighbors if direction == "outgoing" else graph.predecessors

    visited: set[str] = {node_id}
    result: list[str] = []
    queue: deque[tuple[str, int]] = deque([(node_id, 0)])

    while queue:
        current, depth = queue.popleft()
        if max_depth is not None and depth > max_depth:
            continue
        for neighbor in step(current, types):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            result.append(neighbor)
            queue.append((neighbor, depth + 1))

    return result


def transitive_callees(
    graph: GraphStore, node_id: str, max_depth: int | None = None
) -> list[str] | Failure:
    """All functions directly or indirectly called by `node_id`."""
    return transitive(graph, node_id, (EdgeType.CALLS,), "outgoing", max_depth)


def transitive_callers(
    graph: GraphStore, node_id: str, max_depth: int | None = None
) -> list[str] | Failure:
    """All functions that directly or indirectly call `node_id`."""
    return transitive(graph, node_id, (EdgeType.CALLS,), "incoming", max_depth)
