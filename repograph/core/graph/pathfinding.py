"""Path finding: bounded BFS shortest path."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import TYPE_CHECKING

from repograph.core.graph.models import Failure, FailureKind
from repograph.core.models import EdgeType

if TYPE_CHECKING:
    from repograph.core.graph.base import GraphStore

DEFAULT_MAX_DEPTH = 10


def shortest_path(
    graph: GraphStore,
    from_id: str,
    to_id: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    edge_types: Iterable[str] | None = None,
) -> list[str] | Failure:
    """Find the shortest path using BFS, at most `max_depth` hops. O(V + E).

    Returns the node ids from `from_id` to `to_id` inclusive.
    """
    for node_id in (from_id, to_id):
        if node_id not in graph:
            return Failure(FailureKind.NODE_NOT_FOUND, node_id)
    if from_id == to_id:
        return [from_id]

    types = tuple(edge_types) if edge_types is not None else None
    queue: deque[tuple[str, int]] = deque([(from_id, 0)])
    parent: dict[str, str] = {}
    visited: set[str] = {from_id}

    while queue:
        current, depth = queue.popleft()
        if depth >= max_depth:
            continue
        for neighbor in graph.neighbors(current, types):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            parent[neighbor] = current
            if neighbor == to_id:
                return _reconstruct(from_id, to_id, parent)
            queue.append((neighbor, depth + 1))

    return Failure(FailureKind.NO_PATH, f"{from_id} -> {to_id} within {max_depth} hops")


def call_chain(
    graph: GraphStore, from_id: str, to_id: str, max_depth: int = DEFAULT_MAX_DEPTH
) -> list[str] | Failure:
    """Shortest chain of calls from one function to another."""
    return shortest_path(graph, from_id, to_id, max_depth, (EdgeType.CALLS,))


def _reconstruct(from_id: str, to_id: str, parent: dict[str, str]) -> list[str]:
    """Reconstruct path from BFS parent map."""
    path = [to_id]
    current = to_id
    while current != from_id:
        current = parent[current]
        path.append(current)
    path.reverse()
    return path
