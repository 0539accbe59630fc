"""Core GraphStore class with typed, bidirectional adjacency lists."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator

from repograph.core.exceptions import NodeNotFoundError
from repograph.core.graph.models import GraphStats
from repograph.core.models import IMPORT_EDGE_TYPES, Edge, EdgeType, Node, NodeType

EdgeTypes = Iterable[str] | None


class GraphStore:
    """Directed multigraph of typed nodes and edges.

    Edges are indexed by endpoint and edge type in both directions, so
    forward and reverse lookups cost O(degree). Not thread-safe: build once,
    then share for reading.
    """

    __slots__ = ("_nodes", "_out", "_in", "_edge_count")

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}
        self._out: dict[str, dict[str, list[Edge]]] = {}
        self._in: dict[str, dict[str, list[Edge]]] = {}
        self._edge_count = 0

    @classmethod
    def create(cls) -> GraphStore:
        """Create an empty graph."""
        return cls()

    def add_node(self, node: Node) -> None:
        """Add or replace a node by id. O(1)."""
        self._nodes[node.id] = node
        self._out.setdefault(node.id, {})
        self._in.setdefault(node.id, {})

    def add_edge(self, edge: Edge) -> None:
        """Add an edge. O(1).

        Raises:
            NodeNotFoundError: If the source or target node is absent.
        """
        for endpoint in (edge.source, edge.target):
            if endpoint not in self._nodes:
                raise NodeNotFoundError(
                    f"Cannot add {edge.type} edge {edge.source} -> {edge.target}: "
                    f"node not found: {endpoint}"
                )
        self._out[edge.source].setdefault(edge.type, []).append(edge)
        self._in[edge.target].setdefault(edge.type, []).append(edge)
        self._edge_count += 1

    def remove_edge(self, edge: Edge) -> bool:
        """Remove one occurrence of an edge. Returns False if it was not present."""
        outgoing = self._out.get(edge.source, {}).get(edge.type)
        if not outgoing or edge not in outgoing:
            return False
        outgoing.remove(edge)
        self._in[edge.target][edge.type].remove(edge)
        self._edge_count -= 1
        return True

    def remove_node(self, node_id: str) -> bool:
        """Remove a node and every edge touching it."""
        if node_id not in self._nodes:
            return False
        for edge in [*self.outgoing(node_id), *self.incoming(node_id)]:
            self.remove_edge(edge)
        del self._nodes[node_id]
        del self._out[node_id]
        del self._in[node_id]
        return True

    def clear(self) -> None:
        """Remove all nodes and edges."""
        self._nodes.clear()
        self._out.clear()
        self._in.clear()
        self._edge_count = 0

    def get_node(self, node_id: str) -> Node | None:
        """Get node by ID. O(1)."""
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def outgoing(self, node_id: str, edge_types: EdgeTypes = None) -> list[Edge]:
        """Outgoing edges, optionally restricted to some edge types. O(out-degree)."""
        return _collect(self._out.get(node_id), edge_types)

    def incoming(self, node_id: str, edge_types: EdgeTypes = None) -> list[Edge]:
        """Incoming edges, optionally restricted to some edge types. O(in-degree)."""
        return _collect(self._in.get(node_id), edge_types)

    def neighbors(self, node_id: str, edge_types: EdgeTypes = None) -> list[str]:
        """Targets of outgoing edges."""
        return [e.target for e in self.outgoing(node_id, edge_types)]

    def predecessors(self, node_id: str, edge_types: EdgeTypes = None) -> list[str]:
        """Sources of incoming edges."""
        return [e.source for e in self.incoming(node_id, edge_types)]

    def callees(self, node_id: str) -> list[str]:
        """Direct callees, one entry per call edge."""
        return self.neighbors(node_id, (EdgeType.CALLS,))

    def callers(self, node_id: str) -> list[str]:
        """Direct callers, one entry per call edge."""
        return self.predecessors(node_id, (EdgeType.CALLS,))

    def imports_of(self, node_id: str) -> list[str]:
        """Modules imported (or used/aliased) by a module."""
        return self.neighbors(node_id, IMPORT_EDGE_TYPES)

    def imported_by(self, node_id: str) -> list[str]:
        """Modules that import (or use/alias) a module."""
        return self.predecessors(node_id, IMPORT_EDGE_TYPES)

    def functions_of(self, module_id: str) -> list[str]:
        """Function nodes defined by a module."""
        return [
            target
            for target in self.neighbors(module_id, (EdgeType.DEFINES,))
            if self._nodes[target].type == NodeType.FUNCTION
        ]

    def out_degree(self, node_id: str, edge_types: EdgeTypes = None) -> int:
        return len(self.outgoing(node_id, edge_types))

    def in_degree(self, node_id: str, edge_types: EdgeTypes = None) -> int:
        return len(self.incoming(node_id, edge_types))

    def nodes_by_type(self, node_type: str) -> list[Node]:
        """All nodes of a given type. O(V)."""
        return [n for n in self._nodes.values() if n.type == node_type]

    def edges(self) -> Iterator[Edge]:
        """Iterate over all edges, grouped by source node."""
        for by_type in self._out.values():
            for bucket in by_type.values():
                yield from bucket

    def stats(self) -> GraphStats:
        """Node and edge counts, total and per type."""
        return GraphStats(
            node_count=len(self._nodes),
            edge_count=self._edge_count,
            nodes_by_type=dict(Counter(n.type for n in self._nodes.values())),
            edges_by_type=dict(Counter(e.type for e in self.edges())),
        )

    @property
    def nodes(self) -> dict[str, Node]:
        return self._nodes

    @property
    def num_nodes(self) -> int:
        return len(self._nodes)

    @property
    def num_edges(self) -> int:
        return self._edge_count

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"GraphStore(nodes={self.num_nodes}, edges={self.num_edges})"


def _collect(by_type: dict[str, list[Edge]] | None, edge_types: EdgeTypes) -> list[Edge]:
    if not by_type:
        return []
    if edge_types is None:
        return [e for bucket in by_type.values() for e in bucket]
    return [e for t in dict.fromkeys(edge_types) for e in by_type.get(t, [])]
