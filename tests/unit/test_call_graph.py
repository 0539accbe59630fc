"""Unit tests for call graph algorithms."""

import pytest

from repograph.core.graph import CYCLE, Failure, FailureKind, GraphStore
from repograph.core.graph.analysis import (
    all_call_depths,
    call_depth,
    entry_points,
    find_cycles,
    has_cycle,
    hot_paths,
    leaf_functions,
    module_call_stats,
    strongly_connected_components,
    topological_sort,
)
from repograph.core.graph.pathfinding import call_chain, shortest_path
from repograph.core.graph.traversal import transitive, transitive_callees, transitive_callers
from repograph.core.models import Edge, EdgeType, Node, NodeType


def make_node(id: str, type: str = NodeType.FUNCTION) -> Node:
    """Create a test node."""
    return Node(id=id, type=type, name=id.upper())


def make_edge(source: str, target: str, type: str = EdgeType.CALLS) -> Edge:
    """Create a test edge."""
    return Edge(source=source, target=target, type=type)


def make_graph(names: list[str], calls: list[tuple[str, str]]) -> GraphStore:
    """Create a call graph of function nodes."""
    graph = GraphStore.create()
    for name in names:
        graph.add_node(make_node(name))
    for source, target in calls:
        graph.add_edge(make_edge(source, target))
    return graph


@pytest.fixture
def linear_graph() -> GraphStore:
    """Create a linear graph: a -> b -> c."""
    return make_graph(["a", "b", "c"], [("a", "b"), ("b", "c")])


@pytest.fixture
def branching_graph() -> GraphStore:
    """Create a diamond: a -> b -> d, a -> c -> d."""
    return make_graph(["a", "b", "c", "d"], [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])


@pytest.fixture
def cyclic_graph() -> GraphStore:
    """Create a graph with a cycle: a -> b -> c -> a."""
    return make_graph(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "a")])


@pytest.fixture
def disconnected_graph() -> GraphStore:
    """Create a disconnected graph: a -> b, c -> d."""
    return make_graph(["a", "b", "c", "d"], [("a", "b"), ("c", "d")])


@pytest.fixture
def hub_graph() -> GraphStore:
    """Create a hub with three callers and two callees."""
    return make_graph(
        ["hub", "c1", "c2", "c3", "e1", "e2"],
        [("c1", "hub"), ("c2", "hub"), ("c3", "hub"), ("hub", "e1"), ("hub", "e2")],
    )


class TestTransitive:
    """Tests for transitive callers and callees."""

    def test_transitive_callees_linear(self, linear_graph: GraphStore) -> None:
        assert set(transitive_callees(linear_graph, "a")) == {"b", "c"}

    def test_transitive_callers_linear(self, linear_graph: GraphStore) -> None:
        assert set(transitive_callers(linear_graph, "c")) == {"a", "b"}

    def test_leaf_has_no_callees(self, linear_graph: GraphStore) -> None:
        assert transitive_callees(linear_graph, "c") == []

    def test_max_depth_zero_is_direct_only(self, linear_graph: GraphStore) -> None:
        assert transitive_callees(linear_graph, "a", max_depth=0) == ["b"]

    def test_max_depth_one_adds_one_hop(self) -> None:
        graph = make_graph(["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "d")])
        assert transitive_callees(graph, "a", max_depth=1) == ["b", "c"]
        assert transitive_callees(graph, "a") == ["b", "c", "d"]

    def test_start_node_excluded_on_cycle(self, cyclic_graph: GraphStore) -> None:
        result = transitive_callees(cyclic_graph, "a")
        assert set(result) == {"b", "c"}
        assert "a" not in result

    def test_diamond_visits_once(self, branching_graph: GraphStore) -> None:
        assert sorted(transitive_callees(branching_graph, "a")) == ["b", "c", "d"]

    def test_missing_node(self, linear_graph: GraphStore) -> None:
        result = transitive_callees(linear_graph, "ghost")
        assert isinstance(result, Failure)
        assert result.kind is FailureKind.NODE_NOT_FOUND

    def test_only_follows_call_edges(self, linear_graph: GraphStore) -> None:
        linear_graph.add_node(make_node("m", NodeType.MODULE))
        linear_graph.add_edge(make_edge("a", "m", EdgeType.IMPORTS))
        assert "m" not in transitive_callees(linear_graph, "a")
        assert transitive(linear_graph, "a", [EdgeType.IMPORTS]) == ["m"]


class TestCycles:
    """Tests for SCC and cycle detection."""

    def test_no_cycles(self, linear_graph: GraphStore) -> None:
        assert find_cycles(linear_graph) == []
        assert has_cycle(linear_graph) is False

    def test_diamond_has_no_cycle(self, branching_graph: GraphStore) -> None:
        assert has_cycle(branching_graph) is False

    def test_three_cycle(self, cyclic_graph: GraphStore) -> None:
        cycles = find_cycles(cyclic_graph)
        assert len(cycles) == 1
        assert set(cycles[0]) == {"a", "b", "c"}
        assert has_cycle(cyclic_graph) is True

    def test_cycle_follows_edges(self, cyclic_graph: GraphStore) -> None:
        cycle = find_cycles(cyclic_graph)[0]
        for i, node in enumerate(cycle):
            assert cycle[(i + 1) % len(cycle)] in cyclic_graph.callees(node)

    def test_self_loop_is_cycle(self) -> None:
        graph = make_graph(["a", "b"], [("a", "a"), ("a", "b")])
        assert find_cycles(graph) == [["a"]]

    def test_max_cycles(self) -> None:
        graph = make_graph(
            ["n1", "n2", "n3", "n4", "n5", "n6"],
            [("n1", "n2"), ("n2", "n1"), ("n3", "n4"), ("n4", "n3"), ("n5", "n6"), ("n6", "n5")],
        )
        assert len(find_cycles(graph)) == 3
        assert len(find_cycles(graph, max_cycles=2)) == 2

    def test_sccs_skip_singletons(self) -> None:
        graph = make_graph(
            ["a", "b", "c", "d"], [("a", "b"), ("b", "a"), ("b", "c"), ("c", "d")]
        )
        components = strongly_connected_components(graph)
        assert [sorted(c) for c in components] == [["a", "b"]]

    def test_cycle_inside_larger_component(self) -> None:
        graph = make_graph(
            ["a", "b", "c", "d"],
            [("a", "b"), ("b", "c"), ("c", "a"), ("c", "d"), ("d", "b")],
        )
        cycles = find_cycles(graph)
        assert len(cycles) == 1
        assert len(set(cycles[0])) == len(cycles[0])

    def test_deep_chain_does_not_recurse(self) -> None:
        names = [f"f{i}" for i in range(5000)]
        graph = make_graph(names, list(zip(names, names[1:])) + [(names[-1], names[0])])
        cycles = find_cycles(graph)
        assert len(cycles) == 1
        assert len(cycles[0]) == 5000

    def test_non_function_nodes_ignored(self) -> None:
        graph = GraphStore.create()
        graph.add_node(make_node("m1", NodeType.MODULE))
        graph.add_node(make_node("m2", NodeType.MODULE))
        graph.add_edge(make_edge("m1", "m2"))
        graph.add_edge(make_edge("m2", "m1"))
        assert find_cycles(graph) == []
        assert len(find_cycles(graph, node_types=None)) == 1


class TestEntryAndLeafPoints:
    """Tests for entry point and leaf function detection."""

    def test_entry_points_linear(self, linear_graph: GraphStore) -> None:
        assert [n.id for n in entry_points(linear_graph)] == ["a"]

    def test_entry_points_disconnected(self, disconnected_graph: GraphStore) -> None:
        assert {n.id for n in entry_points(disconnected_graph)} == {"a", "c"}

    def test_leaf_functions_branching(self, branching_graph: GraphStore) -> None:
        assert [n.name for n in leaf_functions(branching_graph)] == ["D"]

    def test_cycle_has_no_entry_points(self, cyclic_graph: GraphStore) -> None:
        assert entry_points(cyclic_graph) == []
        assert leaf_functions(cyclic_graph) == []

    def test_isolated_node_is_both(self) -> None:
        graph = make_graph(["solo"], [])
        assert [n.id for n in entry_points(graph)] == ["solo"]
        assert [n.id for n in leaf_functions(graph)] == ["solo"]


class TestCallDepth:
    """Tests for call depth."""

    def test_linear_depths(self, linear_graph: GraphStore) -> None:
        assert call_depth(linear_graph, "a") == 2
        assert call_depth(linear_graph, "b") == 1
        assert call_depth(linear_graph, "c") == 0

    def test_depth_takes_longest_branch(self) -> None:
        graph = make_graph(["a", "b", "c", "d"], [("a", "b"), ("a", "c"), ("c", "d")])
        assert call_depth(graph, "a") == 2

    def test_cycle_detected(self, cyclic_graph: GraphStore) -> None:
        result = call_depth(cyclic_graph, "a")
        assert isinstance(result, Failure)
        assert result.kind is FailureKind.CYCLE_DETECTED

    def test_node_reaching_cycle(self) -> None:
        graph = make_graph(["x", "a", "b"], [("x", "a"), ("a", "b"), ("b", "a")])
        result = call_depth(graph, "x")
        assert isinstance(result, Failure)
        assert result.kind is FailureKind.CYCLE_DETECTED

    def test_missing_node(self, linear_graph: GraphStore) -> None:
        result = call_depth(linear_graph, "ghost")
        assert isinstance(result, Failure)
        assert result.kind is FailureKind.NODE_NOT_FOUND

    def test_all_call_depths(self) -> None:
        graph = make_graph(
            ["a", "b", "c", "x", "y"], [("a", "b"), ("b", "c"), ("x", "y"), ("y", "x")]
        )
        assert all_call_depths(graph) == {"a": 2, "b": 1, "c": 0, "x": CYCLE, "y": CYCLE}

    def test_deep_chain_does_not_recurse(self) -> None:
        names = [f"f{i}" for i in range(5000)]
        graph = make_graph(names, list(zip(names, names[1:])))
        assert call_depth(graph, "f0") == 4999


class TestHotPaths:
    """Tests for hot path ranking."""

    def test_hub(self, hub_graph: GraphStore) -> None:
        ranked = hot_paths(hub_graph, limit=1)
        assert len(ranked) == 1
        assert ranked[0].id == "hub"
        assert ranked[0].name == "HUB"
        assert ranked[0].connectivity == 5

    def test_ties_broken_by_id(self, branching_graph: GraphStore) -> None:
        assert [r.id for r in hot_paths(branching_graph)] == ["a", "b", "c", "d"]

    def test_respects_limit(self, linear_graph: GraphStore) -> None:
        assert len(hot_paths(linear_graph, limit=2)) == 2

    def test_default_limit(self) -> None:
        names = [f"f{i}" for i in range(8)]
        assert len(hot_paths(make_graph(names, []))) == 5


class TestCallChain:
    """Tests for shortest call chains."""

    def test_linear(self, linear_graph: GraphStore) -> None:
        assert call_chain(linear_graph, "a", "c") == ["a", "b", "c"]

    def test_same_node(self, linear_graph: GraphStore) -> None:
        assert call_chain(linear_graph, "a", "a") == ["a"]

    def test_shortest_chosen(self) -> None:
        graph = make_graph(
            ["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "d"), ("a", "d")]
        )
        assert call_chain(graph, "a", "d") == ["a", "d"]

    def test_no_path(self, disconnected_graph: GraphStore) -> None:
        result = call_chain(disconnected_graph, "a", "d")
        assert isinstance(result, Failure)
        assert result.kind is FailureKind.NO_PATH

    def test_direction_matters(self, linear_graph: GraphStore) -> None:
        result = call_chain(linear_graph, "c", "a")
        assert isinstance(result, Failure)
        assert result.kind is FailureKind.NO_PATH

    def test_max_depth_bounds_hops(self) -> None:
        graph = make_graph(["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "d")])
        assert call_chain(graph, "a", "d", max_depth=3) == ["a", "b", "c", "d"]
        result = call_chain(graph, "a", "d", max_depth=2)
        assert isinstance(result, Failure)
        assert result.kind is FailureKind.NO_PATH

    def test_missing_endpoint(self, linear_graph: GraphStore) -> None:
        result = call_chain(linear_graph, "a", "ghost")
        assert isinstance(result, Failure)
        assert result.kind is FailureKind.NODE_NOT_FOUND

    def test_call_chain_ignores_imports(self, linear_graph: GraphStore) -> None:
        linear_graph.add_edge(make_edge("a", "c", EdgeType.IMPORTS))
        assert call_chain(linear_graph, "a", "c") == ["a", "b", "c"]
        assert shortest_path(linear_graph, "a", "c") == ["a", "c"]


class TestModuleCallStats:
    """Tests for module cohesion."""

    @pytest.fixture
    def module_graph(self) -> GraphStore:
        """Module M defines f, g, h; f -> g, g -> h, h -> x (outside)."""
        graph = make_graph(["f", "g", "h", "x"], [("f", "g"), ("g", "h"), ("h", "x")])
        graph.add_node(make_node("M", NodeType.MODULE))
        for name in ["f", "g", "h"]:
            graph.add_edge(make_edge("M", name, EdgeType.DEFINES))
        return graph

    def test_counts(self, module_graph: GraphStore) -> None:
        stats = module_call_stats(module_graph, "M")
        assert not isinstance(stats, Failure)
        assert stats.function_count == 3
        assert stats.internal_calls == 2
        assert stats.external_calls == 1
        assert stats.external_dependencies == 1
        assert stats.cohesion == pytest.approx(2 / 3)

    def test_no_calls_has_zero_cohesion(self) -> None:
        graph = make_graph(["f"], [])
        graph.add_node(make_node("M", NodeType.MODULE))
        graph.add_edge(make_edge("M", "f", EdgeType.DEFINES))
        stats = module_call_stats(graph, "M")
        assert not isinstance(stats, Failure)
        assert stats.cohesion == 0.0

    def test_missing_module(self, module_graph: GraphStore) -> None:
        result = module_call_stats(module_graph, "ghost")
        assert isinstance(result, Failure)
        assert result.kind is FailureKind.NODE_NOT_FOUND


class TestTopologicalSort:
    """Tests for topological sort."""

    def test_linear(self, linear_graph: GraphStore) -> None:
        assert topological_sort(linear_graph) == ["a", "b", "c"]

    def test_reverse(self, linear_graph: GraphStore) -> None:
        assert topological_sort(linear_graph, reverse=True) == ["c", "b", "a"]

    def test_branching(self, branching_graph: GraphStore) -> None:
        assert topological_sort(branching_graph) == ["a", "b", "c", "d"]

    def test_cyclic_returns_none(self, cyclic_graph: GraphStore) -> None:
        assert topological_sort(cyclic_graph) is None
