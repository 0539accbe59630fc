"""
Repograph: In-memory code and dependency graphs.

Repograph stores typed nodes and edges produced by external parsers and
answers structural questions about them:
- Callers/callees, transitive reach and call chains between functions
- Cycles, entry points, leaves, call depth and hot paths
- Cross-repo impact, shared dependencies, version conflicts, upgrade order

Usage:
    from repograph.core.graph import load_graph
    from repograph.core.graph.analysis import find_cycles

    graph = load_graph(Path(".repograph/graph.json"))
    cycles = find_cycles(graph)
"""

__version__ = "0.1.0"
