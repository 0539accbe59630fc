"""MCP server implementation for Repograph."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from repograph.core.graph import (
    Failure,
    FailureKind,
    GraphStore,
    analysis,
    get_default_facts_path,
    load_graph,
    pathfinding,
    traversal,
)
from repograph.core.portfolio import build_cross_repo_graph, impact_analysis, load_portfolio

logger = logging.getLogger(__name__)

server = Server("repograph")

GRAPH_ENV = "REPOGRAPH_GRAPH"
PORTFOLIO_ENV = "REPOGRAPH_PORTFOLIO"


def _get_graph() -> GraphStore:
    """Load the facts file named by REPOGRAPH_GRAPH, or the default one."""
    env_path = os.environ.get(GRAPH_ENV)
    facts_path = Path(env_path) if env_path else get_default_facts_path(Path.cwd())
    if not facts_path.exists():
        raise FileNotFoundError(
            f"No repograph facts found. Set {GRAPH_ENV} or write them to {facts_path}"
        )
    return load_graph(facts_path)


def _get_portfolio() -> GraphStore:
    """Load the portfolio file named by REPOGRAPH_PORTFOLIO."""
    env_path = os.environ.get(PORTFOLIO_ENV)
    if not env_path:
        raise FileNotFoundError(f"No portfolio configured. Set {PORTFOLIO_ENV}.")
    return build_cross_repo_graph(load_portfolio(Path(env_path)))


def _node_to_dict(graph: GraphStore, node_id: str) -> dict[str, Any]:
    """Convert a node to a JSON-serializable dict."""
    node = graph.get_node(node_id)
    if node is None:
        return {"id": node_id}
    return node.to_dict()


@server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="repograph_callers",
            description=(
                "Find all functions that call a given function. "
                "Set transitive to include indirect callers."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {
                        "type": "string",
                        "description": "Id of the function to find callers for",
                    },
                    "transitive": {
                        "type": "boolean",
                        "description": "Include indirect callers (default: false)",
                        "default": False,
                    },
                    "max_depth": {
                        "type": "integer",
                        "description": "Hops beyond direct callers when transitive",
                    },
                },
                "required": ["id"],
            },
        ),
        Tool(
            name="repograph_callees",
            description=(
                "Find all functions that a given function calls. "
                "Set transitive to include indirect callees."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {
                        "type": "string",
                        "description": "Id of the function to find callees for",
                    },
                    "transitive": {
                        "type": "boolean",
                        "description": "Include indirect callees (default: false)",
                        "default": False,
                    },
                    "max_depth": {
                        "type": "integer",
                        "description": "Hops beyond direct callees when transitive",
                    },
                },
                "required": ["id"],
            },
        ),
        Tool(
            name="repograph_path",
            description="Find the shortest call chain from one function to another.",
            inputSchema={
                "type": "object",
                "properties": {
                    "from": {"type": "string", "description": "Function to start from"},
                    "to": {"type": "string", "description": "Function to reach"},
                    "max_depth": {
                        "type": "integer",
                        "description": "Maximum number of calls (default: 10)",
                        "default": pathfinding.DEFAULT_MAX_DEPTH,
                    },
                },
                "required": ["from", "to"],
            },
        ),
        Tool(
            name="repograph_stats",
            description=(
                "Get node and edge counts of the graph, optionally with the most "
                "connected functions and the entry points."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "hot_paths": {
                        "type": "integer",
                        "description": "Number of most connected functions to include",
                    },
                    "entry_points": {
                        "type": "boolean",
                        "description": "Include functions nothing calls",
                        "default": False,
                    },
                },
            },
        ),
        Tool(
            name="repograph_cycles",
            description="Find recursive call cycles, one per strongly connected group.",
            inputSchema={
                "type": "object",
                "properties": {
                    "max_cycles": {
                        "type": "integer",
                        "description": "Stop after this many cycles",
                    },
                },
            },
        ),
        Tool(
            name="repograph_impact",
            description=(
                "Find which repos in the portfolio are affected, directly or "
                "transitively, by a change to a repo, with a risk level."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "repo": {"type": "string", "description": "Repo that changes"},
                },
                "required": ["repo"],
            },
        ),
    ]


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "repograph_callers":
            result = _handle_related(
                _get_graph(),
                arguments["id"],
                "incoming",
                arguments.get("transitive", False),
                arguments.get("max_depth"),
            )
        elif name == "repograph_callees":
            result = _handle_related(
                _get_graph(),
                arguments["id"],
                "outgoing",
                arguments.get("transitive", False),
                arguments.get("max_depth"),
            )
        elif name == "repograph_path":
            result = _handle_path(
                _get_graph(),
                arguments["from"],
                arguments["to"],
                arguments.get("max_depth", pathfinding.DEFAULT_MAX_DEPTH),
            )
        elif name == "repograph_stats":
            result = _handle_stats(
                _get_graph(),
                arguments.get("hot_paths"),
                arguments.get("entry_points", False),
            )
        elif name == "repograph_cycles":
            result = _handle_cycles(_get_graph(), arguments.get("max_cycles"))
        elif name == "repograph_impact":
            result = _handle_impact(_get_portfolio(), arguments["repo"])
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except FileNotFoundError as e:
        return [TextContent(type="text", text=json.dumps({"error": str(e)}))]
    except Exception as e:
        logger.exception("Tool %s failed", name)
        return [TextContent(type="text", text=json.dumps({"error": str(e)}))]


def _handle_related(
    graph: GraphStore,
    node_id: str,
    direction: traversal.Direction,
    transitive: bool,
    max_depth: int | None,
) -> dict[str, Any]:
    """Handle repograph_callers and repograph_callees tools."""
    key = "callers" if direction == "incoming" else "callees"
    if transitive:
        related = traversal.transitive(graph, node_id, analysis.CALL_EDGES, direction, max_depth)
        if isinstance(related, Failure):
            return related.to_dict()
    elif node_id not in graph:
        return Failure(FailureKind.NODE_NOT_FOUND, node_id).to_dict()
    elif direction == "incoming":
        related = list(dict.fromkeys(graph.callers(node_id)))
    else:
        related = list(dict.fromkeys(graph.callees(node_id)))

    return {
        "node": _node_to_dict(graph, node_id),
        key: [_node_to_dict(graph, r) for r in related],
    }


def _handle_path(graph: GraphStore, from_id: str, to_id: str, max_depth: int) -> dict[str, Any]:
    """Handle repograph_path tool."""
    chain = pathfinding.call_chain(graph, from_id, to_id, max_depth)
    if isinstance(chain, Failure):
        return chain.to_dict()
    return {"path": [_node_to_dict(graph, n) for n in chain], "length": len(chain) - 1}


def _handle_stats(
    graph: GraphStore, hot_paths: int | None, entry_points: bool
) -> dict[str, Any]:
    """Handle repograph_stats tool."""
    result = graph.stats().to_dict()
    if hot_paths:
        result["hot_paths"] = [
            {"id": r.id, "name": r.name, "connectivity": r.connectivity}
            for r in analysis.hot_paths(graph, hot_paths)
        ]
    if entry_points:
        result["entry_points"] = [n.id for n in analysis.entry_points(graph)]
    return result


def _handle_cycles(graph: GraphStore, max_cycles: int | None) -> dict[str, Any]:
    """Handle repograph_cycles tool."""
    cycles = analysis.find_cycles(graph, max_cycles)
    return {"cycles": cycles, "count": len(cycles)}


def _handle_impact(graph: GraphStore, repo: str) -> dict[str, Any]:
    """Handle repograph_impact tool."""
    return impact_analysis(graph, repo).to_dict()


async def serve() -> None:
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
