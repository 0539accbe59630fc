"""
MCP server for Repograph.

Exposes graph queries to LLMs via the Model Context Protocol.

Tools:
    - repograph_callers: Find what calls a function
    - repograph_callees: Find what a function calls
    - repograph_path: Shortest call chain between two functions
    - repograph_stats: Graph statistics, hot paths and entry points
    - repograph_cycles: Find recursive call cycles
    - repograph_impact: Repos affected by a change to a repo

Usage:
    Run: repograph-mcp
"""

import asyncio

from repograph.mcp.server import serve as _serve


def serve() -> None:
    """Entry point for the MCP server."""
    asyncio.run(_serve())


__all__ = ["serve"]
