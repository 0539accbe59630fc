"""
Core module: data models and exceptions.

Models (models.py):
    - Node: A module, function, file, repo or dependency
    - Edge: A typed, directed relationship between two nodes
    - NodeType/EdgeType: Well-known node and edge types
    - DependencySpec/RepoManifest: Dependencies declared by a repository

Exceptions (exceptions.py):
    - RepographError: Base exception for all repograph errors
    - NodeNotFoundError: Edge endpoint missing from the graph
    - ManifestError: Manifest could not be read or parsed
    - FactsError: Facts file could not be read or parsed

Graphs and analyses live in the `graph` and `portfolio` subpackages.
"""

from repograph.core.exceptions import (
    FactsError,
    ManifestError,
    NodeNotFoundError,
    RepographError,
)
from repograph.core.models import (
    DependencySpec,
    Edge,
    EdgeType,
    Node,
    NodeType,
    RepoManifest,
)

__all__ = [
    # Models
    "Node",
    "Edge",
    "NodeType",
    "EdgeType",
    "DependencySpec",
    "RepoManifest",
    # Exceptions
    "RepographError",
    "NodeNotFoundError",
    "ManifestError",
    "FactsError",
]
