"""repograph custom exceptions."""


class RepographError(Exception):
    """Base exception for repograph errors."""


class NodeNotFoundError(RepographError):
    """An edge endpoint is not a node of the graph."""


class ManifestError(RepographError):
    """Error reading a dependency manifest."""


class FactsError(RepographError):
    """Error loading a graph facts file."""
