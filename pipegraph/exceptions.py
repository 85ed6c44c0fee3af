"""
Exception hierarchy for pipeline graph construction and queries.

Every error raised by the package inherits from PipelineGraphError so
callers can catch them uniformly at the CLI or HTTP layer.
"""

from typing import Iterable, List, Optional, Tuple


class PipelineGraphError(Exception):
    """Base exception for all pipeline graph errors."""


class MalformedGraphError(PipelineGraphError):
    """The nodes and edges do not form a valid DAG."""

    def __init__(
        self,
        message: str,
        edge: Optional[Tuple[str, str]] = None,
        cycle: Optional[List[str]] = None,
    ):
        self.edge = edge
        self.cycle = cycle
        super().__init__(message)


class UnknownNodeError(PipelineGraphError, KeyError):
    """A query named node identifiers that are not in the graph."""

    def __init__(self, names: Iterable[str]):
        self.names = list(names)
        super().__init__(f"Unknown node(s): {', '.join(self.names)}")

    def __str__(self) -> str:
        return self.args[0]


class GraphStorageError(PipelineGraphError):
    """A stored pipeline definition could not be read or written."""
