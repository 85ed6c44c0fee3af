"""
Dependency and neighborhood queries over a PipelineGraph.

Both queries are breadth-first searches over the graph's index-level
adjacency. They never modify the graph, so any number of them may run
against the same instance concurrently.
"""

from collections import deque
from enum import Enum
from typing import Iterable, List, Optional, Set, Union

from ..exceptions import UnknownNodeError
from ..graph.pipeline_graph import PipelineGraph
from ..utils.logger import app_logger
from .subgraph import induce

logger = app_logger.bind(component="traversal")


class Mode(Enum):
    """Direction in which a neighborhood grows."""
    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"
    BOTH = "both"

    @classmethod
    def parse(cls, value: Union["Mode", str]) -> "Mode":
        """Accept ``upstream``/``downstream``/``both`` or ``in``/``out``/``all``."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        text = _MODE_ALIASES.get(text, text)
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Unknown neighborhood mode: {value!r}") from None


_MODE_ALIASES = {"in": "upstream", "out": "downstream", "all": "both"}


def _as_names(names: Union[str, Iterable[str], None]) -> List[str]:
    if names is None:
        return []
    if isinstance(names, str):
        return [names]
    return list(dict.fromkeys(names))


def dependencies(
    graph: PipelineGraph,
    targets: Union[str, Iterable[str]],
    reverse: bool = False,
) -> Set[str]:
    """
    Transitive dependencies (or reverse dependencies) of ``targets``.

    A start node is only part of the result when it is reachable from
    another start node.

    Args:
        graph: Graph to query.
        targets: One identifier or a collection of identifiers.
        reverse: Follow successor edges (downstream) instead of
            predecessor edges.

    Returns:
        Set of node identifiers. Empty when the targets have no
        dependencies.

    Raises:
        UnknownNodeError: if any target is not in the graph.
    """
    names = _as_names(targets)
    missing = [name for name in names if not graph.has_node(name)]
    if missing:
        raise UnknownNodeError(missing)

    upstream = not reverse
    visited: Set[int] = set()
    queue = deque()
    for name in names:
        queue.extend(graph.neighbors_at(graph.index_of(name), upstream))

    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        queue.extend(n for n in graph.neighbors_at(current, upstream) if n not in visited)

    result = {graph.id_at(i) for i in visited}
    logger.debug(
        f"{'Reverse dependencies' if reverse else 'Dependencies'} of {names}: {len(result)} node(s)"
    )
    return result


def neighborhood(
    graph: PipelineGraph,
    seeds: Union[str, Iterable[str], None],
    mode: Union[Mode, str] = Mode.DOWNSTREAM,
    max_hops: Optional[int] = None,
) -> Set[str]:
    """
    Nodes within ``max_hops`` edges of any seed, seeds included.

    Unknown seeds are dropped with a warning. Giving no seeds at all means
    no restriction and returns every node in the graph. ``max_hops=None``
    is unbounded.
    """
    mode = Mode.parse(mode)
    if max_hops is not None and max_hops < 0:
        raise ValueError(f"max_hops must be non-negative, got {max_hops}")

    names = _as_names(seeds)
    if not names:
        return set(graph.node_ids)

    dropped = [name for name in names if not graph.has_node(name)]
    if dropped:
        logger.warning(f"Ignoring neighborhood seeds not in the graph: {dropped}")

    layer = [graph.index_of(name) for name in names if graph.has_node(name)]
    visited: Set[int] = set(layer)
    hops = 0
    while layer and (max_hops is None or hops < max_hops):
        next_layer = []
        for current in layer:
            for nxt in _adjacent(graph, current, mode):
                if nxt not in visited:
                    visited.add(nxt)
                    next_layer.append(nxt)
        layer = next_layer
        hops += 1

    result = {graph.id_at(i) for i in visited}
    logger.debug(f"Neighborhood of {names} ({mode.value}, max_hops={max_hops}): {len(result)} node(s)")
    return result


def _adjacent(graph: PipelineGraph, position: int, mode: Mode):
    if mode == Mode.UPSTREAM:
        return graph.neighbors_at(position, upstream=True)
    if mode == Mode.DOWNSTREAM:
        return graph.neighbors_at(position, upstream=False)
    return graph.neighbors_at(position, upstream=True) + graph.neighbors_at(position, upstream=False)


def neighborhood_graph(
    graph: PipelineGraph,
    seeds: Union[str, Iterable[str], None],
    mode: Union[Mode, str] = Mode.DOWNSTREAM,
    max_hops: Optional[int] = None,
) -> PipelineGraph:
    """Induced subgraph over :func:`neighborhood`. No seeds returns ``graph`` itself."""
    if not _as_names(seeds):
        return graph
    return induce(graph, neighborhood(graph, seeds, mode=mode, max_hops=max_hops))
