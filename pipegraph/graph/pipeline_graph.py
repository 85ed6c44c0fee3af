"""
Immutable DAG of pipeline targets and imports.

Nodes are stored in insertion order and addressed by a stable integer
index; ``_index`` maps identifiers to that index. Adjacency is kept in
both directions so dependency and reverse dependency lookups are O(1)
per node.
"""

from collections import deque
from dataclasses import replace
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from ..exceptions import MalformedGraphError, UnknownNodeError
from ..types import GraphEdge, GraphNode, NodeCategory
from ..utils.logger import app_logger

NodeSpec = Union[GraphNode, str, Dict[str, Any]]
EdgeSpec = Union[GraphEdge, Tuple[str, str], Sequence[str]]


class PipelineGraph:
    """Read-only dependency graph. Build instances with :func:`build_graph`."""

    def __init__(
        self,
        nodes: List[GraphNode],
        index: Dict[str, int],
        successors: List[Tuple[int, ...]],
        predecessors: List[Tuple[int, ...]],
        edges: List[Tuple[int, int]],
    ):
        self._nodes = tuple(_copy_node(node) for node in nodes)
        self._index = index
        self._successors = tuple(successors)
        self._predecessors = tuple(predecessors)
        self._edges = tuple(edges)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(self.nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PipelineGraph):
            return NotImplemented
        return self.nodes == other.nodes and self.edges == other.edges

    def __repr__(self) -> str:
        return f"PipelineGraph(nodes={len(self._nodes)}, edges={len(self._edges)})"

    @property
    def is_empty(self) -> bool:
        return not self._nodes

    @property
    def nodes(self) -> List[GraphNode]:
        return [_copy_node(node) for node in self._nodes]

    @property
    def node_ids(self) -> List[str]:
        return [node.id for node in self._nodes]

    @property
    def edges(self) -> List[GraphEdge]:
        return [
            GraphEdge(self._nodes[src].id, self._nodes[dst].id)
            for src, dst in self._edges
        ]

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    def get_node(self, node_id: str) -> GraphNode:
        """Return the node with ``node_id`` or raise UnknownNodeError."""
        return _copy_node(self._nodes[self._position(node_id)])

    def successors(self, node_id: str) -> List[str]:
        """Nodes that depend directly on ``node_id``."""
        return [self._nodes[i].id for i in self._successors[self._position(node_id)]]

    def predecessors(self, node_id: str) -> List[str]:
        """Direct dependencies of ``node_id``."""
        return [self._nodes[i].id for i in self._predecessors[self._position(node_id)]]

    def topological_order(self) -> List[str]:
        """Dependencies first; ties broken by insertion order."""
        order = _kahn_order(len(self._nodes), self._successors, self._predecessors)
        return [self._nodes[i].id for i in order]

    def with_nodes(self, nodes: Iterable[GraphNode]) -> "PipelineGraph":
        """Copy of this graph with node annotations replaced, structure shared."""
        nodes = list(nodes)
        if [node.id for node in nodes] != self.node_ids:
            raise ValueError("Replacement nodes must keep the same identifiers and order")
        return PipelineGraph(
            nodes=nodes,
            index=self._index,
            successors=list(self._successors),
            predecessors=list(self._predecessors),
            edges=list(self._edges),
        )

    def _position(self, node_id: str) -> int:
        try:
            return self._index[node_id]
        except KeyError:
            raise UnknownNodeError([node_id]) from None

    # Index level access for the traversal engine. Positions are stable
    # for the lifetime of the graph.

    def index_of(self, node_id: str) -> Optional[int]:
        return self._index.get(node_id)

    def neighbors_at(self, position: int, upstream: bool) -> Tuple[int, ...]:
        if upstream:
            return self._predecessors[position]
        return self._successors[position]

    def id_at(self, position: int) -> str:
        return self._nodes[position].id


def _copy_node(node: GraphNode) -> GraphNode:
    return replace(node, properties=dict(node.properties))


def _coerce_node(spec: NodeSpec) -> GraphNode:
    if isinstance(spec, GraphNode):
        return spec
    if isinstance(spec, str):
        return GraphNode(id=spec, category=NodeCategory.IMPORT)
    if isinstance(spec, dict):
        return GraphNode.from_dict(spec)
    raise TypeError(f"Cannot build a node from {type(spec).__name__}")


def _coerce_edge(spec: EdgeSpec) -> Tuple[str, str]:
    if isinstance(spec, GraphEdge):
        return spec.source_id, spec.target_id
    if isinstance(spec, dict):
        if "source_id" not in spec or "target_id" not in spec:
            raise MalformedGraphError(f"Edge {spec!r} needs source_id and target_id")
        return spec["source_id"], spec["target_id"]
    if isinstance(spec, (str, bytes)) or len(spec) != 2:
        raise MalformedGraphError(f"Edge {spec!r} is not a (dependency, dependent) pair")
    source, target = spec
    return source, target


def _kahn_order(
    size: int,
    successors: Sequence[Sequence[int]],
    predecessors: Sequence[Sequence[int]],
) -> List[int]:
    in_degree = [len(preds) for preds in predecessors]
    queue = deque(i for i in range(size) if in_degree[i] == 0)
    order = []
    while queue:
        current = queue.popleft()
        order.append(current)
        for nxt in successors[current]:
            in_degree[nxt] -= 1
            if in_degree[nxt] == 0:
                queue.append(nxt)
    return order


def _find_cycle(remaining: List[int], predecessors: Sequence[Sequence[int]]) -> List[int]:
    """Walk backward inside the unsorted remainder until a node repeats."""
    allowed = set(remaining)
    path: List[int] = []
    seen_at: Dict[int, int] = {}
    current = remaining[0]
    while current not in seen_at:
        seen_at[current] = len(path)
        path.append(current)
        # Every node left over by Kahn's algorithm keeps a predecessor in the remainder.
        current = next(prev for prev in predecessors[current] if prev in allowed)
    cycle = path[seen_at[current]:]
    cycle.reverse()
    return cycle + [cycle[0]]


def build_graph(nodes: Iterable[NodeSpec], edges: Iterable[EdgeSpec]) -> PipelineGraph:
    """
    Validate nodes and edges and assemble a PipelineGraph.

    Args:
        nodes: GraphNode objects, bare identifiers (imports) or node dicts.
        edges: GraphEdge objects or ``(dependency, dependent)`` pairs.

    Returns:
        The constructed graph.

    Raises:
        MalformedGraphError: duplicate node ids, an edge endpoint that is
            not a node, or a directed cycle.
    """
    node_list: List[GraphNode] = []
    index: Dict[str, int] = {}
    for spec in nodes:
        node = _coerce_node(spec)
        if node.id in index:
            raise MalformedGraphError(f"Duplicate node identifier: {node.id}")
        index[node.id] = len(node_list)
        node_list.append(node)

    successors: List[List[int]] = [[] for _ in node_list]
    predecessors: List[List[int]] = [[] for _ in node_list]
    edge_list: List[Tuple[int, int]] = []
    seen_edges = set()
    for spec in edges:
        source, target = _coerce_edge(spec)
        for endpoint in (source, target):
            if endpoint not in index:
                raise MalformedGraphError(
                    f"Edge {source} -> {target} references unknown node {endpoint}",
                    edge=(source, target),
                )
        pair = (index[source], index[target])
        if pair in seen_edges:
            continue
        seen_edges.add(pair)
        edge_list.append(pair)
        successors[pair[0]].append(pair[1])
        predecessors[pair[1]].append(pair[0])

    order = _kahn_order(len(node_list), successors, predecessors)
    if len(order) != len(node_list):
        sorted_set = set(order)
        remaining = [i for i in range(len(node_list)) if i not in sorted_set]
        cycle = [node_list[i].id for i in _find_cycle(remaining, predecessors)]
        raise MalformedGraphError(
            f"Graph contains a cycle: {' -> '.join(cycle)}",
            cycle=cycle,
        )

    app_logger.debug(f"Built pipeline graph with {len(node_list)} nodes and {len(edge_list)} edges")
    return PipelineGraph(
        nodes=node_list,
        index=index,
        successors=[tuple(s) for s in successors],
        predecessors=[tuple(p) for p in predecessors],
        edges=edge_list,
    )


def empty_graph() -> PipelineGraph:
    return PipelineGraph(nodes=[], index={}, successors=[], predecessors=[], edges=[])
