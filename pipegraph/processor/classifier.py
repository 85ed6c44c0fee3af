"""
Node classification: joins externally supplied status and build time
tables onto a graph, and groups nodes into clusters.

Nothing here computes build status. The execution layer owns that; this
module only attaches what it reports, keyed by node identifier.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Collection, Dict, Iterable, List, Mapping, Optional, Union

from ..exceptions import MalformedGraphError
from ..graph.pipeline_graph import PipelineGraph
from ..types import BuildStatus, GraphEdge, GraphNode, NodeCategory
from ..utils.logger import app_logger

logger = app_logger.bind(component="classifier")

StatusTable = Mapping[str, Union[BuildStatus, str]]
BUILD_TIME_KINDS = ("build", "command", "none")


@dataclass
class ClusteredGraph:
    """Graph after cluster members were merged into single nodes."""
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)


def classify(
    graph: PipelineGraph,
    status_table: Optional[StatusTable],
    default_status: Union[BuildStatus, str] = BuildStatus.IMPORTED,
    targets: Optional[Collection[str]] = None,
) -> PipelineGraph:
    """
    Attach a build status (and optionally a category) to every node.

    Args:
        graph: Graph to annotate. It is not modified.
        status_table: Node id to status, as reported by the execution layer.
            Entries for ids not in the graph are ignored.
        default_status: Status for nodes with no entry in ``status_table``.
        targets: When given, the declared targets; every other node is
            classified as an import. When omitted, node categories are kept.

    Returns:
        A new graph with the same structure and annotated nodes.
    """
    default_status = BuildStatus.parse(default_status)
    statuses = status_table or {}
    declared = set(targets) if targets is not None else None

    annotated = []
    unmatched = 0
    for node in graph.nodes:
        reported = statuses.get(node.id)
        if reported is None:
            unmatched += 1
            status = default_status
        else:
            status = BuildStatus.parse(reported)
        category = node.category
        if declared is not None:
            category = NodeCategory.TARGET if node.id in declared else NodeCategory.IMPORT
        annotated.append(replace(node, category=category, status=status, properties=dict(node.properties)))

    if unmatched:
        logger.debug(f"{unmatched} node(s) had no status entry, defaulted to '{default_status.value}'")
    return graph.with_nodes(annotated)


def cluster(
    graph: PipelineGraph,
    group_key: str,
    included_values: Optional[Iterable[Any]] = None,
    predicate: Optional[Callable[[Any], bool]] = None,
) -> PipelineGraph:
    """
    Label nodes with a cluster name ``"<group_key>: <value>"``.

    A node joins a cluster when its ``group_key`` attribute is one of
    ``included_values`` or satisfies ``predicate``. Nodes that match
    neither, or lack the attribute, stay ungrouped.
    """
    included = _normalize_values(included_values) if included_values is not None else None

    def _accepts(value: Any) -> bool:
        if value is None:
            return False
        if included is not None and _normalize_value(value) in included:
            return True
        return predicate is not None and bool(predicate(value))

    grouped = []
    for node in graph.nodes:
        value = node.attribute(group_key)
        label = f"{group_key}: {value}" if _accepts(value) else None
        grouped.append(replace(node, cluster=label, properties=dict(node.properties)))
    return graph.with_nodes(grouped)


def _normalize_value(value: Any) -> Any:
    if isinstance(value, (BuildStatus, NodeCategory)):
        return value.value
    return value


def _normalize_values(values: Iterable[Any]) -> set:
    if isinstance(values, (str, BuildStatus, NodeCategory)):
        values = [values]
    return {_normalize_value(value) for value in values}


def cluster_status(statuses: Iterable[Optional[BuildStatus]]) -> BuildStatus:
    """Most severe status among the members of a cluster."""
    present = [status for status in statuses if status is not None]
    if not present:
        return BuildStatus.IMPORTED
    return max(present, key=lambda status: status.severity)


def collapse_clusters(graph: PipelineGraph) -> ClusteredGraph:
    """
    Merge the members of each cluster into one node.

    The merged node is named after the cluster, takes the most severe
    member status and lists its members under ``properties["members"]``.
    Edges are redirected to merged nodes; self-loops and duplicates that
    result are dropped. Raises MalformedGraphError when a cluster name is
    already the id of an ungrouped node.
    """
    members: Dict[str, List[GraphNode]] = {}
    for node in graph.nodes:
        if node.cluster:
            members.setdefault(node.cluster, []).append(node)

    owner = {node.id: node.cluster for node in graph.nodes if node.cluster}
    clashes = sorted(set(members) & {node.id for node in graph.nodes if not node.cluster})
    if clashes:
        raise MalformedGraphError(f"Cluster name(s) collide with ungrouped node ids: {clashes}")

    nodes: List[GraphNode] = []
    emitted = set()
    for node in graph.nodes:
        if not node.cluster:
            nodes.append(node)
            continue
        if node.cluster in emitted:
            continue
        emitted.add(node.cluster)
        group = members[node.cluster]
        nodes.append(GraphNode(
            id=node.cluster,
            category=NodeCategory.CLUSTER,
            status=cluster_status(member.status for member in group),
            cluster=node.cluster,
            properties={"members": [member.id for member in group]},
        ))

    edges: List[GraphEdge] = []
    seen = set()
    for edge in graph.edges:
        source = owner.get(edge.source_id, edge.source_id)
        target = owner.get(edge.target_id, edge.target_id)
        if source == target or (source, target) in seen:
            continue
        seen.add((source, target))
        edges.append(GraphEdge(source, target))

    logger.debug(f"Collapsed {len(members)} cluster(s): {len(nodes)} nodes, {len(edges)} edges")
    return ClusteredGraph(nodes=nodes, edges=edges)


def resolve_build_times(value: Union[bool, str, None]) -> str:
    """Map the ``build_times`` option onto ``build``, ``command`` or ``none``."""
    if value is None or value is False:
        return "none"
    if value is True:
        return "build"
    text = str(value).strip().lower()
    if text not in BUILD_TIME_KINDS:
        raise ValueError(f"build_times must be one of {BUILD_TIME_KINDS} or a bool, got {value!r}")
    return text


def attach_build_times(
    graph: PipelineGraph,
    build_times: Optional[Mapping[str, Mapping[str, float]]],
    kind: Union[bool, str] = "build",
    digits: int = 3,
) -> PipelineGraph:
    """Copy ``build_times[node][kind]`` into ``properties["build_time"]``, rounded."""
    kind = resolve_build_times(kind)
    if kind == "none" or not build_times:
        return graph

    timed = []
    for node in graph.nodes:
        properties = dict(node.properties)
        seconds = (build_times.get(node.id) or {}).get(kind)
        if seconds is not None:
            properties["build_time"] = round(float(seconds), digits)
        timed.append(replace(node, properties=properties))
    return graph.with_nodes(timed)
