"""
Assembles the node and edge tables a renderer needs from a full
pipeline graph: classify, narrow to a neighborhood and subset, then
optionally cluster.
"""

from typing import Any, Iterable, Mapping, Optional, Union

from ..graph.pipeline_graph import PipelineGraph
from ..query.subgraph import induce, targets_only as reduce_to_targets
from ..query.traversal import Mode, neighborhood_graph
from ..types import BuildStatus, GraphInfo, NodeCategory
from ..utils.logger import app_logger
from .classifier import StatusTable, attach_build_times, classify, cluster, collapse_clusters

logger = app_logger.bind(component="graph_info")

DEFAULT_TITLE = "Dependency graph"


def graph_info(
    graph: PipelineGraph,
    status_table: Optional[StatusTable] = None,
    from_nodes: Optional[Iterable[str]] = None,
    mode: Union[Mode, str] = Mode.DOWNSTREAM,
    order: Optional[int] = None,
    subset: Optional[Iterable[str]] = None,
    build_times: Optional[Mapping[str, Mapping[str, float]]] = None,
    build_times_kind: Union[bool, str] = "build",
    digits: int = 3,
    targets_only: bool = False,
    from_scratch: bool = False,
    default_status: Union[BuildStatus, str] = BuildStatus.IMPORTED,
    group: Optional[str] = None,
    clusters: Optional[Iterable[Any]] = None,
    split_columns: Any = None,
) -> GraphInfo:
    """
    Build renderer-ready node and edge tables.

    Args:
        graph: Full pipeline graph.
        status_table: Node id to build status from the execution layer.
        from_nodes: Restrict to a neighborhood of these nodes.
        mode: Direction of the neighborhood (``out``, ``in`` or ``all``).
        order: Maximum hops for the neighborhood; ``None`` is unbounded.
        subset: Applied after the neighborhood. Edges are only kept
            between nodes that are both in the subset. Empty means no
            restriction.
        build_times: Node id to ``{"build": s, "command": s}``.
        build_times_kind: ``"build"``, ``"command"``, ``"none"`` or a bool.
        digits: Rounding for build times.
        targets_only: Drop imports.
        from_scratch: Treat every target as outdated.
        default_status: Status of nodes missing from ``status_table``.
        group: Node attribute to cluster on.
        clusters: Values of ``group`` that form clusters.
        split_columns: Deprecated, ignored.
    """
    mode = Mode.parse(mode)
    if split_columns is not None:
        logger.warning("Argument split_columns is deprecated.")

    if graph.is_empty:
        return GraphInfo(nodes=[], edges=[], default_title=DEFAULT_TITLE)

    statuses = dict(status_table or {})
    if from_scratch:
        for node in graph.nodes:
            if node.category == NodeCategory.TARGET:
                statuses[node.id] = BuildStatus.OUTDATED

    current = classify(graph, statuses, default_status=default_status)
    current = attach_build_times(current, build_times, kind=build_times_kind, digits=digits)
    current = neighborhood_graph(current, from_nodes, mode=mode, max_hops=order)
    subset = list(subset) if subset is not None else []
    if subset:
        current = induce(current, subset)
    if targets_only:
        current = reduce_to_targets(current)

    metadata = {
        "mode": mode.value,
        "order": order,
        "targets_only": targets_only,
    }
    if group and clusters is not None:
        clustered = collapse_clusters(cluster(current, group, included_values=clusters))
        metadata["group"] = group
        return GraphInfo(
            nodes=clustered.nodes,
            edges=clustered.edges,
            default_title=DEFAULT_TITLE,
            metadata=metadata,
        )

    logger.info(f"Graph info ready: {len(current)} nodes, {len(current.edges)} edges")
    return GraphInfo(
        nodes=current.nodes,
        edges=current.edges,
        default_title=DEFAULT_TITLE,
        metadata=metadata,
    )
