from typing import Iterable

from ..graph.pipeline_graph import PipelineGraph, build_graph
from ..types import NodeCategory
from ..utils.logger import app_logger

logger = app_logger.bind(component="subgraph")


def induce(graph: PipelineGraph, node_subset: Iterable[str]) -> PipelineGraph:
    """
    Restrict ``graph`` to ``node_subset``.

    Only edges with both endpoints in the subset survive, so a subset that
    skips intermediate nodes loses the edges through them. Identifiers not
    in the graph are ignored.
    """
    wanted = set(node_subset)
    nodes = [node for node in graph.nodes if node.id in wanted]
    edges = [
        edge for edge in graph.edges
        if edge.source_id in wanted and edge.target_id in wanted
    ]
    logger.debug(f"Induced subgraph: kept {len(nodes)}/{len(graph)} nodes, {len(edges)} edges")
    return build_graph(nodes, edges)


def targets_only(graph: PipelineGraph) -> PipelineGraph:
    """Drop imports, keeping only edges between targets."""
    return induce(graph, [node.id for node in graph.nodes if node.category == NodeCategory.TARGET])
