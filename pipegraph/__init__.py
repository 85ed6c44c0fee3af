"""
Pipeline dependency graph: construction, traversal, induced subgraphs
and node classification for workflow targets and imports.
"""

from .exceptions import GraphStorageError, MalformedGraphError, PipelineGraphError, UnknownNodeError
from .graph.pipeline_graph import PipelineGraph, build_graph
from .processor.classifier import classify, cluster
from .processor.graph_info import graph_info
from .query.subgraph import induce
from .query.traversal import Mode, dependencies, neighborhood
from .types import BuildStatus, GraphEdge, GraphInfo, GraphNode, NodeCategory

__all__ = [
    'BuildStatus',
    'GraphEdge',
    'GraphInfo',
    'GraphNode',
    'GraphStorageError',
    'MalformedGraphError',
    'Mode',
    'NodeCategory',
    'PipelineGraph',
    'PipelineGraphError',
    'UnknownNodeError',
    'build_graph',
    'classify',
    'cluster',
    'dependencies',
    'graph_info',
    'induce',
    'neighborhood',
]
