"""
Graph module: the immutable pipeline DAG and its JSON storage.
"""

from .pipeline_graph import PipelineGraph, build_graph, empty_graph
from .json_graph_client import JsonGraphClient

__all__ = ['PipelineGraph', 'build_graph', 'empty_graph', 'JsonGraphClient']
