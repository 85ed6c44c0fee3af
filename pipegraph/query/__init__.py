"""
Structural queries: dependencies, neighborhoods and induced subgraphs.
"""

from .subgraph import induce, targets_only
from .traversal import Mode, dependencies, neighborhood, neighborhood_graph

__all__ = ['Mode', 'dependencies', 'neighborhood', 'neighborhood_graph', 'induce', 'targets_only']
