"""
Node classification and renderer-ready graph assembly.
"""

from .classifier import attach_build_times, classify, cluster, collapse_clusters, resolve_build_times
from .graph_info import graph_info

__all__ = [
    'attach_build_times',
    'classify',
    'cluster',
    'collapse_clusters',
    'resolve_build_times',
    'graph_info',
]
