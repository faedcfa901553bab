"""
Proximity graph and distance computation.

Usage:
    from LocalBundleAdjustment.algorithms.graph import ProximityGraph, compute_distances

    graph = ProximityGraph(min_shared_landmarks=100)
    graph.update_with_new_views({3, 4}, tracks_per_view)
    distances = compute_distances(graph, frontier={3, 4})
"""

from .proximity_graph import ProximityGraph
from .distances import (
    UNREACHABLE,
    build_adjacency_matrix,
    compute_distances,
    pose_distances_from_views
)

__all__ = [
    'ProximityGraph',
    'UNREACHABLE',
    'build_adjacency_matrix',
    'compute_distances',
    'pose_distances_from_views',
]
