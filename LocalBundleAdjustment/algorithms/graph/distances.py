"""
Graph distances from the newly resected views.

One multi-source breadth-first sweep: every frontier view is seeded at
distance 0 and the minimum hop count to any of them is kept. Views that
cannot be reached get -1.
"""

from typing import Dict, Hashable, Iterable, Mapping

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import dijkstra

from LocalBundleAdjustment.algorithms.graph.proximity_graph import ProximityGraph
from LocalBundleAdjustment.logger import get_logger

logger = get_logger("graph.distances")

UNREACHABLE = -1


def build_adjacency_matrix(graph: ProximityGraph) -> csr_matrix:
    """
    Sparse adjacency over the graph slots (free slots are isolated rows).

    Each edge is stored once; traversal treats the matrix as undirected.
    """
    edges = list(graph.edge_slots())
    size = graph.num_slots
    if not edges:
        return csr_matrix((size, size), dtype=np.int8)

    rows, cols = zip(*edges)
    data = np.ones(len(edges), dtype=np.int8)
    return csr_matrix((data, (rows, cols)), shape=(size, size))


def compute_distances(graph: ProximityGraph, frontier: Iterable[Hashable]) -> Dict[Hashable, int]:
    """
    Graph distance of every graphed view to the closest frontier view.

    Args:
        graph: Proximity graph
        frontier: New views (ids not in the graph are ignored)

    Returns:
        Dict: view id -> hop count, 0 for frontier views, -1 if unreachable
    """
    view_ids = graph.view_ids()
    sources = sorted({graph.slot_of(view_id) for view_id in frontier if graph.has_view(view_id)})

    if not sources:
        logger.debug("No frontier view in the graph, every view is unreachable")
        return {view_id: UNREACHABLE for view_id in view_ids}

    adjacency = build_adjacency_matrix(graph)
    dist = dijkstra(adjacency, directed=False, indices=sources, unweighted=True, min_only=True)

    distances = {}
    for view_id in view_ids:
        d = dist[graph.slot_of(view_id)]
        distances[view_id] = int(d) if np.isfinite(d) else UNREACHABLE

    return distances


def pose_distances_from_views(view_distances: Mapping[Hashable, int],
                              pose_per_view: Mapping[Hashable, Hashable]) -> Dict[Hashable, int]:
    """
    Re-map view distances to pose distances.

    When several views share a pose, the pose takes the smallest
    non-negative distance of its views, -1 if none is reachable.
    """
    pose_distances: Dict[Hashable, int] = {}
    for view_id, distance in view_distances.items():
        pose_id = pose_per_view.get(view_id)
        if pose_id is None:
            continue
        current = pose_distances.get(pose_id)
        if current is None or current == UNREACHABLE:
            pose_distances[pose_id] = distance
        elif distance != UNREACHABLE:
            pose_distances[pose_id] = min(current, distance)
    return pose_distances
