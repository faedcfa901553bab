"""
Local bundle adjustment algorithms.

Components:
- graph: proximity graph over views and multi-source graph distances
- classification: distances -> refined/constant/ignored states
- intrinsics: focal history and convergence test
"""

from .graph import ProximityGraph, compute_distances, pose_distances_from_views
from .classification import ClassifiedStates, StateClassifier
from .intrinsics import IntrinsicConvergenceTracker

__all__ = [
    'ProximityGraph',
    'compute_distances',
    'pose_distances_from_views',
    'ClassifiedStates',
    'StateClassifier',
    'IntrinsicConvergenceTracker',
]
