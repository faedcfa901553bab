"""
Reconstruction state implementations.

Components:
    - InMemoryReconstruction: dictionaries behind IReconstructionState
    - SyntheticSequence: generated tracks and focals for demos

Usage:
    from LocalBundleAdjustment.data import InMemoryReconstruction

    reconstruction = InMemoryReconstruction()
    reconstruction.add_intrinsic(0, 1200.0)
    reconstruction.add_view(0, intrinsic_id=0, pose_id=0)
"""

from .in_memory_reconstruction import InMemoryReconstruction
from .synthetic_sequence import SyntheticSequence

__all__ = [
    'InMemoryReconstruction',
    'SyntheticSequence',
]
