"""
Core interfaces for dependency injection.

The local BA reads the reconstruction through IReconstructionState, so
the scene storage can be swapped without touching the graph, distance
or classification code.

Usage:
    from LocalBundleAdjustment.core.interfaces import IReconstructionState

    class MyScene(IReconstructionState):
        def get_views(self):
            ...
"""

from .base_reconstruction import (
    IReconstructionState,
    ValidationResult
)


__all__ = [
    'IReconstructionState',
    'ValidationResult',
]
