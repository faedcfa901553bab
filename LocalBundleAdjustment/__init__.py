"""
LocalBundleAdjustment - Local bundle adjustment scoping for incremental SfM

Decides, after each resection round, which poses, intrinsics and landmarks
the next bundle adjustment refines, holds constant or ignores.
"""

from .logger import get_logger, configure_root_logger
from .config import LocalBAConfig
from .core.interfaces import IReconstructionState, ValidationResult
from .core.structures import Landmark, LocalBAState, LocalBAStatistics, View
from .data import InMemoryReconstruction
from .pipeline import LocalBAData

__version__ = "1.0.0"
__all__ = [
    "get_logger",
    "configure_root_logger",
    "LocalBAConfig",
    "IReconstructionState",
    "ValidationResult",
    "Landmark",
    "LocalBAState",
    "LocalBAStatistics",
    "View",
    "InMemoryReconstruction",
    "LocalBAData",
]
