from .convergence import HistorySample, IntrinsicConvergenceTracker

__all__ = [
    'HistorySample',
    'IntrinsicConvergenceTracker',
]
