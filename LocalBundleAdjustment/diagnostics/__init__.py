from .time_summary import LocalBAStep, TimeSummary
from .export import (
    distances_histogram,
    export_intrinsics_history,
    plot_intrinsics_history
)

__all__ = [
    'LocalBAStep',
    'TimeSummary',
    'distances_histogram',
    'export_intrinsics_history',
    'plot_intrinsics_history',
]
