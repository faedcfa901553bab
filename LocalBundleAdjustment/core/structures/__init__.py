from .lba_state import LocalBAState
from .scene_records import View, Landmark
from .statistics import LocalBAStatistics

__all__ = [
    # Enumerations
    'LocalBAState',

    # Classes
    'View',
    'Landmark',
    'LocalBAStatistics',
]
