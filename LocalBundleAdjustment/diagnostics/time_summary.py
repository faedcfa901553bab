"""
Time spent in each step of the local bundle adjustment.
"""

import time
from enum import Enum
from pathlib import Path
from typing import Dict

from LocalBundleAdjustment.logger import get_logger

logger = get_logger("diagnostics.timing")


class LocalBAStep(Enum):
    """Timed steps of a round"""
    UPDATE_GRAPH = "graph_updating"
    COMPUTE_DISTANCES = "distances_computing"
    CONVERT_DISTANCES_TO_STATES = "distances_conversion"
    ADJUSTMENT = "adjusting"
    SAVE_INTRINSICS = "save_intrinsics"

    def __str__(self):
        return self.value


class TimeSummary:
    """
    Accumulates the time of each step across rounds.

    Usage:
        summary.reset_timer()
        graph.update_with_new_views(...)
        summary.save_time(LocalBAStep.UPDATE_GRAPH)
    """

    def __init__(self):
        self._start = time.time()
        self._times: Dict[LocalBAStep, float] = {step: 0.0 for step in LocalBAStep}

    def reset_timer(self):
        self._start = time.time()

    def save_time(self, step: LocalBAStep) -> float:
        """
        Add the time elapsed since the last reset to a step, then reset.

        Returns:
            Elapsed time in seconds
        """
        elapsed = time.time() - self._start
        self._times[step] += elapsed
        self.reset_timer()
        return elapsed

    def get_time(self, step: LocalBAStep) -> float:
        return self._times[step]

    @property
    def total_time(self) -> float:
        return sum(self._times.values())

    def to_dict(self) -> Dict[str, float]:
        times = {str(step): value for step, value in self._times.items()}
        times['total'] = self.total_time
        return times

    def export_times(self, filepath: str) -> bool:
        """
        Write 'step seconds' lines.

        Args:
            filepath: Output text file

        Returns:
            True once the file is written
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            for key, value in self.to_dict().items():
                f.write(f"{key} {value:.6f}\n")
        return True

    def show_times(self):
        """Log the time breakdown"""
        total = self.total_time
        logger.info("LOCAL BA TIMES")
        for step, value in self._times.items():
            share = value / total if total > 0 else 0.0
            logger.info(f"  {step}: {value:.3f}s ({share:.1%})")
        logger.info(f"  total: {total:.3f}s")
