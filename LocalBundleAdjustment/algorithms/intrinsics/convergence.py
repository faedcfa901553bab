"""
Intrinsic Convergence Tracking

Keeps, for each intrinsic, the history of its focal length after every
bundle adjustment, and decides when the focal has stopped moving enough
to be held constant for the rest of the reconstruction.

Pipeline for one intrinsic:
  H: all the recorded values
  S: the last window_size values of H
  sigma = stddev(S)
  sigma_normalized = sigma / (max(H) - min(H))
  if sigma_normalized * 100 < stdev_percentage_limit: frozen

Freezing is one-way: later variation never un-freezes an intrinsic.
"""

import math
from typing import Dict, Hashable, List, Set, Tuple

import numpy as np

from LocalBundleAdjustment.logger import get_logger

logger = get_logger("intrinsics.convergence")

# (number of posed views using the intrinsic, focal length)
HistorySample = Tuple[int, float]


class IntrinsicConvergenceTracker:
    """Per-intrinsic focal history with a windowed standard deviation test"""

    def __init__(self):
        self._history: Dict[Hashable, List[HistorySample]] = {}
        self._is_frozen: Dict[Hashable, bool] = {}

    def record_sample(self, intrinsic_id: Hashable, pose_count: int, value: float):
        """
        Append a sample to the history of an intrinsic.

        Args:
            intrinsic_id: Intrinsic identifier
            pose_count: Number of posed views using the intrinsic
            value: Current focal length

        Raises:
            ValueError: If pose_count is negative or value is not finite
        """
        if pose_count < 0:
            raise ValueError(f"pose_count must be >= 0, got {pose_count}")
        if not math.isfinite(value):
            raise ValueError(f"Intrinsic {intrinsic_id} value must be finite, got {value}")

        self._history.setdefault(intrinsic_id, []).append((int(pose_count), float(value)))
        self._is_frozen.setdefault(intrinsic_id, False)

    def check_convergence(self,
                          intrinsic_id: Hashable,
                          window_size: int,
                          stdev_percentage_limit: float) -> bool:
        """
        Test whether the focal of an intrinsic has converged, and freeze it if so.

        Args:
            intrinsic_id: Intrinsic identifier
            window_size: Number of last values on which the variation is measured
            stdev_percentage_limit: Limit, in % of the full-history range

        Returns:
            True if the intrinsic is (now or already) frozen
        """
        # Frozen is final, whatever the arguments
        if self._is_frozen.get(intrinsic_id, False):
            return True

        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")

        values = [value for _, value in self._history.get(intrinsic_id, [])]
        if len(values) < window_size:
            return False

        value_range = max(values) - min(values)
        if value_range == 0:
            # Flat history long enough to fill the window
            self._freeze(intrinsic_id, 0.0)
            return True

        stdev = float(np.std(values[-window_size:]))
        normalized_stdev = stdev / value_range

        logger.debug(f"Intrinsic {intrinsic_id}: stdev={stdev:.4f}, range={value_range:.4f}, "
                     f"normalized={normalized_stdev * 100.0:.2f}%")

        if normalized_stdev * 100.0 < stdev_percentage_limit:
            self._freeze(intrinsic_id, normalized_stdev)
            return True
        return False

    def check_all(self, window_size: int, stdev_percentage_limit: float) -> Set[Hashable]:
        """
        Run the convergence test on every tracked intrinsic.

        Returns:
            Intrinsics frozen by this call
        """
        newly_frozen = set()
        for intrinsic_id in self._history:
            was_frozen = self.is_frozen(intrinsic_id)
            if self.check_convergence(intrinsic_id, window_size, stdev_percentage_limit) and not was_frozen:
                newly_frozen.add(intrinsic_id)
        return newly_frozen

    def _freeze(self, intrinsic_id: Hashable, normalized_stdev: float):
        self._is_frozen[intrinsic_id] = True
        logger.info(f"Intrinsic {intrinsic_id} considered constant after "
                    f"{len(self._history[intrinsic_id])} samples "
                    f"(normalized stdev {normalized_stdev * 100.0:.2f}%, "
                    f"focal {self.last_value(intrinsic_id):.2f})")

    # ========================================================================
    # ACCESSORS
    # ========================================================================

    def intrinsic_ids(self) -> Set[Hashable]:
        return set(self._history)

    def history(self, intrinsic_id: Hashable) -> List[HistorySample]:
        """
        Copy of the history of an intrinsic.

        Raises:
            KeyError: If the intrinsic has no history
        """
        if intrinsic_id not in self._history:
            raise KeyError(f"No history for intrinsic {intrinsic_id}")
        return list(self._history[intrinsic_id])

    def last_value(self, intrinsic_id: Hashable) -> float:
        return self.history(intrinsic_id)[-1][1]

    def is_frozen(self, intrinsic_id: Hashable) -> bool:
        return self._is_frozen.get(intrinsic_id, False)

    def frozen_intrinsics(self) -> Set[Hashable]:
        return {intrinsic_id for intrinsic_id, frozen in self._is_frozen.items() if frozen}
