"""
Synthetic incremental sequence for prototyping and the demo script.

Generates a camera path where every view starts a batch of tracks that
stay visible for a few following views. Consecutive views therefore share
many landmarks, distant views share none, which gives a proximity graph
shaped like a thick path.
"""

from typing import Dict, Hashable, List, Optional, Set

import numpy as np

from LocalBundleAdjustment.data.in_memory_reconstruction import InMemoryReconstruction
from LocalBundleAdjustment.logger import get_logger

logger = get_logger("data.synthetic")


class SyntheticSequence:
    """
    Synthetic tracks and focal lengths driving an InMemoryReconstruction.

    Views are resected in index order by calling resect().
    """

    def __init__(self,
                 num_views: int = 30,
                 num_intrinsics: int = 2,
                 tracks_per_view: int = 150,
                 track_length_range: tuple = (2, 5),
                 true_focal: float = 1200.0,
                 initial_focal_error: float = 0.1,
                 seed: Optional[int] = None):
        """
        Initialize the sequence.

        Args:
            num_views: Number of views to simulate
            num_intrinsics: Number of distinct cameras, view i uses i % num_intrinsics
            tracks_per_view: Tracks started at each view
            track_length_range: (min, max) number of consecutive views seeing a track
            true_focal: Focal length the simulated solver converges to
            initial_focal_error: Relative error of the first focal estimate
            seed: Random seed for reproducibility
        """
        self.num_views = num_views
        self.num_intrinsics = max(1, num_intrinsics)
        self.true_focal = true_focal
        self._rng = np.random.default_rng(seed)

        self._observers: Dict[int, Set[int]] = {}
        track_id = 0
        for view_id in range(num_views):
            lengths = self._rng.integers(track_length_range[0], track_length_range[1] + 1,
                                         size=tracks_per_view)
            for length in lengths:
                last = min(num_views, view_id + int(length))
                self._observers[track_id] = set(range(view_id, last))
                track_id += 1

        self.reconstruction = InMemoryReconstruction()
        for intrinsic_id in range(self.num_intrinsics):
            error = self._rng.uniform(-initial_focal_error, initial_focal_error)
            self.reconstruction.add_intrinsic(intrinsic_id, true_focal * (1.0 + error))
        for view_id in range(num_views):
            self.reconstruction.add_view(view_id, intrinsic_id=view_id % self.num_intrinsics)

        logger.info(f"Synthetic sequence: {num_views} views, {len(self._observers)} tracks, "
                    f"{self.num_intrinsics} intrinsics")

    @property
    def tracks_per_view(self) -> Dict[Hashable, Set[Hashable]]:
        """Track ids visible in every posed view"""
        posed = self.reconstruction.posed_view_ids()
        tracks: Dict[Hashable, Set[Hashable]] = {view_id: set() for view_id in posed}
        for track_id, observers in self._observers.items():
            for view_id in observers & posed:
                tracks[view_id].add(track_id)
        return tracks

    def resect(self, view_ids: List[int]):
        """Give a pose to the views and triangulate the tracks seen by two posed views"""
        for view_id in view_ids:
            self.reconstruction.set_pose(view_id, pose_id=view_id)

        posed = self.reconstruction.posed_view_ids()
        for track_id, observers in self._observers.items():
            seen_by = observers & posed
            if len(seen_by) >= 2:
                self.reconstruction.add_landmark(track_id, seen_by)

    def simulate_solve(self, refined_intrinsics: Set[Hashable], step: float = 0.5):
        """
        Stand-in for the external optimizer: move each refined focal a
        fraction of the way to the true value, with a little noise.
        """
        for intrinsic_id in refined_intrinsics:
            current = self.reconstruction.get_intrinsic_value(intrinsic_id)
            noise = self._rng.normal(0.0, 0.5)
            updated = current + step * (self.true_focal - current) + noise
            self.reconstruction.set_intrinsic_value(intrinsic_id, updated)
