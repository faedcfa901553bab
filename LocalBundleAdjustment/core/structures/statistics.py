"""
Per-round statistics of a local bundle adjustment.

The local BA fields are filled from the state maps, the solver fields are
left for the caller to set once the external optimizer has run.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Hashable, Mapping, Set

from LocalBundleAdjustment.core.structures.lba_state import LocalBAState
from LocalBundleAdjustment.logger import get_logger

logger = get_logger("structures.statistics")


@dataclass
class LocalBAStatistics:
    """
    Everything known about one bundle adjustment round.

    Attributes:
        new_views_id: Views resected during this round
        num_cameras_per_distance: Graph distance -> number of poses
        time: Time spent by the solver (s)
        num_successful_iterations: Successful solver iterations
        num_unsuccessful_iterations: Unsuccessful solver iterations
        num_residual_blocks: Residual blocks in the solver problem
        rmse_initial: sqrt(initial_cost / num_residuals)
        rmse_final: sqrt(final_cost / num_residuals)
    """
    new_views_id: Set[Hashable] = field(default_factory=set)
    num_cameras_per_distance: Dict[int, int] = field(default_factory=dict)

    # Filled by the caller after the solve
    time: float = 0.0
    num_successful_iterations: int = 0
    num_unsuccessful_iterations: int = 0
    num_residual_blocks: int = 0
    rmse_initial: float = 0.0
    rmse_final: float = 0.0

    num_refined_poses: int = 0
    num_constant_poses: int = 0
    num_ignored_poses: int = 0
    num_refined_intrinsics: int = 0
    num_constant_intrinsics: int = 0
    num_ignored_intrinsics: int = 0
    num_refined_landmarks: int = 0
    num_constant_landmarks: int = 0
    num_ignored_landmarks: int = 0

    @classmethod
    def from_states(cls,
                    new_views_id: Set[Hashable],
                    distances_histogram: Mapping[int, int],
                    pose_states: Mapping[Hashable, LocalBAState],
                    intrinsic_states: Mapping[Hashable, LocalBAState],
                    landmark_states: Mapping[Hashable, LocalBAState]) -> 'LocalBAStatistics':
        """Build statistics from the state maps of a round"""
        stats = cls(
            new_views_id=set(new_views_id),
            num_cameras_per_distance=dict(distances_histogram)
        )
        for prefix, states in (('poses', pose_states),
                               ('intrinsics', intrinsic_states),
                               ('landmarks', landmark_states)):
            counts = _count_states(states)
            for state, count in counts.items():
                setattr(stats, f"num_{state.value}_{prefix}", count)
        return stats

    def to_dict(self) -> dict:
        """Convert to flat key-value dictionary"""
        return {
            'new_views_id': sorted(self.new_views_id, key=str),
            'num_cameras_per_distance': dict(sorted(self.num_cameras_per_distance.items())),
            'time': self.time,
            'num_successful_iterations': self.num_successful_iterations,
            'num_unsuccessful_iterations': self.num_unsuccessful_iterations,
            'num_residual_blocks': self.num_residual_blocks,
            'rmse_initial': self.rmse_initial,
            'rmse_final': self.rmse_final,
            'num_refined_poses': self.num_refined_poses,
            'num_constant_poses': self.num_constant_poses,
            'num_ignored_poses': self.num_ignored_poses,
            'num_refined_intrinsics': self.num_refined_intrinsics,
            'num_constant_intrinsics': self.num_constant_intrinsics,
            'num_ignored_intrinsics': self.num_ignored_intrinsics,
            'num_refined_landmarks': self.num_refined_landmarks,
            'num_constant_landmarks': self.num_constant_landmarks,
            'num_ignored_landmarks': self.num_ignored_landmarks,
        }

    def export(self, filepath: str) -> bool:
        """
        Write the statistics as 'key value' lines.

        Args:
            filepath: Output text file

        Returns:
            True once the file is written
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            for key, value in self.to_dict().items():
                f.write(f"{key} {value}\n")

        logger.debug(f"Statistics exported to {path}")
        return True

    def print_summary(self):
        """Log a human-readable summary"""
        logger.info("LOCAL BA STATISTICS")
        logger.info(f"  New views: {len(self.new_views_id)}")
        logger.info(f"  Poses (refined/constant/ignored): "
                    f"{self.num_refined_poses}/{self.num_constant_poses}/{self.num_ignored_poses}")
        logger.info(f"  Intrinsics (refined/constant/ignored): "
                    f"{self.num_refined_intrinsics}/{self.num_constant_intrinsics}/"
                    f"{self.num_ignored_intrinsics}")
        logger.info(f"  Landmarks (refined/constant/ignored): "
                    f"{self.num_refined_landmarks}/{self.num_constant_landmarks}/"
                    f"{self.num_ignored_landmarks}")
        for distance, count in sorted(self.num_cameras_per_distance.items()):
            logger.info(f"  Distance {distance}: {count} cameras")


def _count_states(states: Mapping[Hashable, LocalBAState]) -> Dict[LocalBAState, int]:
    counts = {state: 0 for state in LocalBAState}
    for state in states.values():
        counts[state] += 1
    return counts
