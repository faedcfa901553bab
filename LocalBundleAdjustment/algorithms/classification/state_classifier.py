"""
Distance to LocalBAState conversion.

  D_r = distance_refined, D_c = distance_constant
  - poses:
    - 0 <= dist <= D_r: refined
    - D_r < dist <= D_c: constant
    - else (dist > D_c, unreachable, unknown): ignored
  - intrinsics:
    - no using pose, or all using poses ignored: ignored
    - frozen, or no using pose refined: constant
    - else refined
  - landmarks:
    - seen by a refined pose: refined
    - else seen by a constant pose: constant
    - else ignored
"""

from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Hashable, Iterable, Mapping

from LocalBundleAdjustment.algorithms.graph.distances import UNREACHABLE
from LocalBundleAdjustment.core.interfaces import IReconstructionState
from LocalBundleAdjustment.core.structures import LocalBAState
from LocalBundleAdjustment.logger import get_logger

logger = get_logger("classification.states")


@dataclass
class ClassifiedStates:
    """State maps of one round, keyed by pose, intrinsic and landmark id"""
    poses: Dict[Hashable, LocalBAState] = field(default_factory=dict)
    intrinsics: Dict[Hashable, LocalBAState] = field(default_factory=dict)
    landmarks: Dict[Hashable, LocalBAState] = field(default_factory=dict)


def aggregate_states(states: Iterable[LocalBAState]) -> LocalBAState:
    """Highest state among the given ones, IGNORED for none"""
    best = LocalBAState.IGNORED
    for state in states:
        if state.rank > best.rank:
            best = state
            if best is LocalBAState.REFINED:
                break
    return best


class StateClassifier:
    """Converts graph distances into refined/constant/ignored states"""

    def __init__(self, distance_refined: int = 1, distance_constant: int = 2):
        if distance_refined < 0:
            raise ValueError(f"distance_refined must be >= 0, got {distance_refined}")
        if distance_constant < distance_refined:
            raise ValueError(
                f"distance_constant ({distance_constant}) must be >= "
                f"distance_refined ({distance_refined})"
            )
        self.distance_refined = distance_refined
        self.distance_constant = distance_constant

    def pose_state(self, distance: int) -> LocalBAState:
        if 0 <= distance <= self.distance_refined:
            return LocalBAState.REFINED
        if self.distance_refined < distance <= self.distance_constant:
            return LocalBAState.CONSTANT
        return LocalBAState.IGNORED

    @staticmethod
    def intrinsic_state(using_pose_states: Iterable[LocalBAState], is_frozen: bool) -> LocalBAState:
        """State of an intrinsic from the states of the poses using it"""
        aggregated = aggregate_states(using_pose_states)
        if aggregated is LocalBAState.IGNORED:
            return LocalBAState.IGNORED
        if is_frozen or aggregated is LocalBAState.CONSTANT:
            return LocalBAState.CONSTANT
        return LocalBAState.REFINED

    def classify(self,
                 reconstruction: IReconstructionState,
                 pose_distances: Mapping[Hashable, int],
                 frozen_intrinsics: AbstractSet[Hashable] = frozenset()) -> ClassifiedStates:
        """
        Compute the state of every pose, intrinsic and landmark.

        Args:
            reconstruction: Reconstruction to classify
            pose_distances: pose id -> graph distance (-1 unreachable)
            frozen_intrinsics: Intrinsics considered converged

        Returns:
            ClassifiedStates

        Raises:
            ValueError: If a distance is below -1
        """
        for pose_id, distance in pose_distances.items():
            if distance < UNREACHABLE:
                raise ValueError(f"Invalid distance {distance} for pose {pose_id}")

        states = ClassifiedStates()

        # -- Poses
        for pose_id in reconstruction.get_poses():
            states.poses[pose_id] = self.pose_state(pose_distances.get(pose_id, UNREACHABLE))

        state_per_view = {
            view_id: states.poses[pose_id]
            for view_id, pose_id in reconstruction.pose_per_view().items()
        }

        # -- Intrinsics
        using_states: Dict[Hashable, list] = {
            intrinsic_id: [] for intrinsic_id in reconstruction.get_intrinsic_ids()
        }
        for view_id, intrinsic_id in reconstruction.intrinsic_per_view().items():
            using_states.setdefault(intrinsic_id, []).append(state_per_view[view_id])

        for intrinsic_id, pose_states in using_states.items():
            states.intrinsics[intrinsic_id] = self.intrinsic_state(
                pose_states, intrinsic_id in frozen_intrinsics)

        # -- Landmarks
        for landmark_id, landmark in reconstruction.get_landmarks().items():
            states.landmarks[landmark_id] = aggregate_states(
                state_per_view[view_id]
                for view_id in landmark.observations
                if view_id in state_per_view
            )

        logger.debug(f"Classified {len(states.poses)} poses, {len(states.intrinsics)} intrinsics, "
                     f"{len(states.landmarks)} landmarks "
                     f"(D_refined={self.distance_refined}, D_constant={self.distance_constant})")
        return states
