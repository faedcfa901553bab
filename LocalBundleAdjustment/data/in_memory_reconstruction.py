"""
In-memory reconstruction state.

Plain dictionaries behind the IReconstructionState contract. Useful for:
- Unit testing
- Driving the local BA from a pipeline that keeps its own storage
- The synthetic demo sequence
"""

import math
from typing import Dict, Hashable, Iterable, Optional, Set

from LocalBundleAdjustment.core.interfaces import IReconstructionState, ValidationResult
from LocalBundleAdjustment.core.structures import Landmark, View
from LocalBundleAdjustment.logger import get_logger

logger = get_logger("data.in_memory")


class InMemoryReconstruction(IReconstructionState):
    """Reconstruction state stored in dictionaries"""

    def __init__(self):
        self._views: Dict[Hashable, View] = {}
        self._poses: Set[Hashable] = set()
        self._intrinsics: Dict[Hashable, float] = {}
        self._landmarks: Dict[Hashable, Landmark] = {}

    # ========================================================================
    # IReconstructionState
    # ========================================================================

    def get_views(self) -> Dict[Hashable, View]:
        return self._views

    def get_poses(self) -> Set[Hashable]:
        return self._poses

    def get_intrinsic_ids(self) -> Set[Hashable]:
        return set(self._intrinsics)

    def get_intrinsic_value(self, intrinsic_id: Hashable) -> float:
        if intrinsic_id not in self._intrinsics:
            raise KeyError(f"Intrinsic {intrinsic_id} not found")
        return self._intrinsics[intrinsic_id]

    def get_landmarks(self) -> Dict[Hashable, Landmark]:
        return self._landmarks

    # ========================================================================
    # MUTATION
    # ========================================================================

    def add_intrinsic(self, intrinsic_id: Hashable, value: float):
        """Add an intrinsic, or overwrite its value"""
        self.set_intrinsic_value(intrinsic_id, value)

    def set_intrinsic_value(self, intrinsic_id: Hashable, value: float):
        if not math.isfinite(value):
            raise ValueError(f"Intrinsic {intrinsic_id} value must be finite, got {value}")
        self._intrinsics[intrinsic_id] = float(value)

    def add_view(self,
                 view_id: Hashable,
                 intrinsic_id: Optional[Hashable] = None,
                 pose_id: Optional[Hashable] = None) -> View:
        """
        Register a view. A given pose id is also added to the pose set.

        Returns:
            The stored View
        """
        view = View(view_id=view_id, pose_id=pose_id, intrinsic_id=intrinsic_id)
        self._views[view_id] = view
        if pose_id is not None:
            self._poses.add(pose_id)
        return view

    def set_pose(self, view_id: Hashable, pose_id: Hashable):
        """Mark a view as resected with the given pose"""
        if view_id not in self._views:
            raise KeyError(f"View {view_id} not found")
        self._views[view_id].pose_id = pose_id
        self._poses.add(pose_id)

    def remove_view(self, view_id: Hashable):
        """
        Remove a view, its pose when no other view uses it, and its
        observations. Landmarks left without observations are dropped.
        """
        view = self._views.pop(view_id)
        if view.pose_id is not None and not any(
                other.pose_id == view.pose_id for other in self._views.values()):
            self._poses.discard(view.pose_id)

        for landmark_id in list(self._landmarks):
            landmark = self._landmarks[landmark_id]
            landmark.observations.discard(view_id)
            if not landmark.observations:
                del self._landmarks[landmark_id]

    def add_landmark(self, landmark_id: Hashable, observations: Iterable[Hashable]) -> Landmark:
        landmark = Landmark(landmark_id=landmark_id, observations=set(observations))
        self._landmarks[landmark_id] = landmark
        return landmark

    # ========================================================================
    # VALIDATION & METADATA
    # ========================================================================

    def validate(self) -> ValidationResult:
        """
        Check referential integrity between views, poses, intrinsics and landmarks.

        Returns:
            ValidationResult with errors/warnings
        """
        result = ValidationResult()

        for view_id, view in self._views.items():
            if view.view_id != view_id:
                result.add_error(f"View stored under {view_id} reports id {view.view_id}")
            if view.intrinsic_id is not None and view.intrinsic_id not in self._intrinsics:
                result.add_error(f"View {view_id} uses unknown intrinsic {view.intrinsic_id}")
            if view.pose_id is not None and view.pose_id not in self._poses:
                result.add_warning(f"View {view_id} references pose {view.pose_id} not in the pose set")

        for landmark_id, landmark in self._landmarks.items():
            unknown = landmark.observations - set(self._views)
            if unknown:
                result.add_error(f"Landmark {landmark_id} observed by unknown views {sorted(unknown, key=str)}")
            if not landmark.observations:
                result.add_warning(f"Landmark {landmark_id} has no observation")

        result.stats = self.get_statistics()
        return result

    def get_statistics(self) -> Dict[str, int]:
        return {
            'num_views': len(self._views),
            'num_posed_views': len(self.posed_view_ids()),
            'num_poses': len(self._poses),
            'num_intrinsics': len(self._intrinsics),
            'num_landmarks': len(self._landmarks),
        }

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (f"InMemoryReconstruction(views={stats['num_views']}, "
                f"poses={stats['num_poses']}, intrinsics={stats['num_intrinsics']}, "
                f"landmarks={stats['num_landmarks']})")
