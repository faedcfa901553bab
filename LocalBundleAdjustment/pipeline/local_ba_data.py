"""
Local Bundle Adjustment Data

Everything the local bundle adjustment needs between two rounds: the
proximity graph, the distances from the new views, the state of every
parameter and the intrinsics history.

One round, driven by the caller:
    1. set_new_views_id(newly_resected)
    2. prepare_round(reconstruction, tracks_per_view)
         update graph -> compute distances -> convert distances to states
    3. run the optimizer with get_pose_state / get_intrinsic_state /
       get_landmark_state (refined: vary, constant: fixed, ignored: left out)
    4. record_round(reconstruction)
         save the intrinsics history and freeze converged intrinsics

Rounds must not overlap on the same instance.
"""

from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Set

from LocalBundleAdjustment.algorithms.classification import StateClassifier
from LocalBundleAdjustment.algorithms.graph import (
    ProximityGraph,
    compute_distances,
    pose_distances_from_views
)
from LocalBundleAdjustment.algorithms.intrinsics import IntrinsicConvergenceTracker
from LocalBundleAdjustment.config import LocalBAConfig
from LocalBundleAdjustment.core.interfaces import IReconstructionState
from LocalBundleAdjustment.core.structures import LocalBAState, LocalBAStatistics
from LocalBundleAdjustment.diagnostics import (
    LocalBAStep,
    TimeSummary,
    distances_histogram,
    export_intrinsics_history
)
from LocalBundleAdjustment.logger import get_logger

logger = get_logger("pipeline.local_ba")


class LocalBAData:
    """
    Contains all the data needed to apply a local bundle adjustment.

    Strategy:
    - Views are nodes of a proximity graph, connected by shared landmarks
      (and optionally by a shared intrinsic)
    - Graph distances from the new views decide which poses are refined,
      held constant or ignored
    - Intrinsics and landmarks follow the poses using/observing them
    - Converged intrinsics are held constant for good
    """

    def __init__(self, config: Optional[LocalBAConfig] = None, **overrides):
        """
        Initialize empty local BA data.

        Args:
            config: Configuration, defaults to LocalBAConfig()
            **overrides: Configuration overrides applied on top of config
        """
        self.config = config if config is not None else LocalBAConfig()
        for key, value in overrides.items():
            if not hasattr(self.config, key.upper()):
                raise KeyError(f"Unknown LocalBAConfig key: {key}")
            setattr(self.config, key.upper(), value)
        self.config.validate()

        self.graph = ProximityGraph(min_shared_landmarks=self.config.MIN_SHARED_LANDMARKS)
        self.classifier = StateClassifier(
            distance_refined=self.config.DISTANCE_REFINED,
            distance_constant=self.config.DISTANCE_CONSTANT
        )
        self.intrinsics_tracker = IntrinsicConvergenceTracker()
        self.time_summary = TimeSummary()

        self._new_views_id: Set[Hashable] = set()

        # 0: is a new view, -1: is not connected to the new views
        self._distance_per_view_id: Dict[Hashable, int] = {}
        self._distance_per_pose_id: Dict[Hashable, int] = {}

        self._state_per_pose_id: Dict[Hashable, LocalBAState] = {}
        self._state_per_intrinsic_id: Dict[Hashable, LocalBAState] = {}
        self._state_per_landmark_id: Dict[Hashable, LocalBAState] = {}

    # ========================================================================
    # NEW VIEWS
    # ========================================================================

    def get_new_views_id(self) -> Set[Hashable]:
        return set(self._new_views_id)

    def set_new_views_id(self, new_views_id: Iterable[Hashable]):
        """Replace the set of views resected during the current round"""
        self._new_views_id = set(new_views_id)

    # ========================================================================
    # GRAPH
    # ========================================================================

    def select_views_to_add(self, reconstruction: IReconstructionState) -> Set[Hashable]:
        """Posed views not in the graph yet (all posed views for an empty graph)"""
        return self.graph.select_views_to_add(reconstruction.posed_view_ids())

    def update_graph_with_new_views(self,
                                    reconstruction: IReconstructionState,
                                    tracks_per_view: Mapping[Hashable, Iterable[Hashable]]) -> Set[Hashable]:
        """
        Complete the graph with the posed views it does not contain yet.

        Args:
            reconstruction: Current reconstruction
            tracks_per_view: view id -> track ids visible in that view

        Returns:
            Views added to the graph
        """
        views_to_add = self.select_views_to_add(reconstruction)
        num_edges = self.graph.update_with_new_views(views_to_add, tracks_per_view)
        logger.info(f"Graph: +{len(views_to_add)} views, +{num_edges} edges "
                    f"-> {self.graph.num_nodes} views, {self.graph.num_edges} edges")
        return views_to_add

    def add_intrinsic_edges_to_graph(self, reconstruction: IReconstructionState) -> int:
        """Rebuild the edges between views sharing an intrinsic"""
        skipped = set()
        if self.config.SKIP_FROZEN_INTRINSIC_EDGES:
            skipped = self.intrinsics_tracker.frozen_intrinsics()
        return self.graph.add_intrinsic_edges(reconstruction.intrinsic_per_view(), skipped)

    def remove_intrinsic_edges_from_graph(self) -> int:
        return self.graph.remove_intrinsic_edges()

    def remove_views_from_graph(self, removed_views_id: Iterable[Hashable]) -> bool:
        """
        Remove views from the graph, with their incident edges.

        Returns:
            True if every requested view was in the graph and got removed
        """
        return self.graph.remove_views(removed_views_id)

    # ========================================================================
    # DISTANCES & STATES
    # ========================================================================

    def compute_distances_maps(self, reconstruction: IReconstructionState):
        """Compute the graph distance of every view and pose to the new views"""
        self._distance_per_view_id = compute_distances(self.graph, self._new_views_id)
        self._distance_per_pose_id = pose_distances_from_views(
            self._distance_per_view_id, reconstruction.pose_per_view())

        logger.debug(f"Distances histogram: {self.get_distances_histogram()}")

    def convert_distances_to_states(self, reconstruction: IReconstructionState):
        """Derive the state of every pose, intrinsic and landmark from the distances"""
        self.intrinsics_tracker.check_all(
            self.config.INTRINSIC_WINDOW_SIZE,
            self.config.INTRINSIC_STDEV_PERCENTAGE_LIMIT
        )

        states = self.classifier.classify(
            reconstruction,
            self._distance_per_pose_id,
            self.intrinsics_tracker.frozen_intrinsics()
        )
        self._state_per_pose_id = states.poses
        self._state_per_intrinsic_id = states.intrinsics
        self._state_per_landmark_id = states.landmarks

    # ========================================================================
    # INTRINSICS
    # ========================================================================

    def add_intrinsics_to_history(self, reconstruction: IReconstructionState):
        """
        Add the current intrinsics of the reconstruction to the history.

        Each sample is (number of posed views using the intrinsic, focal length).
        """
        pose_counts = reconstruction.count_posed_views_per_intrinsic()
        for intrinsic_id in reconstruction.get_intrinsic_ids():
            self.intrinsics_tracker.record_sample(
                intrinsic_id,
                pose_counts.get(intrinsic_id, 0),
                reconstruction.get_intrinsic_value(intrinsic_id)
            )

    def is_intrinsic_frozen(self, intrinsic_id: Hashable) -> bool:
        return self.intrinsics_tracker.is_frozen(intrinsic_id)

    def export_intrinsics_history(self, folder: str) -> List:
        """Save the history of each intrinsic in K<intrinsic_id>.txt files"""
        return export_intrinsics_history(self.intrinsics_tracker, folder)

    # ========================================================================
    # ROUND
    # ========================================================================

    def prepare_round(self,
                      reconstruction: IReconstructionState,
                      tracks_per_view: Mapping[Hashable, Iterable[Hashable]],
                      new_views_id: Optional[Iterable[Hashable]] = None) -> LocalBAStatistics:
        """
        Update the graph, compute distances and states before a bundle adjustment.

        Args:
            reconstruction: Current reconstruction
            tracks_per_view: view id -> track ids visible in that view
            new_views_id: Views resected this round, replaces the current set if given

        Returns:
            Statistics of the round (solver fields left empty)
        """
        if new_views_id is not None:
            self.set_new_views_id(new_views_id)

        self.time_summary.reset_timer()
        self.update_graph_with_new_views(reconstruction, tracks_per_view)
        if self.config.USE_INTRINSIC_EDGES:
            self.add_intrinsic_edges_to_graph(reconstruction)
        self.time_summary.save_time(LocalBAStep.UPDATE_GRAPH)

        self.compute_distances_maps(reconstruction)
        self.time_summary.save_time(LocalBAStep.COMPUTE_DISTANCES)

        self.convert_distances_to_states(reconstruction)
        self.time_summary.save_time(LocalBAStep.CONVERT_DISTANCES_TO_STATES)

        stats = self.statistics()
        logger.info(f"Round ready: {len(self._new_views_id)} new views, "
                    f"{stats.num_refined_poses} refined / {stats.num_constant_poses} constant / "
                    f"{stats.num_ignored_poses} ignored poses")
        return stats

    def record_round(self, reconstruction: IReconstructionState) -> Set[Hashable]:
        """
        Save the intrinsics after the bundle adjustment and freeze the converged ones.

        The time since prepare_round() is accounted as adjustment time.

        Returns:
            Intrinsics frozen by this round
        """
        self.time_summary.save_time(LocalBAStep.ADJUSTMENT)

        self.add_intrinsics_to_history(reconstruction)
        newly_frozen = self.intrinsics_tracker.check_all(
            self.config.INTRINSIC_WINDOW_SIZE,
            self.config.INTRINSIC_STDEV_PERCENTAGE_LIMIT
        )
        self.time_summary.save_time(LocalBAStep.SAVE_INTRINSICS)
        return newly_frozen

    # ========================================================================
    # GETTERS
    # ========================================================================

    def get_pose_distance(self, pose_id: Hashable) -> int:
        if pose_id not in self._distance_per_pose_id:
            raise KeyError(f"No distance computed for pose {pose_id}")
        return self._distance_per_pose_id[pose_id]

    def get_view_distance(self, view_id: Hashable) -> int:
        if view_id not in self._distance_per_view_id:
            raise KeyError(f"No distance computed for view {view_id}")
        return self._distance_per_view_id[view_id]

    def get_distances_histogram(self) -> Dict[int, int]:
        """Number of poses for each graph distance"""
        return distances_histogram(self._distance_per_pose_id)

    def get_pose_state(self, pose_id: Hashable) -> LocalBAState:
        if pose_id not in self._state_per_pose_id:
            raise KeyError(f"No state for pose {pose_id}")
        return self._state_per_pose_id[pose_id]

    def get_intrinsic_state(self, intrinsic_id: Hashable) -> LocalBAState:
        if intrinsic_id not in self._state_per_intrinsic_id:
            raise KeyError(f"No state for intrinsic {intrinsic_id}")
        return self._state_per_intrinsic_id[intrinsic_id]

    def get_landmark_state(self, landmark_id: Hashable) -> LocalBAState:
        if landmark_id not in self._state_per_landmark_id:
            raise KeyError(f"No state for landmark {landmark_id}")
        return self._state_per_landmark_id[landmark_id]

    def pose_states(self) -> Dict[Hashable, LocalBAState]:
        return dict(self._state_per_pose_id)

    def intrinsic_states(self) -> Dict[Hashable, LocalBAState]:
        return dict(self._state_per_intrinsic_id)

    def landmark_states(self) -> Dict[Hashable, LocalBAState]:
        return dict(self._state_per_landmark_id)

    def view_distances(self) -> Dict[Hashable, int]:
        return dict(self._distance_per_view_id)

    def pose_distances(self) -> Dict[Hashable, int]:
        return dict(self._distance_per_pose_id)

    def get_number_of_constant_and_refined_cameras(self) -> int:
        return sum(
            1 for state in self._state_per_pose_id.values()
            if state is not LocalBAState.IGNORED
        )

    def statistics(self) -> LocalBAStatistics:
        """Statistics of the current states (solver fields left to the caller)"""
        return LocalBAStatistics.from_states(
            self._new_views_id,
            self.get_distances_histogram(),
            self._state_per_pose_id,
            self._state_per_intrinsic_id,
            self._state_per_landmark_id
        )
