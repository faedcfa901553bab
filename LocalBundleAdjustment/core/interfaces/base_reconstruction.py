"""
Base interface for reconstruction state access.

Local bundle adjustment never owns poses, intrinsics or landmarks. It reads
them through this contract, so any scene representation (in-memory records,
a wrapper over an SfM library, a mock) can drive it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Set

from LocalBundleAdjustment.core.structures.scene_records import Landmark, View
from LocalBundleAdjustment.logger import get_logger

logger = get_logger("core.interfaces")


@dataclass
class ValidationResult:
    """
    Result of reconstruction validation.

    Attributes:
        is_valid: Whether validation passed
        errors: List of error messages
        warnings: List of warning messages
        stats: Dictionary of validation statistics
    """
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    def __bool__(self) -> bool:
        """Allow truthiness check"""
        return self.is_valid and len(self.errors) == 0

    def add_error(self, message: str):
        """Add an error message"""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str):
        """Add a warning message"""
        self.warnings.append(message)

    def log_report(self):
        """Log validation report"""
        if self.is_valid and not self.warnings:
            logger.info("Validation passed")
            return

        for error in self.errors:
            logger.error(f"  - {error}")
        for warning in self.warnings:
            logger.warning(f"  - {warning}")
        for key, value in self.stats.items():
            logger.info(f"  {key}: {value}")


class IReconstructionState(ABC):
    """
    Abstract interface over the reconstruction being optimized.

    Implementations expose identifiers and relations only; the
    local BA derives its graph, distances and states from them.
    """

    # ========================================================================
    # CORE DATA ACCESS METHODS (Required)
    # ========================================================================

    @abstractmethod
    def get_views(self) -> Dict[Hashable, View]:
        """
        Get all registered views.

        Returns:
            Dict: view id -> View
        """
        pass

    @abstractmethod
    def get_poses(self) -> Set[Hashable]:
        """
        Get the identifiers of all estimated poses.

        Returns:
            Set of pose ids
        """
        pass

    @abstractmethod
    def get_intrinsic_ids(self) -> Set[Hashable]:
        """
        Get the identifiers of all intrinsics.

        Returns:
            Set of intrinsic ids
        """
        pass

    @abstractmethod
    def get_intrinsic_value(self, intrinsic_id: Hashable) -> float:
        """
        Get the observed scalar of an intrinsic (the focal length).

        Args:
            intrinsic_id: Intrinsic identifier

        Raises:
            KeyError: If the intrinsic is unknown
        """
        pass

    @abstractmethod
    def get_landmarks(self) -> Dict[Hashable, Landmark]:
        """
        Get all landmarks with their observing views.

        Returns:
            Dict: landmark id -> Landmark
        """
        pass

    # ========================================================================
    # DERIVED QUERIES
    # ========================================================================

    def is_posed(self, view: View) -> bool:
        """Whether the view has a pose estimated in the reconstruction"""
        return view.pose_id is not None and view.pose_id in self.get_poses()

    def posed_view_ids(self) -> Set[Hashable]:
        """Identifiers of the views with an estimated pose"""
        return {view_id for view_id, view in self.get_views().items() if self.is_posed(view)}

    def pose_per_view(self) -> Dict[Hashable, Hashable]:
        """Pose id of every posed view"""
        return {
            view_id: view.pose_id
            for view_id, view in self.get_views().items()
            if self.is_posed(view)
        }

    def intrinsic_per_view(self) -> Dict[Hashable, Hashable]:
        """Intrinsic id of every posed view that has one"""
        return {
            view_id: view.intrinsic_id
            for view_id, view in self.get_views().items()
            if self.is_posed(view) and view.intrinsic_id is not None
        }

    def count_posed_views_per_intrinsic(self) -> Dict[Hashable, int]:
        """Number of posed views using each intrinsic (0 for unused ones)"""
        counts = {intrinsic_id: 0 for intrinsic_id in self.get_intrinsic_ids()}
        for intrinsic_id in self.intrinsic_per_view().values():
            counts[intrinsic_id] = counts.get(intrinsic_id, 0) + 1
        return counts
