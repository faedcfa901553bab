from dataclasses import dataclass, field
from typing import Hashable, Optional, Set


@dataclass
class View:
    """
    A registered image of the reconstruction.

    Attributes:
        view_id: Stable view identifier
        pose_id: Identifier of the estimated pose, None while not resected
        intrinsic_id: Identifier of the calibration used by this view
    """
    view_id: Hashable
    pose_id: Optional[Hashable] = None
    intrinsic_id: Optional[Hashable] = None


@dataclass
class Landmark:
    """3D point known only through the views that observe it"""
    landmark_id: Hashable
    observations: Set[Hashable] = field(default_factory=set)  # view ids
