"""
Configuration for local bundle adjustment scoping.

All thresholds used by the graph, the classifier and the intrinsic
convergence tracker live here so each reconstruction can be tuned
independently.

Usage:
    config = LocalBAConfig(distance_refined=2, min_shared_landmarks=50)
    config.validate()
"""

from typing import Any, Dict


class LocalBAConfig:
    """Configuration for local bundle adjustment"""

    # Proximity graph
    MIN_SHARED_LANDMARKS = 100  # Landmarks two views must share to be connected
    USE_INTRINSIC_EDGES = True  # Link views sharing an intrinsic
    SKIP_FROZEN_INTRINSIC_EDGES = False  # No intrinsic edges for frozen intrinsics

    # Distance -> state conversion
    DISTANCE_REFINED = 1   # [0; D_refined] -> refined
    DISTANCE_CONSTANT = 2  # ]D_refined; D_constant] -> constant, beyond -> ignored

    # Intrinsic convergence
    INTRINSIC_WINDOW_SIZE = 25  # Number of last values used for the variation
    INTRINSIC_STDEV_PERCENTAGE_LIMIT = 1.0  # % of the full-history range

    def __init__(self, **config):
        """
        Initialize configuration.

        Args:
            **config: Overrides, keys are case-insensitive attribute names

        Raises:
            KeyError: If a key does not match any configuration attribute
        """
        for key, value in config.items():
            if not hasattr(self, key.upper()):
                raise KeyError(f"Unknown LocalBAConfig key: {key}")
            setattr(self, key.upper(), value)

    def validate(self):
        """
        Check the consistency of the thresholds.

        Raises:
            ValueError: If a threshold is out of range
        """
        if self.MIN_SHARED_LANDMARKS < 1:
            raise ValueError(f"MIN_SHARED_LANDMARKS must be >= 1, got {self.MIN_SHARED_LANDMARKS}")
        if self.DISTANCE_REFINED < 0:
            raise ValueError(f"DISTANCE_REFINED must be >= 0, got {self.DISTANCE_REFINED}")
        if self.DISTANCE_CONSTANT < self.DISTANCE_REFINED:
            raise ValueError(
                f"DISTANCE_CONSTANT ({self.DISTANCE_CONSTANT}) must be >= "
                f"DISTANCE_REFINED ({self.DISTANCE_REFINED})"
            )
        if self.INTRINSIC_WINDOW_SIZE < 1:
            raise ValueError(f"INTRINSIC_WINDOW_SIZE must be >= 1, got {self.INTRINSIC_WINDOW_SIZE}")
        if self.INTRINSIC_STDEV_PERCENTAGE_LIMIT < 0:
            raise ValueError(
                f"INTRINSIC_STDEV_PERCENTAGE_LIMIT must be >= 0, "
                f"got {self.INTRINSIC_STDEV_PERCENTAGE_LIMIT}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging"""
        return {
            key: getattr(self, key)
            for key in dir(self)
            if key.isupper()
        }

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v}" for k, v in self.to_dict().items())
        return f"LocalBAConfig({items})"
