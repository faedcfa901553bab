"""
Diagnostics exports: distance histogram, intrinsic histories as text and plot.
"""

from collections import Counter
from pathlib import Path
from typing import Dict, Hashable, List, Mapping, Optional

import matplotlib.pyplot as plt

from LocalBundleAdjustment.algorithms.intrinsics import IntrinsicConvergenceTracker
from LocalBundleAdjustment.logger import get_logger

logger = get_logger("diagnostics.export")


def distances_histogram(distances: Mapping[Hashable, int]) -> Dict[int, int]:
    """Number of entries per distance value, sorted by distance"""
    return dict(sorted(Counter(distances.values()).items()))


def export_intrinsics_history(tracker: IntrinsicConvergenceTracker, folder: str) -> List[Path]:
    """
    Save the history of each intrinsic in a file K<intrinsic_id>.txt.

    Each line holds 'pose_count value' for one sample.

    Args:
        tracker: Tracker holding the histories
        folder: Output folder (created if needed)

    Returns:
        Written file paths
    """
    out_dir = Path(folder)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for intrinsic_id in sorted(tracker.intrinsic_ids(), key=str):
        path = out_dir / f"K{intrinsic_id}.txt"
        with open(path, 'w') as f:
            for pose_count, value in tracker.history(intrinsic_id):
                f.write(f"{pose_count} {value}\n")
        written.append(path)

    logger.info(f"Exported {len(written)} intrinsic histories to {out_dir}")
    return written


def plot_intrinsics_history(tracker: IntrinsicConvergenceTracker,
                            filepath: str,
                            title: Optional[str] = None) -> Path:
    """
    Plot the focal length of each intrinsic against its number of posed views.

    Frozen intrinsics are drawn with a dashed line.

    Args:
        tracker: Tracker holding the histories
        filepath: Output image path
        title: Optional figure title

    Returns:
        Path of the saved figure
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(10, 6))
    for intrinsic_id in sorted(tracker.intrinsic_ids(), key=str):
        history = tracker.history(intrinsic_id)
        ax.plot(
            range(len(history)),
            [value for _, value in history],
            linestyle='--' if tracker.is_frozen(intrinsic_id) else '-',
            marker='.',
            label=f"K{intrinsic_id}"
        )

    ax.set_xlabel('Bundle adjustment round')
    ax.set_ylabel('Focal length (px)')
    ax.set_title(title or 'Intrinsics history')
    ax.grid(True, alpha=0.3)
    if tracker.intrinsic_ids():
        ax.legend()

    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return path
