"""
Tests for the intrinsic convergence tracker.
"""

import pytest

from LocalBundleAdjustment.algorithms.intrinsics import IntrinsicConvergenceTracker


def tracker_with(values, intrinsic_id=0):
    tracker = IntrinsicConvergenceTracker()
    for pose_count, value in enumerate(values, start=2):
        tracker.record_sample(intrinsic_id, pose_count, value)
    return tracker


def test_recent_variation_large_against_range_is_not_converged():
    # last 3: [998, 1002, 1001], stdev ~1.70, full range 7 -> ~24%
    tracker = tracker_with([1000, 1005, 998, 1002, 1001])
    assert tracker.check_convergence(0, window_size=3, stdev_percentage_limit=1.0) is False
    assert not tracker.is_frozen(0)


def test_recent_variation_below_limit_freezes():
    tracker = tracker_with([1000, 1005, 998, 1002, 1001])
    assert tracker.check_convergence(0, window_size=3, stdev_percentage_limit=30.0) is True
    assert tracker.is_frozen(0)


def test_flat_history_with_full_window_converges():
    tracker = tracker_with([1000.0] * 10)
    assert tracker.check_convergence(0, window_size=3, stdev_percentage_limit=1.0) is True


def test_flat_history_shorter_than_window_is_inconclusive():
    tracker = tracker_with([1000.0, 1000.0])
    assert tracker.check_convergence(0, window_size=3, stdev_percentage_limit=1.0) is False


def test_too_few_samples_is_inconclusive():
    tracker = tracker_with([1000, 1200, 1100, 1150])
    assert tracker.check_convergence(0, window_size=25, stdev_percentage_limit=100.0) is False


def test_unknown_intrinsic_is_not_converged():
    tracker = IntrinsicConvergenceTracker()
    assert tracker.check_convergence('missing', window_size=3, stdev_percentage_limit=1.0) is False


def test_range_uses_full_history_not_window():
    # Window alone is [1000, 1000.5, 1000] (range 0.5, stdev ~47% of it),
    # but the full history range is 200 -> well under 1%
    tracker = tracker_with([1200, 1100, 1000, 1000.5, 1000])
    assert tracker.check_convergence(0, window_size=3, stdev_percentage_limit=1.0) is True


def test_frozen_flag_never_reverts():
    tracker = tracker_with([1000.0] * 5)
    assert tracker.check_convergence(0, 3, 1.0)

    for value in (1500.0, 700.0, 2000.0):
        tracker.record_sample(0, 10, value)
        assert tracker.check_convergence(0, 3, 1.0) is True
        assert tracker.check_convergence(0, 100, 0.0) is True
        assert tracker.is_frozen(0)


def test_frozen_intrinsic_ignores_invalid_window():
    tracker = tracker_with([1000.0] * 5)
    assert tracker.check_convergence(0, 3, 1.0) is True

    assert tracker.check_convergence(0, window_size=0, stdev_percentage_limit=1.0) is True
    assert tracker.check_convergence(0, window_size=-4, stdev_percentage_limit=-1.0) is True
    with pytest.raises(ValueError):
        tracker.check_convergence('other', window_size=0, stdev_percentage_limit=1.0)


def test_check_all_returns_newly_frozen_only():
    tracker = IntrinsicConvergenceTracker()
    for _ in range(4):
        tracker.record_sample('flat', 3, 800.0)
    for value in (900.0, 1000.0, 1100.0, 1200.0):
        tracker.record_sample('moving', 3, value)

    assert tracker.check_all(window_size=3, stdev_percentage_limit=1.0) == {'flat'}
    assert tracker.check_all(window_size=3, stdev_percentage_limit=1.0) == set()
    assert tracker.frozen_intrinsics() == {'flat'}


def test_history_is_append_only_copy():
    tracker = tracker_with([1000.0, 1010.0])
    history = tracker.history(0)
    history.append((99, 0.0))

    assert tracker.history(0) == [(2, 1000.0), (3, 1010.0)]
    assert tracker.last_value(0) == 1010.0


def test_history_of_unknown_intrinsic_raises():
    with pytest.raises(KeyError):
        IntrinsicConvergenceTracker().history(3)


@pytest.mark.parametrize("pose_count, value", [(-1, 1000.0), (2, float('nan')), (2, float('inf'))])
def test_malformed_samples_rejected(pose_count, value):
    with pytest.raises(ValueError):
        IntrinsicConvergenceTracker().record_sample(0, pose_count, value)


def test_invalid_window_rejected():
    with pytest.raises(ValueError):
        tracker_with([1.0]).check_convergence(0, window_size=0, stdev_percentage_limit=1.0)
