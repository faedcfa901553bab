"""
Tests for the distance -> state conversion.
"""

import pytest

from LocalBundleAdjustment import InMemoryReconstruction, LocalBAState
from LocalBundleAdjustment.algorithms.classification import StateClassifier, aggregate_states

REFINED = LocalBAState.REFINED
CONSTANT = LocalBAState.CONSTANT
IGNORED = LocalBAState.IGNORED


def make_reconstruction():
    """
    Five posed views (pose id == view id), two intrinsics:
      K0: views 0, 1, 2    K1: views 3, 4    K2: unused
    """
    reconstruction = InMemoryReconstruction()
    for intrinsic_id in range(3):
        reconstruction.add_intrinsic(intrinsic_id, 1000.0)
    for view_id in range(5):
        reconstruction.add_view(view_id, intrinsic_id=0 if view_id < 3 else 1, pose_id=view_id)
    reconstruction.add_view(5, intrinsic_id=1)  # not resected

    reconstruction.add_landmark('near', {0, 4})
    reconstruction.add_landmark('mid', {2, 4})
    reconstruction.add_landmark('far', {3, 4})
    reconstruction.add_landmark('unposed', {5})
    return reconstruction


def test_pose_states_follow_distance_thresholds():
    classifier = StateClassifier(distance_refined=1, distance_constant=2)
    assert classifier.pose_state(0) is REFINED
    assert classifier.pose_state(1) is REFINED
    assert classifier.pose_state(2) is CONSTANT
    assert classifier.pose_state(3) is IGNORED
    assert classifier.pose_state(-1) is IGNORED


def test_classify_full_reconstruction():
    classifier = StateClassifier(distance_refined=1, distance_constant=2)
    distances = {0: 0, 1: 1, 2: 2, 3: 3}  # pose 4 has no distance

    states = classifier.classify(make_reconstruction(), distances)

    assert states.poses == {0: REFINED, 1: REFINED, 2: CONSTANT, 3: IGNORED, 4: IGNORED}
    assert states.intrinsics == {0: REFINED, 1: IGNORED, 2: IGNORED}
    assert states.landmarks == {
        'near': REFINED,
        'mid': CONSTANT,
        'far': IGNORED,
        'unposed': IGNORED,
    }


def test_frozen_intrinsic_is_constant():
    classifier = StateClassifier()
    states = classifier.classify(make_reconstruction(), {0: 0, 3: 0}, frozen_intrinsics={0})
    assert states.intrinsics[0] is CONSTANT
    assert states.intrinsics[1] is REFINED


def test_frozen_intrinsic_with_ignored_poses_stays_ignored():
    classifier = StateClassifier()
    states = classifier.classify(make_reconstruction(), {0: 0}, frozen_intrinsics={1})
    assert states.intrinsics[1] is IGNORED


def test_intrinsic_used_by_constant_poses_only_is_constant():
    classifier = StateClassifier()
    states = classifier.classify(make_reconstruction(), {3: 2, 4: -1})
    assert states.intrinsics[1] is CONSTANT


def test_classify_is_deterministic():
    classifier = StateClassifier()
    reconstruction = make_reconstruction()
    distances = {0: 0, 1: 1, 2: 2, 3: 3, 4: -1}

    first = classifier.classify(reconstruction, distances, {1})
    second = classifier.classify(reconstruction, distances, {1})
    assert first == second


def test_landmark_state_is_monotonic_in_observer_states():
    order = [IGNORED, CONSTANT, REFINED]
    for a in order:
        for b in order:
            base = aggregate_states([a, b])
            for promoted in order[order.index(a):]:
                assert aggregate_states([promoted, b]).rank >= base.rank


def test_aggregate_of_nothing_is_ignored():
    assert aggregate_states([]) is IGNORED


def test_invalid_distance_rejected():
    with pytest.raises(ValueError):
        StateClassifier().classify(make_reconstruction(), {0: -2})


def test_invalid_thresholds_rejected():
    with pytest.raises(ValueError):
        StateClassifier(distance_refined=2, distance_constant=1)
    with pytest.raises(ValueError):
        StateClassifier(distance_refined=-1)


def test_wider_refined_distance():
    classifier = StateClassifier(distance_refined=3, distance_constant=3)
    states = classifier.classify(make_reconstruction(), {0: 0, 1: 3, 2: 4})
    assert states.poses[1] is REFINED
    assert states.poses[2] is IGNORED
