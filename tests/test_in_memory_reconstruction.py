"""
Tests for the in-memory reconstruction state and its derived queries.
"""

import pytest

from LocalBundleAdjustment import InMemoryReconstruction, LocalBAState, LocalBAStatistics


def make_reconstruction():
    reconstruction = InMemoryReconstruction()
    reconstruction.add_intrinsic(0, 1000.0)
    reconstruction.add_intrinsic(1, 1500.0)
    reconstruction.add_view('a', intrinsic_id=0, pose_id=10)
    reconstruction.add_view('b', intrinsic_id=0, pose_id=11)
    reconstruction.add_view('c', intrinsic_id=0)
    reconstruction.add_landmark(0, {'a', 'b'})
    reconstruction.add_landmark(1, {'b'})
    return reconstruction


def test_derived_queries():
    reconstruction = make_reconstruction()
    assert reconstruction.posed_view_ids() == {'a', 'b'}
    assert reconstruction.pose_per_view() == {'a': 10, 'b': 11}
    assert reconstruction.intrinsic_per_view() == {'a': 0, 'b': 0}
    assert reconstruction.count_posed_views_per_intrinsic() == {0: 2, 1: 0}


def test_remove_view_drops_pose_and_orphan_landmarks():
    reconstruction = make_reconstruction()
    reconstruction.remove_view('b')

    assert 11 not in reconstruction.get_poses()
    assert reconstruction.get_landmarks()[0].observations == {'a'}
    assert 1 not in reconstruction.get_landmarks()


def test_validate_reports_dangling_references():
    reconstruction = make_reconstruction()
    assert reconstruction.validate()

    reconstruction.add_view('d', intrinsic_id=7, pose_id=12)
    reconstruction.add_landmark(2, {'ghost'})
    result = reconstruction.validate()

    assert not result
    assert len(result.errors) == 2
    assert result.stats['num_views'] == 4


def test_unknown_intrinsic_value_raises():
    with pytest.raises(KeyError):
        make_reconstruction().get_intrinsic_value(42)


def test_non_finite_intrinsic_rejected():
    with pytest.raises(ValueError):
        make_reconstruction().set_intrinsic_value(0, float('nan'))


def test_statistics_from_states():
    stats = LocalBAStatistics.from_states(
        {'a'},
        {0: 1, 1: 1},
        {10: LocalBAState.REFINED, 11: LocalBAState.CONSTANT},
        {0: LocalBAState.REFINED},
        {0: LocalBAState.REFINED, 1: LocalBAState.IGNORED}
    )
    assert stats.num_refined_poses == 1
    assert stats.num_constant_poses == 1
    assert stats.num_ignored_poses == 0
    assert stats.num_refined_intrinsics == 1
    assert stats.num_ignored_landmarks == 1
    assert stats.to_dict()['num_cameras_per_distance'] == {0: 1, 1: 1}
