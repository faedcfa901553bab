"""
Tests for the proximity graph: node bookkeeping, shared-landmark edges,
intrinsic edges and view removal.
"""

import random

import pytest

from LocalBundleAdjustment.algorithms.graph import ProximityGraph


def abc_tracks():
    """A-B share 150 landmarks, B-C share 50, A-C nothing"""
    return {
        'A': set(range(0, 150)),
        'B': set(range(0, 150)) | set(range(1000, 1050)),
        'C': set(range(1000, 1050)),
    }


def path_tracks(num_views, shared=100):
    """Consecutive views share `shared` tracks, others share none"""
    return {i: set(range(i * shared, (i + 2) * shared)) for i in range(num_views)}


def test_select_views_bootstrap_returns_all_posed_views():
    graph = ProximityGraph()
    assert graph.select_views_to_add({1, 2, 3}) == {1, 2, 3}


def test_select_views_returns_only_new_views():
    graph = ProximityGraph()
    graph.update_with_new_views({1, 2}, path_tracks(3))
    assert graph.select_views_to_add({1, 2, 3}) == {3}


def test_edges_respect_min_shared_landmarks():
    graph = ProximityGraph(min_shared_landmarks=100)
    num_edges = graph.update_with_new_views({'A', 'B', 'C'}, abc_tracks())

    assert num_edges == 1
    assert graph.has_edge('A', 'B')
    assert not graph.has_edge('B', 'C')
    assert not graph.has_edge('A', 'C')
    assert graph.edge_shared_count('A', 'B') == 150


def test_lower_threshold_connects_more_views():
    graph = ProximityGraph(min_shared_landmarks=50)
    graph.update_with_new_views({'A', 'B', 'C'}, abc_tracks())
    assert graph.has_edge('B', 'C')
    assert graph.num_edges == 2


def test_incremental_update_does_not_duplicate_edges():
    tracks = path_tracks(4)
    graph = ProximityGraph()
    graph.update_with_new_views({0, 1}, tracks)
    assert graph.num_edges == 1

    # Re-adding an already connected pair creates nothing
    assert graph.update_with_new_views({1}, tracks) == 0
    assert graph.num_edges == 1

    graph.update_with_new_views({2, 3}, tracks)
    assert graph.has_edge(0, 1)
    assert graph.num_edges == 3
    assert graph.neighbors(1) == {0, 2}


def test_view_without_tracks_becomes_isolated_node():
    graph = ProximityGraph()
    graph.update_with_new_views({'A', 'Z'}, abc_tracks())
    assert graph.has_view('Z')
    assert graph.neighbors('Z') == set()


def test_intrinsic_edges_link_views_sharing_intrinsic():
    graph = ProximityGraph()
    graph.update_with_new_views({'A', 'B', 'C'}, abc_tracks())

    count = graph.add_intrinsic_edges({'A': 0, 'B': 1, 'C': 0})

    assert count == 1
    assert graph.has_edge('A', 'C')
    assert graph.is_intrinsic_edge('A', 'C')
    assert graph.num_edges == 2


def test_intrinsic_edges_are_idempotent():
    graph = ProximityGraph()
    graph.update_with_new_views({'A', 'B', 'C'}, abc_tracks())
    intrinsics = {'A': 0, 'B': 0, 'C': 0}

    first = graph.add_intrinsic_edges(intrinsics)
    edges_first = graph.edges()
    second = graph.add_intrinsic_edges(intrinsics)

    assert first == second == 3
    assert graph.edges() == edges_first


def test_removing_intrinsic_edges_keeps_ordinary_edges():
    graph = ProximityGraph()
    graph.update_with_new_views({'A', 'B', 'C'}, abc_tracks())

    # A-B is also an ordinary edge
    graph.add_intrinsic_edges({'A': 0, 'B': 0, 'C': 0})
    assert graph.num_intrinsic_edges == 3

    assert graph.remove_intrinsic_edges() == 3
    assert graph.num_intrinsic_edges == 0
    assert graph.has_edge('A', 'B')
    assert not graph.has_edge('A', 'C')
    assert not graph.has_edge('B', 'C')


def test_skipped_intrinsics_create_no_edges():
    graph = ProximityGraph()
    graph.update_with_new_views({'A', 'B', 'C'}, abc_tracks())
    assert graph.add_intrinsic_edges({'A': 0, 'C': 0}, skip_intrinsics={0}) == 0
    assert not graph.has_edge('A', 'C')


def test_remove_views_reports_success():
    graph = ProximityGraph()
    graph.update_with_new_views({'A', 'B', 'C'}, abc_tracks())

    assert graph.remove_views({'B'}) is True
    assert not graph.has_view('B')
    assert graph.neighbors('A') == set()
    assert graph.num_edges == 0


def test_remove_unknown_view_reports_failure():
    graph = ProximityGraph()
    graph.update_with_new_views({'A', 'B'}, abc_tracks())

    assert graph.remove_views({'Z'}) is False
    assert graph.remove_views({'A', 'Z'}) is False
    # The known view was still removed
    assert not graph.has_view('A')


def test_removed_slot_is_reused_without_moving_others():
    tracks = path_tracks(4)
    graph = ProximityGraph()
    graph.update_with_new_views({0, 1, 2}, tracks)
    slots = {view_id: graph.slot_of(view_id) for view_id in (0, 1, 2)}

    graph.remove_views({1})
    assert graph.slot_of(0) == slots[0]
    assert graph.slot_of(2) == slots[2]
    assert graph.view_at(slots[1]) is None

    graph.update_with_new_views({3}, tracks)
    assert graph.slot_of(3) == slots[1]
    assert graph.num_slots == 3
    assert graph.has_edge(2, 3)


def test_view_node_bijection_after_random_mutations():
    rng = random.Random(7)
    tracks = path_tracks(30)
    graph = ProximityGraph()
    expected = set()

    for _ in range(60):
        if expected and rng.random() < 0.4:
            removed = set(rng.sample(sorted(expected), k=min(2, len(expected))))
            assert graph.remove_views(removed)
            expected -= removed
        else:
            added = {rng.randrange(30) for _ in range(3)}
            graph.update_with_new_views(added, tracks)
            expected |= added

        assert graph.view_ids() == expected
        for view_id in expected:
            assert graph.view_at(graph.slot_of(view_id)) == view_id
        assert sum(graph.view_at(s) is not None for s in range(graph.num_slots)) == len(expected)


def test_slot_of_unknown_view_raises():
    graph = ProximityGraph()
    with pytest.raises(KeyError):
        graph.slot_of('missing')


def test_invalid_threshold_rejected():
    with pytest.raises(ValueError):
        ProximityGraph(min_shared_landmarks=0)
