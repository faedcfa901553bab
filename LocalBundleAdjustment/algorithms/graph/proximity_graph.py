"""
Proximity Graph

Undirected graph over the posed views of the reconstruction. Two views are
connected when they observe enough landmarks in common; views sharing an
intrinsic can additionally be linked by "intrinsic edges" so a new camera
pulls the other cameras of the same lens close to the new data.

Storage is an arena of slots: a view keeps its slot for its whole life in
the graph, removed views free their slot for later insertions, and the
adjacency is indexed by slot.
"""

from collections import Counter, defaultdict
from itertools import combinations
from typing import Dict, Hashable, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from LocalBundleAdjustment.logger import get_logger

logger = get_logger("graph.proximity")

EdgeKey = Tuple[int, int]


def _edge_key(slot_a: int, slot_b: int) -> EdgeKey:
    return (slot_a, slot_b) if slot_a < slot_b else (slot_b, slot_a)


class ProximityGraph:
    """
    Graph of views connected by shared landmarks or a shared intrinsic.

    Every edge carries up to two tags: ordinary (enough shared landmarks)
    and intrinsic. An edge stays in the adjacency while one tag remains, so
    purging intrinsic edges never drops an ordinary one.
    """

    def __init__(self, min_shared_landmarks: int = 100):
        """
        Initialize an empty graph.

        Args:
            min_shared_landmarks: Landmarks two views must share to be connected
        """
        if min_shared_landmarks < 1:
            raise ValueError(f"min_shared_landmarks must be >= 1, got {min_shared_landmarks}")
        self.min_shared_landmarks = min_shared_landmarks

        self._view_id_per_slot: List[Optional[Hashable]] = []
        self._slot_per_view_id: Dict[Hashable, int] = {}
        self._adjacency: List[Set[int]] = []
        self._free_slots: List[int] = []

        self._ordinary_edges: Dict[EdgeKey, int] = {}  # -> shared landmarks
        self._intrinsic_edges: Set[EdgeKey] = set()

    # ========================================================================
    # NODES
    # ========================================================================

    @property
    def num_nodes(self) -> int:
        return len(self._slot_per_view_id)

    @property
    def num_slots(self) -> int:
        """Size of the arena, free slots included"""
        return len(self._view_id_per_slot)

    def is_empty(self) -> bool:
        return not self._slot_per_view_id

    def has_view(self, view_id: Hashable) -> bool:
        return view_id in self._slot_per_view_id

    def view_ids(self) -> Set[Hashable]:
        return set(self._slot_per_view_id)

    def slot_of(self, view_id: Hashable) -> int:
        """
        Slot index of a graphed view.

        Raises:
            KeyError: If the view is not in the graph
        """
        if view_id not in self._slot_per_view_id:
            raise KeyError(f"View {view_id} is not in the proximity graph")
        return self._slot_per_view_id[view_id]

    def view_at(self, slot: int) -> Optional[Hashable]:
        """View id held by a slot, None for a free slot"""
        return self._view_id_per_slot[slot]

    def _add_node(self, view_id: Hashable) -> int:
        if self._free_slots:
            slot = self._free_slots.pop()
            self._view_id_per_slot[slot] = view_id
        else:
            slot = len(self._view_id_per_slot)
            self._view_id_per_slot.append(view_id)
            self._adjacency.append(set())
        self._slot_per_view_id[view_id] = slot
        return slot

    def _remove_node(self, view_id: Hashable):
        slot = self._slot_per_view_id.pop(view_id)
        for neighbor in self._adjacency[slot]:
            self._adjacency[neighbor].discard(slot)
            key = _edge_key(slot, neighbor)
            self._ordinary_edges.pop(key, None)
            self._intrinsic_edges.discard(key)
        self._adjacency[slot] = set()
        self._view_id_per_slot[slot] = None
        self._free_slots.append(slot)

    # ========================================================================
    # EDGES
    # ========================================================================

    @property
    def num_edges(self) -> int:
        return len(self._ordinary_edges.keys() | self._intrinsic_edges)

    @property
    def num_intrinsic_edges(self) -> int:
        return len(self._intrinsic_edges)

    def edge_slots(self) -> Iterator[EdgeKey]:
        """Slot pairs of every edge, whatever its tags"""
        return iter(self._ordinary_edges.keys() | self._intrinsic_edges)

    def edges(self) -> Set[Tuple[Hashable, Hashable]]:
        """View id pairs of every edge"""
        return {
            (self._view_id_per_slot[a], self._view_id_per_slot[b])
            for a, b in self.edge_slots()
        }

    def has_edge(self, view_a: Hashable, view_b: Hashable) -> bool:
        if not (self.has_view(view_a) and self.has_view(view_b)):
            return False
        return self.slot_of(view_b) in self._adjacency[self.slot_of(view_a)]

    def is_intrinsic_edge(self, view_a: Hashable, view_b: Hashable) -> bool:
        if not (self.has_view(view_a) and self.has_view(view_b)):
            return False
        return _edge_key(self.slot_of(view_a), self.slot_of(view_b)) in self._intrinsic_edges

    def edge_shared_count(self, view_a: Hashable, view_b: Hashable) -> int:
        """Shared landmarks recorded on the ordinary edge, 0 if there is none"""
        if not (self.has_view(view_a) and self.has_view(view_b)):
            return 0
        key = _edge_key(self.slot_of(view_a), self.slot_of(view_b))
        return self._ordinary_edges.get(key, 0)

    def neighbors(self, view_id: Hashable) -> Set[Hashable]:
        return {self._view_id_per_slot[slot] for slot in self._adjacency[self.slot_of(view_id)]}

    def _link(self, key: EdgeKey):
        a, b = key
        self._adjacency[a].add(b)
        self._adjacency[b].add(a)

    def _unlink(self, key: EdgeKey):
        a, b = key
        self._adjacency[a].discard(b)
        self._adjacency[b].discard(a)

    # ========================================================================
    # GRAPH UPDATE
    # ========================================================================

    def select_views_to_add(self, posed_view_ids: Iterable[Hashable]) -> Set[Hashable]:
        """
        Return the posed views not added to the graph yet.

        It means all the posed views if the graph is empty.
        """
        posed = set(posed_view_ids)
        if self.is_empty():
            return posed
        return {view_id for view_id in posed if view_id not in self._slot_per_view_id}

    def count_shared_landmarks(self,
                               new_view_ids: Iterable[Hashable],
                               tracks_per_view: Mapping[Hashable, Iterable[Hashable]]) -> Dict[EdgeKey, int]:
        """
        Count, for each (new view, graphed view) pair, the landmarks both observe.

        Args:
            new_view_ids: Graphed views to pair with every other graphed view
            tracks_per_view: view id -> track ids visible in that view

        Returns:
            Dict: slot pair -> number of shared tracks (pairs sharing nothing are absent)
        """
        new_views = {view_id for view_id in new_view_ids if self.has_view(view_id)}
        if not new_views:
            return {}

        views_per_track: Dict[Hashable, Set[Hashable]] = defaultdict(set)
        for view_id in self._slot_per_view_id:
            for track_id in tracks_per_view.get(view_id, ()):
                views_per_track[track_id].add(view_id)

        counts: Counter = Counter()
        for observers in views_per_track.values():
            new_observers = observers & new_views
            if not new_observers or len(observers) < 2:
                continue
            pairs = set()
            for new_view in new_observers:
                new_slot = self._slot_per_view_id[new_view]
                for other in observers:
                    if other != new_view:
                        pairs.add(_edge_key(new_slot, self._slot_per_view_id[other]))
            counts.update(pairs)

        return dict(counts)

    def update_with_new_views(self,
                              new_view_ids: Iterable[Hashable],
                              tracks_per_view: Mapping[Hashable, Iterable[Hashable]]) -> int:
        """
        Complete the graph with newly resected views.

        Creates a node for each view not in the graph yet, then connects the
        new views to every graphed view sharing at least min_shared_landmarks
        landmarks with them.

        Args:
            new_view_ids: Views to add
            tracks_per_view: view id -> track ids visible in that view

        Returns:
            Number of ordinary edges created
        """
        new_views = set(new_view_ids)
        num_new_nodes = 0
        for view_id in new_views:
            if view_id not in self._slot_per_view_id:
                self._add_node(view_id)
                num_new_nodes += 1

        num_new_edges = 0
        for key, count in self.count_shared_landmarks(new_views, tracks_per_view).items():
            if count < self.min_shared_landmarks:
                continue
            if key not in self._ordinary_edges:
                num_new_edges += 1
                self._link(key)
            self._ordinary_edges[key] = count

        logger.debug(f"Graph update: +{num_new_nodes} nodes, +{num_new_edges} edges "
                     f"({self.num_nodes} nodes, {self.num_edges} edges)")
        return num_new_edges

    def add_intrinsic_edges(self,
                            intrinsic_per_view: Mapping[Hashable, Hashable],
                            skip_intrinsics: Iterable[Hashable] = ()) -> int:
        """
        Link every pair of graphed views sharing an intrinsic.

        Previous intrinsic edges are purged first, so calling it twice in a
        row yields the same edge set.

        Args:
            intrinsic_per_view: view id -> intrinsic id
            skip_intrinsics: Intrinsics that must not create edges

        Returns:
            Number of intrinsic edges recorded
        """
        self.remove_intrinsic_edges()

        skipped = set(skip_intrinsics)
        views_per_intrinsic: Dict[Hashable, List[int]] = defaultdict(list)
        for view_id, slot in self._slot_per_view_id.items():
            intrinsic_id = intrinsic_per_view.get(view_id)
            if intrinsic_id is None or intrinsic_id in skipped:
                continue
            views_per_intrinsic[intrinsic_id].append(slot)

        for slots in views_per_intrinsic.values():
            for slot_a, slot_b in combinations(slots, 2):
                key = _edge_key(slot_a, slot_b)
                self._intrinsic_edges.add(key)
                self._link(key)

        logger.debug(f"Added {len(self._intrinsic_edges)} intrinsic edges")
        return len(self._intrinsic_edges)

    def remove_intrinsic_edges(self) -> int:
        """
        Drop every intrinsic edge. Pairs also linked by shared landmarks stay connected.

        Returns:
            Number of intrinsic edges removed
        """
        num_removed = len(self._intrinsic_edges)
        for key in self._intrinsic_edges:
            if key not in self._ordinary_edges:
                self._unlink(key)
        self._intrinsic_edges.clear()
        return num_removed

    def remove_views(self, view_ids: Iterable[Hashable]) -> bool:
        """
        Remove views from the graph, with all their incident edges.

        Args:
            view_ids: Views to remove

        Returns:
            True if the number of removed nodes equals the number of requested views
        """
        requested = set(view_ids)
        num_removed = 0
        for view_id in requested:
            if view_id not in self._slot_per_view_id:
                logger.warning(f"Cannot remove view {view_id}: not in the proximity graph")
                continue
            self._remove_node(view_id)
            num_removed += 1

        logger.debug(f"Removed {num_removed}/{len(requested)} views from the graph")
        return num_removed == len(requested)

    def __repr__(self) -> str:
        return (f"ProximityGraph(nodes={self.num_nodes}, edges={self.num_edges}, "
                f"intrinsic_edges={self.num_intrinsic_edges})")
