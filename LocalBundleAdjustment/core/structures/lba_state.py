from enum import Enum


class LocalBAState(Enum):
    """
    Participation of a parameter (pose, intrinsic, landmark) in the next
    bundle adjustment:
    - REFINED: adjusted by the solver
    - CONSTANT: added to the problem but held fixed
    - IGNORED: left out of the problem
    """
    REFINED = "refined"
    CONSTANT = "constant"
    IGNORED = "ignored"

    @property
    def rank(self) -> int:
        """Ordering used for aggregation: IGNORED < CONSTANT < REFINED"""
        return _RANKS[self]


_RANKS = {
    LocalBAState.IGNORED: 0,
    LocalBAState.CONSTANT: 1,
    LocalBAState.REFINED: 2,
}
