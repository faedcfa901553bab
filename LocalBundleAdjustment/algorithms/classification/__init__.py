from .state_classifier import (
    ClassifiedStates,
    StateClassifier,
    aggregate_states
)

__all__ = [
    'ClassifiedStates',
    'StateClassifier',
    'aggregate_states',
]
