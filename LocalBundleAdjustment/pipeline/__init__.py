from .local_ba_data import LocalBAData

__all__ = [
    'LocalBAData',
]
