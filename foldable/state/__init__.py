"""State submodules for the fold engine."""

from .gesture import GestureState, TouchEventCache

__all__ = [
    'GestureState',
    'TouchEventCache',
]
