"""
cassettetap Capture Module

Recording live HTTP exchanges as cassette definitions.
"""

from .recorder import InteractionRecorder, definition_from_exchange

__all__ = [
    'InteractionRecorder',
    'definition_from_exchange',
]
